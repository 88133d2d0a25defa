"""Unit tests for organization name abbreviation."""
import pytest

from registrant_reports.utils.abbreviation import abbreviate_organization_name


class TestAbbreviateOrganizationName:
    """Test abbreviate_organization_name function."""

    @pytest.mark.parametrize("name,expected", [
        ("Foothill Community College District", "Foothill CCD"),
        ("Sierra Junior College District", "Sierra JCD"),
        ("Glendale Community College", "Glendale CC"),
        ("North Orange Continuing Education", "North Orange Cont Ed"),
        ("Acme Corp", "Acme Corp"),
    ])
    def test_rules(self, name, expected):
        """Test each rule and the unmatched case."""
        assert abbreviate_organization_name(name) == expected

    def test_most_specific_rule_wins(self):
        """Test the district rule is applied before the college rule."""
        assert abbreviate_organization_name("Foothill Community College District") != "Foothill CC District"

    def test_single_substitution(self):
        """Test only the first occurrence is replaced."""
        name = "Community College of Community College"
        assert abbreviate_organization_name(name) == "CC of Community College"

    def test_demo_suffix_preserved(self):
        """Test demo names keep their suffix."""
        assert abbreviate_organization_name("Glendale Community College Demo") == "Glendale CC Demo"
