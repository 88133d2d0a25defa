"""Unit tests for the demo enterprise transform."""
from registrant_reports.models.record import Field, get_field
from registrant_reports.models.tenant import TenantConfig
from registrant_reports.services.demo_service import (
    apply_demo_transform,
    demo_organization_name,
    transform_for_tenant,
)


class TestDemoOrganizationName:
    """Test demo_organization_name function."""

    def test_appends_suffix(self):
        """Test suffix appended once."""
        assert demo_organization_name("Foo") == "Foo Demo"

    def test_idempotent(self):
        """Test applying twice equals applying once."""
        assert demo_organization_name("Foo Demo") == "Foo Demo"
        assert demo_organization_name(demo_organization_name("Foo")) == "Foo Demo"

    def test_empty_untouched(self):
        """Test empty names stay empty."""
        assert demo_organization_name("") == ""


class TestApplyDemoTransform:
    """Test apply_demo_transform function."""

    def test_only_organization_changes(self, make_row):
        """Test every other field is left as is."""
        row = make_row(Organization="Acme", First="Ada", Email="ada@example.com", Enrolled="01-02-24")
        [transformed] = apply_demo_transform([row])
        assert get_field(transformed, Field.ORGANIZATION) == "Acme Demo"
        changed = [i for i, (a, b) in enumerate(zip(row, transformed)) if a != b]
        assert changed == [9]

    def test_does_not_mutate_input(self, make_row):
        """Test input rows are copied."""
        row = make_row(Organization="Acme")
        apply_demo_transform([row])
        assert get_field(row, Field.ORGANIZATION) == "Acme"

    def test_twice_equals_once(self, make_row):
        """Test transform is idempotent on whole rows."""
        rows = [make_row(Organization="Acme"), make_row(Organization="Beta Demo")]
        once = apply_demo_transform(rows)
        assert apply_demo_transform(once) == once

    def test_short_rows_survive(self):
        """Test rows too short to hold an Organization are copied unchanged."""
        assert apply_demo_transform([["5", "01-01-24"]]) == [["5", "01-01-24"]]


class TestTransformForTenant:
    """Test transform_for_tenant function."""

    def test_regular_tenant_untouched(self, make_row):
        """Test non-demo enterprises keep their names."""
        rows = [make_row(Organization="Acme")]
        tenant = TenantConfig(code="csu", start_date="01-01-22")
        assert transform_for_tenant(tenant, rows) is rows

    def test_demo_tenant_transformed(self, make_row):
        """Test demo enterprise rows are renamed."""
        tenant = TenantConfig(code="demo", start_date="01-01-22")
        [row] = transform_for_tenant(tenant, [make_row(Organization="Acme")])
        assert get_field(row, Field.ORGANIZATION) == "Acme Demo"

    def test_explicit_demo_flag(self, make_row):
        """Test any enterprise flagged as demo is transformed."""
        tenant = TenantConfig(code="sbx", start_date="01-01-22", is_demo=True)
        [row] = transform_for_tenant(tenant, [make_row(Organization="Acme")])
        assert get_field(row, Field.ORGANIZATION) == "Acme Demo"
