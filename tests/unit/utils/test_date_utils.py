"""Unit tests for date utilities."""
from datetime import date, datetime, timezone

import pytest

from registrant_reports.utils.date_utils import (
    CACHE_TIMEZONE,
    format_cache_timestamp,
    in_range,
    is_cohort_year_in_range,
    is_valid_mmddyy,
    parse_cache_timestamp,
    parse_date,
    today_mmddyy,
)


class TestParseDate:
    """Test parse_date function."""

    def test_parse_valid_date(self):
        """Test parsing valid MM-DD-YY date."""
        assert parse_date("08-01-24") == date(2024, 8, 1)

    def test_parse_leap_day(self):
        """Test Feb 29 in a leap year."""
        assert parse_date("02-29-24") == date(2024, 2, 29)

    @pytest.mark.parametrize("text", ["2024-08-01", "8-1-24", "02-29-23", "", "08-01-2024"])
    def test_parse_invalid_raises(self, text):
        """Test invalid formats and unreal dates raise ValueError."""
        with pytest.raises(ValueError):
            parse_date(text)

    def test_is_valid_mmddyy(self):
        """Test boolean validity check."""
        assert is_valid_mmddyy("12-31-23")
        assert not is_valid_mmddyy("12-32-23")


class TestInRange:
    """Test in_range function."""

    def test_inclusive_bounds(self):
        """Test both bounds are included."""
        assert in_range("01-01-24", "01-01-24", "01-31-24")
        assert in_range("01-31-24", "01-01-24", "01-31-24")

    def test_outside(self):
        """Test dates outside the range."""
        assert not in_range("12-31-23", "01-01-24", "01-31-24")
        assert not in_range("02-01-24", "01-01-24", "01-31-24")

    def test_calendar_not_lexicographic(self):
        """Test comparison across a year boundary uses the calendar."""
        assert in_range("12-15-23", "11-01-23", "02-01-24")

    @pytest.mark.parametrize("value", ["", "-", "Yes", "13-45-24"])
    def test_unparseable_is_false(self, value):
        """Test empty or invalid cells never match."""
        assert not in_range(value, "01-01-20", "12-31-30")


class TestCohortYearInRange:
    """Test is_cohort_year_in_range function."""

    def test_months_within_range(self):
        """Test Cohort-Year keys compared by year then month."""
        assert is_cohort_year_in_range("08", "24", "08-15-24", "01-10-25")
        assert is_cohort_year_in_range("01", "25", "08-15-24", "01-10-25")
        assert not is_cohort_year_in_range("07", "24", "08-15-24", "01-10-25")
        assert not is_cohort_year_in_range("02", "25", "08-15-24", "01-10-25")

    def test_non_numeric_is_false(self):
        """Test blank cohort values never match."""
        assert not is_cohort_year_in_range("", "24", "01-01-24", "12-31-24")


class TestCacheTimestamp:
    """Test cache timestamp formatting and parsing."""

    def test_format_afternoon(self):
        """Test 12-hour clock without leading zero."""
        moment = datetime(2024, 1, 1, 13, 0, tzinfo=CACHE_TIMEZONE)
        assert format_cache_timestamp(moment) == "01-01-24 at 1:00 PM"

    def test_format_midnight_and_noon(self):
        """Test 12 AM and 12 PM."""
        assert format_cache_timestamp(datetime(2024, 1, 1, 0, 5, tzinfo=CACHE_TIMEZONE)) == "01-01-24 at 12:05 AM"
        assert format_cache_timestamp(datetime(2024, 1, 1, 12, 30, tzinfo=CACHE_TIMEZONE)) == "01-01-24 at 12:30 PM"

    def test_format_converts_to_cache_zone(self):
        """Test UTC input is rendered in Pacific time."""
        moment = datetime(2024, 1, 1, 21, 0, tzinfo=timezone.utc)
        assert format_cache_timestamp(moment) == "01-01-24 at 1:00 PM"

    def test_parse_round_trip(self):
        """Test parsing returns an aware datetime in the cache zone."""
        parsed = parse_cache_timestamp("01-01-24 at 1:00 PM")
        assert parsed == datetime(2024, 1, 1, 13, 0, tzinfo=CACHE_TIMEZONE)

    @pytest.mark.parametrize("text", ["", "yesterday", "01-01-24 13:00", None])
    def test_parse_invalid_returns_none(self, text):
        """Test unparseable timestamps return None."""
        assert parse_cache_timestamp(text) is None

    def test_today_mmddyy(self):
        """Test today's date rendered from an injected time."""
        assert today_mmddyy(datetime(2024, 3, 9, 23, 0, tzinfo=CACHE_TIMEZONE)) == "03-09-24"
