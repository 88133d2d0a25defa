"""Date and time utility functions."""
import re
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

DATE_FORMAT = "%m-%d-%y"
CACHE_TIMESTAMP_FORMAT = "%m-%d-%y at %I:%M %p"
CACHE_TIMEZONE = ZoneInfo("America/Los_Angeles")

_MMDDYY_PATTERN = re.compile(r"^\d{2}-\d{2}-\d{2}$")


def parse_date(date_str: str) -> date:
    """
    Parse date string in MM-DD-YY format.

    Args:
        date_str: Date string (e.g., "08-01-24")

    Returns:
        date object

    Raises:
        ValueError: If the text is not a real MM-DD-YY calendar date
    """
    if not isinstance(date_str, str) or not _MMDDYY_PATTERN.match(date_str):
        raise ValueError(f"Date must be in MM-DD-YY format: {date_str!r}")
    parsed = datetime.strptime(date_str, DATE_FORMAT).date()
    if parsed.strftime(DATE_FORMAT) != date_str:
        raise ValueError(f"Invalid date provided: {date_str!r}")
    return parsed


def is_valid_mmddyy(date_str: str) -> bool:
    """Check that text matches MM-DD-YY and names a real calendar date."""
    try:
        parse_date(date_str)
    except ValueError:
        return False
    return True


def in_range(date_str: str, start: str, end: str) -> bool:
    """
    Check if a MM-DD-YY date falls within [start, end].

    Comparison is calendar based. Any unparseable value (including an empty
    cell) yields False.
    """
    if not date_str:
        return False
    try:
        value = parse_date(date_str)
        return parse_date(start) <= value <= parse_date(end)
    except ValueError:
        return False


def is_cohort_year_in_range(cohort: str, year: str, start: str, end: str) -> bool:
    """
    Check if a Cohort-Year key falls within the months of a date range.

    Args:
        cohort: Two-digit month string (MM)
        year: Two-digit year string (YY)
        start: Start date in MM-DD-YY format
        end: End date in MM-DD-YY format

    Returns:
        True if (YY, MM) lies between the start and end months, inclusive
    """
    try:
        key = (int(year), int(cohort))
        start_key = (int(start[6:8]), int(start[0:2]))
        end_key = (int(end[6:8]), int(end[0:2]))
    except (ValueError, TypeError):
        return False
    return start_key <= key <= end_key


def now_in_cache_zone() -> datetime:
    """Current time in the fixed cache timezone."""
    return datetime.now(CACHE_TIMEZONE)


def today_mmddyy(now: Optional[datetime] = None) -> str:
    """Today's date as MM-DD-YY in the cache timezone."""
    current = now or now_in_cache_zone()
    return current.astimezone(CACHE_TIMEZONE).strftime(DATE_FORMAT)


def format_cache_timestamp(moment: datetime) -> str:
    """
    Render a cache generation timestamp.

    Args:
        moment: Aware or naive datetime; naive values are taken as cache zone

    Returns:
        str: e.g. "01-01-24 at 1:00 PM"
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=CACHE_TIMEZONE)
    local = moment.astimezone(CACHE_TIMEZONE)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{local.strftime('%m-%d-%y')} at {hour}:{local.minute:02d} {meridiem}"


def parse_cache_timestamp(text: str) -> Optional[datetime]:
    """
    Parse a cache generation timestamp back to an aware datetime.

    Returns:
        datetime in the cache timezone, or None if the text does not parse
    """
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        parsed = datetime.strptime(text.strip(), CACHE_TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=CACHE_TIMEZONE)
