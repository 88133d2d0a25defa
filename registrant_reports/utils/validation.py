"""Input validation utilities."""
import re
from typing import Tuple

from registrant_reports.utils.date_utils import parse_date
from registrant_reports.utils.exceptions import (
    InvalidDateFormatError,
    InvalidEnterpriseCodeError,
    InvalidPasswordError,
    ValidationError,
)

RANGE_BASES = ("date", "cohort")


def validate_enterprise_code(code: str) -> str:
    """
    Validate an enterprise (tenant) code.

    Args:
        code: Enterprise code to validate

    Returns:
        The code unchanged

    Raises:
        InvalidEnterpriseCodeError: If code is not 3-4 lowercase letters
    """
    if not isinstance(code, str) or not re.match(r"^[a-z]{3,4}$", code):
        raise InvalidEnterpriseCodeError("Enterprise code must be 3-4 lowercase letters")
    return code


def validate_password(password: str) -> str:
    """
    Validate an organization password.

    Raises:
        InvalidPasswordError: If password is not exactly 4 digits
    """
    if not isinstance(password, str) or not re.match(r"^\d{4}$", password):
        raise InvalidPasswordError("Password must be exactly 4 digits")
    return password


def validate_date_format(date_str: str) -> str:
    """
    Validate date string in MM-DD-YY format.

    Args:
        date_str: Date string to validate

    Returns:
        The date string unchanged

    Raises:
        InvalidDateFormatError: If the format is wrong or the date is not real
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{2}-\d{2}-\d{2}$", date_str):
        raise InvalidDateFormatError("Date must be in MM-DD-YY format")

    try:
        parse_date(date_str)
    except ValueError as e:
        raise InvalidDateFormatError("Invalid date provided") from e

    return date_str


def validate_date_range(start_date: str, end_date: str) -> Tuple[str, str]:
    """
    Validate a start/end pair of MM-DD-YY dates.

    Returns:
        Tuple of (start, end)

    Raises:
        InvalidDateFormatError: If either date is invalid or start > end
    """
    start = validate_date_format(start_date)
    end = validate_date_format(end_date)

    if parse_date(start) > parse_date(end):
        raise InvalidDateFormatError("Start date must be before end date")

    return start, end


def validate_range_basis(basis: str) -> str:
    """
    Validate the range basis of a report ("date" or "cohort").

    Raises:
        ValidationError: If basis is unknown
    """
    if basis not in RANGE_BASES:
        raise ValidationError(f"Mode must be: {', '.join(RANGE_BASES)}")
    return basis


def is_valid_enterprise_code(code: str) -> Tuple[bool, str]:
    """
    Check an enterprise code without raising.

    Returns:
        Tuple of (is_valid: bool, error_message: str)
    """
    try:
        validate_enterprise_code(code)
    except InvalidEnterpriseCodeError as e:
        return False, str(e)
    return True, ""
