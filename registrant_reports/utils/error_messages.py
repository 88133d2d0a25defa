"""User-facing error messages.

Failures shown to users collapse to a small set of generic messages; the
detail only goes to the log.
"""
from registrant_reports.utils.exceptions import (
    InvalidPasswordError,
    UpstreamFetchError,
    ValidationError,
)

TECHNICAL_DIFFICULTIES = (
    "We are experiencing technical difficulties. Please close this browser "
    "window, wait a few minutes, and login again. If the problem persists, "
    "please contact support."
)

GOOGLE_SERVICES_ISSUE = (
    "We are experiencing issues connecting to Google services. Please wait a "
    "few minutes and then retry. If problem persists, contact support."
)

INVALID_PASSWORD = "Incorrect password."


def user_message_for(error: Exception) -> str:
    """
    Pick the generic message to show for a failure.

    Args:
        error: Exception raised by a report or refresh operation

    Returns:
        str: Message safe to display to end users
    """
    if isinstance(error, UpstreamFetchError) and error.service_unavailable:
        return GOOGLE_SERVICES_ISSUE
    if isinstance(error, InvalidPasswordError):
        return INVALID_PASSWORD
    if isinstance(error, ValidationError):
        # Validation messages carry no internal detail.
        return str(error)
    return TECHNICAL_DIFFICULTIES
