"""Unit tests for user-facing error messages."""
from registrant_reports.utils.error_messages import (
    GOOGLE_SERVICES_ISSUE,
    INVALID_PASSWORD,
    TECHNICAL_DIFFICULTIES,
    user_message_for,
)
from registrant_reports.utils.exceptions import (
    CacheCorruptError,
    InvalidDateFormatError,
    InvalidPasswordError,
    UpstreamFetchError,
)


class TestUserMessageFor:
    """Test user_message_for function."""

    def test_service_outage(self):
        """Test transient Google failures get the services message."""
        assert user_message_for(UpstreamFetchError("503", service_unavailable=True)) == GOOGLE_SERVICES_ISSUE

    def test_generic_fetch_failure(self):
        """Test other fetch failures get the generic message."""
        assert user_message_for(UpstreamFetchError("no sheet")) == TECHNICAL_DIFFICULTIES

    def test_corrupt_cache_hides_path(self):
        """Test internal details are not exposed."""
        message = user_message_for(CacheCorruptError("/srv/cache/csu/x.json", "bad"))
        assert message == TECHNICAL_DIFFICULTIES
        assert "/srv" not in message

    def test_password(self):
        """Test password failures."""
        assert user_message_for(InvalidPasswordError("x")) == INVALID_PASSWORD

    def test_validation_message_passes_through(self):
        """Test validation messages are shown as is."""
        assert user_message_for(InvalidDateFormatError("Invalid date provided")) == "Invalid date provided"

    def test_unexpected_error(self):
        """Test unexpected exceptions get the generic message."""
        assert user_message_for(RuntimeError("boom")) == TECHNICAL_DIFFICULTIES
