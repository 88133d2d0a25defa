"""Custom exception classes."""


class ReportsError(Exception):
    """Base class for registrant report failures."""
    pass


class TenantConfigMissingError(ReportsError):
    """Raised when an enterprise has no readable configuration."""
    pass


class CacheCorruptError(ReportsError):
    """Raised when an existing cache file cannot be parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Corrupt cache file {path}: {reason}")
        self.path = path
        self.reason = reason


class UpstreamFetchError(ReportsError):
    """Raised when the spreadsheet source cannot deliver rows."""

    def __init__(self, message: str, service_unavailable: bool = False):
        super().__init__(message)
        self.service_unavailable = service_unavailable


class FileWriteError(ReportsError):
    """Raised when unable to write to JSON file."""
    pass


class RefreshLockTimeoutError(ReportsError):
    """Raised when another refresh holds an enterprise lock for too long."""

    def __init__(self, tenant: str, timeout: float):
        super().__init__(f"Could not acquire refresh lock for {tenant} within {timeout}s")
        self.tenant = tenant
        self.timeout = timeout


class ValidationError(ReportsError):
    """Raised when data fails validation."""
    pass


class InvalidDateFormatError(ValidationError):
    """Raised when a date parameter is not a real MM-DD-YY date."""
    pass


class InvalidEnterpriseCodeError(ValidationError):
    """Raised when an enterprise code is malformed."""
    pass


class InvalidPasswordError(ValidationError):
    """Raised when a password is malformed."""
    pass
