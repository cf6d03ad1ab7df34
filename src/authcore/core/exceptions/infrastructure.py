"""Infrastructure exceptions for authcore."""

from .base import AuthCoreError, ErrorKind


class InternalFailureError(AuthCoreError):
    """Opaque failure of an underlying store or driver."""

    kind = ErrorKind.INTERNAL_FAILURE


class StoreConnectionError(InternalFailureError):
    """Key-value store is unreachable or not connected."""
    pass


class StoreTimeoutError(InternalFailureError):
    """Key-value store call exceeded its timeout."""
    pass


class ConfigurationError(InternalFailureError):
    """Raised when settings are missing or inconsistent."""
    pass
