"""Authentication-specific exceptions for authcore."""

from typing import Any, Dict, Optional

from .base import AuthCoreError, ErrorKind


class InvalidTokenError(AuthCoreError):
    """Raised when a token fails signature, claim, or time validation."""

    kind = ErrorKind.INVALID_TOKEN


class SessionRevokedError(AuthCoreError):
    """Raised when a cryptographically valid token has no live session."""

    kind = ErrorKind.SESSION_REVOKED


class InvalidCredentialError(AuthCoreError):
    """Raised when a password, OTP, or single-use token does not match."""

    kind = ErrorKind.INVALID_CREDENTIAL


class ReplayedOTPError(AuthCoreError):
    """Raised when an already consumed OTP is presented again."""

    kind = ErrorKind.REPLAYED_OTP


class SecretNotProvisionedError(AuthCoreError):
    """Raised when an OTP secret or signing key is missing."""

    kind = ErrorKind.SECRET_NOT_PROVISIONED


class _RetryableError(AuthCoreError):
    """Errors that expire on their own after ``retry_after`` seconds."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = dict(details or {})
        if retry_after is not None:
            details["retry_after"] = retry_after
        super().__init__(message, details=details)
        self.retry_after = retry_after


class RateLimitedError(_RetryableError):
    """Raised when a caller exceeds a hard request limit or cooldown."""

    kind = ErrorKind.RATE_LIMITED


class LockedOutError(_RetryableError):
    """Raised when a subject reached the failed-attempt threshold."""

    kind = ErrorKind.LOCKED_OUT
