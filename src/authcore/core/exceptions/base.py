"""Base exceptions for authcore.

Every core operation resolves either to a result or to exactly one of the
error kinds declared in ``ErrorKind``. Each exception carries its kind, an
error code, and structured details so the orchestration layer can decide how
much of the distinction to disclose.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Failure kinds exposed by the core."""

    INVALID_TOKEN = "InvalidToken"
    SESSION_REVOKED = "SessionRevoked"
    INVALID_CREDENTIAL = "InvalidCredential"
    RATE_LIMITED = "RateLimited"
    LOCKED_OUT = "LockedOut"
    REPLAYED_OTP = "ReplayedOTP"
    SECRET_NOT_PROVISIONED = "SecretNotProvisioned"
    INTERNAL_FAILURE = "InternalFailure"


class AuthCoreError(Exception):
    """Base exception for all authcore errors."""

    kind: ErrorKind = ErrorKind.INTERNAL_FAILURE

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.kind.value
        self.details = details or {}


def create_error_response(exception: AuthCoreError) -> Dict[str, Any]:
    """Create standardized error payload from exception.

    Args:
        exception: The authcore exception

    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "kind": exception.kind.value,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
