"""Exceptions module for authcore.

This module provides the complete error taxonomy for authcore. Every public
operation raises only these types; driver-level faults are wrapped in
``InternalFailureError``.
"""

from .base import (
    AuthCoreError,
    ErrorKind,
    create_error_response,
)

from .auth import (
    InvalidTokenError,
    SessionRevokedError,
    InvalidCredentialError,
    ReplayedOTPError,
    SecretNotProvisionedError,
    RateLimitedError,
    LockedOutError,
)

from .infrastructure import (
    InternalFailureError,
    StoreConnectionError,
    StoreTimeoutError,
    ConfigurationError,
)

__all__ = [
    # Base
    "AuthCoreError",
    "ErrorKind",
    "create_error_response",

    # Authentication Errors
    "InvalidTokenError",
    "SessionRevokedError",
    "InvalidCredentialError",
    "ReplayedOTPError",
    "SecretNotProvisionedError",
    "RateLimitedError",
    "LockedOutError",

    # Infrastructure Errors
    "InternalFailureError",
    "StoreConnectionError",
    "StoreTimeoutError",
    "ConfigurationError",
]
