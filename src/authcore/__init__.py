"""authcore - session, step-up and abuse-throttling core for API clients.

Issues and verifies compact signed tokens, keeps the revocation ledger in a
shared key-value store, validates one-time codes and enforces lockouts and
rate limits on the credential-checking surface.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    AuthCoreSettings,
    get_settings,
    KeyNamespace,
    TokenAlgorithm,
)

from .core.exceptions import (
    AuthCoreError,
    ErrorKind,
    create_error_response,
    InvalidTokenError,
    SessionRevokedError,
    InvalidCredentialError,
    ReplayedOTPError,
    SecretNotProvisionedError,
    RateLimitedError,
    LockedOutError,
    InternalFailureError,
)

from .features.store import KeyValueStore, MemoryKeyValueStore, RedisKeyValueStore
from .features.tokens import TokenClaims, TokenIssuer, extract_bearer_token, generate_signing_keypair
from .features.sessions import (
    AuthenticatedSession,
    RequestContext,
    SessionGuard,
    SessionRecord,
    SessionStore,
)
from .features.otp import OTPCode, OTPEngine
from .features.governor import (
    AttemptGovernor,
    RateDecision,
    RateLimiter,
    RateLimitPolicy,
    RateLimitPolicyTable,
)
from .features.credentials import CredentialVerifier, ResetTokenService, random_token
from .features.notifications import (
    LoggingNotificationDispatcher,
    Notification,
    NotificationDispatcher,
    NotificationKind,
)
from .factory import AuthCoreFactory, create_auth_core_factory

__all__ = [
    "__version__",

    # Configuration
    "AuthCoreSettings",
    "get_settings",
    "KeyNamespace",
    "TokenAlgorithm",

    # Errors
    "AuthCoreError",
    "ErrorKind",
    "create_error_response",
    "InvalidTokenError",
    "SessionRevokedError",
    "InvalidCredentialError",
    "ReplayedOTPError",
    "SecretNotProvisionedError",
    "RateLimitedError",
    "LockedOutError",
    "InternalFailureError",

    # Store
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",

    # Tokens
    "TokenClaims",
    "TokenIssuer",
    "extract_bearer_token",
    "generate_signing_keypair",

    # Sessions
    "AuthenticatedSession",
    "RequestContext",
    "SessionGuard",
    "SessionRecord",
    "SessionStore",

    # OTP
    "OTPCode",
    "OTPEngine",

    # Governor
    "AttemptGovernor",
    "RateDecision",
    "RateLimiter",
    "RateLimitPolicy",
    "RateLimitPolicyTable",

    # Credentials
    "CredentialVerifier",
    "ResetTokenService",
    "random_token",

    # Notifications
    "LoggingNotificationDispatcher",
    "Notification",
    "NotificationDispatcher",
    "NotificationKind",

    # Factory
    "AuthCoreFactory",
    "create_auth_core_factory",
]
