"""Constants for authcore.

Default tunables and key namespaces used by the store-backed components.
"""

from enum import Enum


# Token lifetimes
SESSION_TTL_MINUTES = 60 * 24
STEP_UP_TTL_MINUTES = 15

# RFC 6238 parameters
OTP_DIGITS = 6
OTP_INTERVAL_SECONDS = 30
OTP_VALID_WINDOW = 1
OTP_REQUEST_COOLDOWN_SECONDS = 30

# Attempt governor
LOCKOUT_THRESHOLD = 3
LOCKOUT_WINDOW_SECONDS = 24 * 60 * 60
RATE_LIMIT_WINDOW_SECONDS = 15 * 60
RATE_LIMIT_DELAY_MS = 200

# Reset tokens
RESET_REQUEST_LIMIT = 2
RESET_REQUEST_WINDOW_SECONDS = 2 * 60 * 60

DEFAULT_KEY_PREFIX = "authcore"


class TokenAlgorithm(str, Enum):
    """Signing algorithms used on the wire."""
    SESSION = "HS256"
    STEP_UP = "EdDSA"


class KeyNamespace(str, Enum):
    """Key namespaces inside the shared key-value store."""
    SESSION = "sess"
    SUBJECT_SESSION = "sess-subject"
    STEP_UP_SESSION = "stepup"
    STEP_UP_SUBJECT = "stepup-subject"
    OTP_BLACKLIST = "otp-blacklist"
    OTP_REQUESTED = "otp-requested"
    LOCKOUT = "lockout"
    LOCKOUT_ALERT = "lockout-alert"
    RATE_LIMIT = "rl"
    RESET_TOKEN = "reset"
    RESET_SUBJECT = "reset-subject"
    RESET_REQUESTS = "reset-requests"

    def key(self, *parts: str) -> str:
        """Build a namespaced key from its parts."""
        return ":".join((self.value, *[str(part) for part in parts]))
