"""
Password hashing and constant-time secret comparison.

Hashes are argon2id encoded strings with the salt and parameters embedded,
so a stored hash verifies even after the cost settings change.
"""

import hmac
import logging
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from ....config.settings import AuthCoreSettings
from ....core.exceptions.auth import InvalidCredentialError

logger = logging.getLogger(__name__)


class CredentialVerifier:
    """Argon2id password hashing."""

    def __init__(self, time_cost: int = 2, memory_cost: int = 102400, parallelism: int = 8):
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    @classmethod
    def from_settings(cls, settings: AuthCoreSettings) -> "CredentialVerifier":
        return cls(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )

    def hash(self, password: str) -> str:
        """Hash a password with a fresh random salt."""
        return self._hasher.hash(password)

    def verify(self, hashed: Optional[str], candidate: str) -> bool:
        """Check a candidate password. False on mismatch or a malformed hash."""
        if not hashed:
            return False
        try:
            return self._hasher.verify(hashed, candidate)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as e:
            logger.warning(f"Stored password hash could not be verified: {type(e).__name__}")
            return False

    def check(self, hashed: Optional[str], candidate: str) -> None:
        """Like ``verify`` but raises ``InvalidCredentialError`` on failure."""
        if not self.verify(hashed, candidate):
            raise InvalidCredentialError("Invalid credentials")

    def needs_rehash(self, hashed: str) -> bool:
        """Whether a hash was made with parameters other than the current ones."""
        try:
            return self._hasher.check_needs_rehash(hashed)
        except InvalidHashError:
            return True

    @staticmethod
    def safe_compare(a: str, b: str) -> bool:
        """Constant-time string comparison for confirmations and tokens."""
        if a is None or b is None:
            return False
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
