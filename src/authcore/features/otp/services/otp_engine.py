"""
TOTP engine (RFC 6238) with a store-backed replay blacklist.

Codes are SHA1, six digits, 30 second steps by default, and a code from the
adjacent step on either side is accepted. A successfully verified code is
blacklisted until it can no longer validate, so it works exactly once.
"""

import hashlib
import logging
import math
import time
from typing import Optional

import pyotp

from ....config.constants import KeyNamespace
from ....config.settings import AuthCoreSettings
from ....core.exceptions.auth import (
    InvalidCredentialError,
    RateLimitedError,
    ReplayedOTPError,
    SecretNotProvisionedError,
)
from ...store.entities.protocols import Clock, KeyValueStore
from ..entities.otp_code import OTPCode

logger = logging.getLogger(__name__)


class OTPEngine:
    """Generates, validates and consumes time-based one-time codes."""

    def __init__(
        self,
        store: KeyValueStore,
        issuer_name: str = "authcore",
        digits: int = 6,
        interval: int = 30,
        valid_window: int = 1,
        request_cooldown: int = 30,
        clock: Optional[Clock] = None,
    ):
        """Initialize OTP engine.

        Args:
            store: Shared key-value store holding blacklist and cooldown flags
            issuer_name: Issuer shown by authenticator apps
            digits: Code length
            interval: Time step in seconds
            valid_window: Adjacent steps accepted on either side
            request_cooldown: Seconds between two code requests of one subject
            clock: Time source in epoch seconds
        """
        self.store = store
        self.issuer_name = issuer_name
        self.digits = digits
        self.interval = interval
        self.valid_window = valid_window
        self.request_cooldown = request_cooldown
        self._clock = clock or time.time

    @classmethod
    def from_settings(
        cls,
        store: KeyValueStore,
        settings: AuthCoreSettings,
        clock: Optional[Clock] = None,
    ) -> "OTPEngine":
        return cls(
            store,
            issuer_name=settings.otp_issuer_name,
            digits=settings.otp_digits,
            interval=settings.otp_interval,
            valid_window=settings.otp_valid_window,
            request_cooldown=settings.otp_request_cooldown,
            clock=clock,
        )

    def _totp(self, secret: str) -> pyotp.TOTP:
        if not secret:
            raise SecretNotProvisionedError("OTP secret has not been provisioned")
        return pyotp.TOTP(secret, digits=self.digits, interval=self.interval)

    def _time_step(self, now: float) -> int:
        return int(now // self.interval)

    @staticmethod
    def rotate_secret() -> str:
        """Generate a fresh base32 secret. Codes of the old one stop validating."""
        return pyotp.random_base32()

    def provisioning_uri(self, subject_label: str, secret: str) -> str:
        """Build the otpauth:// enrollment URI for authenticator apps."""
        return self._totp(secret).provisioning_uri(
            name=subject_label, issuer_name=self.issuer_name
        )

    def generate(self, subject_id: str, secret: str) -> OTPCode:
        """Generate the code for the current time step."""
        totp = self._totp(secret)
        now = self._clock()
        step = self._time_step(now)
        return OTPCode(
            code=totp.at(int(now)),
            uri=totp.provisioning_uri(name=subject_id, issuer_name=self.issuer_name),
            time_step=step,
            valid_until=(step + 1) * self.interval,
        )

    def validate(self, candidate_code: str, secret: str) -> bool:
        """Check a code against the current and adjacent time steps.

        Never raises for a wrong or malformed candidate.

        Raises:
            SecretNotProvisionedError: If ``secret`` is empty
        """
        totp = self._totp(secret)
        if not isinstance(candidate_code, str):
            return False

        candidate = candidate_code.strip()
        if len(candidate) != self.digits or not candidate.isdigit():
            return False

        try:
            return totp.verify(candidate, for_time=int(self._clock()), valid_window=self.valid_window)
        except ValueError as e:
            # binascii.Error on an undecodable base32 secret
            logger.warning(f"OTP secret could not be decoded: {e}")
            return False

    def _blacklist_key(self, subject_id: str, code: str) -> str:
        digest = hashlib.sha256(code.encode("utf-8")).hexdigest()
        return KeyNamespace.OTP_BLACKLIST.key(subject_id, digest)

    def _blacklist_ttl(self) -> int:
        """Seconds until the latest step that could still accept a code seen now ends."""
        now = self._clock()
        last_step = self._time_step(now) + 2 * self.valid_window
        return max(1, math.ceil((last_step + 1) * self.interval - now))

    async def verify(self, subject_id: str, candidate_code: str, secret: str) -> None:
        """Validate and consume a code. Succeeds at most once per code.

        Raises:
            ReplayedOTPError: The code was already consumed
            InvalidCredentialError: The code does not validate
            SecretNotProvisionedError: If ``secret`` is empty
        """
        candidate = candidate_code.strip() if isinstance(candidate_code, str) else ""
        key = self._blacklist_key(subject_id, candidate)

        if await self.store.get(key) is not None:
            logger.warning(f"Replayed OTP presented for subject {subject_id}")
            raise ReplayedOTPError("One-time code has already been used")

        if not self.validate(candidate, secret):
            logger.info(f"Invalid OTP presented for subject {subject_id}")
            raise InvalidCredentialError("One-time code is invalid")

        # Two concurrent presentations race on SET NX; only one wins.
        consumed = await self.store.set(key, "1", ttl=self._blacklist_ttl(), nx=True)
        if not consumed:
            logger.warning(f"Concurrent replay of OTP for subject {subject_id}")
            raise ReplayedOTPError("One-time code has already been used")

        logger.info(f"OTP verified for subject {subject_id}")

    async def request_code(self, subject_id: str, secret: str) -> OTPCode:
        """Generate a code for delivery, at most once per cooldown.

        Raises:
            RateLimitedError: A code was requested within the cooldown
        """
        self._totp(secret)
        key = KeyNamespace.OTP_REQUESTED.key(subject_id)
        if not await self.store.set(key, "1", ttl=self.request_cooldown, nx=True):
            retry_after = await self.store.ttl(key)
            logger.info(f"OTP requested again within cooldown for subject {subject_id}")
            raise RateLimitedError(
                "One-time code was requested too recently",
                retry_after=retry_after or self.request_cooldown,
            )

        return self.generate(subject_id, secret)
