"""
Settings for authcore.

All tunables of the token issuer, session store, OTP engine, attempt governor
and credential verifier live here. Values are read from the environment
(prefix ``AUTHCORE_``) or a ``.env`` file.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_KEY_PREFIX,
    LOCKOUT_THRESHOLD,
    LOCKOUT_WINDOW_SECONDS,
    OTP_DIGITS,
    OTP_INTERVAL_SECONDS,
    OTP_REQUEST_COOLDOWN_SECONDS,
    OTP_VALID_WINDOW,
    RATE_LIMIT_DELAY_MS,
    RATE_LIMIT_WINDOW_SECONDS,
    RESET_REQUEST_LIMIT,
    RESET_REQUEST_WINDOW_SECONDS,
    SESSION_TTL_MINUTES,
    STEP_UP_TTL_MINUTES,
)

MIN_SECRET_BYTES = 32


class AuthCoreSettings(BaseSettings):
    """Runtime configuration for every authcore component."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # JWT Configuration
    jwt_secret: SecretStr = Field(...)  # required, at least MIN_SECRET_BYTES
    jwt_audience: str = Field(default="authcore-clients")
    jwt_issuer: str = Field(default="authcore")
    jwt_private_key: Optional[SecretStr] = Field(default=None)  # PKCS8 PEM, Ed25519
    jwt_public_key: Optional[str] = Field(default=None)  # SPKI PEM, Ed25519
    jwt_leeway: int = Field(default=0, ge=0)
    session_ttl_minutes: int = Field(default=SESSION_TTL_MINUTES, gt=0)
    step_up_ttl_minutes: int = Field(default=STEP_UP_TTL_MINUTES, gt=0)

    # OTP Configuration
    otp_digits: int = Field(default=OTP_DIGITS)
    otp_interval: int = Field(default=OTP_INTERVAL_SECONDS, gt=0)
    otp_valid_window: int = Field(default=OTP_VALID_WINDOW, ge=0)
    otp_issuer_name: str = Field(default="authcore")
    otp_request_cooldown: int = Field(default=OTP_REQUEST_COOLDOWN_SECONDS, gt=0)

    # Lockout Configuration
    lockout_threshold: int = Field(default=LOCKOUT_THRESHOLD, ge=1)
    lockout_window: int = Field(default=LOCKOUT_WINDOW_SECONDS, gt=0)

    # Rate Limiting Configuration
    rate_limit_window: int = Field(default=RATE_LIMIT_WINDOW_SECONDS, gt=0)
    rate_limit_delay_after: int = Field(default=100, ge=0)
    rate_limit_delay_ms: int = Field(default=RATE_LIMIT_DELAY_MS, ge=0)
    rate_limit_max_delay_ms: int = Field(default=10_000, ge=0)

    # Reset Token Configuration
    reset_token_ttl: int = Field(default=3600, gt=0)
    reset_request_limit: int = Field(default=RESET_REQUEST_LIMIT, ge=1)
    reset_request_window: int = Field(default=RESET_REQUEST_WINDOW_SECONDS, gt=0)

    # Password Hashing Configuration
    argon2_time_cost: int = Field(default=2, ge=1)
    argon2_memory_cost: int = Field(default=102400, ge=8)  # KiB
    argon2_parallelism: int = Field(default=8, ge=1)

    # Key-value Store Configuration
    redis_url: str = Field(default="redis://localhost:6379")
    redis_password: Optional[SecretStr] = Field(default=None)
    redis_db: int = Field(default=0, ge=0)
    key_prefix: str = Field(default=DEFAULT_KEY_PREFIX)
    store_timeout: float = Field(default=5.0, gt=0)

    @field_validator("jwt_secret")
    @classmethod
    def _secret_long_enough(cls, value: SecretStr) -> SecretStr:
        if len(value.get_secret_value().encode("utf-8")) < MIN_SECRET_BYTES:
            raise ValueError(f"jwt_secret must be at least {MIN_SECRET_BYTES} bytes")
        return value

    @field_validator("otp_digits")
    @classmethod
    def _supported_digits(cls, value: int) -> int:
        if value not in (6, 7, 8):
            raise ValueError("otp_digits must be 6, 7 or 8")
        return value

    @property
    def session_ttl_seconds(self) -> int:
        return self.session_ttl_minutes * 60

    @property
    def step_up_ttl_seconds(self) -> int:
        return self.step_up_ttl_minutes * 60

    @property
    def has_step_up_keys(self) -> bool:
        """Check whether an EdDSA key pair is configured."""
        return self.jwt_private_key is not None and self.jwt_public_key is not None


@lru_cache()
def get_settings() -> AuthCoreSettings:
    """Get cached settings instance."""
    return AuthCoreSettings()
