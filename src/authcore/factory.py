"""Factory wiring every authcore component from one settings object."""

import logging
from typing import Dict, Optional

from .config.settings import AuthCoreSettings, get_settings
from .features.credentials.services.credential_verifier import CredentialVerifier
from .features.credentials.services.reset_tokens import ResetTokenService
from .features.governor.entities.policies import RateLimitPolicy
from .features.governor.services.attempt_governor import AttemptGovernor
from .features.governor.services.rate_limiter import RateLimiter
from .features.notifications.adapters.logging_dispatcher import LoggingNotificationDispatcher
from .features.notifications.entities.notification import NotificationDispatcher
from .features.otp.services.otp_engine import OTPEngine
from .features.sessions.services.session_guard import SessionGuard
from .features.sessions.services.session_store import SessionStore
from .features.store.adapters.redis_adapter import RedisKeyValueStore
from .features.store.entities.protocols import KeyValueStore
from .features.tokens.services.token_issuer import TokenIssuer

logger = logging.getLogger(__name__)


class AuthCoreFactory:
    """Creates and caches authcore services.

    The store is connected lazily on first use unless one is passed in.
    """

    def __init__(
        self,
        settings: Optional[AuthCoreSettings] = None,
        store: Optional[KeyValueStore] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        rate_limit_routes: Optional[Dict[str, Optional[RateLimitPolicy]]] = None,
    ):
        self.settings = settings or get_settings()
        self.dispatcher = dispatcher or LoggingNotificationDispatcher()
        self.rate_limit_routes = rate_limit_routes

        self._store = store
        self._owns_store = store is None

        # Lazy-initialized services
        self._token_issuer = None
        self._session_store = None
        self._session_guard = None
        self._otp_engine = None
        self._attempt_governor = None
        self._rate_limiter = None
        self._credential_verifier = None
        self._reset_tokens = None

    async def get_store(self) -> KeyValueStore:
        """Get or connect the key-value store."""
        if self._store is None:
            password = self.settings.redis_password
            store = RedisKeyValueStore(
                redis_url=self.settings.redis_url,
                redis_password=password.get_secret_value() if password else None,
                redis_db=self.settings.redis_db,
                key_prefix=self.settings.key_prefix,
                timeout=self.settings.store_timeout,
            )
            await store.connect()
            self._store = store
        return self._store

    def get_token_issuer(self) -> TokenIssuer:
        if not self._token_issuer:
            self._token_issuer = TokenIssuer.from_settings(self.settings)
        return self._token_issuer

    def get_credential_verifier(self) -> CredentialVerifier:
        if not self._credential_verifier:
            self._credential_verifier = CredentialVerifier.from_settings(self.settings)
        return self._credential_verifier

    async def get_session_store(self) -> SessionStore:
        if not self._session_store:
            self._session_store = SessionStore.from_settings(await self.get_store(), self.settings)
        return self._session_store

    async def get_session_guard(self) -> SessionGuard:
        if not self._session_guard:
            self._session_guard = SessionGuard(
                issuer=self.get_token_issuer(),
                sessions=await self.get_session_store(),
                session_ttl_minutes=self.settings.session_ttl_minutes,
            )
        return self._session_guard

    async def get_otp_engine(self) -> OTPEngine:
        if not self._otp_engine:
            self._otp_engine = OTPEngine.from_settings(await self.get_store(), self.settings)
        return self._otp_engine

    async def get_attempt_governor(self) -> AttemptGovernor:
        if not self._attempt_governor:
            self._attempt_governor = AttemptGovernor.from_settings(
                await self.get_store(), self.settings, self.dispatcher
            )
        return self._attempt_governor

    async def get_rate_limiter(self) -> RateLimiter:
        if not self._rate_limiter:
            self._rate_limiter = RateLimiter.from_settings(
                await self.get_store(), self.settings, routes=self.rate_limit_routes
            )
        return self._rate_limiter

    async def get_reset_tokens(self) -> ResetTokenService:
        if not self._reset_tokens:
            self._reset_tokens = ResetTokenService.from_settings(
                await self.get_store(), self.settings, self.dispatcher
            )
        return self._reset_tokens

    async def initialize_all_services(self) -> None:
        """Initialize all services in dependency order."""
        await self.get_store()
        self.get_token_issuer()
        self.get_credential_verifier()
        await self.get_session_guard()
        await self.get_otp_engine()
        await self.get_attempt_governor()
        await self.get_rate_limiter()
        await self.get_reset_tokens()
        logger.info("authcore services initialized")

    async def cleanup(self) -> None:
        """Release the store connection if this factory opened it."""
        if self._owns_store and isinstance(self._store, RedisKeyValueStore):
            await self._store.disconnect()


def create_auth_core_factory(
    settings: Optional[AuthCoreSettings] = None,
    store: Optional[KeyValueStore] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> AuthCoreFactory:
    """Create configured AuthCoreFactory instance."""
    return AuthCoreFactory(settings=settings, store=store, dispatcher=dispatcher)
