"""
Single-use password reset tokens.

Tokens are stored under their SHA-256 digest and bound to one subject. A new
request supersedes the subject's previous token, and requests are capped per
cooldown window.
"""

import hashlib
import logging
import secrets
from typing import Optional

from ....config.constants import KeyNamespace
from ....config.settings import AuthCoreSettings
from ....core.exceptions.auth import InvalidCredentialError, RateLimitedError
from ...notifications.entities.notification import (
    Notification,
    NotificationDispatcher,
    NotificationKind,
)
from ...store.entities.protocols import KeyValueStore

logger = logging.getLogger(__name__)


def random_token(nbytes: int = 32) -> str:
    """URL-safe random token."""
    return secrets.token_urlsafe(nbytes)


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class ResetTokenService:
    """Issues and consumes password reset tokens."""

    def __init__(
        self,
        store: KeyValueStore,
        token_ttl: int = 3600,
        request_limit: int = 2,
        request_window: int = 2 * 60 * 60,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self.store = store
        self.token_ttl = token_ttl
        self.request_limit = request_limit
        self.request_window = request_window
        self.dispatcher = dispatcher

    @classmethod
    def from_settings(
        cls,
        store: KeyValueStore,
        settings: AuthCoreSettings,
        dispatcher: Optional[NotificationDispatcher] = None,
    ) -> "ResetTokenService":
        return cls(
            store,
            token_ttl=settings.reset_token_ttl,
            request_limit=settings.reset_request_limit,
            request_window=settings.reset_request_window,
            dispatcher=dispatcher,
        )

    async def issue(self, subject_id: str) -> str:
        """Issue a reset token, superseding the subject's previous one.

        When a dispatcher is configured, the token is handed over as a
        ``PASSWORD_RESET`` notification.

        Raises:
            RateLimitedError: The subject exhausted its requests for the window
        """
        requests_key = KeyNamespace.RESET_REQUESTS.key(subject_id)
        count = await self.store.incr(requests_key, self.request_window)
        if count > self.request_limit:
            retry_after = await self.store.ttl(requests_key)
            logger.info(f"Reset token request limit reached for subject {subject_id}")
            raise RateLimitedError(
                "Too many password reset requests",
                retry_after=retry_after if retry_after is not None else self.request_window,
            )

        token = random_token()
        digest = _digest(token)
        await self.store.set(KeyNamespace.RESET_TOKEN.key(digest), subject_id, ttl=self.token_ttl)
        previous = await self.store.replace(
            KeyNamespace.RESET_SUBJECT.key(subject_id), digest, ttl=self.token_ttl
        )
        if previous and previous != digest:
            await self.store.delete(KeyNamespace.RESET_TOKEN.key(previous))

        logger.info(f"Reset token issued for subject {subject_id}")

        if self.dispatcher is not None:
            await self.dispatcher.dispatch(
                Notification(
                    kind=NotificationKind.PASSWORD_RESET,
                    subject_id=subject_id,
                    payload={"token": token, "expires_in": self.token_ttl},
                )
            )
        return token

    async def consume(self, token: str) -> str:
        """Redeem a token once. Returns the subject it was issued to.

        Raises:
            InvalidCredentialError: Unknown, used, expired or superseded token
        """
        if not token:
            raise InvalidCredentialError("Reset token is invalid")

        digest = _digest(token)
        subject_id = await self.store.pop(KeyNamespace.RESET_TOKEN.key(digest))
        if subject_id is None:
            raise InvalidCredentialError("Reset token is invalid")

        await self.store.delete_if_equals(KeyNamespace.RESET_SUBJECT.key(subject_id), digest)
        logger.info(f"Reset token consumed for subject {subject_id}")
        return subject_id
