"""
Lockout counters for failed credential checks.

Every failed verification increments a per-subject counter exactly once.
Once the counter reaches the threshold the subject is locked out until the
counter's window expires, and a single security alert is dispatched for the
episode. Attempts reserve their slot on the counter up front, so parallel
requests cannot slip past the threshold.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from ....config.constants import KeyNamespace
from ....config.settings import AuthCoreSettings
from ....core.exceptions.auth import InvalidCredentialError, LockedOutError, ReplayedOTPError
from ...notifications.entities.notification import (
    Notification,
    NotificationDispatcher,
    NotificationKind,
)
from ...store.entities.protocols import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AttemptGovernor:
    """Per-subject lockout after repeated credential failures."""

    def __init__(
        self,
        store: KeyValueStore,
        dispatcher: Optional[NotificationDispatcher] = None,
        threshold: int = 3,
        window: int = 24 * 60 * 60,
    ):
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self.store = store
        self.dispatcher = dispatcher
        self.threshold = threshold
        self.window = window

    @classmethod
    def from_settings(
        cls,
        store: KeyValueStore,
        settings: AuthCoreSettings,
        dispatcher: Optional[NotificationDispatcher] = None,
    ) -> "AttemptGovernor":
        return cls(store, dispatcher, settings.lockout_threshold, settings.lockout_window)

    async def attempts(self, subject_id: str) -> int:
        """Current failure count inside the window."""
        raw = await self.store.get(KeyNamespace.LOCKOUT.key(subject_id))
        return int(raw) if raw else 0

    async def check(self, subject_id: str) -> None:
        """Raise ``LockedOutError`` if the subject is locked out."""
        key = KeyNamespace.LOCKOUT.key(subject_id)
        raw = await self.store.get(key)
        if raw and int(raw) >= self.threshold:
            retry_after = await self.store.ttl(key)
            raise LockedOutError(
                "Too many failed attempts",
                retry_after=retry_after if retry_after is not None else self.window,
            )

    async def record_failure(self, subject_id: str) -> int:
        """Count one failure. Returns the new count."""
        count = await self.store.incr(KeyNamespace.LOCKOUT.key(subject_id), self.window)
        logger.info(f"Failed attempt {count}/{self.threshold} for subject {subject_id}")

        if count >= self.threshold:
            await self._alert_once(subject_id, count)
        return count

    async def reset(self, subject_id: str) -> None:
        """Clear the failure counter after a success."""
        await self.store.delete(
            KeyNamespace.LOCKOUT.key(subject_id),
            KeyNamespace.LOCKOUT_ALERT.key(subject_id),
        )

    async def guard(self, subject_id: str, verifier: Callable[[], Awaitable[T]]) -> T:
        """Run a credential check under lockout enforcement.

        Each attempt reserves a slot on the counter before ``verifier`` runs,
        so concurrent attempts can never exceed the threshold. A reservation
        past the threshold is released and the attempt fails with
        ``LockedOutError`` without reaching ``verifier``.

        ``InvalidCredentialError`` and ``ReplayedOTPError`` keep the
        reservation as the recorded failure. Any other error releases it,
        and a success resets the counter.
        """
        key = KeyNamespace.LOCKOUT.key(subject_id)
        count = await self.store.incr(key, self.window)
        if count > self.threshold:
            await self.store.decr(key)
            retry_after = await self.store.ttl(key)
            logger.info(f"Rejected attempt for locked out subject {subject_id}")
            raise LockedOutError(
                "Too many failed attempts",
                retry_after=retry_after if retry_after is not None else self.window,
            )

        try:
            result = await verifier()
        except (InvalidCredentialError, ReplayedOTPError):
            logger.info(f"Failed attempt {count}/{self.threshold} for subject {subject_id}")
            if count >= self.threshold:
                await self._alert_once(subject_id, count)
            raise
        except Exception:
            await self.store.decr(key)
            raise

        await self.reset(subject_id)
        return result

    async def _alert_once(self, subject_id: str, count: int) -> None:
        acquired = await self.store.set(
            KeyNamespace.LOCKOUT_ALERT.key(subject_id), "1", ttl=self.window, nx=True
        )
        if not acquired:
            return

        logger.warning(f"Subject {subject_id} locked out after {count} failed attempts")
        if self.dispatcher is None:
            return

        notification = Notification(
            kind=NotificationKind.SECURITY_ALERT,
            subject_id=subject_id,
            payload={"attempts": count, "window": self.window},
        )
        try:
            await self.dispatcher.dispatch(notification)
        except Exception as e:
            logger.error(f"Failed to dispatch security alert for subject {subject_id}: {e}")
