"""Session store - the revocation ledger.

A token's signature proves it was issued; only a live entry here proves it
has not been revoked. Layout in the key-value store:

* ``sess:<session_id>`` holds the JSON ``SessionRecord``
* ``sess-subject:<subject_id>`` holds the subject's current session id
* ``stepup:<token_id>`` holds the subject of a step-up token
* ``stepup-subject:<subject_id>`` holds the subject's current step-up id

A record counts as live only while the subject index points back at it.
Concurrent logins therefore converge on the last writer of the index even
if a superseded record briefly survives.
"""

import json
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from ....config.constants import KeyNamespace
from ....config.settings import AuthCoreSettings
from ....core.exceptions.auth import SessionRevokedError
from ...store.entities.protocols import Clock, KeyValueStore
from ...tokens.entities.claims import TokenClaims
from ..entities.session_record import RequestContext, SessionRecord

logger = logging.getLogger(__name__)


class SessionStore:
    """Store-backed ledger of live sessions and step-up sessions."""

    def __init__(
        self,
        store: KeyValueStore,
        session_ttl: int,
        step_up_ttl: int,
        clock: Optional[Clock] = None,
    ):
        """Initialize session store.

        Args:
            store: Shared key-value store
            session_ttl: Seconds a session lives, equal to the session token TTL
            step_up_ttl: Seconds a step-up session lives
            clock: Time source in epoch seconds
        """
        self.store = store
        self.session_ttl = session_ttl
        self.step_up_ttl = step_up_ttl
        self._clock = clock or time.time

    @classmethod
    def from_settings(
        cls,
        store: KeyValueStore,
        settings: AuthCoreSettings,
        clock: Optional[Clock] = None,
    ) -> "SessionStore":
        return cls(store, settings.session_ttl_seconds, settings.step_up_ttl_seconds, clock)

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), timezone.utc)

    # Sessions

    async def put(
        self,
        session_id: str,
        subject_id: str,
        context: Optional[RequestContext] = None,
    ) -> SessionRecord:
        """Record a login, superseding the subject's previous session."""
        record = SessionRecord.create(session_id, subject_id, context, now=self._now())

        # Record first, index second: an interrupted put leaves an
        # unreachable record rather than a dangling index.
        await self.store.set(
            KeyNamespace.SESSION.key(session_id), record.to_json(), ttl=self.session_ttl
        )
        previous = await self.store.replace(
            KeyNamespace.SUBJECT_SESSION.key(subject_id), session_id, ttl=self.session_ttl
        )

        if previous and previous != session_id:
            await self.store.delete(KeyNamespace.SESSION.key(previous))
            logger.info(f"Session {previous} for subject {subject_id} superseded by {session_id}")
        else:
            logger.info(f"Session {session_id} stored for subject {subject_id}")

        return record

    async def get_record(self, session_id: str) -> Optional[SessionRecord]:
        """Get the live session record, or None if revoked or expired."""
        key = KeyNamespace.SESSION.key(session_id)
        raw = await self.store.get(key)
        if raw is None:
            return None

        try:
            record = SessionRecord.from_json(raw)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Dropping unreadable session record {session_id}: {e}")
            await self.store.delete(key)
            return None

        current = await self.store.get(KeyNamespace.SUBJECT_SESSION.key(record.subject_id))
        if current != session_id:
            return None
        return record

    async def get(self, session_id: str) -> Optional[str]:
        """Get the subject of a live session."""
        record = await self.get_record(session_id)
        return record.subject_id if record else None

    async def require(self, claims: TokenClaims) -> SessionRecord:
        """Resolve the live session behind verified claims."""
        record = await self.get_record(claims.jti)
        if record is None or record.subject_id != claims.sub:
            logger.info(f"Token for subject {claims.sub} refers to revoked session {claims.jti}")
            raise SessionRevokedError("Session has been revoked or has expired")
        return record

    async def touch(self, session_id: str, context: Optional[RequestContext] = None) -> SessionRecord:
        """Refresh the activity stamp of a live session without extending it."""
        record = await self.get_record(session_id)
        if record is None:
            raise SessionRevokedError("Session has been revoked or has expired")

        key = KeyNamespace.SESSION.key(session_id)
        remaining = await self.store.ttl(key)
        if remaining is None or remaining <= 0:
            raise SessionRevokedError("Session has been revoked or has expired")

        updated = record.touched(context, self._now())
        await self.store.set(key, updated.to_json(), ttl=remaining)
        return updated

    async def delete(self, session_id: str) -> bool:
        """Revoke one session. Returns True if it was live."""
        raw = await self.store.pop(KeyNamespace.SESSION.key(session_id))
        if raw is None:
            return False

        try:
            subject_id = SessionRecord.from_json(raw).subject_id
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            return True

        await self.store.delete_if_equals(KeyNamespace.SUBJECT_SESSION.key(subject_id), session_id)
        logger.info(f"Session {session_id} revoked for subject {subject_id}")
        return True

    async def delete_all_for_subject(self, subject_id: str) -> int:
        """Revoke every session and step-up session of a subject."""
        revoked = 0

        session_id = await self.store.pop(KeyNamespace.SUBJECT_SESSION.key(subject_id))
        if session_id:
            revoked += await self.store.delete(KeyNamespace.SESSION.key(session_id))

        step_up_id = await self.store.pop(KeyNamespace.STEP_UP_SUBJECT.key(subject_id))
        if step_up_id:
            revoked += await self.store.delete(KeyNamespace.STEP_UP_SESSION.key(step_up_id))

        logger.info(f"Revoked {revoked} sessions for subject {subject_id}")
        return revoked

    # Step-up sessions

    async def put_step_up(self, token_id: str, subject_id: str) -> None:
        """Record a step-up token, superseding the subject's previous one."""
        await self.store.set(
            KeyNamespace.STEP_UP_SESSION.key(token_id), subject_id, ttl=self.step_up_ttl
        )
        previous = await self.store.replace(
            KeyNamespace.STEP_UP_SUBJECT.key(subject_id),
            token_id,
            ttl=self.step_up_ttl,
        )
        if previous and previous != token_id:
            await self.store.delete(KeyNamespace.STEP_UP_SESSION.key(previous))

    async def get_step_up(self, token_id: str) -> Optional[str]:
        """Get the subject of a live step-up session."""
        subject_id = await self.store.get(KeyNamespace.STEP_UP_SESSION.key(token_id))
        if subject_id is None:
            return None

        current = await self.store.get(KeyNamespace.STEP_UP_SUBJECT.key(subject_id))
        return subject_id if current == token_id else None

    async def require_step_up(self, claims: TokenClaims) -> str:
        subject_id = await self.get_step_up(claims.jti)
        if subject_id is None or subject_id != claims.sub:
            raise SessionRevokedError("Step-up session has been revoked or has expired")
        return subject_id

    async def delete_step_up(self, token_id: str) -> bool:
        subject_id = await self.store.pop(KeyNamespace.STEP_UP_SESSION.key(token_id))
        if subject_id is None:
            return False

        await self.store.delete_if_equals(
            KeyNamespace.STEP_UP_SUBJECT.key(subject_id), token_id
        )
        return True
