"""Tests for the session store and session guard."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from authcore.core.exceptions import InvalidTokenError, SessionRevokedError
from authcore.features.sessions.entities.session_record import RequestContext, SessionRecord
from authcore.features.sessions.services.session_guard import SessionGuard
from authcore.features.sessions.services.session_store import SessionStore
from authcore.features.tokens.entities.claims import TokenClaims


def _claims(subject_id: str, session_id: str) -> TokenClaims:
    return TokenClaims(aud="a", exp=2, iat=1, iss="i", jti=session_id, nbf=1, sub=subject_id)


@pytest.fixture
def sessions(memory_store, clock):
    return SessionStore(memory_store, session_ttl=3600, step_up_ttl=900, clock=clock)


@pytest.fixture
def guard(issuer, sessions):
    return SessionGuard(issuer, sessions, session_ttl_minutes=60)


class TestSessionStore:
    """Test the revocation ledger."""

    @pytest.mark.asyncio
    async def test_new_login_supersedes_previous(self, sessions):
        """Test only the latest session of a subject stays live."""
        await sessions.put("s1", "alice")
        await sessions.put("s2", "alice")

        assert await sessions.get("s1") is None
        assert await sessions.get("s2") == "alice"

    @pytest.mark.asyncio
    async def test_subjects_are_independent(self, sessions):
        await sessions.put("s1", "alice")
        await sessions.put("s2", "bob")

        assert await sessions.get("s1") == "alice"
        assert await sessions.get("s2") == "bob"

    @pytest.mark.asyncio
    async def test_concurrent_logins_converge(self, sessions):
        """Test concurrent logins leave exactly one live session."""
        await asyncio.gather(*(sessions.put(f"s{i}", "alice") for i in range(5)))

        live = [sid for sid in (f"s{i}" for i in range(5)) if await sessions.get(sid)]

        assert len(live) == 1

    @pytest.mark.asyncio
    async def test_delete_all_for_subject(self, sessions):
        """Test a password reset revokes sessions and step-up sessions."""
        await sessions.put("s2", "alice")
        await sessions.put_step_up("u1", "alice")

        revoked = await sessions.delete_all_for_subject("alice")

        assert revoked == 2
        assert await sessions.get("s2") is None
        assert await sessions.get_step_up("u1") is None

    @pytest.mark.asyncio
    async def test_delete_single_session(self, sessions):
        """Test logout revokes once and frees the subject index."""
        await sessions.put("s1", "alice")

        assert await sessions.delete("s1") is True
        assert await sessions.delete("s1") is False
        assert await sessions.get("s1") is None

        await sessions.put("s3", "alice")
        assert await sessions.get("s3") == "alice"

    @pytest.mark.asyncio
    async def test_delete_of_stale_session_keeps_current(self, sessions):
        """Test deleting a superseded id does not touch the live session."""
        await sessions.put("s1", "alice")
        await sessions.put("s2", "alice")

        assert await sessions.delete("s1") is False
        assert await sessions.get("s2") == "alice"

    @pytest.mark.asyncio
    async def test_session_expires_with_ttl(self, sessions, clock):
        await sessions.put("s1", "alice")

        clock.advance(3601)

        assert await sessions.get("s1") is None

    @pytest.mark.asyncio
    async def test_touch_keeps_remaining_ttl(self, sessions, memory_store, clock):
        """Test activity stamps never extend the session."""
        record = await sessions.put("s1", "alice", RequestContext(ip="10.0.0.1"))
        clock.advance(600)

        touched = await sessions.touch("s1", RequestContext(ip="10.0.0.2", device="phone"))

        assert touched.ip == "10.0.0.2"
        assert touched.device == "phone"
        assert touched.signed_in == record.signed_in
        assert touched.last_active > record.last_active
        assert await memory_store.ttl("sess:s1") == 3000

    @pytest.mark.asyncio
    async def test_touch_of_revoked_session_fails(self, sessions):
        with pytest.raises(SessionRevokedError):
            await sessions.touch("missing")

    @pytest.mark.asyncio
    async def test_require_checks_subject(self, sessions):
        """Test a live session id under another subject is not accepted."""
        await sessions.put("s1", "alice")

        assert (await sessions.require(_claims("alice", "s1"))).subject_id == "alice"
        with pytest.raises(SessionRevokedError):
            await sessions.require(_claims("mallory", "s1"))

    @pytest.mark.asyncio
    async def test_unreadable_record_is_dropped(self, sessions, memory_store):
        await memory_store.set("sess:bad", "not-json")

        assert await sessions.get_record("bad") is None
        assert await memory_store.get("sess:bad") is None

    @pytest.mark.asyncio
    async def test_step_up_supersedes_previous(self, sessions):
        await sessions.put_step_up("u1", "alice")
        await sessions.put_step_up("u2", "alice")

        assert await sessions.get_step_up("u1") is None
        assert await sessions.get_step_up("u2") == "alice"
        assert await sessions.delete_step_up("u2") is True
        assert await sessions.get_step_up("u2") is None

    @pytest.mark.asyncio
    async def test_step_up_expires(self, sessions, clock):
        await sessions.put_step_up("u1", "alice")

        clock.advance(901)

        with pytest.raises(SessionRevokedError):
            await sessions.require_step_up(_claims("alice", "u1"))


class TestSessionRecord:
    """Test session record serialization."""

    def test_json_round_trip_keeps_datetimes(self):
        record = SessionRecord.create("s1", "alice", RequestContext("laptop", "1.2.3.4", "ua"))

        restored = SessionRecord.from_json(record.to_json())

        assert restored == record


class TestSessionGuard:
    """Test the authentication pipeline."""

    @pytest.mark.asyncio
    async def test_login_then_authenticate(self, guard):
        token, record = await guard.start_session("alice", RequestContext(device="laptop"))

        session = await guard.authenticate(token)

        assert session.subject_id == "alice"
        assert session.session_id == record.session_id
        assert session.claims.jti == record.session_id

    @pytest.mark.asyncio
    async def test_second_login_revokes_first_token(self, guard):
        """Test a signature-valid token of a superseded session is refused."""
        first, _ = await guard.start_session("alice")
        second, _ = await guard.start_session("alice")

        with pytest.raises(SessionRevokedError):
            await guard.authenticate(first)
        assert (await guard.authenticate(second)).subject_id == "alice"

    @pytest.mark.asyncio
    async def test_logout_revokes_token(self, guard):
        token, _ = await guard.start_session("alice")
        session = await guard.authenticate(token)

        assert await guard.end_session(session) is True
        with pytest.raises(SessionRevokedError):
            await guard.authenticate(token)

    @pytest.mark.asyncio
    async def test_authenticate_stamps_activity(self, guard):
        token, _ = await guard.start_session("alice", RequestContext(ip="10.0.0.1"))

        session = await guard.authenticate(token, RequestContext(ip="10.0.0.9"))

        assert session.record.ip == "10.0.0.9"

    @pytest.mark.asyncio
    async def test_invalid_token_never_reaches_store(self, issuer):
        """Test cryptographic failures are reported before any lookup."""
        sessions = AsyncMock(spec=SessionStore)
        guard = SessionGuard(issuer, sessions, session_ttl_minutes=60)

        with pytest.raises(InvalidTokenError):
            await guard.authenticate("not-a-token")

        sessions.require.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_step_up_flow(self, guard):
        token, _ = await guard.start_session("alice")
        session = await guard.authenticate(token)

        step_up = await guard.start_step_up("alice")
        claims = await guard.authorize_step_up(session, step_up)

        assert claims.sub == "alice"

    @pytest.mark.asyncio
    async def test_step_up_of_other_subject_rejected(self, guard):
        token, _ = await guard.start_session("alice")
        session = await guard.authenticate(token)
        step_up = await guard.start_step_up("bob")

        with pytest.raises(InvalidTokenError):
            await guard.authorize_step_up(session, step_up)

    @pytest.mark.asyncio
    async def test_step_up_revoked_with_all_sessions(self, guard, sessions):
        token, _ = await guard.start_session("alice")
        session = await guard.authenticate(token)
        step_up = await guard.start_step_up("alice")

        await sessions.delete_all_for_subject("alice")

        with pytest.raises(SessionRevokedError):
            await guard.authorize_step_up(session, step_up)
