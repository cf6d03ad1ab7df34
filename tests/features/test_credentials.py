"""Tests for password hashing and reset tokens."""

import pytest

from authcore.core.exceptions import (
    InvalidCredentialError,
    LockedOutError,
    RateLimitedError,
)
from authcore.features.credentials.services.credential_verifier import CredentialVerifier
from authcore.features.credentials.services.reset_tokens import ResetTokenService, random_token
from authcore.features.governor.services.attempt_governor import AttemptGovernor
from authcore.features.notifications.entities.notification import NotificationKind


@pytest.fixture
def verifier():
    # Minimum argon2 cost keeps the suite fast
    return CredentialVerifier(time_cost=1, memory_cost=8, parallelism=1)


class TestCredentialVerifier:
    """Test argon2id hashing and constant-time comparisons."""

    def test_hash_is_salted(self, verifier):
        first = verifier.hash("correct horse")
        second = verifier.hash("correct horse")

        assert first != second
        assert first.startswith("$argon2id$")
        assert verifier.verify(first, "correct horse") is True
        assert verifier.verify(second, "correct horse") is True

    def test_wrong_password(self, verifier):
        hashed = verifier.hash("correct horse")

        assert verifier.verify(hashed, "battery staple") is False

    @pytest.mark.parametrize("hashed", ["", None, "not-a-hash", "$argon2id$v=19$broken"])
    def test_malformed_hash_is_a_mismatch(self, verifier, hashed):
        assert verifier.verify(hashed, "anything") is False

    def test_check_raises_on_mismatch(self, verifier):
        hashed = verifier.hash("correct horse")

        verifier.check(hashed, "correct horse")
        with pytest.raises(InvalidCredentialError):
            verifier.check(hashed, "wrong")

    def test_needs_rehash(self, verifier):
        hashed = verifier.hash("correct horse")
        stronger = CredentialVerifier(time_cost=2, memory_cost=16, parallelism=1)

        assert verifier.needs_rehash(hashed) is False
        assert stronger.needs_rehash(hashed) is True
        assert stronger.verify(hashed, "correct horse") is True

    def test_needs_rehash_for_garbage(self, verifier):
        assert verifier.needs_rehash("not-a-hash") is True

    def test_from_settings(self, settings):
        verifier = CredentialVerifier.from_settings(settings)

        assert verifier.verify(verifier.hash("pw"), "pw") is True

    @pytest.mark.parametrize(
        "a,b,expected",
        [
            ("secret", "secret", True),
            ("secret", "Secret", False),
            ("secret", "secret1", False),
            ("", "", True),
            ("pässword", "pässword", True),
            ("secret", None, False),
        ],
    )
    def test_safe_compare(self, a, b, expected):
        assert CredentialVerifier.safe_compare(a, b) is expected

    @pytest.mark.asyncio
    async def test_password_check_under_lockout(self, verifier, memory_store):
        """Test three wrong passwords lock the subject out of further checks."""
        governor = AttemptGovernor(memory_store, threshold=3, window=3600)
        hashed = verifier.hash("correct horse")

        async def attempt(password):
            verifier.check(hashed, password)

        for _ in range(3):
            with pytest.raises(InvalidCredentialError):
                await governor.guard("alice", lambda: attempt("wrong"))

        with pytest.raises(LockedOutError):
            await governor.guard("alice", lambda: attempt("correct horse"))


class TestResetTokens:
    """Test single-use password reset tokens."""

    @pytest.fixture
    def reset_tokens(self, memory_store, mock_dispatcher):
        return ResetTokenService(
            memory_store,
            token_ttl=3600,
            request_limit=2,
            request_window=7200,
            dispatcher=mock_dispatcher,
        )

    @pytest.mark.asyncio
    async def test_issue_and_consume_once(self, reset_tokens):
        token = await reset_tokens.issue("alice")

        assert await reset_tokens.consume(token) == "alice"
        with pytest.raises(InvalidCredentialError):
            await reset_tokens.consume(token)

    @pytest.mark.asyncio
    async def test_new_token_supersedes_previous(self, reset_tokens):
        first = await reset_tokens.issue("alice")
        second = await reset_tokens.issue("alice")

        with pytest.raises(InvalidCredentialError):
            await reset_tokens.consume(first)
        assert await reset_tokens.consume(second) == "alice"

    @pytest.mark.asyncio
    async def test_request_limit(self, reset_tokens, clock):
        """Test the third request inside the cooldown is refused."""
        await reset_tokens.issue("alice")
        await reset_tokens.issue("alice")

        with pytest.raises(RateLimitedError) as exc_info:
            await reset_tokens.issue("alice")
        assert exc_info.value.retry_after == 7200

        clock.advance(7201)
        await reset_tokens.issue("alice")

    @pytest.mark.asyncio
    async def test_expired_token(self, reset_tokens, clock):
        token = await reset_tokens.issue("alice")

        clock.advance(3601)

        with pytest.raises(InvalidCredentialError):
            await reset_tokens.consume(token)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["", "unknown-token"])
    async def test_unknown_token(self, reset_tokens, token):
        with pytest.raises(InvalidCredentialError):
            await reset_tokens.consume(token)

    @pytest.mark.asyncio
    async def test_token_not_stored_in_clear(self, reset_tokens, memory_store):
        token = await reset_tokens.issue("alice")

        assert await memory_store.get(f"reset:{token}") is None

    @pytest.mark.asyncio
    async def test_issue_dispatches_notification(self, reset_tokens, mock_dispatcher):
        token = await reset_tokens.issue("alice")

        notification = mock_dispatcher.dispatch.await_args.args[0]
        assert notification.kind == NotificationKind.PASSWORD_RESET
        assert notification.payload["token"] == token

    def test_random_token(self):
        tokens = {random_token() for _ in range(50)}

        assert len(tokens) == 50
        assert all(len(token) >= 43 for token in tokens)
