"""Pytest configuration and fixtures for authcore tests."""

from unittest.mock import AsyncMock

import pytest

from authcore.config.settings import AuthCoreSettings
from authcore.features.notifications.entities.notification import NotificationDispatcher
from authcore.features.store.adapters.memory_adapter import MemoryKeyValueStore
from authcore.features.tokens.services.keys import generate_signing_keypair
from authcore.features.tokens.services.token_issuer import TokenIssuer

TEST_SECRET = "test-secret-for-session-tokens-0123456789"
TEST_AUDIENCE = "authcore-clients"
TEST_ISSUER = "authcore"

# Five seconds into an RFC 6238 step and 35 seconds into a one-minute window
T0 = 30 * 56_666_667 + 5


class FakeClock:
    """Controllable epoch clock."""

    def __init__(self, now: float = T0):
        self.now = float(now)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    """In-memory key-value store driven by the fake clock."""
    return MemoryKeyValueStore(key_prefix="test", clock=clock)


@pytest.fixture(scope="session")
def signing_keypair():
    """Ed25519 key pair as (private PEM, public PEM)."""
    return generate_signing_keypair()


@pytest.fixture
def settings(signing_keypair):
    """Settings isolated from the environment and .env files."""
    private_pem, public_pem = signing_keypair
    return AuthCoreSettings(
        _env_file=None,
        jwt_secret=TEST_SECRET,
        jwt_audience=TEST_AUDIENCE,
        jwt_issuer=TEST_ISSUER,
        jwt_private_key=private_pem,
        jwt_public_key=public_pem,
        argon2_time_cost=1,
        argon2_memory_cost=8,
        argon2_parallelism=1,
    )


@pytest.fixture
def issuer(signing_keypair):
    """Token issuer on the real clock, able to issue step-up tokens."""
    private_pem, public_pem = signing_keypair
    return TokenIssuer(
        secret=TEST_SECRET,
        audience=TEST_AUDIENCE,
        issuer=TEST_ISSUER,
        private_key_pem=private_pem,
        public_key_pem=public_pem,
    )


@pytest.fixture
def mock_dispatcher():
    """Mock notification dispatcher."""
    dispatcher = AsyncMock(spec=NotificationDispatcher)
    dispatcher.dispatch = AsyncMock()
    return dispatcher
