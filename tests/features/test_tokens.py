"""Tests for the token issuer."""

import base64
import time

import jwt
import pytest

from authcore.core.exceptions import (
    ConfigurationError,
    ErrorKind,
    InternalFailureError,
    InvalidTokenError,
    SecretNotProvisionedError,
)
from authcore.features.tokens.entities.claims import TokenClaims
from authcore.features.tokens.services.token_issuer import TokenIssuer, extract_bearer_token
from tests.conftest import TEST_AUDIENCE, TEST_ISSUER, TEST_SECRET, FakeClock


def _flip_signature_bit(token: str) -> str:
    header, payload, signature = token.split(".")
    raw = bytearray(base64.urlsafe_b64decode(signature + "=" * (-len(signature) % 4)))
    raw[0] ^= 0x01
    flipped = base64.urlsafe_b64encode(bytes(raw)).rstrip(b"=").decode("ascii")
    return ".".join((header, payload, flipped))


class TestSessionTokens:
    """Test HS256 session token issuance and verification."""

    def test_issue_and_verify(self, issuer):
        """Test a freshly issued token verifies to its own claims."""
        token = issuer.issue_session_token("alice", "s1", ttl_minutes=60)

        claims = issuer.verify(token)

        assert claims.sub == "alice"
        assert claims.jti == "s1"
        assert claims.aud == TEST_AUDIENCE
        assert claims.iss == TEST_ISSUER
        assert claims.nbf == claims.iat
        assert claims.lifetime_seconds == 60 * 60

    def test_header_declares_hs256(self, issuer):
        """Test the token header carries the session algorithm."""
        token = issuer.issue_session_token("alice", "s1", ttl_minutes=5)

        header = jwt.get_unverified_header(token)

        assert header["alg"] == "HS256"
        assert header["typ"] == "JWT"

    def test_expired_token_rejected(self):
        """Test a token is rejected once the issuer's clock passes exp."""
        clock = FakeClock(time.time())
        issuer = TokenIssuer(TEST_SECRET, TEST_AUDIENCE, TEST_ISSUER, clock=clock)
        token = issuer.issue_session_token("alice", "s1", ttl_minutes=60)
        assert issuer.verify(token).sub == "alice"

        clock.advance(2 * 3600)

        with pytest.raises(InvalidTokenError, match="expired"):
            issuer.verify(token)

    def test_expiry_follows_injected_clock(self):
        """Test an old token still verifies while the injected clock is before exp."""
        clock = FakeClock(time.time() - 10 * 3600)
        issuer = TokenIssuer(TEST_SECRET, TEST_AUDIENCE, TEST_ISSUER, clock=clock)
        token = issuer.issue_session_token("alice", "s1", ttl_minutes=60)

        clock.advance(59 * 60)
        assert issuer.verify(token).jti == "s1"

        clock.advance(60)
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_leeway_applies_to_expiry(self):
        clock = FakeClock(time.time())
        issuer = TokenIssuer(TEST_SECRET, TEST_AUDIENCE, TEST_ISSUER, leeway=30, clock=clock)
        token = issuer.issue_session_token("alice", "s1", ttl_minutes=1)

        clock.advance(80)
        assert issuer.verify(token).sub == "alice"

        clock.advance(20)
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_not_yet_valid_token_rejected(self):
        """Test a token whose nbf lies ahead of the issuer's clock is rejected."""
        clock = FakeClock(time.time())
        issuer = TokenIssuer(TEST_SECRET, TEST_AUDIENCE, TEST_ISSUER, clock=clock)
        token = issuer.issue_session_token("alice", "s1", ttl_minutes=60)

        clock.advance(-3600)

        with pytest.raises(InvalidTokenError, match="not yet valid"):
            issuer.verify(token)

    def test_flipped_signature_bit_rejected(self, issuer):
        """Test a single flipped signature bit invalidates the token."""
        token = issuer.issue_session_token("alice", "s1", ttl_minutes=60)

        with pytest.raises(InvalidTokenError):
            issuer.verify(_flip_signature_bit(token))

    def test_wrong_secret_rejected(self, issuer):
        """Test a token signed with another secret is rejected."""
        other = TokenIssuer("another-secret-that-is-long-enough-000", TEST_AUDIENCE, TEST_ISSUER)
        token = other.issue_session_token("alice", "s1", ttl_minutes=60)

        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_wrong_audience_rejected(self, issuer):
        """Test audience mismatch is rejected."""
        token = issuer.issue_session_token("alice", "s1", ttl_minutes=60)

        with pytest.raises(InvalidTokenError):
            issuer.verify(token, expected_audience="someone-else")

    def test_wrong_issuer_rejected(self, issuer):
        """Test issuer mismatch is rejected."""
        token = issuer.issue_session_token("alice", "s1", ttl_minutes=60)

        with pytest.raises(InvalidTokenError):
            issuer.verify(token, expected_issuer="someone-else")

    def test_missing_claim_rejected(self, issuer):
        """Test a correctly signed token without jti is rejected."""
        now = int(time.time())
        token = jwt.encode(
            {"aud": TEST_AUDIENCE, "iss": TEST_ISSUER, "sub": "alice",
             "iat": now, "nbf": now, "exp": now + 60},
            TEST_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
    def test_malformed_token_rejected(self, issuer, token):
        """Test garbage input is rejected."""
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_step_up_token_not_accepted_as_session(self, issuer):
        """Test algorithms are bound to token kinds."""
        step_up = issuer.issue_step_up_token("alice")

        with pytest.raises(InvalidTokenError):
            issuer.verify(step_up)

    def test_invalid_arguments(self, issuer):
        """Test issuing without ids or with a non-positive TTL fails."""
        with pytest.raises(ValueError):
            issuer.issue_session_token("", "s1", ttl_minutes=60)
        with pytest.raises(ValueError):
            issuer.issue_session_token("alice", "s1", ttl_minutes=0)
        with pytest.raises(ValueError):
            issuer.issue_step_up_token("alice", ttl_minutes=0)

    def test_empty_secret_not_provisioned(self):
        """Test an issuer cannot be built without a secret."""
        with pytest.raises(SecretNotProvisionedError):
            TokenIssuer("", TEST_AUDIENCE, TEST_ISSUER)


class TestStepUpTokens:
    """Test EdDSA step-up tokens."""

    def test_issue_and_verify(self, issuer):
        """Test step-up tokens verify and default to a 15 minute lifetime."""
        token = issuer.issue_step_up_token("alice", token_id="otp-1")

        claims = issuer.verify_step_up(token)

        assert jwt.get_unverified_header(token)["alg"] == "EdDSA"
        assert claims.sub == "alice"
        assert claims.jti == "otp-1"
        assert claims.lifetime_seconds == 15 * 60

    def test_verify_with_public_key_only(self, issuer, signing_keypair):
        """Test verification needs only the public key."""
        _, public_pem = signing_keypair
        verifier = TokenIssuer(TEST_SECRET, TEST_AUDIENCE, TEST_ISSUER, public_key_pem=public_pem)
        token = issuer.issue_step_up_token("alice")

        assert verifier.verify_step_up(token).sub == "alice"
        assert verifier.can_issue_step_up is False
        with pytest.raises(SecretNotProvisionedError):
            verifier.issue_step_up_token("alice")

    def test_public_key_derived_from_private_key(self, signing_keypair):
        """Test an issuer with only the private key can verify its tokens."""
        private_pem, _ = signing_keypair
        issuer = TokenIssuer(TEST_SECRET, TEST_AUDIENCE, TEST_ISSUER, private_key_pem=private_pem)

        assert issuer.verify_step_up(issuer.issue_step_up_token("bob")).sub == "bob"

    def test_session_token_not_accepted_as_step_up(self, issuer):
        """Test an HS256 token never passes step-up verification."""
        token = issuer.issue_session_token("alice", "s1", ttl_minutes=60)

        with pytest.raises(InvalidTokenError):
            issuer.verify_step_up(token)

    def test_flipped_signature_bit_rejected(self, issuer):
        """Test Ed25519 signatures detect a flipped bit."""
        token = issuer.issue_step_up_token("alice")

        with pytest.raises(InvalidTokenError):
            issuer.verify_step_up(_flip_signature_bit(token))

    def test_invalid_key_material(self):
        """Test unreadable PEM input is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            TokenIssuer(TEST_SECRET, TEST_AUDIENCE, TEST_ISSUER, private_key_pem="not a pem")

        assert isinstance(exc_info.value, InternalFailureError)
        assert exc_info.value.kind == ErrorKind.INTERNAL_FAILURE


class TestTokenClaims:
    """Test claim validation after decoding."""

    def test_from_payload_requires_all_claims(self):
        """Test missing claims are listed in the error details."""
        with pytest.raises(InvalidTokenError) as exc_info:
            TokenClaims.from_payload({"sub": "alice"})

        assert "jti" in exc_info.value.details["missing"]

    def test_from_payload_rejects_wrong_types(self):
        """Test a boolean timestamp is not accepted as an integer."""
        payload = {"aud": "a", "iss": "i", "jti": "j", "sub": "s",
                   "iat": 1, "nbf": 1, "exp": True}

        with pytest.raises(InvalidTokenError):
            TokenClaims.from_payload(payload)


class TestExtractBearerToken:
    """Test Authorization header parsing."""

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            ("bearer abc", "abc"),
            ("Basic abc", None),
            ("Bearer ", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extract(self, header, expected):
        assert extract_bearer_token(header) == expected
