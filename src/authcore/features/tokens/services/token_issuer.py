"""Token issuance and verification service.

Session tokens are HS256 over a shared secret. Step-up tokens are EdDSA
(Ed25519); verifying them needs only the public key.

Verification establishes cryptographic validity only. Whether the session
behind a token is still live is the session store's decision.
"""

import logging
import secrets
import time
from typing import Any, Dict, List, Optional, Union

import jwt
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from jwt.exceptions import (
    InvalidAudienceError,
    InvalidIssuerError,
    InvalidSignatureError,
    InvalidTokenError as JWTInvalidTokenError,
)

from ....config.constants import STEP_UP_TTL_MINUTES, TokenAlgorithm
from ....config.settings import AuthCoreSettings
from ....core.exceptions.auth import InvalidTokenError, SecretNotProvisionedError
from ...store.entities.protocols import Clock
from ..entities.claims import REGISTERED_CLAIMS, TokenClaims
from .keys import load_private_key, load_public_key

logger = logging.getLogger(__name__)

Key = Union[str, bytes, Ed25519PrivateKey, Ed25519PublicKey]


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from a ``Bearer <token>`` header value."""
    if not authorization:
        return None

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class TokenIssuer:
    """Signs and verifies compact session and step-up tokens."""

    def __init__(
        self,
        secret: str,
        audience: str,
        issuer: str,
        private_key_pem: Optional[str] = None,
        public_key_pem: Optional[str] = None,
        leeway: int = 0,
        step_up_ttl_minutes: int = STEP_UP_TTL_MINUTES,
        clock: Optional[Clock] = None,
    ):
        """Initialize token issuer.

        The public key is derived from the private key when only the
        private key is given.
        """
        if not secret:
            raise SecretNotProvisionedError("Session token secret is not configured")

        self._secret = secret
        self.audience = audience
        self.issuer = issuer
        self.leeway = leeway
        self.step_up_ttl_minutes = step_up_ttl_minutes
        self._clock = clock or time.time

        self._private_key: Optional[Ed25519PrivateKey] = (
            load_private_key(private_key_pem) if private_key_pem else None
        )
        if public_key_pem:
            self._public_key: Optional[Ed25519PublicKey] = load_public_key(public_key_pem)
        elif self._private_key is not None:
            self._public_key = self._private_key.public_key()
        else:
            self._public_key = None

    @classmethod
    def from_settings(cls, settings: AuthCoreSettings, clock: Optional[Clock] = None) -> "TokenIssuer":
        """Create issuer from settings."""
        private_key = settings.jwt_private_key.get_secret_value() if settings.jwt_private_key else None
        return cls(
            secret=settings.jwt_secret.get_secret_value(),
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            private_key_pem=private_key,
            public_key_pem=settings.jwt_public_key,
            leeway=settings.jwt_leeway,
            step_up_ttl_minutes=settings.step_up_ttl_minutes,
            clock=clock,
        )

    @property
    def can_issue_step_up(self) -> bool:
        return self._private_key is not None

    # Issuance

    def _build_payload(self, subject_id: str, token_id: str, ttl_minutes: int) -> Dict[str, Any]:
        """Build the registered claim set.

        Raises:
            ValueError: On an empty id or a non-positive TTL. These are
                caller bugs, not authentication outcomes.
        """
        if not subject_id:
            raise ValueError("subject_id is required")
        if not token_id:
            raise ValueError("token_id is required")
        if ttl_minutes <= 0:
            raise ValueError("ttl_minutes must be positive")

        now = int(self._clock())
        return {
            "aud": self.audience,
            "exp": now + ttl_minutes * 60,
            "iat": now,
            "iss": self.issuer,
            "jti": token_id,
            "nbf": now,
            "sub": subject_id,
        }

    def issue_session_token(self, subject_id: str, session_id: str, ttl_minutes: int) -> str:
        """Issue an HS256 session token whose ``jti`` is the session id."""
        payload = self._build_payload(subject_id, session_id, ttl_minutes)
        token = jwt.encode(
            payload,
            self._secret,
            algorithm=TokenAlgorithm.SESSION.value,
            headers={"typ": "JWT"},
        )
        logger.debug(f"Issued session token for subject {subject_id}, session {session_id}")
        return token

    def issue_step_up_token(
        self,
        subject_id: str,
        token_id: Optional[str] = None,
        ttl_minutes: Optional[int] = None,
    ) -> str:
        """Issue an EdDSA step-up token after second-factor verification."""
        if self._private_key is None:
            raise SecretNotProvisionedError("Step-up signing key is not configured")

        token_id = token_id or secrets.token_urlsafe(16)
        if ttl_minutes is None:
            ttl_minutes = self.step_up_ttl_minutes
        payload = self._build_payload(subject_id, token_id, ttl_minutes)
        token = jwt.encode(
            payload,
            self._private_key,
            algorithm=TokenAlgorithm.STEP_UP.value,
            headers={"typ": "JWT"},
        )
        logger.debug(f"Issued step-up token {token_id} for subject {subject_id}")
        return token

    # Verification

    def verify(
        self,
        token: str,
        expected_audience: Optional[str] = None,
        expected_issuer: Optional[str] = None,
    ) -> TokenClaims:
        """Verify a session token and return its validated claims."""
        return self._decode(
            token,
            self._secret,
            [TokenAlgorithm.SESSION.value],
            expected_audience or self.audience,
            expected_issuer or self.issuer,
        )

    def verify_step_up(
        self,
        token: str,
        expected_audience: Optional[str] = None,
        expected_issuer: Optional[str] = None,
    ) -> TokenClaims:
        """Verify a step-up token using the public key only."""
        if self._public_key is None:
            raise SecretNotProvisionedError("Step-up verification key is not configured")

        return self._decode(
            token,
            self._public_key,
            [TokenAlgorithm.STEP_UP.value],
            expected_audience or self.audience,
            expected_issuer or self.issuer,
        )

    def _decode(
        self,
        token: str,
        key: Key,
        algorithms: List[str],
        audience: str,
        issuer: str,
    ) -> TokenClaims:
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token is missing")

        try:
            payload = jwt.decode(
                token,
                key=key,
                algorithms=algorithms,
                audience=audience,
                issuer=issuer,
                leeway=self.leeway,
                options={
                    "require": list(REGISTERED_CLAIMS),
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                },
            )

        except (InvalidAudienceError, InvalidIssuerError) as e:
            logger.warning(f"Rejected token with unexpected audience or issuer: {e}")
            raise InvalidTokenError("Token audience or issuer is invalid") from e

        except InvalidSignatureError as e:
            logger.warning("Rejected token with invalid signature")
            raise InvalidTokenError("Token signature is invalid") from e

        except JWTInvalidTokenError as e:
            logger.warning(f"Rejected malformed token: {e}")
            raise InvalidTokenError("Token format is invalid") from e

        claims = TokenClaims.from_payload(payload)
        self._check_lifetime(claims)
        return claims

    def _check_lifetime(self, claims: TokenClaims) -> None:
        # exp and nbf are checked against the injected clock
        now = self._clock()
        if claims.exp <= now - self.leeway:
            logger.info("Rejected expired token")
            raise InvalidTokenError("Token has expired")
        if claims.nbf > now + self.leeway:
            logger.info("Rejected token that is not yet valid")
            raise InvalidTokenError("Token is not yet valid")
