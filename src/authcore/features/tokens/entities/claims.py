"""Token claims entity."""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict

from ....core.exceptions.auth import InvalidTokenError

REGISTERED_CLAIMS = ("aud", "exp", "iat", "iss", "jti", "nbf", "sub")


@dataclass(frozen=True)
class TokenClaims:
    """The seven registered claims carried by every authcore token.

    ``jti`` is the session (or step-up) identifier and ``sub`` the subject.
    """

    aud: str
    exp: int
    iat: int
    iss: str
    jti: str
    nbf: int
    sub: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TokenClaims":
        """Build claims from a decoded payload, enforcing types."""
        missing = [name for name in REGISTERED_CLAIMS if name not in payload]
        if missing:
            raise InvalidTokenError(
                "Token payload is missing required claims",
                details={"missing": missing},
            )

        for name in ("aud", "iss", "jti", "sub"):
            if not isinstance(payload[name], str) or not payload[name]:
                raise InvalidTokenError(f"Token claim '{name}' must be a non-empty string")

        for name in ("exp", "iat", "nbf"):
            # bool is an int subclass; reject it explicitly
            if isinstance(payload[name], bool) or not isinstance(payload[name], int):
                raise InvalidTokenError(f"Token claim '{name}' must be an integer timestamp")

        return cls(**{name: payload[name] for name in REGISTERED_CLAIMS})

    @property
    def subject_id(self) -> str:
        return self.sub

    @property
    def token_id(self) -> str:
        return self.jti

    @property
    def lifetime_seconds(self) -> int:
        return self.exp - self.iat

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
