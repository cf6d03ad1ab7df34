"""Session entities."""

import json
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from ...tokens.entities.claims import TokenClaims


@dataclass(frozen=True)
class RequestContext:
    """Opaque device stamp supplied by the caller for each request."""

    device: str = ""
    ip: str = ""
    user_agent: str = ""


@dataclass(frozen=True)
class SessionRecord:
    """One login episode. At most one is live per subject."""

    session_id: str
    subject_id: str
    device: str = ""
    ip: str = ""
    user_agent: str = ""
    last_active: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    signed_in: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        session_id: str,
        subject_id: str,
        context: Optional[RequestContext] = None,
        now: Optional[datetime] = None,
    ) -> "SessionRecord":
        context = context or RequestContext()
        now = now or datetime.now(timezone.utc)
        return cls(
            session_id=session_id,
            subject_id=subject_id,
            device=context.device,
            ip=context.ip,
            user_agent=context.user_agent,
            last_active=now,
            signed_in=now,
        )

    def touched(self, context: Optional[RequestContext], now: datetime) -> "SessionRecord":
        """Copy with a fresh activity stamp."""
        if context is None:
            return replace(self, last_active=now)
        return replace(
            self,
            device=context.device,
            ip=context.ip,
            user_agent=context.user_agent,
            last_active=now,
        )

    def to_json(self) -> str:
        data = asdict(self)
        data["last_active"] = self.last_active.isoformat()
        data["signed_in"] = self.signed_in.isoformat()
        return json.dumps(data)

    @classmethod
    def from_json(cls, raw: str) -> "SessionRecord":
        data = json.loads(raw)
        data["last_active"] = datetime.fromisoformat(data["last_active"])
        data["signed_in"] = datetime.fromisoformat(data["signed_in"])
        return cls(**data)


@dataclass(frozen=True)
class AuthenticatedSession:
    """Result of a successful session authentication."""

    claims: TokenClaims
    record: SessionRecord

    @property
    def subject_id(self) -> str:
        return self.record.subject_id

    @property
    def session_id(self) -> str:
        return self.record.session_id
