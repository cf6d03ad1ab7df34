"""Notification entities and the dispatcher contract."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Protocol, runtime_checkable


class NotificationKind(str, Enum):
    """Messages the core asks the orchestration layer to deliver."""
    SECURITY_ALERT = "security_alert"
    ONE_TIME_CODE = "one_time_code"
    PASSWORD_RESET = "password_reset"


@dataclass(frozen=True)
class Notification:
    """A delivery request. Payload values may be secret and must not be logged."""

    kind: NotificationKind
    subject_id: str
    payload: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@runtime_checkable
class NotificationDispatcher(Protocol):
    """Delivers notifications (email, SMS, push) on behalf of the core."""

    async def dispatch(self, notification: Notification) -> None:
        ...
