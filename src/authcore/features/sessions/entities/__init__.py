"""Session feature entities."""

from .session_record import AuthenticatedSession, RequestContext, SessionRecord

__all__ = [
    "AuthenticatedSession",
    "RequestContext",
    "SessionRecord",
]
