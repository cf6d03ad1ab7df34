"""Session feature module - the revocation ledger.

- SessionStore: store-backed live sessions, one per subject
- SessionGuard: token verification composed with session resolution
"""

from .entities.session_record import AuthenticatedSession, RequestContext, SessionRecord
from .services.session_guard import SessionGuard
from .services.session_store import SessionStore

__all__ = [
    "AuthenticatedSession",
    "RequestContext",
    "SessionRecord",
    "SessionGuard",
    "SessionStore",
]
