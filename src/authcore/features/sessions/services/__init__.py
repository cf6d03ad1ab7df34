"""Session feature services."""

from .session_guard import SessionGuard
from .session_store import SessionStore

__all__ = [
    "SessionGuard",
    "SessionStore",
]
