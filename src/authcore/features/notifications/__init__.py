"""Notification feature module.

The core never delivers messages itself. It hands ``Notification`` objects to
a ``NotificationDispatcher`` supplied by the orchestration layer.
"""

from .entities.notification import Notification, NotificationDispatcher, NotificationKind
from .adapters.logging_dispatcher import LoggingNotificationDispatcher

__all__ = [
    "Notification",
    "NotificationDispatcher",
    "NotificationKind",
    "LoggingNotificationDispatcher",
]
