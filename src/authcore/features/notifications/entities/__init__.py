"""Notification entities."""

from .notification import Notification, NotificationDispatcher, NotificationKind

__all__ = [
    "Notification",
    "NotificationDispatcher",
    "NotificationKind",
]
