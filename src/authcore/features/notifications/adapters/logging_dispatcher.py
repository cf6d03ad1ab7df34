"""Dispatcher that only records notifications in the log."""

import logging
from typing import List

from ..entities.notification import Notification, NotificationDispatcher

logger = logging.getLogger(__name__)


class LoggingNotificationDispatcher(NotificationDispatcher):
    """Default dispatcher for development; logs kind and subject, never payload values."""

    def __init__(self, keep_history: bool = False):
        self.keep_history = keep_history
        self.history: List[Notification] = []

    async def dispatch(self, notification: Notification) -> None:
        logger.info(
            f"Notification {notification.kind.value} for subject {notification.subject_id} "
            f"(fields: {sorted(notification.payload)})"
        )
        if self.keep_history:
            self.history.append(notification)
