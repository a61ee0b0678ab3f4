"""User-visible, non-blocking notifications raised by a session."""

from __future__ import annotations

import logging
import threading

from loan_recon.models.base import Notification
from loan_recon.models.enums import NotificationLevel

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


class NotificationCenter:
    """Collect notifications; safe to post from timer threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[Notification] = []

    def post(
        self,
        level: NotificationLevel,
        message: str,
        retryable: bool = False,
    ) -> Notification:
        notification = Notification(level=level, message=message, retryable=retryable)
        with self._lock:
            self._items.append(notification)
        logger.log(_LOG_LEVELS[level], "[%s] %s", level.value, message)
        return notification

    def info(self, message: str) -> Notification:
        return self.post(NotificationLevel.INFO, message)

    def success(self, message: str) -> Notification:
        return self.post(NotificationLevel.SUCCESS, message)

    def warning(self, message: str) -> Notification:
        return self.post(NotificationLevel.WARNING, message)

    def error(self, message: str, retryable: bool = False) -> Notification:
        return self.post(NotificationLevel.ERROR, message, retryable=retryable)

    @property
    def items(self) -> list[Notification]:
        with self._lock:
            return list(self._items)

    @property
    def latest(self) -> Notification | None:
        with self._lock:
            return self._items[-1] if self._items else None

    def drain(self) -> list[Notification]:
        """Return and clear everything posted so far."""
        with self._lock:
            items, self._items = self._items, []
        return items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
