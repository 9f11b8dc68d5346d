"""
Transient user notifications.

The controller reports outcomes (saved, removed, failed to load...) by
queueing notifications; the UI drains the queue on each render and shows
them as toasts.
"""

from collections import deque
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notification(BaseModel):
    level: NotificationLevel
    message: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


class NotificationCenter:
    """FIFO of pending notifications, oldest dropped past `max_pending`."""

    def __init__(self, max_pending: int = 50):
        self._pending: deque[Notification] = deque(maxlen=max_pending)

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self._pending.append(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.notify(NotificationLevel.ERROR, message)

    def info(self, message: str) -> Notification:
        return self.notify(NotificationLevel.INFO, message)

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        """Return and forget all pending notifications."""
        drained = list(self._pending)
        self._pending.clear()
        return drained
