"""Mini README: User-facing notifications.

Structure:
    * Severity - info, success or error.
    * Notification - a message with its severity and timestamp.
    * NotificationSink - interface receiving ``notify`` calls.
    * NotificationLog - keeps the most recent notifications for the dashboard
      and mirrors each one to the application log.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, Dict, List

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(slots=True)
class Notification:
    message: str
    severity: Severity
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_dict(self) -> Dict[str, str]:
        return {
            "message": self.message,
            "severity": self.severity.value,
            "created_at": self.created_at.isoformat(),
        }


class NotificationSink(ABC):
    """Receives every user-facing outcome."""

    @abstractmethod
    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        """Deliver ``message`` to the user."""

    def recent(self) -> List[Notification]:
        """Notifications still worth showing; sinks without history return none."""

        return []


class NotificationLog(NotificationSink):
    """Bounded, newest-first history of notifications."""

    def __init__(self, limit: int = 25) -> None:
        self._entries: Deque[Notification] = deque(maxlen=limit)

    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        level = logging.WARNING if severity is Severity.ERROR else logging.INFO
        LOGGER.log(level, "[%s] %s", severity.value, message)
        self._entries.appendleft(Notification(message=message, severity=Severity(severity)))

    def recent(self) -> List[Notification]:
        return list(self._entries)
