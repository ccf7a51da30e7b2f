"""Transient user notifications (the dashboard's toasts)."""

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional

logger = logging.getLogger(__name__)

Level = Literal["success", "error"]


@dataclass
class Notification:
    level: Level
    message: str


class Notifier:
    """Collects notifications and hands each one to an optional sink.

    Nothing is persisted or retried; `messages` only exists so callers
    (and tests) can see what the user was shown.
    """

    def __init__(self, sink: Optional[Callable[[Notification], None]] = None):
        self.sink = sink
        self.notifications: list[Notification] = []

    def _emit(self, level: Level, message: str) -> None:
        note = Notification(level, message)
        self.notifications.append(note)
        logger.info("%s: %s", level, message)
        if self.sink:
            self.sink(note)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    @property
    def messages(self) -> list[str]:
        return [n.message for n in self.notifications]

    @property
    def last(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None
