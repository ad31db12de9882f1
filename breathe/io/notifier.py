# breathe/io/notifier.py
from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from loguru import logger

from config.config import settings

if TYPE_CHECKING:
    from breathe.session.machine import Notify


class Notifier:
    """Transient user-facing alerts for session lifecycle events (started/stopped/completed)."""

    def __init__(self, mode: str | None = None, history: int = 20):
        self.mode = mode or settings.notifier_mode
        self.recent: deque[Notify] = deque(maxlen=history)

    def notify(self, event: "Notify") -> None:
        self.recent.append(event)
        if self.mode == "console":
            print(f"[BreatheEasy] {event.title}: {event.message}")
        elif self.mode == "log":
            logger.info(f"[Notifier] {event.kind}: {event.title} - {event.message}")
        else:
            logger.warning(f"Notifier mode {self.mode} not yet implemented")

    def latest(self) -> "Notify | None":
        return self.recent[-1] if self.recent else None
