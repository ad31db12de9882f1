# breathe/session/ticker.py
from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from loguru import logger

from config.config import settings


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Ticker:
    """
    One-shot, re-armable timer backed by APScheduler.

    Every tick is a single `date` job under a fixed job id with
    `replace_existing=True`, so arming twice replaces the pending tick
    instead of stacking a second one.

    The APScheduler instance and the clock are injectable so tests can
    spy on scheduling without threads or real time. A scheduler cannot be
    started again once shut down, so arming after `stop()` builds a fresh
    one from `scheduler_factory`.
    """

    JOB_ID = "session:tick"

    def __init__(
        self,
        *,
        apscheduler: BackgroundScheduler | None = None,
        clock: Callable[[], datetime] = _utcnow,
        interval_sec: float = 1.0,
        scheduler_factory: Callable[[], BackgroundScheduler] = BackgroundScheduler,
    ):
        self._scheduler_factory = scheduler_factory
        self.scheduler = apscheduler or scheduler_factory()
        self._shut_down = False
        self._clock = clock
        self.interval_sec = interval_sec
        self.running = False
        self._lock = threading.Lock()
        self._armed = False

    @classmethod
    def from_settings(cls, **kwargs) -> Ticker:
        return cls(interval_sec=settings.tick_interval_sec, **kwargs)

    def start(self) -> None:
        if self.running:
            return
        if self._shut_down:
            self.scheduler = self._scheduler_factory()
            self._shut_down = False
        self.scheduler.start()
        self.running = True
        logger.info("[Ticker] started")

    def arm(self, func: Callable[[], None], delay_sec: float | None = None) -> None:
        """Schedule `func` once, `delay_sec` (default: the interval) from now."""
        if not self.running:
            self.start()
        delay = self.interval_sec if delay_sec is None else delay_sec
        with self._lock:
            self.scheduler.add_job(
                func,
                "date",
                run_date=self._clock() + timedelta(seconds=delay),
                id=self.JOB_ID,
                replace_existing=True,
                misfire_grace_time=None,
            )
            self._armed = True

    def cancel(self) -> bool:
        """Drop the pending tick, if any. Returns True when one was removed."""
        with self._lock:
            self._armed = False
            try:
                self.scheduler.remove_job(self.JOB_ID)
            except JobLookupError:
                return False
        logger.debug("[Ticker] pending tick cancelled")
        return True

    @property
    def armed(self) -> bool:
        return self._armed

    def fired(self) -> None:
        """Mark the pending tick as consumed (called from the tick callback)."""
        with self._lock:
            self._armed = False

    def stop(self) -> None:
        self.cancel()
        if not self.running:
            return
        self.running = False
        self._shut_down = True

        # Do not hang on shutdown; pending ticks are discarded anyway
        try:
            self.scheduler.shutdown(wait=False)
        except Exception as e:
            logger.warning(f"[Ticker] shutdown() raised: {e}")

        logger.info("[Ticker] stopped.")
