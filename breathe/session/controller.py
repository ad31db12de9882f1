# breathe/session/controller.py
from __future__ import annotations

import threading
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING

from loguru import logger

from breathe.session import machine
from breathe.session.machine import (
    ArmTick,
    CancelNarration,
    CancelTick,
    Effect,
    Narrate,
    Notify,
    Session,
    Snapshot,
    Transition,
)
from breathe.session.phases import BreathingPattern
from breathe.session.ticker import Ticker

if TYPE_CHECKING:
    from breathe.io.notifier import Notifier
    from breathe.voice.narrator import Narrator

SnapshotListener = Callable[[Snapshot], None]


class BreathingController:
    """
    Owns the single `Session` of the process and applies the state machine.

    `start`, `stop` and `tick` run under one re-entrant lock. Each run gets a
    generation number and every armed tick carries the generation it was
    armed for, so a tick that fires after `stop()` (or after a restart)
    is dropped without touching the session.
    """

    def __init__(
        self,
        *,
        narrator: "Narrator | None" = None,
        notifier: "Notifier | None" = None,
        ticker: Ticker | None = None,
        pattern: BreathingPattern | None = None,
    ):
        if narrator is None:
            from breathe.voice.narrator import Narrator  # local import to keep tests light
            from breathe.voice.null_voice import NullVoice

            narrator = Narrator(NullVoice())
        if notifier is None:
            from breathe.io.notifier import Notifier

            notifier = Notifier()

        self.narrator = narrator
        self.notifier = notifier
        self.pattern = pattern or BreathingPattern.from_settings()
        self.ticker = ticker or Ticker.from_settings()

        self.session = Session()
        self._lock = threading.RLock()
        self._generation = 0
        self._listeners: list[SnapshotListener] = []
        self._idle = threading.Event()
        self._idle.set()

    # ---------- commands ----------
    def start(self) -> bool:
        with self._lock:
            return self._apply("start", machine.start(self.session, self.pattern))

    def stop(self) -> bool:
        with self._lock:
            return self._apply("stop", machine.stop(self.session, self.pattern))

    def toggle(self) -> bool:
        with self._lock:
            return self.stop() if self.session.is_active else self.start()

    def tick(self, generation: int | None = None) -> bool:
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug(f"[Session] dropping stale tick from run {generation}")
                return False
            self.ticker.fired()
            return self._apply("tick", machine.tick(self.session, self.pattern))

    def set_voice_preference(self, preference: str) -> None:
        self.narrator.set_preference(preference)

    # ---------- observation ----------
    def snapshot(self) -> Snapshot:
        with self._lock:
            return machine.snapshot(self.session, self.pattern)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def wait(self, timeout: float | None = None) -> bool:
        """Block until no run is active. Returns False on timeout."""
        return self._idle.wait(timeout)

    def shutdown(self) -> None:
        self.stop()
        self.ticker.stop()
        self.narrator.cancel()

    # ---------- internals ----------
    def _apply(self, event: str, transition: Transition) -> bool:
        if not transition.accepted:
            logger.debug(f"[Session] {event} ignored in phase {self.session.phase.value}")
            return False

        if event in ("start", "stop"):
            self._generation += 1
        self.session = transition.session

        if self.session.is_active:
            self._idle.clear()

        for effect in transition.effects:
            self._run_effect(effect)

        if event != "tick" or transition.effects != (ArmTick(),):
            logger.info(
                f"[Session] {event}: phase={self.session.phase.value} "
                f"countdown={self.session.countdown} rounds={self.session.rounds_completed}"
            )

        self._publish()
        if not self.session.is_active:
            self._idle.set()
        return True

    def _run_effect(self, effect: Effect) -> None:
        if isinstance(effect, ArmTick):
            self.ticker.arm(partial(self.tick, self._generation))
        elif isinstance(effect, CancelTick):
            self.ticker.cancel()
        elif isinstance(effect, Narrate):
            self.narrator.say(effect.text)
        elif isinstance(effect, CancelNarration):
            self.narrator.cancel()
        elif isinstance(effect, Notify):
            self.notifier.notify(effect)

    def _publish(self) -> None:
        snap = machine.snapshot(self.session, self.pattern)
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception as e:
                logger.exception(f"[Session] snapshot listener failed: {e}")
