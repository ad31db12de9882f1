# tests/session/conftest.py
from __future__ import annotations

import pytest

from breathe.io.notifier import Notifier
from breathe.session.controller import BreathingController
from breathe.session.phases import FOUR_SEVEN_EIGHT
from breathe.voice.narrator import Narrator
from breathe.voice.voices import VoiceInfo


class SpyTicker:
    def __init__(self):
        self.pending = None
        self.armed_count = 0
        self.cancelled = 0
        self.stopped = False

    def arm(self, func, delay_sec=None):
        self.pending = func
        self.armed_count += 1

    def cancel(self):
        self.cancelled += 1
        had = self.pending is not None
        self.pending = None
        return had

    def fired(self):
        self.pending = None

    def stop(self):
        self.stopped = True
        self.pending = None

    def fire(self):
        func, self.pending = self.pending, None
        return func()


class FakeEngine:
    available = True

    def __init__(self, voices=None):
        self.voices = voices if voices is not None else [VoiceInfo("v1", "Test Voice", "en-US", "female")]
        self.calls: list[tuple[str, str]] = []

    def list_voices(self):
        return list(self.voices)

    def speak_async(self, text, voice=None):
        self.calls.append(("speak", text))

    def stop_speaking(self):
        self.calls.append(("stop", ""))

    @property
    def spoken(self):
        return [text for kind, text in self.calls if kind == "speak"]


@pytest.fixture()
def ticker() -> SpyTicker:
    return SpyTicker()


@pytest.fixture()
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture()
def controller(ticker, engine) -> BreathingController:
    return BreathingController(
        narrator=Narrator(engine, locale="en-US", preference="female"),
        notifier=Notifier("log"),
        ticker=ticker,  # type: ignore[arg-type]
        pattern=FOUR_SEVEN_EIGHT,
    )
