# breathe/voice/narrator.py
from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from loguru import logger

from breathe.voice.voices import VoiceInfo, VoicePreference, VoiceSelector, select_voice
from config.config import settings

if TYPE_CHECKING:
    from breathe.voice.engine import SpeechEngine


class Narrator:
    """
    Speaks session prompts through an injected speech engine.

    At most one utterance is active: any narration in progress is
    interrupted before a new one starts. Without an engine, or without any
    installed voice, narration is skipped silently.
    """

    def __init__(
        self,
        engine: "SpeechEngine | None",
        *,
        locale: str | None = None,
        preference: str | VoicePreference | None = None,
        selector: VoiceSelector = select_voice,
    ):
        self.engine = engine
        self.locale = locale or settings.locale
        self.preference = VoicePreference.parse(preference or settings.voice_preference)
        self.selector = selector
        self.last_spoken: str | None = None
        self._lock = threading.Lock()

    @property
    def available(self) -> bool:
        return self.engine is not None and bool(getattr(self.engine, "available", True))

    def set_preference(self, preference: str | VoicePreference) -> VoicePreference:
        self.preference = VoicePreference.parse(preference)
        logger.info(f"[Narrator] voice preference set to {self.preference.value}")
        return self.preference

    def current_voice(self) -> VoiceInfo | None:
        if not self.available:
            return None
        voices = self.engine.list_voices()  # type: ignore[union-attr]
        return self.selector(voices, self.locale, self.preference)

    def say(self, text: str) -> bool:
        """Interrupt whatever is playing and speak `text`. Returns True if handed to the engine."""
        if not self.available:
            logger.debug(f"[Narrator] no speech engine; skipped {text!r}")
            return False

        with self._lock:
            self.cancel()
            voice = self.current_voice()
            if voice is None:
                logger.debug(f"[Narrator] no voices installed; skipped {text!r}")
                return False
            try:
                self.engine.speak_async(text, voice)  # type: ignore[union-attr]
            except Exception as e:
                logger.warning(f"[Narrator] speech failed for {text!r}: {e}")
                return False
            self.last_spoken = text
        return True

    def cancel(self) -> None:
        if not self.available:
            return
        try:
            self.engine.stop_speaking()  # type: ignore[union-attr]
        except Exception as e:
            logger.warning(f"[Narrator] could not interrupt speech: {e}")
