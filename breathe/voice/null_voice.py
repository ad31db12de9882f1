# breathe/voice/null_voice.py
from __future__ import annotations

from breathe.voice.voices import VoiceInfo


class NullVoice:
    """Speech engine for hosts without speech synthesis: no voices, says nothing."""

    available = False

    def list_voices(self) -> list[VoiceInfo]:
        return []

    def speak_async(self, text: str, voice: VoiceInfo | None = None) -> None:
        pass

    def stop_speaking(self) -> None:
        pass
