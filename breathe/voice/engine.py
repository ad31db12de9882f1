# breathe/voice/engine.py
from __future__ import annotations

from typing import Protocol

from loguru import logger

from breathe.voice.null_voice import NullVoice
from breathe.voice.voices import VoiceInfo
from config.config import Settings, settings as default_settings


class SpeechEngine(Protocol):
    available: bool

    def list_voices(self) -> list[VoiceInfo]: ...

    def speak_async(self, text: str, voice: VoiceInfo | None = None) -> None: ...

    def stop_speaking(self) -> None: ...


def load_engine(cfg: Settings | None = None) -> SpeechEngine:
    """Build the configured speech engine; narration degrades to NullVoice."""
    cfg = cfg or default_settings
    backend = (cfg.speech_backend or "null").lower()

    if backend == "null":
        return NullVoice()

    if backend == "elevenlabs":
        try:
            # Lazy-import: simpleaudio needs an audio device at import time on some hosts
            from breathe.voice.tts_elevenlabs import ElevenLabsVoice

            return ElevenLabsVoice(
                api_key=cfg.eleven_api_key,
                default_voice_id=cfg.eleven_voice_id,
                model_id=cfg.eleven_model,
                output_format=cfg.eleven_output,
            )
        except (ImportError, RuntimeError) as e:
            logger.warning(f"[Voice] ElevenLabs unavailable, narration disabled: {e}")
            return NullVoice()

    raise ValueError(f"Unknown BREATHE_SPEECH_BACKEND: {backend!r}")
