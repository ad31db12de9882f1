# breathe/voice/tts_elevenlabs.py
from __future__ import annotations

import threading
import time
from collections.abc import Iterable
from typing import Any, Union

import simpleaudio as sa
from elevenlabs.client import ElevenLabs
from loguru import logger

from breathe.voice.voices import VoiceInfo
from config.config import settings

BytesLike = Union[bytes, bytearray, memoryview]

# ElevenLabs reports an accent label rather than a locale for most voices
ACCENT_LOCALES = {
    "american": "en-US",
    "british": "en-GB",
    "australian": "en-AU",
    "irish": "en-IE",
    "indian": "en-IN",
}

PCM_RATE = 16000
VOICE_LIST_RETRY_SEC = 60.0


class ElevenLabsVoice:
    """
    ElevenLabs text-to-speech with simpleaudio playback.

    Synthesis and playback both run on a daemon thread so narration never
    blocks the session ticker. Each utterance gets a sequence number; an
    utterance superseded (or cancelled) while it is still being synthesized
    is dropped instead of played.
    """

    available = True

    def __init__(
        self,
        api_key: str | None = None,
        default_voice_id: str | None = None,
        model_id: str | None = None,
        output_format: str | None = None,
        *,
        client: Any = None,
    ):
        api_key = api_key or settings.eleven_api_key
        default_voice_id = default_voice_id or settings.eleven_voice_id
        if client is None and (not api_key or not default_voice_id):
            raise RuntimeError("ElevenLabs API key/voice id not configured")

        self.client = client or ElevenLabs(api_key=api_key)
        self.default_voice_id = default_voice_id
        self.model_id = model_id or settings.eleven_model
        self.output_format = output_format or settings.eleven_output

        self._lock = threading.Lock()
        self._current_playback: sa.PlayObject | None = None
        self._utterance = 0
        self._voices: list[VoiceInfo] | None = None
        self._retry_voices_at = 0.0

    # ---------- voices ----------
    def list_voices(self) -> list[VoiceInfo]:
        if self._voices is None:
            if time.monotonic() < self._retry_voices_at:
                return []
            try:
                resp = self.client.voices.search()
                raw = getattr(resp, "voices", []) or []
            except Exception as e:
                # narration runs under the session lock; don't hit the API on every prompt
                self._retry_voices_at = time.monotonic() + VOICE_LIST_RETRY_SEC
                logger.warning(f"[TTS] Failed to list ElevenLabs voices, retrying in {VOICE_LIST_RETRY_SEC}s: {e}")
                return []
            self._voices = [self._to_voice_info(v) for v in raw]
        return list(self._voices)

    def _to_voice_info(self, v: Any) -> VoiceInfo:
        labels = dict(getattr(v, "labels", None) or {})
        voice_id = getattr(v, "voice_id", "")
        return VoiceInfo(
            voice_id=voice_id,
            name=getattr(v, "name", "") or voice_id,
            locale=self._locale_of(v, labels),
            gender=labels.get("gender"),
            is_default=voice_id == self.default_voice_id,
            labels=labels,
        )

    @staticmethod
    def _locale_of(v: Any, labels: dict[str, str]) -> str:
        for lang in getattr(v, "verified_languages", None) or []:
            locale = getattr(lang, "locale", None)
            if locale:
                return locale
        if labels.get("locale"):
            return labels["locale"]
        accent = (labels.get("accent") or "").lower()
        return ACCENT_LOCALES.get(accent, labels.get("language", ""))

    # ---------- playback ----------
    def speak_async(self, text: str, voice: VoiceInfo | None = None) -> None:
        """
        Synthesize and play audio asynchronously (non-blocking).
        """
        voice_id = voice.voice_id if voice else self.default_voice_id
        with self._lock:
            self._utterance += 1
            utterance = self._utterance

        def _play():
            try:
                audio_bytes = self.synth(text, voice_id)
                with self._lock:
                    if utterance != self._utterance:
                        return
                    self._current_playback = sa.play_buffer(audio_bytes, 1, 2, PCM_RATE)
                    playback = self._current_playback
                playback.wait_done()
            except Exception as e:
                logger.warning(f"[TTS Async] Failed to play audio: {e}")
            finally:
                with self._lock:
                    if utterance == self._utterance:
                        self._current_playback = None

        threading.Thread(target=_play, daemon=True).start()

    def stop_speaking(self) -> None:
        """
        Interrupt current speech playback (if any), including an utterance
        that is still being synthesized.
        """
        with self._lock:
            self._utterance += 1
            if self._current_playback:
                self._current_playback.stop()
                self._current_playback = None

    def synth(self, text: str, voice_id: str | None = None) -> bytes:
        result = self.client.text_to_speech.convert(
            voice_id=voice_id or self.default_voice_id,
            model_id=self.model_id,
            text=text,
            output_format=self.output_format,
        )
        return self._to_bytes(result)

    @staticmethod
    def _to_bytes(data: BytesLike | Iterable[bytes]) -> bytes:
        if isinstance(data, (bytes, bytearray, memoryview)):
            return bytes(data)
        return b"".join(data)
