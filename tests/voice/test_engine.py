# tests/voice/test_engine.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from breathe.voice.engine import load_engine
from breathe.voice.null_voice import NullVoice
from config.config import Settings


def test_null_backend_gives_null_voice():
    assert isinstance(load_engine(Settings(speech_backend="null")), NullVoice)


def test_unconfigured_elevenlabs_degrades_to_null_voice():
    cfg = Settings(speech_backend="elevenlabs", eleven_api_key=None, eleven_voice_id=None)
    assert isinstance(load_engine(cfg), NullVoice)


def test_elevenlabs_voice_metadata_is_mapped():
    pytest.importorskip("simpleaudio")
    pytest.importorskip("elevenlabs")
    from breathe.voice.tts_elevenlabs import ElevenLabsVoice

    raw = [
        SimpleNamespace(voice_id="abc", name="Rachel", labels={"gender": "female", "accent": "american"}),
        SimpleNamespace(voice_id="def", name="George", labels={"gender": "male", "accent": "british"}),
        SimpleNamespace(
            voice_id="ghi",
            name="Lucie",
            labels={"gender": "female"},
            verified_languages=[SimpleNamespace(locale="fr-FR")],
        ),
    ]

    class FakeVoices:
        def __init__(self):
            self.calls = 0

        def search(self):
            self.calls += 1
            return SimpleNamespace(voices=raw)

    client = SimpleNamespace(voices=FakeVoices())
    engine = ElevenLabsVoice(default_voice_id="def", client=client)

    voices = engine.list_voices()
    assert [(v.voice_id, v.locale, v.gender, v.is_default) for v in voices] == [
        ("abc", "en-US", "female", False),
        ("def", "en-GB", "male", True),
        ("ghi", "fr-FR", "female", False),
    ]
    engine.list_voices()
    assert client.voices.calls == 1


def test_elevenlabs_synth_joins_streamed_chunks():
    pytest.importorskip("simpleaudio")
    pytest.importorskip("elevenlabs")
    from breathe.voice.tts_elevenlabs import ElevenLabsVoice

    seen = {}

    def convert(**kwargs):
        seen.update(kwargs)
        return iter([b"ab", b"", b"cd"])

    client = SimpleNamespace(text_to_speech=SimpleNamespace(convert=convert))
    engine = ElevenLabsVoice(default_voice_id="v1", model_id="m1", output_format="pcm_16000", client=client)

    assert engine.synth("Breath in") == b"abcd"
    assert seen == {"voice_id": "v1", "model_id": "m1", "text": "Breath in", "output_format": "pcm_16000"}


def test_failed_voice_listing_is_not_retried_on_every_prompt(monkeypatch):
    pytest.importorskip("simpleaudio")
    pytest.importorskip("elevenlabs")
    from breathe.voice import tts_elevenlabs
    from breathe.voice.tts_elevenlabs import ElevenLabsVoice

    now = [1000.0]
    monkeypatch.setattr(tts_elevenlabs.time, "monotonic", lambda: now[0])

    class FlakyVoices:
        def __init__(self):
            self.calls = 0

        def search(self):
            self.calls += 1
            if self.calls == 1:
                raise ConnectionError("api down")
            return SimpleNamespace(voices=[SimpleNamespace(voice_id="abc", name="Rachel", labels={})])

    client = SimpleNamespace(voices=FlakyVoices())
    engine = ElevenLabsVoice(default_voice_id="abc", client=client)

    assert engine.list_voices() == []
    assert engine.list_voices() == []
    assert client.voices.calls == 1

    now[0] += tts_elevenlabs.VOICE_LIST_RETRY_SEC + 1
    assert [v.voice_id for v in engine.list_voices()] == ["abc"]
    assert client.voices.calls == 2


class FakePlayback:
    def wait_done(self):
        pass

    def is_playing(self):
        return False

    def stop(self):
        pass


@pytest.fixture()
def gated_engine(monkeypatch):
    """ElevenLabsVoice whose synthesis blocks until `release` is set; records playback and threads."""
    pytest.importorskip("simpleaudio")
    pytest.importorskip("elevenlabs")
    import threading

    from breathe.voice import tts_elevenlabs
    from breathe.voice.tts_elevenlabs import ElevenLabsVoice

    release = threading.Event()
    played: list[bytes] = []
    threads: list[threading.Thread] = []
    original_thread = threading.Thread

    class RecordingThread(original_thread):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            threads.append(self)

    def convert(**kwargs):
        release.wait(timeout=5)
        return kwargs["text"].encode()

    def play_buffer(audio, channels, width, rate):
        played.append(audio)
        return FakePlayback()

    monkeypatch.setattr(tts_elevenlabs.threading, "Thread", RecordingThread)
    monkeypatch.setattr(tts_elevenlabs.sa, "play_buffer", play_buffer)

    client = SimpleNamespace(text_to_speech=SimpleNamespace(convert=convert))
    engine = ElevenLabsVoice(default_voice_id="v1", client=client)

    def finish():
        release.set()
        for t in threads:
            t.join(timeout=5)
        return played

    return engine, finish


def test_utterance_cancelled_during_synthesis_is_not_played(gated_engine):
    engine, finish = gated_engine

    engine.speak_async("Breath in")
    engine.stop_speaking()

    assert finish() == []


def test_superseded_utterance_is_dropped(gated_engine):
    engine, finish = gated_engine

    engine.speak_async("Breath in")
    engine.speak_async("Hold breath")

    assert finish() == [b"Hold breath"]
