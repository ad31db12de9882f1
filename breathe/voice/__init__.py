from breathe.voice.engine import SpeechEngine, load_engine
from breathe.voice.narrator import Narrator
from breathe.voice.null_voice import NullVoice
from breathe.voice.voices import VoiceInfo, VoicePreference, select_voice

__all__ = [
    "Narrator",
    "NullVoice",
    "SpeechEngine",
    "VoiceInfo",
    "VoicePreference",
    "load_engine",
    "select_voice",
]
