# breathe/voice/voices.py
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class VoicePreference(str, Enum):
    FEMALE = "female"
    MALE = "male"

    @classmethod
    def parse(cls, value: str | VoicePreference) -> VoicePreference:
        try:
            return cls(str(getattr(value, "value", value)).strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown voice preference {value!r} (expected one of: {allowed})") from None


@dataclass(frozen=True)
class VoiceInfo:
    voice_id: str
    name: str
    locale: str = ""
    gender: str | None = None  # as reported by the engine's metadata
    is_default: bool = False
    labels: dict[str, str] = field(default_factory=dict, compare=False)


class VoiceSelector(Protocol):
    def __call__(
        self,
        voices: Sequence[VoiceInfo],
        locale: str,
        gender: VoicePreference | None,
    ) -> VoiceInfo | None: ...


_WORD = re.compile(r"[a-z]+")


def _same_locale(voice_locale: str, target: str) -> bool:
    """'en-US' matches 'en_us' and 'en-US'; a bare 'en' matches any English variant."""
    a = voice_locale.replace("_", "-").lower()
    b = target.replace("_", "-").lower()
    if not a or not b:
        return False
    if "-" not in a or "-" not in b:
        return a.split("-")[0] == b.split("-")[0]
    return a == b


def signals_gender(voice: VoiceInfo, gender: VoicePreference) -> bool:
    if voice.gender:
        return voice.gender.strip().lower() == gender.value
    # Fall back on whole words of the display name ("Google UK English Female")
    return gender.value in _WORD.findall(voice.name.lower())


def select_voice(
    voices: Sequence[VoiceInfo],
    locale: str,
    gender: VoicePreference | None = None,
) -> VoiceInfo | None:
    """
    Best-effort voice choice:
    locale + preferred gender, then any voice of the locale, then the system
    default, then the first voice. None when nothing is installed.
    """
    if not voices:
        return None

    in_locale = [v for v in voices if _same_locale(v.locale, locale)]
    if gender is not None:
        for v in in_locale:
            if signals_gender(v, gender):
                return v
    if in_locale:
        return in_locale[0]

    for v in voices:
        if v.is_default:
            return v
    return voices[0]
