# breathe/session/phases.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from config.config import settings


class Phase(str, Enum):
    IDLE = "idle"
    INHALE = "inhale"
    HOLD = "hold"
    EXHALE = "exhale"


PHASE_MESSAGES: dict[Phase, str] = {
    Phase.INHALE: "Breath in",
    Phase.HOLD: "Hold breath",
    Phase.EXHALE: "Breath out",
}

COMPLETION_MESSAGE = "Session complete. Well done!"

# Inhale -> Hold -> Exhale; Exhale is resolved by the round counter.
NEXT_PHASE: dict[Phase, Phase] = {
    Phase.INHALE: Phase.HOLD,
    Phase.HOLD: Phase.EXHALE,
}


@dataclass(frozen=True)
class BreathingPattern:
    """Fixed timing of one run: seconds per phase and number of rounds."""

    durations: dict[Phase, int] = field(
        default_factory=lambda: {
            Phase.INHALE: 4,
            Phase.HOLD: 7,
            Phase.EXHALE: 8,
        }
    )
    total_rounds: int = 10

    def __post_init__(self) -> None:
        missing = {Phase.INHALE, Phase.HOLD, Phase.EXHALE} - set(self.durations)
        if missing:
            raise ValueError(f"Missing durations for phases: {sorted(p.value for p in missing)}")
        if any(int(sec) < 1 for sec in self.durations.values()):
            raise ValueError("Phase durations must be at least one second")
        if self.total_rounds < 1:
            raise ValueError("total_rounds must be at least 1")

    def duration(self, phase: Phase) -> int:
        if phase is Phase.IDLE:
            return 0
        return self.durations[phase]

    @property
    def round_seconds(self) -> int:
        return sum(self.durations.values())

    @classmethod
    def from_settings(cls) -> BreathingPattern:
        return cls(
            durations={
                Phase.INHALE: settings.inhale_sec,
                Phase.HOLD: settings.hold_sec,
                Phase.EXHALE: settings.exhale_sec,
            },
            total_rounds=settings.total_rounds,
        )


FOUR_SEVEN_EIGHT = BreathingPattern()
