# breathe/session/machine.py
"""
Pure 4-7-8 state machine.

Every operation takes the current `Session` and returns a `Transition`: the
next session plus the side effects the controller has to carry out (speak,
notify, arm or cancel the ticker). Nothing here touches clocks, threads or
speech engines, so a full run can be replayed tick by tick in tests.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Literal, NamedTuple, Union

from breathe.session.phases import (
    COMPLETION_MESSAGE,
    FOUR_SEVEN_EIGHT,
    NEXT_PHASE,
    PHASE_MESSAGES,
    BreathingPattern,
    Phase,
)

NotificationKind = Literal["started", "stopped", "completed"]


@dataclass(frozen=True)
class Session:
    phase: Phase = Phase.IDLE
    countdown: int = 0
    rounds_completed: int = 0
    is_active: bool = False


# ---------- effects ----------
@dataclass(frozen=True)
class Narrate:
    text: str


@dataclass(frozen=True)
class CancelNarration:
    pass


@dataclass(frozen=True)
class Notify:
    kind: NotificationKind
    title: str
    message: str
    duration_ms: int = 3000


@dataclass(frozen=True)
class ArmTick:
    pass


@dataclass(frozen=True)
class CancelTick:
    pass


Effect = Union[Narrate, CancelNarration, Notify, ArmTick, CancelTick]


class Transition(NamedTuple):
    session: Session
    effects: tuple[Effect, ...]
    accepted: bool


@dataclass(frozen=True)
class Snapshot:
    phase: Phase
    countdown: int
    rounds_completed: int
    total_rounds: int
    remaining_rounds: int
    is_active: bool
    label: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["phase"] = self.phase.value
        return data


def pattern_name(pattern: BreathingPattern) -> str:
    return "-".join(str(pattern.duration(p)) for p in (Phase.INHALE, Phase.HOLD, Phase.EXHALE))


def _enter(session: Session, phase: Phase, pattern: BreathingPattern, **changes) -> Session:
    return replace(session, phase=phase, countdown=pattern.duration(phase), **changes)


def start(session: Session, pattern: BreathingPattern = FOUR_SEVEN_EIGHT) -> Transition:
    """Idle -> Inhale. Rejected (unchanged session) while a run is active."""
    if session.is_active:
        return Transition(session, (), False)

    nxt = _enter(session, Phase.INHALE, pattern, rounds_completed=0, is_active=True)
    effects: tuple[Effect, ...] = (
        Notify(
            "started",
            "Session Started",
            f"Follow the prompts for {pattern.total_rounds} rounds of {pattern_name(pattern)} breathing.",
        ),
        Narrate(PHASE_MESSAGES[Phase.INHALE]),
        ArmTick(),
    )
    return Transition(nxt, effects, True)


def stop(session: Session, pattern: BreathingPattern = FOUR_SEVEN_EIGHT) -> Transition:
    """Any active phase -> Idle. Completed rounds are kept for the progress display."""
    if not session.is_active:
        return Transition(session, (), False)

    nxt = replace(session, phase=Phase.IDLE, countdown=0, is_active=False)
    effects: tuple[Effect, ...] = (
        CancelTick(),
        CancelNarration(),
        Notify("stopped", "Session Stopped", "Breathing exercise has been stopped.", 3000),
    )
    return Transition(nxt, effects, True)


def tick(session: Session, pattern: BreathingPattern = FOUR_SEVEN_EIGHT) -> Transition:
    """
    One elapsed second.

    The countdown is decremented; when it runs out the machine advances to
    the next phase within the same tick, so a full round takes exactly
    `pattern.round_seconds` ticks. Phase prompts are narrated on the
    transition edge only.
    """
    if not session.is_active or session.phase is Phase.IDLE:
        return Transition(session, (), False)

    remaining = max(session.countdown - 1, 0)
    if remaining > 0:
        return Transition(replace(session, countdown=remaining), (ArmTick(),), True)

    if session.phase in NEXT_PHASE:
        phase = NEXT_PHASE[session.phase]
        nxt = _enter(session, phase, pattern)
        return Transition(nxt, (Narrate(PHASE_MESSAGES[phase]), ArmTick()), True)

    # Exhale finished: one more round done
    rounds = min(session.rounds_completed + 1, pattern.total_rounds)
    if rounds < pattern.total_rounds:
        nxt = _enter(session, Phase.INHALE, pattern, rounds_completed=rounds)
        return Transition(nxt, (Narrate(PHASE_MESSAGES[Phase.INHALE]), ArmTick()), True)

    nxt = replace(session, phase=Phase.IDLE, countdown=0, rounds_completed=rounds, is_active=False)
    effects: tuple[Effect, ...] = (
        Notify("completed", "Session Complete!", "You've completed all breathing rounds.", 5000),
        Narrate(COMPLETION_MESSAGE),
    )
    return Transition(nxt, effects, True)


def snapshot(session: Session, pattern: BreathingPattern = FOUR_SEVEN_EIGHT) -> Snapshot:
    return Snapshot(
        phase=session.phase,
        countdown=session.countdown,
        rounds_completed=session.rounds_completed,
        total_rounds=pattern.total_rounds,
        remaining_rounds=max(0, pattern.total_rounds - session.rounds_completed),
        is_active=session.is_active,
        label="Ready?" if session.phase is Phase.IDLE else session.phase.value.capitalize(),
    )
