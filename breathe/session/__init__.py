from breathe.session.controller import BreathingController
from breathe.session.machine import Session, Snapshot
from breathe.session.phases import FOUR_SEVEN_EIGHT, BreathingPattern, Phase

__all__ = [
    "BreathingController",
    "BreathingPattern",
    "FOUR_SEVEN_EIGHT",
    "Phase",
    "Session",
    "Snapshot",
]
