# breathe/io/console.py
from __future__ import annotations

import sys
from typing import TextIO

from breathe.session.machine import Snapshot
from breathe.session.phases import Phase

# Circle size per phase: inhale grows, hold keeps the size, exhale shrinks back
CIRCLE = {
    Phase.IDLE: "( )",
    Phase.INHALE: "(  O  )",
    Phase.HOLD: "(  O  )",
    Phase.EXHALE: "( o )",
}


def render_circle(snap: Snapshot) -> str:
    return f"{CIRCLE[snap.phase]} {snap.countdown:>2}  {snap.label}"


def render_progress(snap: Snapshot) -> str:
    return (
        f"Rounds Completed: {snap.rounds_completed} / {snap.total_rounds}  "
        f"Remaining: {snap.remaining_rounds}"
    )


def render(snap: Snapshot) -> str:
    # Progress is shown while running, and after a run that got somewhere
    if snap.is_active or (snap.rounds_completed > 0 and snap.phase is Phase.IDLE):
        return f"{render_circle(snap)} | {render_progress(snap)}"
    return (
        f"{render_circle(snap)} | Press start to begin your {snap.total_rounds} rounds "
        f"of guided breathing."
    )


class ConsoleRenderer:
    """Snapshot listener that redraws one status line per tick."""

    def __init__(self, stream: TextIO | None = None, *, inline: bool = True):
        self.stream = stream or sys.stdout
        self.inline = inline
        self.last_line = ""

    def __call__(self, snap: Snapshot) -> None:
        line = render(snap)
        self.last_line = line
        if self.inline:
            self.stream.write("\r\x1b[2K" + line)
        else:
            self.stream.write(line + "\n")
        self.stream.flush()
