# breathe/io/text_loop.py
from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from breathe.io.console import render

if TYPE_CHECKING:
    from breathe.session.controller import BreathingController

HELP = "Commands: start, stop, toggle, status, voice <female|male>, exit"


def run_text(
    controller: "BreathingController",
    *,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    write(f"BreatheEasy ready. Type 'exit' to quit. {HELP}")
    while True:
        try:
            msg = read("> ").strip()
        except EOFError:
            break
        if not msg:
            continue
        cmd = msg.lower()
        if cmd in {"exit", "quit"}:
            break

        if cmd == "start":
            if not controller.start():
                write("A session is already running.")
            continue

        if cmd == "stop":
            if not controller.stop():
                write("No session is running.")
            continue

        if cmd == "toggle":
            controller.toggle()
            continue

        if cmd == "status":
            write(render(controller.snapshot()))
            continue

        if cmd.startswith("voice"):
            parts = cmd.split(maxsplit=1)
            if len(parts) == 1:
                write(f"Voice preference: {controller.narrator.preference.value}")
                continue
            try:
                controller.set_voice_preference(parts[1])
                write(f"Voice preference: {controller.narrator.preference.value}")
            except ValueError as e:
                write(str(e))
            continue

        write(f"Unknown command {msg!r}. {HELP}")
