# cli/breathe_cli.py
from __future__ import annotations

import argparse
import asyncio

from tabulate import tabulate

from breathe.io.console import ConsoleRenderer
from breathe.io.notifier import Notifier
from breathe.log import configure_logging
from breathe.offline.cache_store import CacheStorage
from breathe.offline.transport import build_offline_transport
from breathe.session.controller import BreathingController
from breathe.voice.engine import load_engine
from breathe.voice.narrator import Narrator
from config.config import settings


REMINDER = """
Available commands:
  python -m cli.breathe_cli session [--voice female|male]
  python -m cli.breathe_cli voices
  python -m cli.breathe_cli serve
  python -m cli.breathe_cli cache list
  python -m cli.breathe_cli cache warm
  python -m cli.breathe_cli cache clear
"""


def _print_reminder():
    print(REMINDER.strip())


def _storage() -> CacheStorage:
    return CacheStorage(settings.cache_db_path)


def cmd_session(voice: str | None):
    narrator = Narrator(load_engine(), preference=voice)
    controller = BreathingController(narrator=narrator, notifier=Notifier("console"))
    controller.subscribe(ConsoleRenderer())
    controller.start()
    try:
        controller.wait()
    except KeyboardInterrupt:
        controller.stop()
    finally:
        print()
        controller.shutdown()


def cmd_voices(voice: str | None):
    narrator = Narrator(load_engine(), preference=voice)
    if not narrator.available:
        print("No speech engine configured (BREATHE_SPEECH_BACKEND=null); narration is silent.")
        return
    voices = narrator.engine.list_voices()  # type: ignore[union-attr]
    chosen = narrator.current_voice()
    if not voices:
        print("No voices installed.")
        return
    print(tabulate(
        [
            ("*" if chosen and v.voice_id == chosen.voice_id else "", v.name, v.locale, v.gender or "", v.voice_id)
            for v in voices
        ],
        headers=["", "Name", "Locale", "Gender", "ID"],
    ))


def cmd_serve():
    import uvicorn

    uvicorn.run("breathe.web.app:create_app", host=settings.web_host, port=settings.web_port, factory=True)


def cmd_cache_list(storage: CacheStorage):
    rows = storage.stats()
    if not rows:
        print("No caches.")
    else:
        print(tabulate(
            [(name, entries, "current" if name == settings.cache_version else "stale") for name, entries in rows],
            headers=["Cache", "Entries", "Status"],
        ))


def cmd_cache_warm(storage: CacheStorage):
    transport, worker = build_offline_transport(storage)

    async def _run():
        try:
            await transport.ready()
        finally:
            await transport.aclose()

    asyncio.run(_run())
    entries = dict(storage.stats()).get(worker.version, 0)
    print(f"✅ {worker.version}: {entries} entries cached from {settings.app_origin}")


def cmd_cache_clear(storage: CacheStorage):
    names = storage.keys()
    for name in names:
        storage.delete(name)
    print(f"Removed {len(names)} cache(s).")


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="BreatheEasy guided breathing CLI")
    parser.add_argument("--log-level", default=None, help="Override BREATHE_LOG_LEVEL")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("session", help="Run a guided 4-7-8 session in the terminal")
    sp.add_argument("--voice", choices=["female", "male"], default=None)

    vp = sub.add_parser("voices", help="List available narration voices")
    vp.add_argument("--voice", choices=["female", "male"], default=None)

    sub.add_parser("serve", help="Serve the session JSON API")
    sub.add_parser("commands", help="Show command cheat-sheet")

    cp = sub.add_parser("cache", help="Inspect or manage the offline asset cache")
    cp.add_argument("action", choices=["list", "warm", "clear"])

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.cmd == "session":
        cmd_session(args.voice)
    elif args.cmd == "voices":
        cmd_voices(args.voice)
    elif args.cmd == "serve":
        cmd_serve()
    elif args.cmd == "cache":
        storage = _storage()
        try:
            if args.action == "list":
                cmd_cache_list(storage)
            elif args.action == "warm":
                cmd_cache_warm(storage)
            else:
                cmd_cache_clear(storage)
        finally:
            storage.close()
    else:
        _print_reminder()


if __name__ == "__main__":
    main()
