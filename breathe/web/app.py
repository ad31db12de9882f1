# breathe/web/app.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Literal

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from breathe.session.controller import BreathingController


class SnapshotOut(BaseModel):
    phase: Literal["idle", "inhale", "hold", "exhale"]
    countdown: int
    rounds_completed: int
    total_rounds: int
    remaining_rounds: int
    is_active: bool
    label: str


class VoiceRequest(BaseModel):
    preference: Literal["female", "male"]


class VoiceOut(BaseModel):
    preference: Literal["female", "male"]
    voice: str | None = None


def create_app(controller: BreathingController | None = None) -> FastAPI:
    if controller is None:
        from breathe.voice.engine import load_engine
        from breathe.voice.narrator import Narrator

        controller = BreathingController(narrator=Narrator(load_engine()))

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        controller.shutdown()

    app = FastAPI(title="BreatheEasy", lifespan=lifespan)
    app.state.controller = controller

    def _snapshot() -> dict:
        return controller.snapshot().to_dict()

    def _conflict(detail: str) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": detail, "session": _snapshot()})

    @app.get("/api/session", response_model=SnapshotOut)
    def get_session():
        return _snapshot()

    @app.post("/api/session/start", response_model=SnapshotOut)
    def start_session():
        if not controller.start():
            return _conflict("A session is already running")
        return _snapshot()

    @app.post("/api/session/stop", response_model=SnapshotOut)
    def stop_session():
        if not controller.stop():
            return _conflict("No session is running")
        return _snapshot()

    @app.post("/api/session/toggle", response_model=SnapshotOut)
    def toggle_session():
        controller.toggle()
        return _snapshot()

    def _voice() -> dict:
        voice = controller.narrator.current_voice()
        return {"preference": controller.narrator.preference.value, "voice": voice.name if voice else None}

    @app.get("/api/voice", response_model=VoiceOut)
    def get_voice():
        return _voice()

    @app.put("/api/voice", response_model=VoiceOut)
    def set_voice(req: VoiceRequest):
        controller.set_voice_preference(req.preference)
        return _voice()

    return app
