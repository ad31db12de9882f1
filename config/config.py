from __future__ import annotations

import os
from typing import Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field


env_override = os.getenv("BREATHE_ENV_PATH")
if env_override and os.path.exists(env_override):
    load_dotenv(env_override, override=True)
else:
    # Otherwise, find the nearest .env (project root)
    found = find_dotenv(filename=".env", usecwd=True)
    if found:
        load_dotenv(found, override=False)


class Settings(BaseModel):
    # 4-7-8 breathing
    inhale_sec: int = int(os.getenv("BREATHE_INHALE_SEC", 4))
    hold_sec: int = int(os.getenv("BREATHE_HOLD_SEC", 7))
    exhale_sec: int = int(os.getenv("BREATHE_EXHALE_SEC", 8))
    total_rounds: int = int(os.getenv("BREATHE_TOTAL_ROUNDS", 10))
    tick_interval_sec: float = float(os.getenv("BREATHE_TICK_INTERVAL_SEC", 1.0))

    # Narration
    locale: str = os.getenv("BREATHE_LOCALE", "en-US")
    voice_preference: Literal["female", "male"] = os.getenv("BREATHE_VOICE", "female")  # type: ignore[assignment]
    speech_backend: Literal["null", "elevenlabs"] = os.getenv("BREATHE_SPEECH_BACKEND", "null")  # type: ignore[assignment]

    # ElevenLabs
    eleven_api_key: str | None = os.getenv("ELEVENLABS_API_KEY")
    eleven_voice_id: str | None = os.getenv("ELEVENLABS_VOICE_ID")
    eleven_model: str = os.getenv("ELEVENLABS_MODEL", "eleven_multilingual_v2")
    eleven_output: str = os.getenv("ELEVENLABS_OUTPUT", "pcm_16000")

    # Offline cache
    cache_version: str = os.getenv("BREATHE_CACHE_VERSION", "breatheeasy-cache-v1")
    cache_db_path: str = Field(default=os.getenv("BREATHE_CACHE_DB", "./breathe_cache.db"))
    app_origin: str = os.getenv("BREATHE_APP_ORIGIN", "http://localhost:9002")

    # Notifications
    notifier_mode: Literal["console", "log"] = os.getenv("BREATHE_NOTIFIER", "console")  # type: ignore[assignment]

    # Web
    web_host: str = os.getenv("BREATHE_WEB_HOST", "127.0.0.1")
    web_port: int = int(os.getenv("BREATHE_WEB_PORT", 8000))

    log_level: str = os.getenv("BREATHE_LOG_LEVEL", "INFO")


settings = Settings()
