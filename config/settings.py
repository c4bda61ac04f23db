"""Application settings and configuration management."""
from __future__ import annotations

from pathlib import Path
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_WEBHOOK_URL = "https://tauga.app.n8n.cloud/webhook/english-test"


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    WEBHOOK_URL: str = DEFAULT_WEBHOOK_URL
    WEBHOOK_TIMEOUT_S: float = Field(default=120.0, ge=0.1)
    WEBHOOK_AUDIO_FILENAME: str = "recording.wav"

    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024
    MIN_DURATION_S: int = 20
    MAX_DURATION_S: int = 90
    ENFORCE_DURATION: bool = False
    TRANSCODE_UPLOADS: bool = False

    FORWARD_MODE: Literal["sync", "background"] = "sync"
    STATUS_MOCK_ENABLED: bool = True
    DB_PATH: str = Field(default="data/assessments.db")

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    PROXY_URL: str = "http://localhost:5001"
    POLL_INTERVAL_S: float = 3.0
    POLL_TIMEOUT_S: float = 30.0

    PRESETS_PATH: str = str(Path(__file__).resolve().parent / "presets.yaml")

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True)


settings = Settings()
