"""Application configuration."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    openai_api_key: str
    openai_image_model: str = "gpt-image-1"
    openai_speech_model: str = "gpt-4o-mini-tts"
    openai_speech_voice: str = "alloy"
    openai_video_model: str = "sora-2"
    video_api_key: str | None = None
    batch_concurrency: int = Field(default=2, ge=1)
    max_active_sessions: int = Field(default=16, ge=1)
    generation_timeout_seconds: float | None = Field(default=300.0, gt=0)
    narration_sample_rate: int = 24000
    narration_channels: int = Field(default=1, ge=1)
    audio_output_dir: Path = Path("narration")
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
