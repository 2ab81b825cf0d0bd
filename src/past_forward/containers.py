"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from past_forward.adapters.openai_generation_client import OpenAIGenerationClient
from past_forward.adapters.settings_video_authorization import (
    SettingsVideoAuthorization,
)
from past_forward.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from past_forward.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from past_forward.adapters.wav_audio_player import WavFileAudioPlayer
from past_forward.config import Settings
from past_forward.services.generation import GenerationService, VideoAuthorizationGate
from past_forward.services.mirror import SessionMirror
from past_forward.services.profiles import ProfileService
from past_forward.services.sessions import SessionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_service: SessionService
    profile_service: ProfileService
    mirror: SessionMirror
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseSessionRepository(supabase_client)
    profile_repository = SupabaseProfileRepository(supabase_client)
    mirror = SessionMirror(session_repository)
    generation_client = OpenAIGenerationClient.create(
        api_key=resolved_settings.openai_api_key,
        video_api_key=resolved_settings.video_api_key,
        image_model=resolved_settings.openai_image_model,
        speech_model=resolved_settings.openai_speech_model,
        speech_voice=resolved_settings.openai_speech_voice,
        video_model=resolved_settings.openai_video_model,
    )
    generation_service = GenerationService(
        client=generation_client,
        timeout_seconds=resolved_settings.generation_timeout_seconds,
    )
    video_gate = VideoAuthorizationGate(
        SettingsVideoAuthorization(resolved_settings.video_api_key)
    )
    session_service = SessionService(
        session_repository=session_repository,
        mirror=mirror,
        generation=generation_service,
        video_gate=video_gate,
        player=WavFileAudioPlayer(resolved_settings.audio_output_dir),
        concurrency=resolved_settings.batch_concurrency,
        max_active_sessions=resolved_settings.max_active_sessions,
        narration_sample_rate=resolved_settings.narration_sample_rate,
        narration_channels=resolved_settings.narration_channels,
    )
    profile_service = ProfileService(profile_repository)

    async def close_resources() -> None:
        await mirror.close()
        await generation_client.client.close()
        if generation_client.video_client is not generation_client.client:
            await generation_client.video_client.close()

    return AppContainer(
        settings=resolved_settings,
        session_service=session_service,
        profile_service=profile_service,
        mirror=mirror,
        close_resources=close_resources,
    )
