"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from past_forward.config import Settings
from past_forward.containers import AppContainer
from past_forward.domain.items import ItemRecord
from past_forward.domain.profiles import UserProfile
from past_forward.domain.sessions import SessionRecord
from past_forward.services.generation import (
    GenerationClient,
    GenerationService,
    VideoAuthorization,
    VideoAuthorizationGate,
)
from past_forward.services.mirror import SessionMirror
from past_forward.services.narration import AudioBuffer, AudioPlayer
from past_forward.services.profiles import ProfileRepository, ProfileService
from past_forward.services.sessions import SessionRepository, SessionService

SOURCE_IMAGE = "data:image/jpeg;base64,c291cmNl"


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository for tests."""

    sessions: dict[UUID, SessionRecord] = field(default_factory=dict)
    writes: list[tuple[UUID, dict[str, dict[str, object]]]] = field(
        default_factory=list
    )
    fail_create: bool = False
    fail_updates: bool = False

    def create_session(
        self,
        user_id: UUID,
        source_image: str,
        selected_items: list[str],
        items: dict[str, dict[str, object]],
    ) -> SessionRecord:
        if self.fail_create:
            raise RuntimeError("Failed to create session")
        session = SessionRecord(
            id=uuid4(),
            user_id=user_id,
            created_at=datetime.now(tz=UTC),
            source_image=source_image,
            selected_items=tuple(selected_items),
            items={key: ItemRecord.from_document(value) for key, value in items.items()},
        )
        self.sessions[session.id] = session
        return session

    def get_session(self, session_id: UUID) -> SessionRecord | None:
        return self.sessions.get(session_id)

    def list_sessions(self, user_id: UUID) -> list[SessionRecord]:
        owned = [s for s in self.sessions.values() if s.user_id == user_id]
        return sorted(owned, key=lambda s: s.created_at, reverse=True)

    def update_session_items(
        self, session_id: UUID, items: dict[str, dict[str, object]]
    ) -> None:
        if self.fail_updates:
            raise RuntimeError("document store unavailable")
        self.writes.append((session_id, items))
        session = self.sessions[session_id]
        self.sessions[session_id] = SessionRecord(
            id=session.id,
            user_id=session.user_id,
            created_at=session.created_at,
            source_image=session.source_image,
            selected_items=session.selected_items,
            items={key: ItemRecord.from_document(value) for key, value in items.items()},
        )


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, UserProfile] = field(default_factory=dict)

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        return self.profiles.get(user_id)

    def save_profile(self, user_id: UUID, profile: UserProfile) -> None:
        self.profiles[user_id] = profile


@dataclass
class FakeGenerationClient(GenerationClient):
    """Fake backend with per-era failures and in-flight tracking."""

    image_failures: dict[str, Exception] = field(default_factory=dict)
    edit_failure: Exception | None = None
    video_failure: Exception | None = None
    narration_failure: Exception | None = None
    narration_audio: bytes = b"\x00\x00\xff\x7f\x00\x80\x00\x40"
    delay: float = 0.01
    calls: list[tuple[str, str]] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0

    async def generate_image(self, source_image: str, era_key: str) -> str:
        async with self._track("image", era_key):
            if era_key in self.image_failures:
                raise self.image_failures[era_key]
            return f"data:image/png;base64,{era_key}-{len(self.calls)}"

    async def edit_image(self, image_ref: str, instruction: str) -> str:
        async with self._track("edit", instruction):
            if self.edit_failure is not None:
                raise self.edit_failure
            return "data:image/png;base64,edited"

    async def generate_video(
        self, image_ref: str, era_key: str, aspect_ratio: str
    ) -> str:
        async with self._track("video", era_key):
            if self.video_failure is not None:
                raise self.video_failure
            return f"data:video/mp4;base64,{era_key}-{aspect_ratio}"

    async def generate_narration(self, era_key: str) -> bytes:
        async with self._track("narration", era_key):
            if self.narration_failure is not None:
                raise self.narration_failure
            return self.narration_audio

    def _track(self, kind: str, subject: str) -> "_InFlight":
        return _InFlight(self, kind, subject)


class _InFlight:
    def __init__(self, client: FakeGenerationClient, kind: str, subject: str) -> None:
        self.client = client
        self.kind = kind
        self.subject = subject

    async def __aenter__(self) -> None:
        self.client.calls.append((self.kind, self.subject))
        self.client.in_flight += 1
        self.client.max_in_flight = max(self.client.max_in_flight, self.client.in_flight)
        await asyncio.sleep(self.client.delay)

    async def __aexit__(self, *_exc: object) -> None:
        self.client.in_flight -= 1


@dataclass
class FakeVideoAuthorization(VideoAuthorization):
    """Video authorization with a switchable answer."""

    authorized: bool = True
    checks: int = 0
    requests: int = 0

    async def has_authorization(self) -> bool:
        self.checks += 1
        return self.authorized

    async def request_authorization(self) -> None:
        self.requests += 1


@dataclass
class RecordingAudioPlayer(AudioPlayer):
    """Audio player that remembers what it was asked to play."""

    played: list[tuple[str, AudioBuffer]] = field(default_factory=list)

    def play(self, buffer: AudioBuffer, label: str) -> None:
        self.played.append((label, buffer))


def build_session_service(
    repository: InMemorySessionRepository,
    client: FakeGenerationClient,
    authorization: FakeVideoAuthorization | None = None,
    player: RecordingAudioPlayer | None = None,
    concurrency: int = 2,
    timeout_seconds: float | None = None,
    max_active_sessions: int = 16,
) -> SessionService:
    return SessionService(
        session_repository=repository,
        mirror=SessionMirror(repository),
        generation=GenerationService(client=client, timeout_seconds=timeout_seconds),
        video_gate=VideoAuthorizationGate(authorization or FakeVideoAuthorization()),
        player=player or RecordingAudioPlayer(),
        concurrency=concurrency,
        max_active_sessions=max_active_sessions,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def generation_client() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def container(
    settings: Settings,
    session_repository: InMemorySessionRepository,
    generation_client: FakeGenerationClient,
    profile_repository: InMemoryProfileRepository,
) -> AppContainer:
    session_service = build_session_service(session_repository, generation_client)

    async def close_resources() -> None:
        await session_service.mirror.close()

    return AppContainer(
        settings=settings,
        session_service=session_service,
        profile_service=ProfileService(profile_repository),
        mirror=session_service.mirror,
        close_resources=close_resources,
    )
