"""Session lifecycle: batch submission, history and resume."""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from past_forward.domain.items import FeatureStatus, ItemRecord, ItemStatus
from past_forward.domain.sessions import SessionRecord
from past_forward.eras import validate_eras
from past_forward.services.batch import DEFAULT_CONCURRENCY, WorkerPool
from past_forward.services.error_messages import INTERRUPTED_MESSAGE
from past_forward.services.generation import GenerationService, VideoAuthorizationGate
from past_forward.services.item_store import ItemStateStore
from past_forward.services.mirror import SessionItemsWriter, SessionMirror
from past_forward.services.narration import AudioPlayer
from past_forward.services.operations import (
    NARRATION_CHANNELS,
    NARRATION_SAMPLE_RATE,
    ItemOperations,
)

logger = logging.getLogger(__name__)

SESSION_CREATION_MESSAGE = (
    "Could not save your new session. Please check your connection and try again."
)
DEFAULT_MAX_ACTIVE_SESSIONS = 16


class SessionRepository(SessionItemsWriter, Protocol):
    """Persistence interface for generation sessions."""

    def create_session(
        self,
        user_id: UUID,
        source_image: str,
        selected_items: list[str],
        items: dict[str, dict[str, object]],
    ) -> SessionRecord:
        """Create a new session and return it."""

    def get_session(self, session_id: UUID) -> SessionRecord | None:
        """Return a session by id, if present."""

    def list_sessions(self, user_id: UUID) -> list[SessionRecord]:
        """Return a user's sessions, newest first."""


class SessionCreationError(RuntimeError):
    """Raised when a batch cannot start because its session was not saved."""


@dataclass
class ActiveSession:
    """A session whose items can currently be generated or re-processed."""

    record: SessionRecord
    store: ItemStateStore
    operations: ItemOperations
    batch_pending: bool = False

    @property
    def id(self) -> UUID:
        return self.record.id

    def items(self) -> dict[str, ItemRecord]:
        """Return the live item map."""
        return self.store.snapshot()

    def is_idle(self) -> bool:
        """Return true when no batch is queued and no call is in flight."""
        return not self.batch_pending and not self.store.has_claims()


@dataclass
class SessionService:
    """Create, run and resume generation sessions.

    At most ``max_active_sessions`` sessions stay loaded. When the limit is
    exceeded the least recently used idle sessions are dropped; ``resume``
    loads them again from history on the next request.
    """

    session_repository: SessionRepository
    mirror: SessionMirror
    generation: GenerationService
    video_gate: VideoAuthorizationGate
    player: AudioPlayer
    concurrency: int = DEFAULT_CONCURRENCY
    narration_sample_rate: int = NARRATION_SAMPLE_RATE
    narration_channels: int = NARRATION_CHANNELS
    max_active_sessions: int = DEFAULT_MAX_ACTIVE_SESSIONS
    _active: OrderedDict[UUID, ActiveSession] = field(
        default_factory=OrderedDict, repr=False
    )

    async def submit_batch(
        self, user_id: UUID, source_image: str, era_keys: list[str]
    ) -> ActiveSession:
        """Persist a new session with every selected era pending.

        Raises ``SessionCreationError`` if the session cannot be saved; no
        generation starts in that case.
        """
        selected = validate_eras(era_keys)
        store = ItemStateStore(mirror=self.mirror)
        for era_key in selected:
            store.apply(era_key, ItemRecord.pending())
        initial = {key: record.to_document() for key, record in store.snapshot().items()}
        try:
            record = await asyncio.to_thread(
                self.session_repository.create_session,
                user_id,
                source_image,
                selected,
                initial,
            )
        except Exception as exc:
            logger.exception(
                "Failed to create session", extra={"user_id": str(user_id)}
            )
            raise SessionCreationError(SESSION_CREATION_MESSAGE) from exc
        # The created document already holds the initial map.
        store.bind_session(record.id, publish=False)
        active = self._activate(record, store, batch_pending=True)
        logger.info(
            "Session created",
            extra={"session_id": str(record.id), "eras": len(selected)},
        )
        return active

    async def run_batch(self, session_id: UUID) -> dict[str, ItemRecord]:
        """Generate every pending era of a submitted session."""
        active = self._active[session_id]
        pool = WorkerPool(
            process=active.operations.process_batch_item,
            concurrency=self.concurrency,
        )
        try:
            await pool.run(active.record.selected_items)
        finally:
            active.batch_pending = False
        logger.info("Batch finished", extra={"session_id": str(session_id)})
        self._evict_idle()
        return active.items()

    async def generate(
        self, user_id: UUID, source_image: str, era_keys: list[str]
    ) -> ActiveSession:
        """Submit a batch and wait for all of its eras to finish."""
        active = await self.submit_batch(user_id, source_image, era_keys)
        await self.run_batch(active.id)
        return active

    def get_active(self, session_id: UUID) -> ActiveSession | None:
        """Return a session already loaded in this process, if any."""
        active = self._active.get(session_id)
        if active is not None:
            self._active.move_to_end(session_id)
        return active

    async def resume(self, session_id: UUID) -> ActiveSession | None:
        """Return the active session, loading it from history if needed.

        Work still marked pending in history has no call behind it in this
        process, so it is settled as an interrupted error the user can retry.
        """
        active = self.get_active(session_id)
        if active is not None:
            return active
        # Writes from an unloaded copy of this session may still be queued.
        await self.mirror.flush()
        record = await asyncio.to_thread(
            self.session_repository.get_session, session_id
        )
        if record is None:
            return None
        # Another request may have loaded it while this one waited.
        active = self.get_active(session_id)
        if active is not None:
            return active
        items = {key: _settle_orphaned(item) for key, item in record.items.items()}
        store = ItemStateStore.seeded(self.mirror, items)
        store.bind_session(record.id, publish=items != record.items)
        return self._activate(record, store)

    async def list_sessions(self, user_id: UUID) -> list[SessionRecord]:
        """Return a user's session history, newest first."""
        return await asyncio.to_thread(self.session_repository.list_sessions, user_id)

    def _activate(
        self,
        record: SessionRecord,
        store: ItemStateStore,
        *,
        batch_pending: bool = False,
    ) -> ActiveSession:
        operations = ItemOperations(
            store=store,
            generation=self.generation,
            video_gate=self.video_gate,
            player=self.player,
            source_image=record.source_image,
            narration_sample_rate=self.narration_sample_rate,
            narration_channels=self.narration_channels,
        )
        active = ActiveSession(
            record=record,
            store=store,
            operations=operations,
            batch_pending=batch_pending,
        )
        self._active[record.id] = active
        self._evict_idle(keep=record.id)
        return active

    def _evict_idle(self, keep: UUID | None = None) -> None:
        excess = len(self._active) - self.max_active_sessions
        if excess <= 0:
            return
        idle = [
            key
            for key, active in self._active.items()
            if key != keep and active.is_idle()
        ]
        for session_id in idle[:excess]:
            del self._active[session_id]
            logger.info(
                "Unloaded idle session", extra={"session_id": str(session_id)}
            )


def _settle_orphaned(item: ItemRecord) -> ItemRecord:
    """Close out work an earlier process left unfinished."""
    changes: dict[str, object] = {}
    if item.status is ItemStatus.PENDING:
        changes["status"] = ItemStatus.ERROR
        changes["error_message"] = INTERRUPTED_MESSAGE
    if item.video_status is FeatureStatus.PENDING:
        changes["video_status"] = FeatureStatus.ERROR
        changes["video_error"] = INTERRUPTED_MESSAGE
    # Narration is playback only; nothing of it survives a restart.
    if item.audio_status is not FeatureStatus.IDLE:
        changes["audio_status"] = FeatureStatus.IDLE
    if not changes:
        return item
    return ItemRecord.model_validate(item.model_dump() | changes)
