"""Fire-and-forget replication of item maps to the persisted session."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

logger = logging.getLogger(__name__)


class SessionItemsWriter(Protocol):
    """Persistence interface for replacing a session's item map."""

    def update_session_items(
        self, session_id: UUID, items: dict[str, dict[str, object]]
    ) -> None:
        """Replace the stored item map for a session."""


@dataclass
class SessionMirror:
    """Outbound queue drained by a background task.

    ``publish`` never suspends and never fails; writes are attempted once in
    publish order and failures are logged. The persisted map may lag the
    in-memory map by however many writes are still queued.
    """

    writer: SessionItemsWriter
    _queue: asyncio.Queue | None = field(default=None, init=False, repr=False)
    _task: asyncio.Task | None = field(default=None, init=False, repr=False)
    _loop: asyncio.AbstractEventLoop | None = field(
        default=None, init=False, repr=False
    )

    def publish(self, session_id: UUID, items: dict[str, dict[str, object]]) -> None:
        """Queue a full item map for replication."""
        queue = self._ensure_started()
        queue.put_nowait((session_id, items))

    async def flush(self) -> None:
        """Wait until every queued write has been attempted."""
        if self._queue is not None and self._loop is asyncio.get_running_loop():
            await self._queue.join()

    async def close(self) -> None:
        """Drain pending writes and stop the background task."""
        await self.flush()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._queue = None
        self._loop = None

    def _ensure_started(self) -> asyncio.Queue:
        loop = asyncio.get_running_loop()
        if (
            self._queue is None
            or self._task is None
            or self._task.done()
            or self._loop is not loop
        ):
            self._loop = loop
            self._queue = asyncio.Queue()
            self._task = loop.create_task(self._drain(self._queue))
        return self._queue

    async def _drain(self, queue: asyncio.Queue) -> None:
        while True:
            session_id, items = await queue.get()
            try:
                await asyncio.to_thread(
                    self.writer.update_session_items, session_id, items
                )
            except Exception:
                logger.exception(
                    "Failed to mirror session items",
                    extra={"session_id": str(session_id)},
                )
            finally:
                queue.task_done()
