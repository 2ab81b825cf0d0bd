"""Bounded worker pool for the initial batch."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 2


@dataclass
class WorkerPool:
    """Process era keys from a FIFO queue with a fixed number of workers.

    Each worker pops one key at a time and awaits ``process`` for it before
    popping the next, so no more than ``concurrency`` keys are ever in flight.
    A failing key never stops its worker or the batch.
    """

    process: Callable[[str], Awaitable[None]]
    concurrency: int = DEFAULT_CONCURRENCY

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")

    async def run(self, era_keys: Sequence[str]) -> None:
        """Return once every key has been processed."""
        queue: asyncio.Queue[str] = asyncio.Queue()
        for key in era_keys:
            queue.put_nowait(key)
        await asyncio.gather(
            *(self._worker(queue, index) for index in range(self.concurrency))
        )

    async def _worker(self, queue: asyncio.Queue[str], index: int) -> None:
        while True:
            try:
                era_key = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                await self.process(era_key)
            except Exception:
                logger.exception(
                    "Worker failed to process era",
                    extra={"era": era_key, "worker": index},
                )
