"""In-memory item state for one session."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID

from past_forward.domain.items import ItemRecord
from past_forward.services.mirror import SessionMirror

logger = logging.getLogger(__name__)


class Channel(StrEnum):
    """Independent lanes of work on a single item."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"


class ItemBusyError(RuntimeError):
    """Raised when a channel of an item already has a call in flight."""


@dataclass
class ItemStateStore:
    """Authoritative map of era key to record for the active session.

    All mutation goes through ``apply``, which replaces one key and returns a
    new snapshot of the whole map; callers render and persist that snapshot,
    never a map they read earlier.
    """

    mirror: SessionMirror
    session_id: UUID | None = None
    _items: dict[str, ItemRecord] = field(default_factory=dict, repr=False)
    _busy: set[tuple[str, Channel]] = field(default_factory=set, repr=False)

    @classmethod
    def seeded(
        cls,
        mirror: SessionMirror,
        items: dict[str, ItemRecord],
        session_id: UUID | None = None,
    ) -> "ItemStateStore":
        """Create a store holding existing records without replicating them."""
        store = cls(mirror=mirror, session_id=session_id)
        store._items = dict(items)
        return store

    def get(self, era_key: str) -> ItemRecord | None:
        """Return the current record for an era, if present."""
        return self._items.get(era_key)

    def snapshot(self) -> dict[str, ItemRecord]:
        """Return a copy of the full item map."""
        return dict(self._items)

    def apply(
        self, era_key: str, record: ItemRecord, *, mirror: bool = True
    ) -> dict[str, ItemRecord]:
        """Replace the record for an era and return the updated map."""
        self._items[era_key] = record
        updated = dict(self._items)
        if mirror:
            self._publish(updated)
        return updated

    def update(
        self, era_key: str, *, mirror: bool = True, **changes: object
    ) -> ItemRecord:
        """Apply a copy of the current record with some fields changed."""
        current = self._items[era_key]
        record = ItemRecord.model_validate(current.model_dump() | changes)
        self.apply(era_key, record, mirror=mirror)
        return record

    def bind_session(self, session_id: UUID, *, publish: bool = True) -> None:
        """Attach the persisted session id, publishing the current map."""
        self.session_id = session_id
        if publish and self._items:
            self._publish(dict(self._items))

    def is_busy(self, era_key: str, channel: Channel) -> bool:
        """Return true when a call is in flight on the channel."""
        return (era_key, channel) in self._busy

    def has_claims(self) -> bool:
        """Return true while any call on any item is in flight."""
        return bool(self._busy)

    @contextmanager
    def claim(self, era_key: str, channel: Channel) -> Iterator[None]:
        """Hold the channel of an item exclusively for one call.

        Check and set happen without a suspension point in between, so two
        triggers on the same loop can never both acquire the claim.
        """
        key = (era_key, channel)
        if key in self._busy:
            raise ItemBusyError(f"{era_key} already has a {channel} call in flight")
        self._busy.add(key)
        try:
            yield
        finally:
            self._busy.discard(key)

    def _publish(self, items: dict[str, ItemRecord]) -> None:
        if self.session_id is None:
            logger.debug("Skipping mirror write before session id is bound")
            return
        self.mirror.publish(
            self.session_id,
            {key: record.to_document() for key, record in items.items()},
        )
