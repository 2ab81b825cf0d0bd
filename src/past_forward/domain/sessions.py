"""Domain models for generation sessions."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from past_forward.domain.items import ItemRecord


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted generation session."""

    id: UUID
    user_id: UUID
    created_at: datetime
    source_image: str
    selected_items: tuple[str, ...]
    items: dict[str, ItemRecord] = field(default_factory=dict)
