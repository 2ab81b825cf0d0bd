"""Supabase-backed session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from past_forward.domain.items import ItemRecord
from past_forward.domain.sessions import SessionRecord
from past_forward.services.sessions import SessionRepository

_COLUMNS = "id, user_id, created_at, source_image, selected_items, items_json"


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for generation sessions."""

    client: Client

    def create_session(
        self,
        user_id: UUID,
        source_image: str,
        selected_items: list[str],
        items: dict[str, dict[str, object]],
    ) -> SessionRecord:
        """Create a session row and return it."""
        response = (
            self.client.table("generation_sessions")
            .insert(
                {
                    "user_id": str(user_id),
                    "source_image": source_image,
                    "selected_items": list(selected_items),
                    "items_json": items,
                    "created_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create session")
        return _to_record(response.data[0])

    def get_session(self, session_id: UUID) -> SessionRecord | None:
        """Return a session by id, if present."""
        response = (
            self.client.table("generation_sessions")
            .select(_COLUMNS)
            .eq("id", str(session_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def list_sessions(self, user_id: UUID) -> list[SessionRecord]:
        """Return a user's sessions, newest first."""
        response = (
            self.client.table("generation_sessions")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [_to_record(row) for row in response.data or []]

    def update_session_items(
        self, session_id: UUID, items: dict[str, dict[str, object]]
    ) -> None:
        """Replace the item map of a session."""
        self.client.table("generation_sessions").update(
            {
                "items_json": items,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("id", str(session_id)).execute()


def _to_record(row: dict[str, object]) -> SessionRecord:
    raw_items = row.get("items_json") or {}
    return SessionRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        source_image=str(row["source_image"]),
        selected_items=tuple(row.get("selected_items") or ()),
        items={
            key: ItemRecord.from_document(value)
            for key, value in raw_items.items()
            if isinstance(value, dict)
        },
    )
