"""Supabase-backed profile repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from past_forward.domain.profiles import UserProfile
from past_forward.services.profiles import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for user profiles."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the stored profile for a user, if present."""
        response = (
            self.client.table("profiles")
            .select("display_name, avatar_ref")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return UserProfile(
            display_name=row["display_name"],
            avatar_ref=row.get("avatar_ref"),
        )

    def save_profile(self, user_id: UUID, profile: UserProfile) -> None:
        """Insert or update the profile row for a user."""
        self.client.table("profiles").upsert(
            {
                "user_id": str(user_id),
                "display_name": profile.display_name,
                "avatar_ref": profile.avatar_ref,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()
