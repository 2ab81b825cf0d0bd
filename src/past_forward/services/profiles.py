"""User profile business logic."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from past_forward.domain.profiles import UserProfile

DEFAULT_DISPLAY_NAME = "Time Traveler"


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the stored profile for a user, if present."""

    def save_profile(self, user_id: UUID, profile: UserProfile) -> None:
        """Create or replace the stored profile for a user."""


@dataclass
class ProfileService:
    """Application service for profile lookups and edits."""

    repository: ProfileRepository

    def load_profile(self, user_id: UUID, email: str | None = None) -> UserProfile:
        """Return the user's profile, creating a default one on first use."""
        existing = self.repository.get_profile(user_id)
        if existing:
            return existing

        created = UserProfile(display_name=_default_display_name(email))
        self.repository.save_profile(user_id, created)
        return created

    def save_profile(
        self, user_id: UUID, display_name: str, avatar_ref: str | None = None
    ) -> UserProfile:
        """Validate and persist a profile edit."""
        cleaned = display_name.strip()
        if not cleaned:
            raise ValueError("Display name cannot be empty")
        profile = UserProfile(display_name=cleaned, avatar_ref=avatar_ref)
        self.repository.save_profile(user_id, profile)
        return profile


def _default_display_name(email: str | None) -> str:
    if email:
        local_part = email.split("@", maxsplit=1)[0].strip()
        if local_part:
            return local_part
    return DEFAULT_DISPLAY_NAME
