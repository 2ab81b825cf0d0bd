"""Domain models for user profiles."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserProfile:
    """Represents a user's display profile."""

    display_name: str
    avatar_ref: str | None = None
