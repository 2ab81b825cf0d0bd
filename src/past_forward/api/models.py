"""Request and response bodies for the HTTP API."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from past_forward.domain.items import ItemRecord
from past_forward.domain.profiles import UserProfile
from past_forward.domain.sessions import SessionRecord
from past_forward.eras import ERAS


class BatchRequest(BaseModel):
    """A photo and the eras to render it in."""

    image_base64: str = Field(min_length=1)
    eras: list[str] = Field(default_factory=lambda: list(ERAS))
    mime_type: str | None = None


class EditRequest(BaseModel):
    instruction: str = Field(min_length=1)


class AnimateRequest(BaseModel):
    aspect_ratio: Literal["9:16", "16:9"] = "9:16"


class ProfileRequest(BaseModel):
    display_name: str = Field(min_length=1)
    avatar_ref: str | None = None


class SessionView(BaseModel):
    """Session as shown to clients."""

    id: UUID
    created_at: datetime
    source_image: str
    selected_items: list[str]
    items: dict[str, ItemRecord]

    @classmethod
    def build(
        cls, record: SessionRecord, items: dict[str, ItemRecord] | None = None
    ) -> "SessionView":
        return cls(
            id=record.id,
            created_at=record.created_at,
            source_image=record.source_image,
            selected_items=list(record.selected_items),
            items=items if items is not None else record.items,
        )


class ProfileView(BaseModel):
    display_name: str
    avatar_ref: str | None = None

    @classmethod
    def build(cls, profile: UserProfile) -> "ProfileView":
        return cls(display_name=profile.display_name, avatar_ref=profile.avatar_ref)
