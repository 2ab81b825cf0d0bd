"""Per-era generation records."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator


class ItemStatus(StrEnum):
    """Status of the primary image for an era."""

    PENDING = "pending"
    DONE = "done"
    ERROR = "error"


class FeatureStatus(StrEnum):
    """Status of an optional per-era feature (video, narration)."""

    IDLE = "idle"
    PENDING = "pending"
    DONE = "done"
    ERROR = "error"


class ItemRecord(BaseModel):
    """Everything an era has produced so far."""

    model_config = ConfigDict(frozen=True)

    status: ItemStatus
    image_ref: str | None = None
    error_message: str | None = None
    video_status: FeatureStatus = FeatureStatus.IDLE
    video_ref: str | None = None
    video_error: str | None = None
    audio_status: FeatureStatus = FeatureStatus.IDLE

    @model_validator(mode="after")
    def _check_fields(self) -> "ItemRecord":
        if self.status is ItemStatus.DONE and not self.image_ref:
            raise ValueError("done records require an image_ref")
        if (self.status is ItemStatus.ERROR) != (self.error_message is not None):
            raise ValueError("error_message is present iff status is error")
        if (self.video_status is FeatureStatus.DONE) != (self.video_ref is not None):
            raise ValueError("video_ref is present iff video_status is done")
        if (self.video_status is FeatureStatus.ERROR) != (self.video_error is not None):
            raise ValueError("video_error is present iff video_status is error")
        return self

    @classmethod
    def pending(cls) -> "ItemRecord":
        """Return a fresh record awaiting its first image."""
        return cls(status=ItemStatus.PENDING)

    @classmethod
    def done(cls, image_ref: str) -> "ItemRecord":
        """Return a fresh record holding a generated image."""
        return cls(status=ItemStatus.DONE, image_ref=image_ref)

    @classmethod
    def failed(cls, message: str) -> "ItemRecord":
        """Return a fresh record for a failed generation."""
        return cls(status=ItemStatus.ERROR, error_message=message)

    def to_document(self) -> dict[str, object]:
        """Serialize for the persisted session document."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_document(cls, data: dict[str, object]) -> "ItemRecord":
        """Rebuild a record from a persisted session document."""
        return cls.model_validate(data)
