"""Per-item generation, regeneration, edit, animation and narration."""

import logging
from dataclasses import dataclass

from past_forward.domain.items import FeatureStatus, ItemRecord, ItemStatus
from past_forward.services.error_messages import classify_error, is_authorization_error
from past_forward.services.generation import (
    ASPECT_RATIOS,
    GenerationService,
    VideoAuthorizationGate,
)
from past_forward.services.item_store import Channel, ItemStateStore
from past_forward.services.narration import AudioPlayer, decode_pcm

logger = logging.getLogger(__name__)

NARRATION_SAMPLE_RATE = 24000
NARRATION_CHANNELS = 1


@dataclass
class ItemOperations:
    """Run generation calls for individual items of one session.

    Every public operation returns the item's final record, or ``None`` when a
    guard rejected the request without touching state. Generation failures
    never propagate: they are classified and stored on the record.
    """

    store: ItemStateStore
    generation: GenerationService
    video_gate: VideoAuthorizationGate
    player: AudioPlayer
    source_image: str | None
    narration_sample_rate: int = NARRATION_SAMPLE_RATE
    narration_channels: int = NARRATION_CHANNELS

    async def process_batch_item(self, era_key: str) -> None:
        """Generate the first image for an era seeded as pending."""
        if self.store.is_busy(era_key, Channel.IMAGE):
            logger.warning("Skipping busy era in batch", extra={"era": era_key})
            return
        with self.store.claim(era_key, Channel.IMAGE):
            await self._generate(era_key)

    async def regenerate(self, era_key: str) -> ItemRecord | None:
        """Discard an era's result and generate a new image."""
        current = self.store.get(era_key)
        if self.store.session_id is None or not self.source_image or current is None:
            return None
        if current.status is ItemStatus.PENDING or self._image_locked(era_key):
            return None
        with self.store.claim(era_key, Channel.IMAGE):
            self.store.apply(era_key, ItemRecord.pending())
            return await self._generate(era_key)

    async def edit(self, era_key: str, instruction: str) -> ItemRecord | None:
        """Apply an instruction to an era's finished image."""
        if not instruction.strip():
            raise ValueError("Please enter an edit instruction.")
        current = self.store.get(era_key)
        if self.store.session_id is None or current is None:
            return None
        if current.status is not ItemStatus.DONE or not current.image_ref:
            return None
        if self._image_locked(era_key):
            return None
        rollback = current
        with self.store.claim(era_key, Channel.IMAGE):
            self.store.update(era_key, status=ItemStatus.PENDING)
            try:
                image_ref = await self.generation.edit_image(
                    rollback.image_ref, instruction
                )
            except Exception as exc:
                logger.exception("Failed to edit image", extra={"era": era_key})
                # Narration runs on its own channel and may have moved meanwhile.
                record = ItemRecord.model_validate(
                    rollback.model_dump()
                    | {
                        "status": ItemStatus.ERROR,
                        "error_message": classify_error(exc),
                        "audio_status": self.store.get(era_key).audio_status,
                    }
                )
            else:
                # The old animation was rendered from the old image.
                record = ItemRecord(
                    status=ItemStatus.DONE,
                    image_ref=image_ref,
                    video_status=FeatureStatus.IDLE,
                    audio_status=FeatureStatus.IDLE,
                )
            self.store.apply(era_key, record)
            return record

    async def animate(self, era_key: str, aspect_ratio: str) -> ItemRecord | None:
        """Render a short video from an era's finished image."""
        if aspect_ratio not in ASPECT_RATIOS:
            raise ValueError(f"Unsupported aspect ratio: {aspect_ratio}")
        if not self._can_animate(era_key):
            return None
        if not await self.video_gate.ensure():
            logger.info("Video authorization requested", extra={"era": era_key})
            return None
        # State may have moved while the credential was being checked.
        if not self._can_animate(era_key):
            return None
        current = self.store.get(era_key)
        with self.store.claim(era_key, Channel.VIDEO):
            self.store.update(
                era_key,
                video_status=FeatureStatus.PENDING,
                video_ref=None,
                video_error=None,
            )
            try:
                video_ref = await self.generation.generate_video(
                    current.image_ref, era_key, aspect_ratio
                )
            except Exception as exc:
                logger.exception("Failed to animate era", extra={"era": era_key})
                message = classify_error(exc)
                if is_authorization_error(message):
                    self.video_gate.reset()
                return self.store.update(
                    era_key, video_status=FeatureStatus.ERROR, video_error=message
                )
            return self.store.update(
                era_key, video_status=FeatureStatus.DONE, video_ref=video_ref
            )

    async def narrate(self, era_key: str) -> ItemRecord | None:
        """Fetch and play the narration for an era."""
        current = self.store.get(era_key)
        if self.store.session_id is None or current is None:
            return None
        if current.audio_status is FeatureStatus.PENDING or self.store.is_busy(
            era_key, Channel.AUDIO
        ):
            return None
        with self.store.claim(era_key, Channel.AUDIO):
            self.store.update(era_key, audio_status=FeatureStatus.PENDING)
            try:
                raw = await self.generation.generate_narration(era_key)
                buffer = decode_pcm(
                    raw, self.narration_sample_rate, self.narration_channels
                )
                self.player.play(buffer, era_key)
            except Exception:
                logger.exception("Failed to play narration", extra={"era": era_key})
                return self.store.update(era_key, audio_status=FeatureStatus.ERROR)
            # Playback is the product here; nothing durable to replicate.
            return self.store.update(
                era_key, audio_status=FeatureStatus.DONE, mirror=False
            )

    async def _generate(self, era_key: str) -> ItemRecord:
        try:
            image_ref = await self.generation.generate_image(
                self.source_image, era_key
            )
        except Exception as exc:
            logger.exception("Processing failed for era", extra={"era": era_key})
            record = ItemRecord.failed(classify_error(exc))
        else:
            record = ItemRecord.done(image_ref)
        self.store.apply(era_key, record)
        return record

    def _image_locked(self, era_key: str) -> bool:
        return self.store.is_busy(era_key, Channel.IMAGE) or self.store.is_busy(
            era_key, Channel.VIDEO
        )

    def _can_animate(self, era_key: str) -> bool:
        current = self.store.get(era_key)
        if self.store.session_id is None or current is None:
            return False
        if current.status is not ItemStatus.DONE or not current.image_ref:
            return False
        if current.video_status is FeatureStatus.PENDING:
            return False
        return not (
            self.store.is_busy(era_key, Channel.VIDEO)
            or self.store.is_busy(era_key, Channel.IMAGE)
        )
