"""Generation invoker: one external call per invocation, with a deadline."""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Protocol, TypeVar

T = TypeVar("T")

ASPECT_RATIOS = frozenset({"9:16", "16:9"})


class GenerationError(RuntimeError):
    """Raised by generation backends with a classifiable message."""


class GenerationClient(Protocol):
    """Interface for the external generative backend."""

    async def generate_image(self, source_image: str, era_key: str) -> str:
        """Restyle the source photo into the era and return its reference."""

    async def edit_image(self, image_ref: str, instruction: str) -> str:
        """Apply an edit instruction to an image and return the new reference."""

    async def generate_video(
        self, image_ref: str, era_key: str, aspect_ratio: str
    ) -> str:
        """Animate an image and return a video reference."""

    async def generate_narration(self, era_key: str) -> bytes:
        """Return raw PCM audio narrating the era."""


class VideoAuthorization(Protocol):
    """Interface for the credential required by the video path."""

    async def has_authorization(self) -> bool:
        """Return true when a video credential is available."""

    async def request_authorization(self) -> None:
        """Start the flow that lets the user provide a credential."""


@dataclass
class VideoAuthorizationGate:
    """Remembers a confirmed video credential until a call reports it invalid."""

    authorization: VideoAuthorization
    confirmed: bool = False

    async def ensure(self) -> bool:
        """Return true when video calls may start; otherwise start the flow."""
        if self.confirmed:
            return True
        if await self.authorization.has_authorization():
            self.confirmed = True
            return True
        await self.authorization.request_authorization()
        return False

    def reset(self) -> None:
        """Forget the confirmation so the next attempt checks again."""
        self.confirmed = False


@dataclass
class GenerationService:
    """Invoke the backend once per call, failing calls that exceed a deadline.

    There is no retry here: a timeout surfaces as a ``GenerationError`` and the
    caller records it as a terminal error on the item.
    """

    client: GenerationClient
    timeout_seconds: float | None = None

    async def generate_image(self, source_image: str, era_key: str) -> str:
        return await self._bounded(
            self.client.generate_image(source_image, era_key), "Image generation"
        )

    async def edit_image(self, image_ref: str, instruction: str) -> str:
        return await self._bounded(
            self.client.edit_image(image_ref, instruction), "Image edit"
        )

    async def generate_video(
        self, image_ref: str, era_key: str, aspect_ratio: str
    ) -> str:
        if aspect_ratio not in ASPECT_RATIOS:
            raise ValueError(f"Unsupported aspect ratio: {aspect_ratio}")
        return await self._bounded(
            self.client.generate_video(image_ref, era_key, aspect_ratio),
            "Video generation",
        )

    async def generate_narration(self, era_key: str) -> bytes:
        return await self._bounded(
            self.client.generate_narration(era_key), "Narration"
        )

    async def _bounded(self, call: Awaitable[T], label: str) -> T:
        if self.timeout_seconds is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except TimeoutError as exc:
            raise GenerationError(
                f"{label} timed out after {self.timeout_seconds:g}s"
            ) from exc
