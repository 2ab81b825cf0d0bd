"""OpenAI-backed generation client for images, video and narration."""

import logging
from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from past_forward.eras import (
    build_era_prompt,
    build_fallback_prompt,
    build_narration_script,
    build_video_prompt,
)
from past_forward.services.generation import GenerationClient, GenerationError
from past_forward.services.media import file_extension, from_data_url, to_data_url

logger = logging.getLogger(__name__)

_VIDEO_SIZES = {"9:16": "720x1280", "16:9": "1280x720"}


@dataclass
class OpenAIGenerationClient(GenerationClient):
    """Generation client backed by the OpenAI Images, Videos and Audio APIs."""

    client: AsyncOpenAI
    video_client: AsyncOpenAI
    image_model: str
    speech_model: str
    speech_voice: str
    video_model: str

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        api_key: str,
        video_api_key: str | None,
        image_model: str,
        speech_model: str,
        speech_voice: str,
        video_model: str,
    ) -> "OpenAIGenerationClient":
        """Create a client; video calls use their own key when one is set."""
        client = AsyncOpenAI(api_key=api_key)
        video_client = AsyncOpenAI(api_key=video_api_key) if video_api_key else client
        return cls(
            client=client,
            video_client=video_client,
            image_model=image_model,
            speech_model=speech_model,
            speech_voice=speech_voice,
            video_model=video_model,
        )

    async def generate_image(self, source_image: str, era_key: str) -> str:
        """Restyle the source photo, retrying once with a softened prompt."""
        try:
            return await self._edit(source_image, build_era_prompt(era_key))
        except openai.BadRequestError as exc:
            logger.warning("Image prompt rejected, trying fallback: %s", exc)
        except GenerationError:
            raise
        except Exception as exc:
            raise GenerationError(f"The model failed to generate an image: {exc}") from exc

        try:
            return await self._edit(source_image, build_fallback_prompt(era_key))
        except GenerationError:
            raise
        except Exception as exc:
            raise GenerationError(
                f"Image generation failed with both original and fallback prompts: {exc}"
            ) from exc

    async def edit_image(self, image_ref: str, instruction: str) -> str:
        """Apply an edit instruction to an existing image."""
        try:
            return await self._edit(image_ref, instruction)
        except Exception as exc:
            raise GenerationError(f"The model failed to edit the image: {exc}") from exc

    async def generate_video(
        self, image_ref: str, era_key: str, aspect_ratio: str
    ) -> str:
        """Render a short clip from an image and return it as a data URL."""
        content, mime_type = from_data_url(image_ref)
        try:
            video = await self.video_client.videos.create_and_poll(
                model=self.video_model,
                prompt=build_video_prompt(era_key),
                input_reference=(
                    f"reference.{file_extension(mime_type)}",
                    content,
                    mime_type,
                ),
                size=_VIDEO_SIZES[aspect_ratio],
            )
        except openai.AuthenticationError as exc:
            raise GenerationError(f"API key not valid: {exc}") from exc
        except openai.BadRequestError as exc:
            if "moderation" in str(exc).lower():
                raise GenerationError(f"Video prompt was blocked: {exc}") from exc
            raise GenerationError(f"Video generation failed: {exc}") from exc
        except Exception as exc:
            raise GenerationError(f"Video generation failed: {exc}") from exc

        if video.status != "completed":
            raise GenerationError(f"Video generation failed: {video.error}")
        try:
            download = await self.video_client.videos.download_content(
                video.id, variant="video"
            )
        except Exception as exc:
            raise GenerationError(
                f"Video generation failed: could not download {video.id}: {exc}"
            ) from exc
        return to_data_url(download.content, "video/mp4")

    async def generate_narration(self, era_key: str) -> bytes:
        """Return 24 kHz mono 16-bit PCM narrating the era."""
        try:
            response = await self.client.audio.speech.create(
                model=self.speech_model,
                voice=self.speech_voice,
                input=build_narration_script(era_key),
                response_format="pcm",
            )
        except Exception as exc:
            raise GenerationError(f"Narration failed: {exc}") from exc
        return response.content

    async def _edit(self, image_ref: str, prompt: str) -> str:
        content, mime_type = from_data_url(image_ref)
        response = await self.client.images.edit(
            model=self.image_model,
            image=(f"source.{file_extension(mime_type)}", content, mime_type),
            prompt=prompt,
        )
        image = response.data[0] if response.data else None
        if image is None or not image.b64_json:
            raise GenerationError("The model responded with text instead of an image")
        return f"data:image/png;base64,{image.b64_json}"
