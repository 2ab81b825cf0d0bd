"""Video authorization backed by a configured API key."""

import logging
from dataclasses import dataclass

from past_forward.services.generation import VideoAuthorization

logger = logging.getLogger(__name__)


@dataclass
class SettingsVideoAuthorization(VideoAuthorization):
    """Treats a configured video API key as the authorization."""

    video_api_key: str | None

    async def has_authorization(self) -> bool:
        """Return true when a video key is configured."""
        return bool(self.video_api_key and self.video_api_key.strip())

    async def request_authorization(self) -> None:
        """Ask the operator to configure a key."""
        logger.warning(
            "Video generation requires an API key; set VIDEO_API_KEY and retry"
        )
