"""Map raw generation failures to user-facing messages."""

IMAGE_SAFETY_MESSAGE = (
    "The AI couldn't create an image, possibly due to safety filters. "
    "Try a different photo or decade."
)
FALLBACK_EXHAUSTED_MESSAGE = (
    "The AI failed after multiple attempts. "
    "Please try again later or with a different photo."
)
IMAGE_FAILED_MESSAGE = (
    "An unexpected error occurred during image generation. "
    "Please check your connection and try again."
)
EDIT_FAILED_MESSAGE = (
    "The AI failed to edit the image. This could be due to safety filters or a "
    "complex request. Try a different instruction."
)
AUTHORIZATION_MESSAGE = (
    "API Key error. Please ensure your key is valid and has video generation "
    "enabled, then re-select it and try again."
)
VIDEO_SAFETY_MESSAGE = (
    "The video request was blocked due to safety filters. "
    "Please try a different photo or decade."
)
VIDEO_FAILED_MESSAGE = (
    "The AI failed to create a video. This can happen with complex requests or a "
    "temporary service issue. Please try again."
)
TIMEOUT_MESSAGE = "The AI took too long to respond. Please try again."
INTERRUPTED_MESSAGE = (
    "This generation was interrupted before it finished. Please try again."
)
UNKNOWN_MESSAGE = "An unknown error occurred. Please try again."

# Most specific first: later patterns can appear inside earlier messages.
_CLASSIFICATION_TABLE: tuple[tuple[tuple[str, ...], str], ...] = (
    (("responded with text instead of an image",), IMAGE_SAFETY_MESSAGE),
    (("failed with both original and fallback prompts",), FALLBACK_EXHAUSTED_MESSAGE),
    (("failed to generate an image",), IMAGE_FAILED_MESSAGE),
    (("failed to edit the image",), EDIT_FAILED_MESSAGE),
    (
        (
            "API key not valid",
            "API_KEY_INVALID",
            "Requested entity was not found.",
        ),
        AUTHORIZATION_MESSAGE,
    ),
    (("prompt was blocked",), VIDEO_SAFETY_MESSAGE),
    (("Video generation failed",), VIDEO_FAILED_MESSAGE),
    (("timed out",), TIMEOUT_MESSAGE),
    (("was interrupted",), INTERRUPTED_MESSAGE),
)


def classify_error(raw: BaseException | str) -> str:
    """Return the user-facing message for a raw failure."""
    text = raw if isinstance(raw, str) else str(raw)
    for patterns, message in _CLASSIFICATION_TABLE:
        if any(pattern in text for pattern in patterns):
            return message
    return UNKNOWN_MESSAGE


def is_authorization_error(message: str) -> bool:
    """Return true when a classified message reports an authorization failure."""
    return message == AUTHORIZATION_MESSAGE
