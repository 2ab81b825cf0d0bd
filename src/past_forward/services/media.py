"""Data URL helpers for image, video and audio references."""

import base64
import binascii


def to_data_url(content: bytes, mime_type: str | None = None) -> str:
    """Convert bytes to a base64 data URL."""
    resolved = mime_type or detect_mime_type(content)
    encoded = base64.b64encode(content).decode("utf-8")
    return f"data:{resolved};base64,{encoded}"


def from_data_url(data_url: str) -> tuple[bytes, str]:
    """Return the bytes and MIME type held by a base64 data URL."""
    header, separator, payload = data_url.partition(",")
    if not separator or not header.startswith("data:") or ";base64" not in header:
        raise ValueError("Expected a base64 data URL")
    mime_type = header[len("data:") :].split(";", maxsplit=1)[0] or "image/jpeg"
    try:
        return base64.b64decode(payload, validate=True), mime_type
    except binascii.Error as exc:
        raise ValueError("Invalid base64 payload") from exc


def detect_mime_type(content: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if content.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if content.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def file_extension(mime_type: str) -> str:
    """Return a file extension for upload tuples."""
    return {
        "image/png": "png",
        "image/webp": "webp",
        "video/mp4": "mp4",
    }.get(mime_type, "jpg")
