"""Image input normalization to a bare base64 payload."""

import asyncio
import base64
import logging
import mimetypes
import re
from pathlib import Path

from bizcard.models.business_card import ImageInput

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(r"data:(.*?);base64,(.*)", re.DOTALL)

# Leading bytes of common image formats
_MAGIC_NUMBERS: tuple[tuple[bytes, str], ...] = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


def to_data_uri(blob: bytes, mime_type: str = "application/octet-stream") -> str:
    """Encode raw bytes as a base64 data URI."""
    encoded = base64.b64encode(blob).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


async def normalize_to_base64(image: ImageInput) -> str:
    """
    Convert an image input into a base64 payload without a data-URI prefix.

    Strings matching ``data:<mime>;base64,<payload>`` yield ``<payload>``,
    including payloads wrapped over several lines.
    Any other string is assumed to already be base64 and is returned
    unchanged; it is not validated.

    Binary blobs are encoded as a data URI and everything up to and
    including the first comma is stripped. Paths are read in a worker
    thread first; read errors propagate as-is.

    Args:
        image: Data URI or base64 string, raw bytes, or a file path.

    Returns:
        Base64-encoded image bytes.

    Raises:
        TypeError: If the input type is not supported.
        OSError: If a path cannot be read.
    """
    if isinstance(image, str):
        match = DATA_URI_PATTERN.fullmatch(image)
        return match.group(2) if match else image

    if isinstance(image, Path):
        logger.debug("Reading image file: %s", image)
        blob = await asyncio.to_thread(image.read_bytes)
    elif isinstance(image, (bytes, bytearray, memoryview)):
        blob = bytes(image)
    else:
        raise TypeError(
            f"Unsupported image type: {type(image).__name__}. "
            "Expected str, bytes or pathlib.Path"
        )

    data_uri = to_data_uri(blob)
    return data_uri.split(",", 1)[1]


def detect_mime_type(image: ImageInput) -> str | None:
    """
    Best-effort mime type detection for an image input.

    Uses the data-URI prefix for strings, the file suffix for paths and
    magic numbers for raw bytes.

    Returns:
        The mime type, or None if it cannot be determined.
    """
    if isinstance(image, str):
        match = DATA_URI_PATTERN.fullmatch(image)
        return (match.group(1) or None) if match else None

    if isinstance(image, Path):
        mime_type, _ = mimetypes.guess_type(image.name)
        return mime_type if mime_type and mime_type.startswith("image/") else None

    if isinstance(image, (bytes, bytearray, memoryview)):
        head = bytes(image[:12])
        if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
            return "image/webp"
        for magic, mime_type in _MAGIC_NUMBERS:
            if head.startswith(magic):
                return mime_type

    return None
