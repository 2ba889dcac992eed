"""Pydantic models for business card requests and results."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

BusinessCardData = dict[str, str]
"""Extracted field values keyed by the requested field names."""

DEFAULT_FIELDS: tuple[str, ...] = (
    "name",
    "title",
    "company",
    "email",
    "phone",
    "website",
    "address",
)

ImageInput = str | bytes | bytearray | memoryview | Path
"""Accepted image inputs: data URI or base64 text, a binary blob, or a file path."""


class ParseOptions(BaseModel):
    """Inputs for a single extraction call."""

    model_config = ConfigDict(frozen=True)

    image: str | bytes | Path | None = Field(
        default=None,
        description="Data URI or base64 string, raw image bytes, or a file path",
    )
    api_key: str | None = Field(default=None, description="Gemini API key")
    fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FIELDS),
        description="Field names to request, in prompt order",
    )
    mime_type: str | None = Field(
        default=None, description="Declared image mime type (image/jpeg if unset)"
    )
