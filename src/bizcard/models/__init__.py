"""Data models for business card extraction."""

from bizcard.models.business_card import (
    DEFAULT_FIELDS,
    BusinessCardData,
    ImageInput,
    ParseOptions,
)

__all__ = [
    "DEFAULT_FIELDS",
    "BusinessCardData",
    "ImageInput",
    "ParseOptions",
]
