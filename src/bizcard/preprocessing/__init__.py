"""Image input preprocessing."""

from bizcard.preprocessing.normalizer import (
    detect_mime_type,
    normalize_to_base64,
    to_data_uri,
)

__all__ = ["detect_mime_type", "normalize_to_base64", "to_data_uri"]
