"""Business card field extraction with the Gemini API."""

from bizcard.errors import BackendError, BusinessCardError, ConfigError
from bizcard.models.business_card import DEFAULT_FIELDS, BusinessCardData, ParseOptions
from bizcard.parser import BusinessCardParser, parse_business_card_image
from bizcard.preprocessing import normalize_to_base64

__version__ = "0.1.0"
__all__ = [
    "BackendError",
    "BusinessCardData",
    "BusinessCardError",
    "BusinessCardParser",
    "ConfigError",
    "DEFAULT_FIELDS",
    "ParseOptions",
    "normalize_to_base64",
    "parse_business_card_image",
]
