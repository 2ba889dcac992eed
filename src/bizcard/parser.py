"""Main business card parser controller."""

import asyncio
import logging
from collections.abc import Sequence

import httpx

from bizcard.errors import ConfigError
from bizcard.extractor.base import Extractor
from bizcard.extractor.gemini import GeminiExtractor
from bizcard.models.business_card import (
    DEFAULT_FIELDS,
    BusinessCardData,
    ImageInput,
    ParseOptions,
)
from bizcard.preprocessing import normalize_to_base64

logger = logging.getLogger(__name__)


def _require_image(image: object) -> None:
    if image is None or (isinstance(image, (str, bytes, bytearray, memoryview)) and not image):
        raise ConfigError("Missing required parameter: image")


class BusinessCardParser:
    """Main controller for parsing business card images."""

    def __init__(self, extractor: Extractor):
        """
        Initialize the parser with an extractor backend.

        Args:
            extractor: Extractor that turns a base64 image into fields.
        """
        self._extractor = extractor

    @property
    def extractor(self) -> Extractor:
        return self._extractor

    async def parse(
        self,
        image: ImageInput,
        fields: Sequence[str] | None = None,
        mime_type: str | None = None,
    ) -> BusinessCardData:
        """
        Parse a business card image and extract the requested fields.

        Args:
            image: Data URI or base64 string, raw bytes, or a file path.
            fields: Field names to request. Defaults to DEFAULT_FIELDS.
            mime_type: Declared image mime type. Defaults to image/jpeg.

        Returns:
            Mapping of every requested field to its extracted value.

        Raises:
            ConfigError: If the image is missing.
            BackendError: If the backend response is unusable.
        """
        _require_image(image)
        fields = list(DEFAULT_FIELDS) if fields is None else list(fields)

        image_b64 = await normalize_to_base64(image)
        logger.debug(
            "Extracting %d field(s) with %s", len(fields), self._extractor.name
        )
        return await self._extractor.extract(image_b64, fields, mime_type)

    def parse_sync(
        self,
        image: ImageInput,
        fields: Sequence[str] | None = None,
        mime_type: str | None = None,
    ) -> BusinessCardData:
        """Blocking wrapper around parse() for callers without an event loop."""
        return asyncio.run(self.parse(image, fields, mime_type))


async def parse_business_card_image(
    options: ParseOptions | None = None,
    *,
    image: ImageInput | None = None,
    api_key: str | None = None,
    fields: Sequence[str] | None = None,
    mime_type: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> BusinessCardData:
    """
    Parse a business card image with Gemini.

    Accepts either a ParseOptions instance or the same values as keyword
    arguments. Exactly one HTTP request is made per call.

    Raises:
        ConfigError: If the image or the API key is missing.
        TypeError: If options is combined with image, api_key, fields or
            mime_type keyword arguments.
        BackendError: If Gemini returns no text, invalid JSON, or omits
            a requested field.
    """
    if options is not None:
        keywords = {"image": image, "api_key": api_key, "fields": fields, "mime_type": mime_type}
        given = [name for name, value in keywords.items() if value is not None]
        if given:
            raise TypeError(
                f"Pass either options or keyword arguments, not both (got {', '.join(given)})"
            )
    else:
        _require_image(image)
        if not api_key:
            raise ConfigError("Missing required parameter: api_key")

        if isinstance(image, (bytearray, memoryview)):
            image = bytes(image)
        values = {"image": image, "api_key": api_key, "mime_type": mime_type}
        if fields is not None:
            values["fields"] = list(fields)
        options = ParseOptions(**values)

    _require_image(options.image)
    extractor = GeminiExtractor(api_key=options.api_key, client=client)
    parser = BusinessCardParser(extractor)
    return await parser.parse(options.image, options.fields, options.mime_type)
