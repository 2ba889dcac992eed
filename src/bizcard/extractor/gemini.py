"""Gemini multimodal extractor implementation."""

import json
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from bizcard.errors import BackendError, ConfigError
from bizcard.extractor.base import Extractor
from bizcard.models.business_card import BusinessCardData

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_MIME_TYPE = "image/jpeg"

PROMPT_TEMPLATE = """
Extract the following fields from this business card image:
{field_list}

Respond ONLY in valid JSON format:
{{
{json_template}
}}
"""


def build_prompt(fields: Sequence[str]) -> str:
    """Build the extraction instruction listing every requested field."""
    return PROMPT_TEMPLATE.format(
        field_list="\n".join(f"- {field}" for field in fields),
        json_template=",\n".join(f'  "{field}": ""' for field in fields),
    )


def build_request_body(prompt: str, image_b64: str, mime_type: str = DEFAULT_MIME_TYPE) -> dict:
    """Build the generateContent request body with an inline image part."""
    return {
        "contents": [
            {
                "parts": [
                    {"text": prompt},
                    {
                        "inlineData": {
                            "mimeType": mime_type,
                            "data": image_b64,
                        },
                    },
                ],
            },
        ],
    }


class GeminiExtractor(Extractor):
    """Extractor using the Gemini generateContent REST endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize Gemini extractor.

        Args:
            api_key: Gemini API key, sent as the ``key`` query parameter.
            model: Gemini model name (e.g., "gemini-2.0-flash").
            base_url: Generative Language API base URL.
            timeout: Request timeout in seconds. None disables the timeout.
            client: Optional shared HTTP client. It is not closed here.
        """
        if not api_key:
            raise ConfigError("Missing required parameter: api_key")

        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return f"gemini:{self._model}"

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/v1beta/models/{self._model}:generateContent"

    async def extract(
        self,
        image_b64: str,
        fields: Sequence[str],
        mime_type: str | None = None,
    ) -> BusinessCardData:
        """Extract business card fields using Gemini."""
        body = build_request_body(
            build_prompt(fields), image_b64, mime_type or DEFAULT_MIME_TYPE
        )
        payload = await self._call_gemini(body)
        return self._parse_response(payload, fields)

    async def _call_gemini(self, body: dict) -> Any:
        """POST the request body once and return the decoded JSON response."""
        logger.debug(
            "Sending generateContent request to %s (%d base64 chars)",
            self.endpoint,
            len(body["contents"][0]["parts"][1]["inlineData"]["data"]),
        )
        params = {"key": self._api_key}

        if self._client is not None:
            resp = await self._client.post(self.endpoint, params=params, json=body)
        else:
            async with self._new_client() as client:
                resp = await client.post(self.endpoint, params=params, json=body)

        logger.debug("Gemini responded with HTTP %d", resp.status_code)
        return resp.json()

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout)

    def _parse_response(self, payload: Any, fields: Sequence[str]) -> BusinessCardData:
        """Validate a decoded Gemini response and return the parsed fields."""
        raw_text = self._extract_text(payload)
        if not raw_text:
            logger.debug("Gemini response had no candidate text")
            raise BackendError("Gemini API returned no valid content.", payload)

        try:
            parsed = json.loads(raw_text.strip())
        except json.JSONDecodeError as e:
            logger.debug("Gemini text is not valid JSON: %s", e)
            raise BackendError("Invalid JSON format in Gemini response.", raw_text) from e

        if not isinstance(parsed, dict):
            raise BackendError("Invalid JSON format in Gemini response.", raw_text)

        for field in fields:
            if field not in parsed:
                logger.debug("Gemini response is missing field %r", field)
                raise BackendError(f'Missing expected field: "{field}"', parsed)

        return parsed

    def _extract_text(self, payload: Any) -> str | None:
        """Return ``candidates[0].content.parts[0].text`` if present."""
        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
        return text if isinstance(text, str) else None
