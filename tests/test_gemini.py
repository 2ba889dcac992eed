"""Tests for the Gemini extractor."""

import json

import httpx
import pytest

from conftest import gemini_payload
from bizcard.errors import BackendError, ConfigError
from bizcard.extractor.gemini import (
    DEFAULT_BASE_URL,
    GeminiExtractor,
    build_prompt,
    build_request_body,
)
from bizcard.models.business_card import DEFAULT_FIELDS


class TestBuildPrompt:
    """Test prompt construction."""

    def test_lists_every_field(self):
        prompt = build_prompt(["name", "email"])

        assert "- name\n- email" in prompt
        assert '{\n  "name": "",\n  "email": ""\n}' in prompt
        assert "Respond ONLY in valid JSON format:" in prompt

    def test_default_fields(self):
        prompt = build_prompt(DEFAULT_FIELDS)
        for field in ("name", "title", "company", "email", "phone", "website", "address"):
            assert f"- {field}" in prompt
            assert f'"{field}": ""' in prompt


class TestBuildRequestBody:
    """Test request body construction."""

    def test_body_shape(self):
        body = build_request_body("prompt", "abc")
        assert body == {
            "contents": [
                {
                    "parts": [
                        {"text": "prompt"},
                        {"inlineData": {"mimeType": "image/jpeg", "data": "abc"}},
                    ]
                }
            ]
        }

    def test_custom_mime(self):
        body = build_request_body("prompt", "abc", "image/png")
        assert body["contents"][0]["parts"][1]["inlineData"]["mimeType"] == "image/png"


class TestGeminiExtractor:
    """Test GeminiExtractor request/response handling."""

    def test_requires_api_key(self):
        with pytest.raises(ConfigError, match="^Missing required parameter: api_key$"):
            GeminiExtractor(api_key="")

    def test_name_and_endpoint(self):
        extractor = GeminiExtractor(api_key="k", model="gemini-2.5-flash")
        assert extractor.name == "gemini:gemini-2.5-flash"
        assert extractor.endpoint == (
            f"{DEFAULT_BASE_URL}/v1beta/models/gemini-2.5-flash:generateContent"
        )

    def test_base_url_trailing_slash(self):
        extractor = GeminiExtractor(api_key="k", base_url="http://localhost:8080/")
        assert extractor.endpoint.startswith("http://localhost:8080/v1beta/")

    @pytest.mark.asyncio
    async def test_default_client_has_no_timeout(self):
        """Test the owned client does not impose httpx's 5 second default."""
        extractor = GeminiExtractor(api_key="k")

        async with extractor._new_client() as client:
            assert client.timeout == httpx.Timeout(None)
            assert client.timeout.read is None

    @pytest.mark.asyncio
    async def test_explicit_timeout_applied(self):
        extractor = GeminiExtractor(api_key="k", timeout=120.0)

        async with extractor._new_client() as client:
            assert client.timeout.read == 120.0
            assert client.timeout.connect == 120.0

    @pytest.mark.asyncio
    async def test_sends_single_post(self, make_client):
        client, transport = make_client(gemini_payload('{"name": "Jane"}'))
        extractor = GeminiExtractor(api_key="secret", client=client)

        result = await extractor.extract("abc", ["name"])

        assert result == {"name": "Jane"}
        assert len(transport.requests) == 1
        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.host == "generativelanguage.googleapis.com"
        assert request.url.path == "/v1beta/models/gemini-2.0-flash:generateContent"
        assert request.url.params["key"] == "secret"
        assert request.headers["content-type"] == "application/json"

        body = transport.last_json
        parts = body["contents"][0]["parts"]
        assert parts[0]["text"] == build_prompt(["name"])
        assert parts[1] == {"inlineData": {"mimeType": "image/jpeg", "data": "abc"}}

    @pytest.mark.asyncio
    async def test_mime_type_override(self, make_client):
        client, transport = make_client(gemini_payload('{"name": "Jane"}'))
        extractor = GeminiExtractor(api_key="k", client=client)

        await extractor.extract("abc", ["name"], mime_type="image/png")

        parts = transport.last_json["contents"][0]["parts"]
        assert parts[1]["inlineData"]["mimeType"] == "image/png"

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self, make_client):
        client, _ = make_client(gemini_payload('{"name": "Jane"}'))
        extractor = GeminiExtractor(api_key="k", client=client)

        await extractor.extract("abc", ["name"])

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        extractor = GeminiExtractor(api_key="k", client=client)

        with pytest.raises(httpx.ConnectError):
            await extractor.extract("abc", ["name"])

    @pytest.mark.asyncio
    async def test_error_status_reports_body(self, make_client):
        error_body = {"error": {"code": 400, "message": "API key not valid."}}
        client, _ = make_client(error_body, status_code=400)
        extractor = GeminiExtractor(api_key="bad", client=client)

        with pytest.raises(BackendError) as exc_info:
            await extractor.extract("abc", ["name"])

        assert exc_info.value.response_data == error_body


class TestParseResponse:
    """Test response validation."""

    def setup_method(self):
        self.extractor = GeminiExtractor(api_key="k")

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"candidates": []},
            {"candidates": [{"content": {"parts": []}}]},
            {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
            {"candidates": [{"finishReason": "SAFETY"}]},
            ["unexpected"],
            None,
        ],
    )
    def test_no_content(self, payload):
        with pytest.raises(BackendError, match="returned no valid content") as exc_info:
            self.extractor._parse_response(payload, ["name"])
        assert exc_info.value.response_data == payload
        assert exc_info.value.kind == "backend"

    def test_invalid_json(self):
        with pytest.raises(BackendError, match="Invalid JSON format") as exc_info:
            self.extractor._parse_response(gemini_payload("not json"), ["name"])
        assert exc_info.value.response_data == "not json"

    def test_non_object_json(self):
        with pytest.raises(BackendError, match="Invalid JSON format") as exc_info:
            self.extractor._parse_response(gemini_payload("[1, 2]"), ["name"])
        assert exc_info.value.response_data == "[1, 2]"

    def test_missing_field(self):
        payload = gemini_payload(json.dumps({"name": "Jane"}))
        with pytest.raises(BackendError, match='Missing expected field: "email"') as exc_info:
            self.extractor._parse_response(payload, ["name", "email"])
        assert exc_info.value.response_data == {"name": "Jane"}

    def test_reports_first_missing_field(self):
        payload = gemini_payload("{}")
        with pytest.raises(BackendError, match='"title"'):
            self.extractor._parse_response(payload, ["title", "email"])

    def test_success_returns_exact_object(self):
        parsed = {"name": "Jane", "email": "jane@x.com"}
        payload = gemini_payload(f"\n  {json.dumps(parsed)}  \n")

        result = self.extractor._parse_response(payload, ["name", "email"])

        assert result == parsed

    def test_extra_keys_kept(self):
        payload = gemini_payload('{"name": "Jane", "fax": "123"}')
        result = self.extractor._parse_response(payload, ["name"])
        assert result == {"name": "Jane", "fax": "123"}
