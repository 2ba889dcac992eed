"""Shared test fixtures."""

import json

import httpx
import pytest

from bizcard.extractor.base import Extractor


def gemini_payload(text):
    """Build a generateContent response carrying ``text``."""
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class RecordingTransport:
    """httpx handler that records requests and replies with a fixed body."""

    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


class FakeExtractor(Extractor):
    """In-memory extractor returning canned results."""

    def __init__(self, result=None, error=None):
        self.result = result or {}
        self.error = error
        self.calls: list[tuple] = []

    @property
    def name(self) -> str:
        return "fake"

    async def extract(self, image_b64, fields, mime_type=None):
        self.calls.append((image_b64, list(fields), mime_type))
        if self.error is not None:
            raise self.error
        return dict(self.result)


@pytest.fixture
def make_client():
    """Factory for AsyncClients backed by a RecordingTransport."""

    def factory(body, status_code=200):
        transport = RecordingTransport(body, status_code)
        return httpx.AsyncClient(transport=httpx.MockTransport(transport)), transport

    return factory
