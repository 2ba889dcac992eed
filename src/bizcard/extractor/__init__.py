"""Extractors for structured data extraction from card images."""

from bizcard.extractor.base import Extractor
from bizcard.extractor.gemini import GeminiExtractor, build_prompt, build_request_body

__all__ = ["Extractor", "GeminiExtractor", "build_prompt", "build_request_body"]
