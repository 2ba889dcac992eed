"""Error types raised by the business card client."""

from typing import Any, Literal


class BusinessCardError(Exception):
    """Base class for errors raised by bizcard."""

    kind: Literal["config", "backend"]


class ConfigError(BusinessCardError, ValueError):
    """A required input is missing. Raised before any I/O."""

    kind = "config"


class BackendError(BusinessCardError):
    """The Gemini backend returned a response that could not be used."""

    kind = "backend"

    def __init__(self, message: str, response_data: Any = None):
        super().__init__(message)
        self.response_data = response_data
