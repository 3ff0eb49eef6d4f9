"""
Error types raised by the Mackerel client.

Every failure surfaces to the immediate caller with its kind intact:

- BadURLError: the configured base URL cannot be parsed
- EncodingError: a request payload could not be serialized to JSON
- TransportError: network I/O, DNS, timeout or cancellation
- DecodeError: the response body is not valid JSON for the expected shape
- APIError: the server answered with a non-2xx status
- ValidationError: a wire value could not be translated (enum labels, argument choices)
"""

from __future__ import annotations

import json
from typing import Any


class MackerelError(Exception):
    """Base exception for Mackerel client errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BadURLError(MackerelError):
    """Raised when the base URL is not parseable."""


class EncodingError(MackerelError):
    """Raised when a request body cannot be encoded as JSON."""


class TransportError(MackerelError):
    """Raised for network failures, timeouts and cancellation."""


class DecodeError(TransportError):
    """Raised when a response body does not decode into the expected shape."""


class APIError(MackerelError):
    """Raised when the API responds with a status outside 200-299."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message, {"status_code": status_code})
        self.status_code = status_code

    def __str__(self) -> str:
        return f"API request failed: {self.message}"

    def __repr__(self) -> str:
        return f"APIError(status_code={self.status_code!r}, message={self.message!r})"


class ValidationError(MackerelError):
    """Raised when a value cannot be translated to or from its wire form.

    Not a ValueError subclass, so it is not swallowed by pydantic validators.
    """


class UnknownMonitorTypeError(ValidationError):
    """Raised when a monitor payload carries an unrecognized type."""

    def __init__(self, monitor_type: str):
        super().__init__(f"unknown monitor type: {monitor_type}", {"type": monitor_type})
        self.monitor_type = monitor_type


def extract_error_message(body: bytes) -> str:
    """Best-effort message extraction from a JSON error body.

    Accepts ``{"error": {"message": "..."}}`` and ``{"error": "..."}``.
    Anything else yields an empty string.
    """
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return ""
    if not isinstance(data, dict):
        return ""

    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return message if isinstance(message, str) else ""
    if isinstance(error, str):
        return error
    return ""
