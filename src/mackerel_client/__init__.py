"""Client library for the Mackerel monitoring service REST API."""

from mackerel_client.client import Client, new_client, new_client_from_settings, new_client_with_options
from mackerel_client.context import BACKGROUND, Cancelled, Context, DeadlineExceeded
from mackerel_client.errors import (
    APIError,
    BadURLError,
    DecodeError,
    EncodingError,
    MackerelError,
    TransportError,
    UnknownMonitorTypeError,
    ValidationError,
)
from mackerel_client.logging import Logger, PrioritizedLogger, StreamLogger, StructlogPrioritizedLogger
from mackerel_client.pagination import paginate

__version__ = "0.1.0"

__all__ = [
    "APIError",
    "BACKGROUND",
    "BadURLError",
    "Cancelled",
    "Client",
    "Context",
    "DeadlineExceeded",
    "DecodeError",
    "EncodingError",
    "Logger",
    "MackerelError",
    "PrioritizedLogger",
    "StreamLogger",
    "StructlogPrioritizedLogger",
    "TransportError",
    "UnknownMonitorTypeError",
    "ValidationError",
    "new_client",
    "new_client_from_settings",
    "new_client_with_options",
    "paginate",
]
