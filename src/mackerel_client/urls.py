from __future__ import annotations

from typing import Iterable, Mapping, Sequence, Union
from urllib.parse import SplitResult, quote, quote_plus, urlsplit, urlunsplit

from mackerel_client.errors import BadURLError

QueryValue = Union[str, int, float, bool]
QueryParams = Union[
    Mapping[str, Union[QueryValue, Sequence[QueryValue]]],
    Iterable[tuple[str, QueryValue]],
    None,
]


def parse_base_url(raw: str) -> SplitResult:
    """Parse and validate an absolute base URL."""
    try:
        parts = urlsplit(raw)
        # Port parsing is lazy; force it so a bad port fails here.
        parts.port
    except ValueError as exc:
        raise BadURLError(f"invalid base url: {raw!r}", {"url": raw}) from exc
    if not parts.scheme or not parts.netloc:
        raise BadURLError(f"invalid base url: {raw!r}", {"url": raw})
    return parts


def _format_value(value: QueryValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def query_items(params: QueryParams) -> list[tuple[str, str]]:
    """Flatten params into (key, value) pairs, preserving insertion order."""
    if not params:
        return []
    items: list[tuple[str, str]] = []
    pairs = params.items() if isinstance(params, Mapping) else params
    for key, value in pairs:
        if isinstance(value, (list, tuple)):
            items.extend((key, _format_value(v)) for v in value)
        else:
            items.append((key, _format_value(value)))
    return items


def encode_query(params: QueryParams) -> str:
    """Canonical query encoding: keys sorted, repeated keys kept in insertion order."""
    grouped: dict[str, list[str]] = {}
    for key, value in query_items(params):
        grouped.setdefault(key, []).append(value)
    return "&".join(
        f"{quote_plus(key)}={quote_plus(value)}"
        for key in sorted(grouped)
        for value in grouped[key]
    )


def escape_path(segment: str) -> str:
    """Percent-escape a single path segment ("/" included)."""
    return quote(str(segment), safe="$&+:=@")


def url_for(base: SplitResult, path: str, params: QueryParams = None) -> str:
    """Replace the base URL's path and query with path and params."""
    return urlunsplit((base.scheme, base.netloc, path, encode_query(params), ""))
