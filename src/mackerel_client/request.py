"""
Typed request core.

Each entry point builds a URL, optionally encodes a JSON payload, dispatches
through the transport and decodes the body into ``result_type``. Passing
``NO_RESULT`` as the result type decodes on a best-effort basis and returns None.
The plain variants use the background context; the ``_context`` variants take
the caller's. Either way the client timeout bounds the whole call, body read
included.
"""

from __future__ import annotations

import json
import types
import typing
from functools import lru_cache
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import pydantic
from pydantic import BaseModel, TypeAdapter
from pydantic_core import PydanticSerializationError, to_json

from mackerel_client import transport
from mackerel_client.context import BACKGROUND, Context
from mackerel_client.errors import DecodeError, EncodingError, TransportError
from mackerel_client.urls import QueryParams

if TYPE_CHECKING:
    from mackerel_client.client import Client

T = TypeVar("T")

NO_RESULT: Any = None
_NO_BODY = object()


@lru_cache(maxsize=None)
def _adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


def zero_value(result_type: Any) -> Any:
    """The value a `null` body decodes to."""
    if result_type is Any or result_type is None:
        return None
    origin = typing.get_origin(result_type)
    if origin is typing.Union or origin is types.UnionType:
        return None
    if origin is not None:
        result_type = origin
    if isinstance(result_type, type) and issubclass(result_type, BaseModel):
        return result_type()
    try:
        return result_type()
    except TypeError:
        return None


def encode_payload(payload: Any) -> bytes:
    try:
        return to_json(payload, by_alias=True)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise EncodingError(f"cannot encode request body: {exc}") from exc


def _read_body(response: httpx.Response, ctx: Context) -> bytes:
    chunks = []
    for chunk in response.iter_bytes():
        if ctx.done():
            raise TransportError(f"reading response body cancelled: {ctx.cause()}") from ctx.cause()
        chunks.append(chunk)
    return b"".join(chunks)


def decode_body(body: bytes, result_type: Any) -> Any:
    """Decode the first JSON value in body into result_type.

    Trailing bytes after the value are ignored. A `null` value yields the
    zero value of result_type.
    """
    try:
        text = body.decode("utf-8").lstrip()
        value, _ = json.JSONDecoder().raw_decode(text)
    except (UnicodeDecodeError, ValueError) as exc:
        raise DecodeError(f"invalid JSON response body: {exc}") from exc

    if value is None:
        return zero_value(result_type)
    try:
        return _adapter(result_type).validate_python(value)
    except pydantic.ValidationError as exc:
        raise DecodeError(f"unexpected response shape: {exc}") from exc


def request_internal(
    ctx: Context,
    client: Client,
    method: str,
    path: str,
    result_type: Any,
    *,
    params: QueryParams = None,
    payload: Any = _NO_BODY,
) -> tuple[Any, httpx.Headers]:
    url = client._url_for(path, params)

    content = None
    if payload is not _NO_BODY:
        content = encode_payload(payload)

    headers = {}
    if content is not None or method != "GET":
        headers["Content-Type"] = "application/json"

    request = client.http_client.build_request(method, url, content=content, headers=headers)

    # One deadline covers dispatch, headers and the whole body read.
    call_ctx = ctx.with_timeout(client.timeout) if client.timeout is not None else ctx
    try:
        return _exchange(client, request, call_ctx, result_type)
    finally:
        if call_ctx is not ctx:
            # Releases the deadline timer and the link to the caller's context.
            call_ctx.cancel()


def _exchange(
    client: Client, request: httpx.Request, ctx: Context, result_type: Any
) -> tuple[Any, httpx.Headers]:
    response = transport.send(client, request, ctx)

    remove = ctx.add_done_callback(response.close) if ctx is not BACKGROUND else None
    try:
        try:
            body = _read_body(response, ctx)
        except (httpx.HTTPError, httpx.StreamError) as exc:
            if ctx.done():
                raise TransportError(f"reading response body cancelled: {ctx.cause()}") from ctx.cause()
            raise TransportError(f"reading response body: {exc}") from exc

        if result_type is NO_RESULT:
            try:
                decode_body(body, Any)
            except DecodeError:
                pass
            return None, response.headers
        return decode_body(body, result_type), response.headers
    finally:
        if remove is not None:
            remove()
        response.close()


def request_get(client: Client, path: str, result_type: type[T]) -> T:
    return request_get_context(BACKGROUND, client, path, result_type)


def request_get_context(ctx: Context, client: Client, path: str, result_type: type[T]) -> T:
    data, _ = request_internal(ctx, client, "GET", path, result_type)
    return data


def request_get_with_params(
    client: Client, path: str, params: QueryParams, result_type: type[T]
) -> T:
    return request_get_with_params_context(BACKGROUND, client, path, params, result_type)


def request_get_with_params_context(
    ctx: Context, client: Client, path: str, params: QueryParams, result_type: type[T]
) -> T:
    data, _ = request_internal(ctx, client, "GET", path, result_type, params=params)
    return data


def request_get_and_return_header(
    client: Client, path: str, result_type: type[T]
) -> tuple[T, httpx.Headers]:
    return request_get_and_return_header_context(BACKGROUND, client, path, result_type)


def request_get_and_return_header_context(
    ctx: Context, client: Client, path: str, result_type: type[T]
) -> tuple[T, httpx.Headers]:
    return request_internal(ctx, client, "GET", path, result_type)


def request_post(client: Client, path: str, payload: Any, result_type: type[T]) -> T:
    return request_post_context(BACKGROUND, client, path, payload, result_type)


def request_post_context(
    ctx: Context, client: Client, path: str, payload: Any, result_type: type[T]
) -> T:
    data, _ = request_internal(ctx, client, "POST", path, result_type, payload=payload)
    return data


def request_put(client: Client, path: str, payload: Any, result_type: type[T]) -> T:
    return request_put_context(BACKGROUND, client, path, payload, result_type)


def request_put_context(
    ctx: Context, client: Client, path: str, payload: Any, result_type: type[T]
) -> T:
    data, _ = request_internal(ctx, client, "PUT", path, result_type, payload=payload)
    return data


def request_delete(client: Client, path: str, result_type: type[T]) -> T:
    return request_delete_context(BACKGROUND, client, path, result_type)


def request_delete_context(ctx: Context, client: Client, path: str, result_type: type[T]) -> T:
    data, _ = request_internal(ctx, client, "DELETE", path, result_type)
    return data


def request_delete_with_body(client: Client, path: str, payload: Any, result_type: type[T]) -> T:
    return request_delete_with_body_context(BACKGROUND, client, path, payload, result_type)


def request_delete_with_body_context(
    ctx: Context, client: Client, path: str, payload: Any, result_type: type[T]
) -> T:
    data, _ = request_internal(ctx, client, "DELETE", path, result_type, payload=payload)
    return data
