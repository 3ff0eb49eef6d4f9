"""
Transport envelope: header injection, dispatch, tracing and status classification.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import TYPE_CHECKING

import httpx
import structlog

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.errors import APIError, TransportError, extract_error_message

if TYPE_CHECKING:
    from mackerel_client.client import Client

logger = structlog.get_logger()

_REQUIRED_HEADERS = ("x-api-key", "user-agent")


def build_request(client: Client, request: httpx.Request) -> httpx.Request:
    """Attach additional headers, then the API key and user agent.

    Additional headers replace same-named headers on the request, such as the
    httpx defaults for Accept. A Content-Type already set for the body is kept.
    """
    protected = set(_REQUIRED_HEADERS)
    if "content-type" in request.headers:
        protected.add("content-type")
    additional = [
        (key, value)
        for key, value in httpx.Headers(client.additional_headers).multi_items()
        if key.lower() not in protected
    ]
    replaced = {key.lower() for key, _ in additional}
    items = [
        (key, value)
        for key, value in request.headers.multi_items()
        if key.lower() not in _REQUIRED_HEADERS and key.lower() not in replaced
    ]
    items.extend(additional)
    items.append(("X-Api-Key", client.api_key))
    items.append(("User-Agent", client.user_agent))
    request.headers = httpx.Headers(items)
    return request


def dump_request(request: httpx.Request) -> str:
    """Render a request as it goes on the wire."""
    target = request.url.raw_path.decode("ascii")
    lines = [f"{request.method} {target} HTTP/1.1"]
    lines.extend(f"{key}: {value}" for key, value in request.headers.multi_items())
    body = request.content.decode("utf-8", errors="replace")
    return "\r\n".join(lines) + "\r\n\r\n" + body


def dump_response(response: httpx.Response) -> str:
    """Render a response (headers and already-read body)."""
    lines = [f"{response.http_version} {status_line(response)}"]
    lines.extend(f"{key}: {value}" for key, value in response.headers.multi_items())
    body = response.content.decode("utf-8", errors="replace")
    return "\r\n".join(lines) + "\r\n\r\n" + body


def status_line(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def _timeout_for(client: Client, ctx: Context) -> httpx.Timeout:
    seconds = client.timeout
    remaining = ctx.remaining()
    if remaining is not None:
        seconds = remaining if seconds is None else min(seconds, remaining)
    return httpx.Timeout(seconds)


def _cancelled(ctx: Context, where: str) -> TransportError:
    cause = ctx.cause()
    error = TransportError(f"request {where}: {cause}", {"cause": cause})
    error.__cause__ = cause
    return error


def _send_cancellable(client: Client, request: httpx.Request, ctx: Context) -> httpx.Response:
    """Send on a worker thread so the caller can stop waiting on cancellation.

    An abandoned send keeps its pooled connection until the server answers or
    the transport timeout fires; the late response is then closed.
    """
    future: Future[httpx.Response] = Future()
    wake = threading.Event()

    def run() -> None:
        try:
            future.set_result(client.http_client.send(request, stream=True))
        except BaseException as exc:
            future.set_exception(exc)
        finally:
            wake.set()

    remove = ctx.add_done_callback(wake.set)
    threading.Thread(target=run, name="mackerel-client-send", daemon=True).start()
    try:
        wake.wait()
    finally:
        remove()

    if not future.done():
        # Abandoned: close the response whenever it arrives.
        future.add_done_callback(_close_abandoned)
        raise _cancelled(ctx, "cancelled before response headers")
    return future.result()


def _close_abandoned(future: Future[httpx.Response]) -> None:
    if future.exception() is None:
        future.result().close()


def send(client: Client, request: httpx.Request, ctx: Context = BACKGROUND) -> httpx.Response:
    """Dispatch a prepared request and classify the response.

    Returns the open streamed response for 2xx statuses; the caller must close
    it. Other statuses are read, closed and raised as APIError.
    """
    request = build_request(client, request)
    if ctx.done():
        raise _cancelled(ctx, "cancelled before dispatch")

    request.extensions["timeout"] = _timeout_for(client, ctx).as_dict()

    if client.verbose:
        client._tracef("%s", dump_request(request))

    try:
        if ctx is BACKGROUND:
            response = client.http_client.send(request, stream=True)
        else:
            response = _send_cancellable(client, request, ctx)
    except httpx.HTTPError as exc:
        if ctx.done():
            raise _cancelled(ctx, "cancelled") from exc
        raise TransportError(f"{request.method} {request.url}: {exc}", {"url": str(request.url)}) from exc

    if client.verbose:
        try:
            response.read()
        except httpx.HTTPError as exc:
            response.close()
            raise TransportError(f"reading response body: {exc}") from exc
        client._tracef("%s", dump_response(response))

    if response.is_success:
        return response

    try:
        body = response.read()
    except httpx.HTTPError:
        body = b""
    finally:
        response.close()

    message = extract_error_message(body) or status_line(response)
    raise APIError(response.status_code, message)
