import json

import respx
from httpx import Response

from mackerel_client import BACKGROUND, APIError, TransportError, paginate
from mackerel_client.resources.traces import ListTracesParam

BASE = "https://api.example.com"


def pages(*contents):
    calls = []

    def fetch(ctx, page):
        calls.append(page)
        result = contents[page - 1]
        if isinstance(result, Exception):
            raise result
        return result

    return fetch, calls


def test_walks_pages_until_no_next_page():
    fetch, calls = pages((["a", "b"], True), (["c"], False))
    assert list(paginate(BACKGROUND, fetch)) == [("a", None), ("b", None), ("c", None)]
    assert calls == [1, 2]


def test_error_is_yielded_once_and_ends_sequence():
    error = TransportError("connection reset")
    fetch, calls = pages((["a"], True), error, (["never"], False))
    assert list(paginate(BACKGROUND, fetch)) == [("a", None), (None, error)]
    assert calls == [1, 2]


def test_start_page():
    fetch, calls = pages((["skipped"], True), (["x"], False))
    assert list(paginate(BACKGROUND, fetch, start_page=2)) == [("x", None)]
    assert calls == [2]


def test_cancellation_stops_at_next_yield():
    ctx = BACKGROUND.with_cancel()
    fetch, calls = pages((["a", "b"], True), (["c"], False))
    seen = []
    for item, err in paginate(ctx, fetch):
        seen.append(item)
        ctx.cancel()
    assert seen == ["a"]
    assert calls == [1]


def test_early_break_fetches_no_more_pages():
    fetch, calls = pages((["a"], True), (["b"], True), (["c"], False))
    for item, err in paginate(BACKGROUND, fetch):
        break
    assert calls == [1]


def test_each_invocation_is_independent():
    fetch, calls = pages((["a"], False))
    assert list(paginate(BACKGROUND, fetch)) == list(paginate(BACKGROUND, fetch))
    assert calls == [1, 1]


def trace_result(trace_id):
    return {
        "traceId": trace_id,
        "serviceName": "web",
        "serviceNamespace": "",
        "environment": "production",
        "title": "GET /",
        "traceStartAt": 1700000000,
        "traceLatencyMillis": 12,
        "serviceStartAt": 1700000000,
        "serviceLatencyMillis": 10,
    }


def test_iter_traces_across_pages(client):
    with respx.mock:
        route = respx.post(f"{BASE}/api/v0/traces")
        route.side_effect = [
            Response(200, json={"results": [trace_result("t1")], "hasNextPage": True}),
            Response(200, json={"results": [trace_result("t2")], "hasNextPage": False}),
        ]

        param = ListTracesParam(service_name="web", from_=1, to=2)
        results = list(client.iter_traces(param))

    assert [(item.trace_id, err) for item, err in results] == [("t1", None), ("t2", None)]
    bodies = [json.loads(call.request.content) for call in route.calls]
    assert [(body["page"], body["perPage"]) for body in bodies] == [(1, 20), (2, 20)]
    assert bodies[0]["serviceName"] == "web"
    assert param.page is None


def test_iter_traces_starts_at_caller_page(client):
    with respx.mock:
        route = respx.post(f"{BASE}/api/v0/traces").mock(
            return_value=Response(200, json={"results": [], "hasNextPage": False})
        )
        list(client.iter_traces(ListTracesParam(service_name="web", page=3, per_page=5)))

    body = json.loads(route.calls.last.request.content)
    assert (body["page"], body["perPage"]) == (3, 5)


def test_iter_traces_yields_api_error(client):
    with respx.mock:
        respx.post(f"{BASE}/api/v0/traces").mock(
            return_value=Response(400, json={"error": {"message": "invalid range"}})
        )
        results = list(client.iter_traces(ListTracesParam(service_name="web")))

    assert len(results) == 1
    item, err = results[0]
    assert item is None
    assert isinstance(err, APIError)
    assert err.message == "invalid range"
