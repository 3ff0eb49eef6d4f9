from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Optional

from pydantic import Base64Bytes, Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.errors import MackerelError
from mackerel_client.pagination import paginate
from mackerel_client.request import request_get_context, request_post_context
from mackerel_client.resources.base import EVERY_FIELD, MackerelModel
from mackerel_client.urls import escape_path

DEFAULT_TRACES_PER_PAGE = 20


class TraceAttributeOperator(str, Enum):
    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"
    STARTS_WITH = "STARTS_WITH"


class TraceAttributeValueType(str, Enum):
    STRING = "string"
    INT = "int"
    DOUBLE = "double"
    BOOL = "bool"


class TraceOrderColumn(str, Enum):
    LATENCY = "LATENCY"
    START_AT = "START_AT"


class OrderDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class TraceAttributeFilter(MackerelModel):
    always_emit = EVERY_FIELD

    key: str = ""
    value: str = ""
    operator: TraceAttributeOperator = TraceAttributeOperator.EQ
    type: TraceAttributeValueType = TraceAttributeValueType.STRING


class TraceOrder(MackerelModel):
    always_emit = EVERY_FIELD

    column: TraceOrderColumn | None = None
    direction: OrderDirection | None = None


class ListTracesParam(MackerelModel):
    always_emit = frozenset({"serviceName", "from", "to"})

    service_name: str = ""
    service_namespace: str | None = None
    from_: int = Field(0, alias="from")
    to: int = 0
    environment: str | None = None
    trace_id: str | None = None
    span_name: str | None = None
    version: str | None = None
    issue_fingerprint: str | None = None
    min_latency_millis: int | None = None
    max_latency_millis: int | None = None
    attributes: list[TraceAttributeFilter] = Field(default_factory=list)
    resource_attributes: list[TraceAttributeFilter] = Field(default_factory=list)
    page: int | None = None
    per_page: int | None = None
    order: TraceOrder | None = None


class ListTracesResult(MackerelModel):
    trace_id: str = ""
    service_name: str = ""
    service_namespace: str = ""
    environment: str = ""
    title: str = ""
    trace_start_at: int = 0
    trace_latency_millis: int = 0
    service_start_at: int = 0
    service_latency_millis: int = 0


class ListTracesResponse(MackerelModel):
    results: list[ListTracesResult] = Field(default_factory=list)
    has_next_page: bool = False


class SpanKind(str, Enum):
    UNSPECIFIED = "unspecified"
    INTERNAL = "internal"
    SERVER = "server"
    CLIENT = "client"
    PRODUCER = "producer"
    CONSUMER = "consumer"


class StatusCode(str, Enum):
    UNSET = "unset"
    OK = "ok"
    ERROR = "error"


class AttributeValue(MackerelModel):
    """A typed attribute value; value_type names the populated field."""

    value_type: str = ""
    string_value: str = ""
    bool_value: bool = False
    int_value: int = 0
    double_value: float = 0
    array_value: list[AttributeValue] = Field(default_factory=list)
    kvlist_value: dict[str, AttributeValue] = Field(default_factory=dict)
    bytes_value: Base64Bytes = b""

    @property
    def value(self) -> Any:
        return {
            "string": self.string_value,
            "bool": self.bool_value,
            "int": self.int_value,
            "double": self.double_value,
            "array": self.array_value,
            "kvlist": self.kvlist_value,
            "bytes": self.bytes_value,
        }.get(self.value_type)


class Attribute(MackerelModel):
    key: str = ""
    value: AttributeValue | None = None


class Event(MackerelModel):
    time: datetime | None = None
    name: str = ""
    attributes: list[Attribute] = Field(default_factory=list)
    dropped_attributes_count: int = 0


class Link(MackerelModel):
    trace_id: str = ""
    span_id: str = ""
    trace_state: str = ""
    attributes: list[Attribute] = Field(default_factory=list)
    dropped_attributes_count: int = 0


class Status(MackerelModel):
    message: str = ""
    code: StatusCode = StatusCode.UNSET


class Resource(MackerelModel):
    attributes: list[Attribute] = Field(default_factory=list)
    dropped_attributes_count: int = 0


class Scope(MackerelModel):
    name: str = ""
    version: str = ""
    attributes: list[Attribute] = Field(default_factory=list)
    dropped_attributes_count: int = 0


class Span(MackerelModel):
    trace_id: str = ""
    span_id: str = ""
    trace_state: str = ""
    parent_span_id: str = ""
    name: str = ""
    kind: SpanKind = SpanKind.UNSPECIFIED
    start_time: datetime | None = None
    end_time: datetime | None = None
    attributes: list[Attribute] = Field(default_factory=list)
    dropped_attributes_count: int = 0
    events: list[Event] = Field(default_factory=list)
    dropped_events_count: int = 0
    links: list[Link] = Field(default_factory=list)
    dropped_links_count: int = 0
    status: Status | None = None
    resource: Resource | None = None
    scope: Scope | None = None


class TraceResponse(MackerelModel):
    spans: list[Span] = Field(default_factory=list)


class TracesAPI:
    def list_traces(self, param: ListTracesParam) -> ListTracesResponse:
        return self.list_traces_context(BACKGROUND, param)

    def list_traces_context(self, ctx: Context, param: ListTracesParam) -> ListTracesResponse:
        return request_post_context(ctx, self, "/api/v0/traces", param, ListTracesResponse)

    def iter_traces(
        self, param: ListTracesParam
    ) -> Iterator[tuple[Optional[ListTracesResult], Optional[MackerelError]]]:
        return self.iter_traces_context(BACKGROUND, param)

    def iter_traces_context(
        self, ctx: Context, param: ListTracesParam
    ) -> Iterator[tuple[Optional[ListTracesResult], Optional[MackerelError]]]:
        """Iterate trace listings across pages.

        Starts at param.page (or 1) and requests DEFAULT_TRACES_PER_PAGE results
        per page unless param.per_page is set. param itself is not modified.
        """
        per_page = param.per_page if param.per_page is not None else DEFAULT_TRACES_PER_PAGE

        def fetch(ctx: Context, page: int) -> tuple[list[ListTracesResult], bool]:
            page_param = param.model_copy(update={"page": page, "per_page": per_page})
            result = self.list_traces_context(ctx, page_param)
            return result.results, result.has_next_page

        return paginate(ctx, fetch, start_page=param.page if param.page is not None else 1)

    def get_trace(self, trace_id: str) -> TraceResponse:
        return self.get_trace_context(BACKGROUND, trace_id)

    def get_trace_context(self, ctx: Context, trace_id: str) -> TraceResponse:
        return request_get_context(ctx, self, f"/api/v0/traces/{escape_path(trace_id)}", TraceResponse)
