from __future__ import annotations

from typing import Iterator, Optional

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.errors import MackerelError
from mackerel_client.pagination import paginate
from mackerel_client.request import request_get_with_params_context
from mackerel_client.resources.base import MackerelModel


class HTTPServerStats(MackerelModel):
    method: str = ""
    route: str = ""
    total_millis: float = 0
    average_millis: float = 0
    approx_p95_millis: float = Field(0, alias="approxP95Millis")
    error_rate_percentage: float = 0
    request_count: int = 0


class HTTPServerStatsPage(MackerelModel):
    results: list[HTTPServerStats] = Field(default_factory=list)
    has_next_page: bool = False


class ListHTTPServerStatsParam(MackerelModel):
    service_name: str = ""
    from_: int = Field(0, alias="from")
    to: int = 0
    service_namespace: str | None = None
    environment: str | None = None
    version: str | None = None
    order_column: str | None = None
    order_direction: str | None = None
    method: str | None = None
    route: str | None = None
    page: int | None = None
    per_page: int | None = None

    def query(self) -> dict[str, str | int]:
        """Query parameters; optional values are sent only when set."""
        params: dict[str, str | int] = {
            "serviceName": self.service_name,
            "from": self.from_,
            "to": self.to,
        }
        for name, field in type(self).model_fields.items():
            if field.alias in params:
                continue
            value = getattr(self, name)
            if value is not None:
                params[field.alias] = value
        return params


class APMAPI:
    def list_http_server_stats(self, param: ListHTTPServerStatsParam) -> HTTPServerStatsPage:
        return self.list_http_server_stats_context(BACKGROUND, param)

    def list_http_server_stats_context(
        self, ctx: Context, param: ListHTTPServerStatsParam
    ) -> HTTPServerStatsPage:
        path = "/api/v0/apm/http-server-stats"
        return request_get_with_params_context(ctx, self, path, param.query(), HTTPServerStatsPage)

    def iter_http_server_stats(
        self, param: ListHTTPServerStatsParam
    ) -> Iterator[tuple[Optional[HTTPServerStats], Optional[MackerelError]]]:
        return self.iter_http_server_stats_context(BACKGROUND, param)

    def iter_http_server_stats_context(
        self, ctx: Context, param: ListHTTPServerStatsParam
    ) -> Iterator[tuple[Optional[HTTPServerStats], Optional[MackerelError]]]:
        def fetch(ctx: Context, page: int) -> tuple[list[HTTPServerStats], bool]:
            result = self.list_http_server_stats_context(ctx, param.model_copy(update={"page": page}))
            return result.results, result.has_next_page

        return paginate(ctx, fetch, start_page=param.page or 1)
