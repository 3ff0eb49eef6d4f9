from __future__ import annotations

from typing import Any

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.errors import ValidationError
from mackerel_client.request import NO_RESULT, request_get_with_params_context, request_post_context
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class MetricValue(MackerelModel):
    name: str = ""
    time: int = 0
    value: Any = None


class HostMetricValue(MetricValue):
    host_id: str = ""


class ServiceMetricValue(MetricValue):
    pass


class MetricPoint(MackerelModel):
    time: int = 0
    value: float = 0


LatestMetricValues = dict[str, dict[str, MetricValue | None]]


class _LatestEnvelope(MackerelModel):
    tsdb_latest: LatestMetricValues = Field(default_factory=dict)


class _MetricPointsEnvelope(MackerelModel):
    metrics: list[MetricPoint] = Field(default_factory=list)


class MetricsAPI:
    def post_host_metric_values(self, values: list[HostMetricValue]) -> None:
        self.post_host_metric_values_context(BACKGROUND, values)

    def post_host_metric_values_context(self, ctx: Context, values: list[HostMetricValue]) -> None:
        request_post_context(ctx, self, "/api/v0/tsdb", list(values), NO_RESULT)

    def post_service_metric_values(self, service_name: str, values: list[ServiceMetricValue]) -> None:
        self.post_service_metric_values_context(BACKGROUND, service_name, values)

    def post_service_metric_values_context(
        self, ctx: Context, service_name: str, values: list[ServiceMetricValue]
    ) -> None:
        path = f"/api/v0/services/{escape_path(service_name)}/tsdb"
        request_post_context(ctx, self, path, list(values), NO_RESULT)

    def fetch_latest_metric_values(self, host_ids: list[str], metric_names: list[str]) -> LatestMetricValues:
        return self.fetch_latest_metric_values_context(BACKGROUND, host_ids, metric_names)

    def fetch_latest_metric_values_context(
        self, ctx: Context, host_ids: list[str], metric_names: list[str]
    ) -> LatestMetricValues:
        params = [("hostId", host_id) for host_id in host_ids]
        params.extend(("name", name) for name in metric_names)
        data = request_get_with_params_context(ctx, self, "/api/v0/tsdb/latest", params, _LatestEnvelope)
        return data.tsdb_latest

    def fetch_host_metric_values(self, host_id: str, name: str, from_: int, to: int) -> list[MetricPoint]:
        return self.fetch_host_metric_values_context(BACKGROUND, host_id, name, from_, to)

    def fetch_host_metric_values_context(
        self, ctx: Context, host_id: str, name: str, from_: int, to: int
    ) -> list[MetricPoint]:
        path = f"/api/v0/hosts/{escape_path(host_id)}/metrics"
        return self._fetch_metric_points(ctx, path, name, from_, to)

    def fetch_service_metric_values(
        self, service_name: str, name: str, from_: int, to: int
    ) -> list[MetricPoint]:
        return self.fetch_service_metric_values_context(BACKGROUND, service_name, name, from_, to)

    def fetch_service_metric_values_context(
        self, ctx: Context, service_name: str, name: str, from_: int, to: int
    ) -> list[MetricPoint]:
        path = f"/api/v0/services/{escape_path(service_name)}/metrics"
        return self._fetch_metric_points(ctx, path, name, from_, to)

    def fetch_metric_values(
        self,
        name: str,
        from_: int,
        to: int,
        *,
        host_id: str | None = None,
        service_name: str | None = None,
    ) -> list[MetricPoint]:
        return self.fetch_metric_values_context(
            BACKGROUND, name, from_, to, host_id=host_id, service_name=service_name
        )

    def fetch_metric_values_context(
        self,
        ctx: Context,
        name: str,
        from_: int,
        to: int,
        *,
        host_id: str | None = None,
        service_name: str | None = None,
    ) -> list[MetricPoint]:
        """Fetch points for exactly one of a host or a service."""
        if bool(host_id) == bool(service_name):
            raise ValidationError(
                "exactly one of host_id or service_name is required",
                {"host_id": host_id, "service_name": service_name},
            )
        if host_id:
            return self.fetch_host_metric_values_context(ctx, host_id, name, from_, to)
        return self.fetch_service_metric_values_context(ctx, service_name, name, from_, to)

    def _fetch_metric_points(
        self, ctx: Context, path: str, name: str, from_: int, to: int
    ) -> list[MetricPoint]:
        params = {"name": name, "from": from_, "to": to}
        return request_get_with_params_context(ctx, self, path, params, _MetricPointsEnvelope).metrics
