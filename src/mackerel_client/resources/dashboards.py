from __future__ import annotations

from typing import Any

from pydantic import Field, model_serializer

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import (
    request_delete_context,
    request_get_context,
    request_post_context,
    request_put_context,
)
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class Metric(MackerelModel):
    """A value widget's metric. An empty type encodes as null."""

    type: str = ""
    name: str = ""
    host_id: str = ""
    service_name: str = ""
    expression: str = ""
    query: str = ""
    legend: str = ""

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        if not self.type:
            return None
        if self.type == "query":
            return {"type": self.type, "query": self.query, "legend": self.legend}
        return self._prune(handler(self))


class Graph(MackerelModel):
    """A graph widget's graph. An empty type encodes as null."""

    type: str = ""
    name: str = ""
    host_id: str = ""
    role_fullname: str = ""
    is_stacked: bool = False
    service_name: str = ""
    expression: str = ""
    query: str = ""
    legend: str = ""

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        if not self.type:
            return None
        if self.type == "query":
            return {"type": self.type, "query": self.query, "legend": self.legend}
        return self._prune(handler(self))


class Range(MackerelModel):
    type: str = ""
    period: int = 0
    offset: int = 0
    start: int = 0
    end: int = 0

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        if self.type == "relative":
            return {"type": self.type, "period": self.period, "offset": self.offset}
        if self.type == "absolute":
            return {"type": self.type, "start": self.start, "end": self.end}
        if not self.type:
            return None
        return self._prune(handler(self))


class Layout(MackerelModel):
    always_emit = frozenset({"x", "y"})

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0


class Widget(MackerelModel):
    always_emit = frozenset({"title"})

    type: str = ""
    title: str = ""
    layout: Layout = Field(default_factory=Layout)
    metric: Metric = Field(default_factory=Metric)
    graph: Graph = Field(default_factory=Graph)
    range: Range = Field(default_factory=Range)
    markdown: str = ""


class Dashboard(MackerelModel):
    """A dashboard. Legacy dashboards carry body_markdown instead of widgets."""

    always_emit = frozenset({"memo"})

    id: str = ""
    title: str = ""
    url_path: str = ""
    created_at: int = 0
    updated_at: int = 0
    memo: str = ""
    widgets: list[Widget] = Field(default_factory=list)
    is_legacy: bool = False
    body_markdown: str = ""


class _DashboardsEnvelope(MackerelModel):
    dashboards: list[Dashboard] = Field(default_factory=list)


def _dashboard_path(dashboard_id: str) -> str:
    return f"/api/v0/dashboards/{escape_path(dashboard_id)}"


class DashboardsAPI:
    def find_dashboards(self) -> list[Dashboard]:
        return self.find_dashboards_context(BACKGROUND)

    def find_dashboards_context(self, ctx: Context) -> list[Dashboard]:
        return request_get_context(ctx, self, "/api/v0/dashboards", _DashboardsEnvelope).dashboards

    def find_dashboard(self, dashboard_id: str) -> Dashboard:
        return self.find_dashboard_context(BACKGROUND, dashboard_id)

    def find_dashboard_context(self, ctx: Context, dashboard_id: str) -> Dashboard:
        return request_get_context(ctx, self, _dashboard_path(dashboard_id), Dashboard)

    def create_dashboard(self, param: Dashboard) -> Dashboard:
        return self.create_dashboard_context(BACKGROUND, param)

    def create_dashboard_context(self, ctx: Context, param: Dashboard) -> Dashboard:
        return request_post_context(ctx, self, "/api/v0/dashboards", param, Dashboard)

    def update_dashboard(self, dashboard_id: str, param: Dashboard) -> Dashboard:
        return self.update_dashboard_context(BACKGROUND, dashboard_id, param)

    def update_dashboard_context(self, ctx: Context, dashboard_id: str, param: Dashboard) -> Dashboard:
        return request_put_context(ctx, self, _dashboard_path(dashboard_id), param, Dashboard)

    def delete_dashboard(self, dashboard_id: str) -> Dashboard:
        return self.delete_dashboard_context(BACKGROUND, dashboard_id)

    def delete_dashboard_context(self, ctx: Context, dashboard_id: str) -> Dashboard:
        return request_delete_context(ctx, self, _dashboard_path(dashboard_id), Dashboard)
