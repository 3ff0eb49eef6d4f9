from __future__ import annotations

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import NO_RESULT, request_delete_with_body_context, request_post_context
from mackerel_client.resources.base import EVERY_FIELD, MackerelModel


class GraphDefsMetric(MackerelModel):
    always_emit = EVERY_FIELD

    name: str = ""
    display_name: str = ""
    is_stacked: bool = False


class GraphDefsParam(MackerelModel):
    always_emit = EVERY_FIELD

    name: str = ""
    display_name: str = ""
    unit: str = ""
    metrics: list[GraphDefsMetric] = Field(default_factory=list)


class GraphDefsAPI:
    def create_graph_defs(self, payloads: list[GraphDefsParam]) -> None:
        self.create_graph_defs_context(BACKGROUND, payloads)

    def create_graph_defs_context(self, ctx: Context, payloads: list[GraphDefsParam]) -> None:
        request_post_context(ctx, self, "/api/v0/graph-defs/create", list(payloads), NO_RESULT)

    def delete_graph_def(self, name: str) -> None:
        self.delete_graph_def_context(BACKGROUND, name)

    def delete_graph_def_context(self, ctx: Context, name: str) -> None:
        request_delete_with_body_context(ctx, self, "/api/v0/graph-defs", {"name": name}, NO_RESULT)
