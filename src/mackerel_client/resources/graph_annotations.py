from __future__ import annotations

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import (
    request_delete_context,
    request_get_with_params_context,
    request_post_context,
    request_put_context,
)
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class GraphAnnotation(MackerelModel):
    id: str = ""
    service: str = ""
    roles: list[str] = Field(default_factory=list)
    from_: int = Field(0, alias="from")
    to: int = 0
    title: str = ""
    description: str = ""


class _GraphAnnotationsEnvelope(MackerelModel):
    graph_annotations: list[GraphAnnotation] = Field(default_factory=list)


_PATH = "/api/v0/graph-annotations"


class GraphAnnotationsAPI:
    def create_graph_annotation(self, annotation: GraphAnnotation) -> GraphAnnotation:
        return self.create_graph_annotation_context(BACKGROUND, annotation)

    def create_graph_annotation_context(
        self, ctx: Context, annotation: GraphAnnotation
    ) -> GraphAnnotation:
        return request_post_context(ctx, self, _PATH, annotation, GraphAnnotation)

    def find_graph_annotations(self, service: str, from_: int, to: int) -> list[GraphAnnotation]:
        return self.find_graph_annotations_context(BACKGROUND, service, from_, to)

    def find_graph_annotations_context(
        self, ctx: Context, service: str, from_: int, to: int
    ) -> list[GraphAnnotation]:
        params = {"service": service, "from": from_, "to": to}
        data = request_get_with_params_context(ctx, self, _PATH, params, _GraphAnnotationsEnvelope)
        return data.graph_annotations

    def update_graph_annotation(self, annotation_id: str, annotation: GraphAnnotation) -> GraphAnnotation:
        return self.update_graph_annotation_context(BACKGROUND, annotation_id, annotation)

    def update_graph_annotation_context(
        self, ctx: Context, annotation_id: str, annotation: GraphAnnotation
    ) -> GraphAnnotation:
        path = f"{_PATH}/{escape_path(annotation_id)}"
        return request_put_context(ctx, self, path, annotation, GraphAnnotation)

    def delete_graph_annotation(self, annotation_id: str) -> GraphAnnotation:
        return self.delete_graph_annotation_context(BACKGROUND, annotation_id)

    def delete_graph_annotation_context(self, ctx: Context, annotation_id: str) -> GraphAnnotation:
        path = f"{_PATH}/{escape_path(annotation_id)}"
        return request_delete_context(ctx, self, path, GraphAnnotation)
