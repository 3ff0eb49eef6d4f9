from __future__ import annotations

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import request_delete_context, request_get_context, request_post_context
from mackerel_client.resources.base import EVERY_FIELD, MackerelModel
from mackerel_client.urls import escape_path


class Service(MackerelModel):
    always_emit = EVERY_FIELD

    name: str = ""
    memo: str = ""
    roles: list[str] = Field(default_factory=list)


class CreateServiceParam(MackerelModel):
    always_emit = EVERY_FIELD

    name: str = ""
    memo: str = ""


class _ServicesEnvelope(MackerelModel):
    services: list[Service] = Field(default_factory=list)


class _NamesEnvelope(MackerelModel):
    names: list[str] = Field(default_factory=list)


class ServicesAPI:
    def find_services(self) -> list[Service]:
        return self.find_services_context(BACKGROUND)

    def find_services_context(self, ctx: Context) -> list[Service]:
        return request_get_context(ctx, self, "/api/v0/services", _ServicesEnvelope).services

    def create_service(self, param: CreateServiceParam) -> Service:
        return self.create_service_context(BACKGROUND, param)

    def create_service_context(self, ctx: Context, param: CreateServiceParam) -> Service:
        return request_post_context(ctx, self, "/api/v0/services", param, Service)

    def delete_service(self, service_name: str) -> Service:
        return self.delete_service_context(BACKGROUND, service_name)

    def delete_service_context(self, ctx: Context, service_name: str) -> Service:
        path = f"/api/v0/services/{escape_path(service_name)}"
        return request_delete_context(ctx, self, path, Service)

    def list_service_metric_names(self, service_name: str) -> list[str]:
        return self.list_service_metric_names_context(BACKGROUND, service_name)

    def list_service_metric_names_context(self, ctx: Context, service_name: str) -> list[str]:
        path = f"/api/v0/services/{escape_path(service_name)}/metric-names"
        return request_get_context(ctx, self, path, _NamesEnvelope).names
