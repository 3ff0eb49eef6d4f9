from __future__ import annotations

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import request_delete_context, request_get_context, request_post_context
from mackerel_client.resources.base import EVERY_FIELD, MackerelModel
from mackerel_client.urls import escape_path


class Role(MackerelModel):
    always_emit = EVERY_FIELD

    name: str = ""
    memo: str = ""


class CreateRoleParam(Role):
    pass


class _RolesEnvelope(MackerelModel):
    roles: list[Role] = Field(default_factory=list)


def _roles_path(service_name: str) -> str:
    return f"/api/v0/services/{escape_path(service_name)}/roles"


class RolesAPI:
    def find_roles(self, service_name: str) -> list[Role]:
        return self.find_roles_context(BACKGROUND, service_name)

    def find_roles_context(self, ctx: Context, service_name: str) -> list[Role]:
        return request_get_context(ctx, self, _roles_path(service_name), _RolesEnvelope).roles

    def create_role(self, service_name: str, param: CreateRoleParam) -> Role:
        return self.create_role_context(BACKGROUND, service_name, param)

    def create_role_context(self, ctx: Context, service_name: str, param: CreateRoleParam) -> Role:
        return request_post_context(ctx, self, _roles_path(service_name), param, Role)

    def delete_role(self, service_name: str, role_name: str) -> Role:
        return self.delete_role_context(BACKGROUND, service_name, role_name)

    def delete_role_context(self, ctx: Context, service_name: str, role_name: str) -> Role:
        path = f"{_roles_path(service_name)}/{escape_path(role_name)}"
        return request_delete_context(ctx, self, path, Role)
