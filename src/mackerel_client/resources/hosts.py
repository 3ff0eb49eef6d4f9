from __future__ import annotations

from typing import Any

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import (
    NO_RESULT,
    request_get_context,
    request_get_with_params_context,
    request_post_context,
    request_put_context,
)
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class Interface(MackerelModel):
    name: str = ""
    ip_address: str = ""
    ipv4_addresses: list[str] = Field(default_factory=list)
    ipv6_addresses: list[str] = Field(default_factory=list)
    mac_address: str = ""


class HostMeta(MackerelModel):
    agent_revision: str = Field("", alias="agent-revision")
    agent_version: str = Field("", alias="agent-version")
    block_device: dict[str, dict[str, Any]] = Field(default_factory=dict, alias="block_device")
    cpu: list[dict[str, Any]] = Field(default_factory=list)
    filesystem: dict[str, Any] = Field(default_factory=dict)
    kernel: dict[str, str] = Field(default_factory=dict)
    memory: dict[str, str] = Field(default_factory=dict)
    cloud: dict[str, Any] | None = None


class Host(MackerelModel):
    id: str = ""
    name: str = ""
    display_name: str = ""
    custom_identifier: str = ""
    type: str = ""
    status: str = ""
    memo: str = ""
    roles: dict[str, list[str]] = Field(default_factory=dict)
    role_fullnames: list[str] = Field(default_factory=list)
    is_retired: bool = False
    created_at: int = 0
    meta: HostMeta = Field(default_factory=HostMeta)
    interfaces: list[Interface] = Field(default_factory=list)

    def get_role_fullnames(self) -> list[str]:
        """Roles flattened to "service:role" strings."""
        return [f"{service}:{role}" for service, roles in self.roles.items() for role in roles]


class CheckConfig(MackerelModel):
    name: str = ""
    memo: str = ""


class CreateHostParam(MackerelModel):
    name: str = ""
    display_name: str = ""
    custom_identifier: str = ""
    meta: HostMeta = Field(default_factory=HostMeta)
    interfaces: list[Interface] = Field(default_factory=list)
    role_fullnames: list[str] = Field(default_factory=list)
    checks: list[CheckConfig] = Field(default_factory=list)


class UpdateHostParam(CreateHostParam):
    pass


class FindHostsParam(MackerelModel):
    service: str = ""
    roles: list[str] = Field(default_factory=list)
    name: str = ""
    statuses: list[str] = Field(default_factory=list)
    custom_identifier: str = ""

    def query(self) -> list[tuple[str, str]]:
        params = []
        if self.service:
            params.append(("service", self.service))
        params.extend(("role", role) for role in self.roles)
        if self.name:
            params.append(("name", self.name))
        params.extend(("status", status) for status in self.statuses)
        if self.custom_identifier:
            params.append(("customIdentifier", self.custom_identifier))
        return params


class FindHostByCustomIdentifierParam(MackerelModel):
    case_insensitive: bool = False


class MonitoredStatusDetail(MackerelModel):
    type: str = ""
    message: str = ""
    memo: str = ""


class MonitoredStatus(MackerelModel):
    monitor_id: str = ""
    status: str = ""
    detail: MonitoredStatusDetail = Field(default_factory=MonitoredStatusDetail)


class _HostEnvelope(MackerelModel):
    host: Host | None = None


class _HostsEnvelope(MackerelModel):
    hosts: list[Host] = Field(default_factory=list)


class _IDEnvelope(MackerelModel):
    id: str = ""


class _NamesEnvelope(MackerelModel):
    names: list[str] = Field(default_factory=list)


class _MonitoredStatusesEnvelope(MackerelModel):
    monitored_statuses: list[MonitoredStatus] = Field(default_factory=list)


class HostsAPI:
    """Host operations."""

    def find_host(self, host_id: str) -> Host | None:
        return self.find_host_context(BACKGROUND, host_id)

    def find_host_context(self, ctx: Context, host_id: str) -> Host | None:
        path = f"/api/v0/hosts/{escape_path(host_id)}"
        return request_get_context(ctx, self, path, _HostEnvelope).host

    def find_hosts(self, param: FindHostsParam | None = None) -> list[Host]:
        return self.find_hosts_context(BACKGROUND, param)

    def find_hosts_context(self, ctx: Context, param: FindHostsParam | None = None) -> list[Host]:
        params = (param or FindHostsParam()).query()
        return request_get_with_params_context(ctx, self, "/api/v0/hosts", params, _HostsEnvelope).hosts

    def find_host_by_custom_identifier(
        self, custom_identifier: str, param: FindHostByCustomIdentifierParam | None = None
    ) -> Host | None:
        return self.find_host_by_custom_identifier_context(BACKGROUND, custom_identifier, param)

    def find_host_by_custom_identifier_context(
        self,
        ctx: Context,
        custom_identifier: str,
        param: FindHostByCustomIdentifierParam | None = None,
    ) -> Host | None:
        path = f"/api/v0/hosts-by-custom-identifier/{escape_path(custom_identifier)}"
        params = {}
        if param is not None and param.case_insensitive:
            params["caseInsensitive"] = "true"
        return request_get_with_params_context(ctx, self, path, params, _HostEnvelope).host

    def create_host(self, param: CreateHostParam) -> str:
        """Register a host and return its ID."""
        return self.create_host_context(BACKGROUND, param)

    def create_host_context(self, ctx: Context, param: CreateHostParam) -> str:
        return request_post_context(ctx, self, "/api/v0/hosts", param, _IDEnvelope).id

    def update_host(self, host_id: str, param: UpdateHostParam) -> str:
        return self.update_host_context(BACKGROUND, host_id, param)

    def update_host_context(self, ctx: Context, host_id: str, param: UpdateHostParam) -> str:
        path = f"/api/v0/hosts/{escape_path(host_id)}"
        return request_put_context(ctx, self, path, param, _IDEnvelope).id

    def update_host_status(self, host_id: str, status: str) -> None:
        self.update_host_status_context(BACKGROUND, host_id, status)

    def update_host_status_context(self, ctx: Context, host_id: str, status: str) -> None:
        path = f"/api/v0/hosts/{escape_path(host_id)}/status"
        request_post_context(ctx, self, path, {"status": status}, NO_RESULT)

    def bulk_update_host_statuses(self, ids: list[str], status: str) -> None:
        self.bulk_update_host_statuses_context(BACKGROUND, ids, status)

    def bulk_update_host_statuses_context(self, ctx: Context, ids: list[str], status: str) -> None:
        payload = {"ids": list(ids), "status": status}
        request_post_context(ctx, self, "/api/v0/hosts/bulk-update-statuses", payload, NO_RESULT)

    def update_host_role_fullnames(self, host_id: str, role_fullnames: list[str]) -> None:
        self.update_host_role_fullnames_context(BACKGROUND, host_id, role_fullnames)

    def update_host_role_fullnames_context(
        self, ctx: Context, host_id: str, role_fullnames: list[str]
    ) -> None:
        path = f"/api/v0/hosts/{escape_path(host_id)}/role-fullnames"
        request_put_context(ctx, self, path, {"roleFullnames": list(role_fullnames)}, NO_RESULT)

    def retire_host(self, host_id: str) -> None:
        self.retire_host_context(BACKGROUND, host_id)

    def retire_host_context(self, ctx: Context, host_id: str) -> None:
        path = f"/api/v0/hosts/{escape_path(host_id)}/retire"
        request_post_context(ctx, self, path, {}, NO_RESULT)

    def bulk_retire_hosts(self, ids: list[str]) -> None:
        self.bulk_retire_hosts_context(BACKGROUND, ids)

    def bulk_retire_hosts_context(self, ctx: Context, ids: list[str]) -> None:
        request_post_context(ctx, self, "/api/v0/hosts/bulk-retire", {"ids": list(ids)}, NO_RESULT)

    def list_host_metric_names(self, host_id: str) -> list[str]:
        return self.list_host_metric_names_context(BACKGROUND, host_id)

    def list_host_metric_names_context(self, ctx: Context, host_id: str) -> list[str]:
        path = f"/api/v0/hosts/{escape_path(host_id)}/metric-names"
        return request_get_context(ctx, self, path, _NamesEnvelope).names

    def list_monitored_statuses(self, host_id: str) -> list[MonitoredStatus]:
        return self.list_monitored_statuses_context(BACKGROUND, host_id)

    def list_monitored_statuses_context(self, ctx: Context, host_id: str) -> list[MonitoredStatus]:
        path = f"/api/v0/hosts/{escape_path(host_id)}/monitored-statuses"
        return request_get_context(ctx, self, path, _MonitoredStatusesEnvelope).monitored_statuses
