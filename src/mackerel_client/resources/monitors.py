"""
Monitors.

The API returns every monitor kind from the same endpoints; the ``type`` field
selects the model a payload decodes into.
"""

from __future__ import annotations

from typing import Any, Literal, Union

import pydantic
from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.errors import DecodeError, UnknownMonitorTypeError
from mackerel_client.request import (
    request_delete_context,
    request_get_context,
    request_post_context,
    request_put_context,
)
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class MonitorBase(MackerelModel):
    always_emit = frozenset({"type"})

    id: str = ""
    name: str = ""
    memo: str = ""
    type: str = ""
    is_mute: bool = False
    notification_interval: int = 0

    @property
    def monitor_type(self) -> str:
        return self.type


class MonitorConnectivity(MonitorBase):
    type: Literal["connectivity"] = "connectivity"
    alert_status_on_gone: str = ""
    scopes: list[str] = Field(default_factory=list)
    exclude_scopes: list[str] = Field(default_factory=list)


class MonitorHostMetric(MonitorBase):
    always_emit = MonitorBase.always_emit | {"warning", "critical"}

    type: Literal["host"] = "host"
    metric: str = ""
    operator: str = ""
    warning: float | None = None
    critical: float | None = None
    duration: int = 0
    max_check_attempts: int = 0
    scopes: list[str] = Field(default_factory=list)
    exclude_scopes: list[str] = Field(default_factory=list)


class MonitorServiceMetric(MonitorBase):
    always_emit = MonitorBase.always_emit | {"warning", "critical"}

    type: Literal["service"] = "service"
    service: str = ""
    metric: str = ""
    operator: str = ""
    warning: float | None = None
    critical: float | None = None
    duration: int = 0
    max_check_attempts: int = 0
    missing_duration_warning: int = 0
    missing_duration_critical: int = 0


class HeaderField(MackerelModel):
    always_emit = frozenset({"name", "value"})

    name: str = ""
    value: str = ""


class MonitorExternalHTTP(MonitorBase):
    always_emit = MonitorBase.always_emit | {"headers"}

    type: Literal["external"] = "external"
    method: str = ""
    url: str = ""
    max_check_attempts: int = 0
    service: str = ""
    response_time_critical: float | None = None
    response_time_warning: float | None = None
    response_time_duration: int | None = None
    request_body: str = ""
    contains_string: str = ""
    certification_expiration_critical: int | None = None
    certification_expiration_warning: int | None = None
    skip_certificate_verification: bool = False
    follow_redirect: bool = False
    expected_status_code: int | None = None
    headers: list[HeaderField] = Field(default_factory=list)


class MonitorExpression(MonitorBase):
    always_emit = MonitorBase.always_emit | {"warning", "critical"}

    type: Literal["expression"] = "expression"
    expression: str = ""
    operator: str = ""
    warning: float | None = None
    critical: float | None = None
    evaluate_backward_minutes: int | None = None


class MonitorAnomalyDetection(MonitorBase):
    always_emit = MonitorBase.always_emit | {"scopes"}

    type: Literal["anomalyDetection"] = "anomalyDetection"
    warning_sensitivity: str = ""
    critical_sensitivity: str = ""
    training_period_from: int = 0
    max_check_attempts: int = 0
    scopes: list[str] = Field(default_factory=list)


class MonitorQuery(MonitorBase):
    always_emit = MonitorBase.always_emit | {"warning", "critical"}

    type: Literal["query"] = "query"
    query: str = ""
    operator: str = ""
    warning: float | None = None
    critical: float | None = None
    legend: str = ""
    evaluate_backward_minutes: int | None = None


Monitor = Union[
    MonitorConnectivity,
    MonitorHostMetric,
    MonitorServiceMetric,
    MonitorExternalHTTP,
    MonitorExpression,
    MonitorAnomalyDetection,
    MonitorQuery,
]

MONITOR_TYPES: dict[str, type[MonitorBase]] = {
    "connectivity": MonitorConnectivity,
    "host": MonitorHostMetric,
    "service": MonitorServiceMetric,
    "external": MonitorExternalHTTP,
    "expression": MonitorExpression,
    "anomalyDetection": MonitorAnomalyDetection,
    "query": MonitorQuery,
}


def decode_monitor(raw: Any) -> Monitor:
    """Decode a raw monitor object into the model selected by its type."""
    if not isinstance(raw, dict):
        raise DecodeError(f"unexpected monitor payload: {raw!r}")
    monitor_type = raw.get("type")
    model = MONITOR_TYPES.get(monitor_type) if isinstance(monitor_type, str) else None
    if model is None:
        raise UnknownMonitorTypeError(monitor_type)
    try:
        return model.model_validate(raw)
    except pydantic.ValidationError as exc:
        raise DecodeError(f"unexpected {monitor_type} monitor shape: {exc}") from exc


class _MonitorsEnvelope(MackerelModel):
    monitors: list[dict[str, Any]] = Field(default_factory=list)


class _MonitorEnvelope(MackerelModel):
    monitor: dict[str, Any] | None = None


def _monitor_path(monitor_id: str) -> str:
    return f"/api/v0/monitors/{escape_path(monitor_id)}"


class MonitorsAPI:
    def find_monitors(self) -> list[Monitor]:
        return self.find_monitors_context(BACKGROUND)

    def find_monitors_context(self, ctx: Context) -> list[Monitor]:
        """List monitors, stopping at the first one of an unknown type."""
        data = request_get_context(ctx, self, "/api/v0/monitors", _MonitorsEnvelope)
        monitors = []
        for raw in data.monitors:
            try:
                monitors.append(decode_monitor(raw))
            except UnknownMonitorTypeError:
                break
        return monitors

    def get_monitor(self, monitor_id: str) -> Monitor:
        return self.get_monitor_context(BACKGROUND, monitor_id)

    def get_monitor_context(self, ctx: Context, monitor_id: str) -> Monitor:
        data = request_get_context(ctx, self, _monitor_path(monitor_id), _MonitorEnvelope)
        return decode_monitor(data.monitor)

    def create_monitor(self, param: Monitor) -> Monitor:
        return self.create_monitor_context(BACKGROUND, param)

    def create_monitor_context(self, ctx: Context, param: Monitor) -> Monitor:
        return decode_monitor(request_post_context(ctx, self, "/api/v0/monitors", param, Any))

    def update_monitor(self, monitor_id: str, param: Monitor) -> Monitor:
        return self.update_monitor_context(BACKGROUND, monitor_id, param)

    def update_monitor_context(self, ctx: Context, monitor_id: str, param: Monitor) -> Monitor:
        return decode_monitor(request_put_context(ctx, self, _monitor_path(monitor_id), param, Any))

    def delete_monitor(self, monitor_id: str) -> Monitor:
        return self.delete_monitor_context(BACKGROUND, monitor_id)

    def delete_monitor_context(self, ctx: Context, monitor_id: str) -> Monitor:
        return decode_monitor(request_delete_context(ctx, self, _monitor_path(monitor_id), Any))
