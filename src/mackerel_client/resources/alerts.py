from __future__ import annotations

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import request_get_context, request_get_with_params_context, request_post_context
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class Alert(MackerelModel):
    id: str = ""
    status: str = ""
    monitor_id: str = ""
    type: str = ""
    host_id: str = ""
    value: float = 0
    message: str = ""
    reason: str = ""
    opened_at: int = 0
    closed_at: int = 0


class AlertsResp(MackerelModel):
    """One page of alerts; next_id is empty on the last page."""

    alerts: list[Alert] = Field(default_factory=list)
    next_id: str = ""


class AlertLogStatusDetailDetail(MackerelModel):
    message: str = ""
    memo: str = ""


class AlertLogStatusDetail(MackerelModel):
    type: str = ""
    detail: AlertLogStatusDetailDetail = Field(default_factory=AlertLogStatusDetailDetail)


class AlertLog(MackerelModel):
    id: str = ""
    created_at: int = 0
    status: str = ""
    trigger: str = ""
    monitor_id: str | None = None
    target_value: float | None = None
    status_detail: AlertLogStatusDetail | None = None


class FindAlertLogsParam(MackerelModel):
    next_id: str | None = None
    limit: int | None = None


class FindAlertLogsResp(MackerelModel):
    logs: list[AlertLog] = Field(default_factory=list)
    next_id: str = ""


def _alert_path(alert_id: str) -> str:
    return f"/api/v0/alerts/{escape_path(alert_id)}"


class AlertsAPI:
    def find_alerts(self) -> AlertsResp:
        return self.find_alerts_context(BACKGROUND)

    def find_alerts_context(self, ctx: Context) -> AlertsResp:
        return self._find_alerts(ctx, {})

    def find_alerts_by_next_id(self, next_id: str) -> AlertsResp:
        return self.find_alerts_by_next_id_context(BACKGROUND, next_id)

    def find_alerts_by_next_id_context(self, ctx: Context, next_id: str) -> AlertsResp:
        return self._find_alerts(ctx, {"nextId": next_id})

    def find_with_closed_alerts(self) -> AlertsResp:
        return self.find_with_closed_alerts_context(BACKGROUND)

    def find_with_closed_alerts_context(self, ctx: Context) -> AlertsResp:
        return self._find_alerts(ctx, {"withClosed": True})

    def find_with_closed_alerts_by_next_id(self, next_id: str) -> AlertsResp:
        return self.find_with_closed_alerts_by_next_id_context(BACKGROUND, next_id)

    def find_with_closed_alerts_by_next_id_context(self, ctx: Context, next_id: str) -> AlertsResp:
        return self._find_alerts(ctx, {"nextId": next_id, "withClosed": True})

    def _find_alerts(self, ctx: Context, params: dict) -> AlertsResp:
        return request_get_with_params_context(ctx, self, "/api/v0/alerts", params, AlertsResp)

    def get_alert(self, alert_id: str) -> Alert:
        return self.get_alert_context(BACKGROUND, alert_id)

    def get_alert_context(self, ctx: Context, alert_id: str) -> Alert:
        return request_get_context(ctx, self, _alert_path(alert_id), Alert)

    def close_alert(self, alert_id: str, reason: str) -> Alert:
        return self.close_alert_context(BACKGROUND, alert_id, reason)

    def close_alert_context(self, ctx: Context, alert_id: str, reason: str) -> Alert:
        path = f"{_alert_path(alert_id)}/close"
        return request_post_context(ctx, self, path, {"reason": reason}, Alert)

    def find_alert_logs(self, alert_id: str, param: FindAlertLogsParam | None = None) -> FindAlertLogsResp:
        return self.find_alert_logs_context(BACKGROUND, alert_id, param)

    def find_alert_logs_context(
        self, ctx: Context, alert_id: str, param: FindAlertLogsParam | None = None
    ) -> FindAlertLogsResp:
        params: dict[str, str | int] = {}
        if param is not None:
            if param.next_id is not None:
                params["nextId"] = param.next_id
            if param.limit is not None:
                params["limit"] = param.limit
        path = f"{_alert_path(alert_id)}/logs"
        return request_get_with_params_context(ctx, self, path, params, FindAlertLogsResp)
