from __future__ import annotations

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import (
    request_delete_context,
    request_get_context,
    request_post_context,
    request_put_context,
)
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class AlertGroupSetting(MackerelModel):
    always_emit = frozenset({"name"})

    id: str = ""
    name: str = ""
    memo: str = ""
    service_scopes: list[str] = Field(default_factory=list)
    role_scopes: list[str] = Field(default_factory=list)
    monitor_scopes: list[str] = Field(default_factory=list)
    notification_interval: int = 0


class _AlertGroupSettingsEnvelope(MackerelModel):
    alert_group_settings: list[AlertGroupSetting] = Field(default_factory=list)


_PATH = "/api/v0/alert-group-settings"


class AlertGroupSettingsAPI:
    def find_alert_group_settings(self) -> list[AlertGroupSetting]:
        return self.find_alert_group_settings_context(BACKGROUND)

    def find_alert_group_settings_context(self, ctx: Context) -> list[AlertGroupSetting]:
        return request_get_context(ctx, self, _PATH, _AlertGroupSettingsEnvelope).alert_group_settings

    def create_alert_group_setting(self, param: AlertGroupSetting) -> AlertGroupSetting:
        return self.create_alert_group_setting_context(BACKGROUND, param)

    def create_alert_group_setting_context(
        self, ctx: Context, param: AlertGroupSetting
    ) -> AlertGroupSetting:
        return request_post_context(ctx, self, _PATH, param, AlertGroupSetting)

    def get_alert_group_setting(self, setting_id: str) -> AlertGroupSetting:
        return self.get_alert_group_setting_context(BACKGROUND, setting_id)

    def get_alert_group_setting_context(self, ctx: Context, setting_id: str) -> AlertGroupSetting:
        return request_get_context(ctx, self, f"{_PATH}/{escape_path(setting_id)}", AlertGroupSetting)

    def update_alert_group_setting(self, setting_id: str, param: AlertGroupSetting) -> AlertGroupSetting:
        return self.update_alert_group_setting_context(BACKGROUND, setting_id, param)

    def update_alert_group_setting_context(
        self, ctx: Context, setting_id: str, param: AlertGroupSetting
    ) -> AlertGroupSetting:
        path = f"{_PATH}/{escape_path(setting_id)}"
        return request_put_context(ctx, self, path, param, AlertGroupSetting)

    def delete_alert_group_setting(self, setting_id: str) -> AlertGroupSetting:
        return self.delete_alert_group_setting_context(BACKGROUND, setting_id)

    def delete_alert_group_setting_context(self, ctx: Context, setting_id: str) -> AlertGroupSetting:
        path = f"{_PATH}/{escape_path(setting_id)}"
        return request_delete_context(ctx, self, path, AlertGroupSetting)
