from __future__ import annotations

from enum import Enum

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


class NotificationLevel(str, Enum):
    ALL = "all"
    CRITICAL = "critical"


class NotificationGroupMonitor(MackerelModel):
    always_emit = frozenset({"id", "skipDefault"})

    id: str = ""
    skip_default: bool = False


class NotificationGroupService(MackerelModel):
    name: str = ""


class NotificationGroup(MackerelModel):
    always_emit = frozenset(
        {"name", "notificationLevel", "childNotificationGroupIds", "childChannelIds"}
    )

    id: str = ""
    name: str = ""
    notification_level: NotificationLevel = NotificationLevel.ALL
    child_notification_group_ids: list[str] = Field(default_factory=list)
    child_channel_ids: list[str] = Field(default_factory=list)
    monitors: list[NotificationGroupMonitor] = Field(default_factory=list)
    services: list[NotificationGroupService] = Field(default_factory=list)


class _NotificationGroupsEnvelope(MackerelModel):
    notification_groups: list[NotificationGroup] = Field(default_factory=list)


_PATH = "/api/v0/notification-groups"


class NotificationGroupsAPI:
    def find_notification_groups(self) -> list[NotificationGroup]:
        return self.find_notification_groups_context(BACKGROUND)

    def find_notification_groups_context(self, ctx: Context) -> list[NotificationGroup]:
        return request_get_context(ctx, self, _PATH, _NotificationGroupsEnvelope).notification_groups

    def create_notification_group(self, param: NotificationGroup) -> NotificationGroup:
        return self.create_notification_group_context(BACKGROUND, param)

    def create_notification_group_context(
        self, ctx: Context, param: NotificationGroup
    ) -> NotificationGroup:
        return request_post_context(ctx, self, _PATH, param, NotificationGroup)

    def update_notification_group(self, group_id: str, param: NotificationGroup) -> NotificationGroup:
        return self.update_notification_group_context(BACKGROUND, group_id, param)

    def update_notification_group_context(
        self, ctx: Context, group_id: str, param: NotificationGroup
    ) -> NotificationGroup:
        path = f"{_PATH}/{escape_path(group_id)}"
        return request_put_context(ctx, self, path, param, NotificationGroup)

    def delete_notification_group(self, group_id: str) -> NotificationGroup:
        return self.delete_notification_group_context(BACKGROUND, group_id)

    def delete_notification_group_context(self, ctx: Context, group_id: str) -> NotificationGroup:
        path = f"{_PATH}/{escape_path(group_id)}"
        return request_delete_context(ctx, self, path, NotificationGroup)
