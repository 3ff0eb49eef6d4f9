from __future__ import annotations

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import request_delete_context, request_get_context, request_post_context
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class Mentions(MackerelModel):
    ok: str = ""
    warning: str = ""
    critical: str = ""


class Channel(MackerelModel):
    """A notification channel.

    Collections the server leaves out decode as None so that "absent" stays
    distinguishable from "empty".
    """

    always_emit = frozenset({"id", "name", "type"})

    id: str = ""
    name: str = ""
    type: str = ""
    emails: list[str] | None = None
    user_ids: list[str] | None = None
    mentions: Mentions = Field(default_factory=Mentions)
    enabled_graph_image: bool | None = None
    url: str = ""
    events: list[str] | None = None
    suspended_at: int | None = None


class _ChannelsEnvelope(MackerelModel):
    channels: list[Channel] = Field(default_factory=list)


class ChannelsAPI:
    def find_channels(self) -> list[Channel]:
        return self.find_channels_context(BACKGROUND)

    def find_channels_context(self, ctx: Context) -> list[Channel]:
        return request_get_context(ctx, self, "/api/v0/channels", _ChannelsEnvelope).channels

    def create_channel(self, param: Channel) -> Channel:
        return self.create_channel_context(BACKGROUND, param)

    def create_channel_context(self, ctx: Context, param: Channel) -> Channel:
        return request_post_context(ctx, self, "/api/v0/channels", param, Channel)

    def delete_channel(self, channel_id: str) -> Channel:
        return self.delete_channel_context(BACKGROUND, channel_id)

    def delete_channel_context(self, ctx: Context, channel_id: str) -> Channel:
        return request_delete_context(ctx, self, f"/api/v0/channels/{escape_path(channel_id)}", Channel)
