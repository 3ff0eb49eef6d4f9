from __future__ import annotations

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import request_get_context
from mackerel_client.resources.base import EVERY_FIELD, MackerelModel


class Org(MackerelModel):
    always_emit = EVERY_FIELD

    name: str = ""
    display_name: str = ""


class OrgAPI:
    def get_org(self) -> Org:
        return self.get_org_context(BACKGROUND)

    def get_org_context(self, ctx: Context) -> Org:
        return request_get_context(ctx, self, "/api/v0/org", Org)
