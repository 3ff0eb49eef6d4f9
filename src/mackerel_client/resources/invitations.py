from __future__ import annotations

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import request_get_context, request_post_context
from mackerel_client.resources.base import MackerelModel


class Invitation(MackerelModel):
    email: str = ""
    authority: str = ""
    expires_at: int = 0


class _InvitationsEnvelope(MackerelModel):
    invitations: list[Invitation] = Field(default_factory=list)


class InvitationsAPI:
    def find_invitations(self) -> list[Invitation]:
        return self.find_invitations_context(BACKGROUND)

    def find_invitations_context(self, ctx: Context) -> list[Invitation]:
        return request_get_context(ctx, self, "/api/v0/invitations", _InvitationsEnvelope).invitations

    def create_invitation(self, param: Invitation) -> Invitation:
        return self.create_invitation_context(BACKGROUND, param)

    def create_invitation_context(self, ctx: Context, param: Invitation) -> Invitation:
        return request_post_context(ctx, self, "/api/v0/invitations", param, Invitation)
