from __future__ import annotations

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import request_delete_context, request_get_context
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class User(MackerelModel):
    id: str = ""
    screen_name: str = ""
    email: str = ""
    authority: str = ""
    is_in_registration_process: bool = False
    is_mfa_enabled: bool = Field(False, alias="isMFAEnabled")
    authentication_methods: list[str] = Field(default_factory=list)
    joined_at: int = 0


class _UsersEnvelope(MackerelModel):
    users: list[User] = Field(default_factory=list)


class UsersAPI:
    def find_users(self) -> list[User]:
        return self.find_users_context(BACKGROUND)

    def find_users_context(self, ctx: Context) -> list[User]:
        return request_get_context(ctx, self, "/api/v0/users", _UsersEnvelope).users

    def delete_user(self, user_id: str) -> User:
        return self.delete_user_context(BACKGROUND, user_id)

    def delete_user_context(self, ctx: Context, user_id: str) -> User:
        return request_delete_context(ctx, self, f"/api/v0/users/{escape_path(user_id)}", User)
