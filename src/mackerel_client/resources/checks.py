from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import NO_RESULT, request_post_context
from mackerel_client.resources.base import EVERY_FIELD, MackerelModel


class CheckStatus(str, Enum):
    OK = "OK"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    UNKNOWN = "UNKNOWN"


class CheckSourceHost(MackerelModel):
    always_emit = EVERY_FIELD

    type: Literal["host"] = "host"
    host_id: str = ""


CheckSource = CheckSourceHost


def check_source_host(host_id: str) -> CheckSource:
    return CheckSourceHost(host_id=host_id)


class CheckReport(MackerelModel):
    """A single check result. occurred_at is seconds since the epoch."""

    always_emit = frozenset({"source", "name", "status", "message", "occurredAt"})

    source: CheckSource
    name: str = ""
    status: CheckStatus = CheckStatus.UNKNOWN
    message: str = ""
    occurred_at: int = 0
    notification_interval: int = 0
    max_check_attempts: int = 0


class CheckReports(MackerelModel):
    always_emit = frozenset({"reports"})

    reports: list[CheckReport] = Field(default_factory=list)


class ChecksAPI:
    def post_check_reports(self, reports: CheckReports) -> None:
        self.post_check_reports_context(BACKGROUND, reports)

    def post_check_reports_context(self, ctx: Context, reports: CheckReports) -> None:
        request_post_context(ctx, self, "/api/v0/monitoring/checks/report", reports, NO_RESULT)
