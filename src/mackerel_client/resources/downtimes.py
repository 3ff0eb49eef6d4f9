from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.errors import ValidationError
from mackerel_client.request import (
    request_delete_context,
    request_get_context,
    request_post_context,
    request_put_context,
)
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class DowntimeRecurrenceType(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class DowntimeWeekday(str, Enum):
    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"


class DowntimeRecurrence(MackerelModel):
    always_emit = frozenset({"type", "interval"})

    type: DowntimeRecurrenceType
    interval: int = 0
    weekdays: list[DowntimeWeekday] = Field(default_factory=list)
    until: int = 0

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, value: Any) -> Any:
        if isinstance(value, DowntimeRecurrenceType):
            return value
        try:
            return DowntimeRecurrenceType(value)
        except ValueError:
            raise ValidationError(f"unknown downtime recurrence type: {value!r}", {"type": value}) from None

    @field_validator("weekdays", mode="before")
    @classmethod
    def _known_weekdays(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        days = []
        for day in value:
            try:
                days.append(DowntimeWeekday(day))
            except ValueError:
                raise ValidationError(f"unknown downtime weekday: {day!r}", {"weekday": day}) from None
        return days


class Downtime(MackerelModel):
    always_emit = frozenset({"name", "start", "duration"})

    id: str = ""
    name: str = ""
    memo: str = ""
    start: int = 0
    duration: int = 0
    recurrence: DowntimeRecurrence | None = None
    service_scopes: list[str] = Field(default_factory=list)
    service_exclude_scopes: list[str] = Field(default_factory=list)
    role_scopes: list[str] = Field(default_factory=list)
    role_exclude_scopes: list[str] = Field(default_factory=list)
    monitor_scopes: list[str] = Field(default_factory=list)
    monitor_exclude_scopes: list[str] = Field(default_factory=list)


class _DowntimesEnvelope(MackerelModel):
    downtimes: list[Downtime] = Field(default_factory=list)


def _downtime_path(downtime_id: str) -> str:
    return f"/api/v0/downtimes/{escape_path(downtime_id)}"


class DowntimesAPI:
    def find_downtimes(self) -> list[Downtime]:
        return self.find_downtimes_context(BACKGROUND)

    def find_downtimes_context(self, ctx: Context) -> list[Downtime]:
        return request_get_context(ctx, self, "/api/v0/downtimes", _DowntimesEnvelope).downtimes

    def create_downtime(self, param: Downtime) -> Downtime:
        return self.create_downtime_context(BACKGROUND, param)

    def create_downtime_context(self, ctx: Context, param: Downtime) -> Downtime:
        return request_post_context(ctx, self, "/api/v0/downtimes", param, Downtime)

    def update_downtime(self, downtime_id: str, param: Downtime) -> Downtime:
        return self.update_downtime_context(BACKGROUND, downtime_id, param)

    def update_downtime_context(self, ctx: Context, downtime_id: str, param: Downtime) -> Downtime:
        return request_put_context(ctx, self, _downtime_path(downtime_id), param, Downtime)

    def delete_downtime(self, downtime_id: str) -> Downtime:
        return self.delete_downtime_context(BACKGROUND, downtime_id)

    def delete_downtime_context(self, ctx: Context, downtime_id: str) -> Downtime:
        return request_delete_context(ctx, self, _downtime_path(downtime_id), Downtime)
