"""Days of Week matrix: recurring tasks by weekday and by week of month.

Documents are frozen. Edits build a new document that reuses every
container off the changed path.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from onboarding.models.common import CamelModel


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"


class WeekOfMonth(str, Enum):
    FIRST = "FirstWeek"
    SECOND = "SecondWeek"
    THIRD = "ThirdWeek"
    FOURTH = "FourthWeek"


class Entry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str | None = None
    text: str = ""
    href: str | None = None


DayBuckets = dict[Weekday, tuple[Entry, ...]]


class DaysOfWeekDocument(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    version: int = 1
    updated_at: str | None = Field(default=None, alias="updatedAt")
    weekly: DayBuckets = Field(default_factory=dict)
    monthly: dict[WeekOfMonth, DayBuckets] = Field(default_factory=dict)
    general: tuple[Entry, ...] | None = None
    discretionary: tuple[Entry, ...] | None = None


class EntryCommand(CamelModel):
    """One matrix edit. ``index`` addresses an entry inside a day bucket."""

    op: Literal["add_entry", "update_entry", "remove_entry"]
    scope: Literal["weekly", "monthly"] = "weekly"
    day: Weekday
    week: WeekOfMonth | None = None
    index: int | None = None
    text: str | None = None
    href: str | None = None


class DaysOfWeekEdits(CamelModel):
    base_version: int | None = None
    commands: list[EntryCommand] = []
