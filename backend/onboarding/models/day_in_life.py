"""Day in the Life board models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field

from onboarding.models.common import CamelModel


class SectionKey(str, Enum):
    # The legacy "Calendar" bucket is intentionally absent.
    PRIOR_TO_STAND_UP = "PriorToStandUp"
    AFTER_STAND_UP = "AfterStandUp"
    TO_BE_SCHEDULED = "ToBeScheduled"
    OTHER = "Other"


class DayInLifeItem(CamelModel):
    id: str
    text: str = ""
    order: int = 0
    active: bool = False
    role: str = ""
    section: SectionKey


SectionsMap = dict[SectionKey, list[DayInLifeItem]]


class ItemUpdate(CamelModel):
    id: str
    before: DayInLifeItem
    after: DayInLifeItem


class ChangeSet(CamelModel):
    creates: list[DayInLifeItem] = []
    updates: list[ItemUpdate] = []
    deletes: list[DayInLifeItem] = []

    @property
    def empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes)


class DayInLifeSaveRequest(CamelModel):
    """An edit session: the snapshot taken when editing started and the current board."""

    role: str = ""
    before: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)
    after: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)


class SaveResult(CamelModel):
    deleted: int = 0
    updated: int = 0
    created: int = 0
    changed: bool = True
