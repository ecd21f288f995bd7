"""Orientation Tracker checklist models."""

from __future__ import annotations

from enum import Enum

from onboarding.models.common import CamelModel


class ItemStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class RosterStatus(str, Enum):
    """Aggregate orientation status shown on the employee roster."""

    NOT_RELEASED = "Not Released"
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class ChecklistItem(CamelModel):
    """One tracker row as the checklist renders it."""

    id: str
    label: str
    status: ItemStatus = ItemStatus.NOT_STARTED
    category: str = "Department"
    order_key: float = 0
    hover_text: str | None = None
    requires_attachment: bool = False
    started_by: str | None = None
    started_at: str | None = None
    completed_by: str | None = None
    completed_at: str | None = None
    updated_by: str | None = None
    updated_at: str | None = None


class ChecklistSections(CamelModel):
    general: list[ChecklistItem] = []
    department: list[ChecklistItem] = []

    @property
    def items(self) -> list[ChecklistItem]:
        return [*self.general, *self.department]


class ChecklistSummary(CamelModel):
    not_started: int = 0
    in_progress: int = 0
    completed: int = 0


class StatusChangeRequest(CamelModel):
    """Body of the checklist status selector."""

    status: ItemStatus


class MyOrientation(CamelModel):
    employee_id: str
    general: list[ChecklistItem] = []
    department: list[ChecklistItem] = []
    summary: ChecklistSummary
    all_completed: bool = False
