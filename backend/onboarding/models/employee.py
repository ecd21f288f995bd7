"""Employee profile models for the roster and the new-employee flow."""

from __future__ import annotations

from onboarding.models.common import CamelModel
from onboarding.models.orientation import ChecklistItem, ChecklistSummary, RosterStatus


class OnboardResult(CamelModel):
    employee_id: str
    released: bool
    profile: dict = {}


class RosterRow(CamelModel):
    id: str
    name: str
    role_code: str = ""
    role: str = "—"
    released: bool = False
    status: RosterStatus = RosterStatus.NOT_RELEASED
    reviewed: str = ""
    review_audit: str = ""
    last_updated: str = ""


class EmployeeHeader(CamelModel):
    id: str
    name: str
    role: str = "—"
    last_updated: str = "—"


class EmployeeDetail(CamelModel):
    employee: EmployeeHeader
    general: list[ChecklistItem] = []
    department: list[ChecklistItem] = []
    summary: ChecklistSummary
    all_completed: bool = False
    released: bool = False
    can_edit: bool = False
