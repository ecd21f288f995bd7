"""Acknowledgement records and the dashboards built from them."""

from __future__ import annotations

from enum import Enum

from onboarding.models.common import CamelModel


class ContentType(str, Enum):
    DAY_IN_LIFE = "dayInLife"
    IN_ABSENCE = "inAbsence"


class AcknowledgementState(CamelModel):
    acknowledged_version: int | None = None
    acknowledged_at: str | None = None


class AcknowledgementBanner(CamelModel):
    """What the acknowledgement strip above a role document shows."""

    role_code: str
    content_type: ContentType
    current_version: int
    needs_ack: bool
    updated_since: bool
    reviewed_label: str | None = None
    helper: str | None = None
    checkbox_text: str
    confirm_text: str
    state: AcknowledgementState | None = None


class ConfirmRequest(CamelModel):
    role_code: str
    content_type: ContentType
    current_version: int | None = None


class EmployeeAckRow(CamelModel):
    role: str
    day_complete: bool
    absence_complete: bool
    last_activity: str | None = None


class ExecRoleRow(CamelModel):
    role: str
    day_complete: bool
    absence_complete: bool
    latest: str | None = None


class ExecRollup(CamelModel):
    users_observed: int
    headcount: int
    role_count: int
    day_complete_count: int
    absence_complete_count: int
    outstanding: int
    roles: list[ExecRoleRow] = []
