"""Orientation Tracker: status vocabulary, checklist shaping, tracker writes."""

from __future__ import annotations

import logging
import re
from typing import Any

from onboarding.core.errors import InvalidRequestError
from onboarding.models.orientation import (
    ChecklistItem,
    ChecklistSections,
    ChecklistSummary,
    ItemStatus,
    RosterStatus,
)
from onboarding.services.function_client import (
    FunctionClient,
    UpstreamResponse,
    ensure_ok,
    function_client,
)

logger = logging.getLogger(__name__)

STATUS_LABELS: dict[ItemStatus, str] = {
    ItemStatus.NOT_STARTED: "Not Started",
    ItemStatus.IN_PROGRESS: "In Progress",
    ItemStatus.COMPLETED: "Completed",
}

INVALID_STATUS_MESSAGE = "Invalid status. Expected: not_started | in_progress | completed"

_LEADING_BULLET = re.compile(r"^\s*[•\-]\s*")
_ITEM_ID = re.compile(r"[0-9]+")


def normalize_status(value: Any) -> ItemStatus | None:
    """Accept only the three machine values, ignoring case and surrounding whitespace."""
    if not isinstance(value, str):
        return None
    try:
        return ItemStatus(value.strip().lower())
    except ValueError:
        return None


def status_from_upstream(raw: Any) -> ItemStatus:
    text = "" if raw is None else str(raw).strip().lower()
    for status, label in STATUS_LABELS.items():
        if text in (label.lower(), status.value):
            return status
    return ItemStatus.NOT_STARTED


def status_label(status: ItemStatus) -> str:
    return STATUS_LABELS[status]


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return value
    text = _as_str(value)
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _first_str(fields: dict[str, Any], *names: str) -> str | None:
    for name in names:
        value = _as_str(fields.get(name))
        if value is not None:
            return value
    return None


def tracker_rows(payload: Any) -> list[dict[str, Any]]:
    """Rows from an OrientationTrackerGet answer (``{items: [...]}`` or a bare list)."""
    if isinstance(payload, dict):
        payload = payload.get("items")
    if not isinstance(payload, list):
        return []
    return [row for row in payload if isinstance(row, dict)]


def _fields(row: dict[str, Any]) -> dict[str, Any]:
    fields = row.get("fields")
    return fields if isinstance(fields, dict) else {}


def to_checklist_item(row: dict[str, Any], index: int) -> ChecklistItem:
    f = _fields(row)
    label = _first_str(f, "Title", "ItemName", "ChecklistItem") or "Untitled"
    order_key = _as_number(f.get("TemplateTaskId"))
    if order_key is None:
        order_key = _as_number(f.get("templateTaskId"))

    category = (_as_str(f.get("OrientationCategory")) or "").strip()
    return ChecklistItem(
        id=str(row.get("id", "")),
        label=_LEADING_BULLET.sub("", label),
        status=status_from_upstream(f.get("Status")),
        category="General" if category == "General" else "Department",
        order_key=index if order_key is None else order_key,
        hover_text=_first_str(f, "HoverText", "HelpText"),
        requires_attachment=bool(f.get("RequiresAttachment")),
        started_by=_as_str(f.get("StartedBy")),
        started_at=_as_str(f.get("StartedAt")),
        completed_by=_as_str(f.get("CompletedBy")),
        completed_at=_as_str(f.get("CompletedAt")),
        updated_by=_as_str(f.get("UpdatedBy")),
        updated_at=_as_str(f.get("UpdatedAt")),
    )


def build_checklist(rows: list[dict[str, Any]]) -> ChecklistSections:
    sections = ChecklistSections()
    for index, row in enumerate(rows):
        item = to_checklist_item(row, index)
        if item.category == "General":
            sections.general.append(item)
        else:
            sections.department.append(item)

    sections.general.sort(key=lambda i: (i.order_key, i.label))
    sections.department.sort(key=lambda i: (i.order_key, i.label))
    return sections


def summarize(items: list[ChecklistItem]) -> ChecklistSummary:
    summary = ChecklistSummary()
    for item in items:
        if item.status is ItemStatus.COMPLETED:
            summary.completed += 1
        elif item.status is ItemStatus.IN_PROGRESS:
            summary.in_progress += 1
        else:
            summary.not_started += 1
    return summary


def all_completed(items: list[ChecklistItem]) -> bool:
    return all(item.status is ItemStatus.COMPLETED for item in items)


def aggregate_status(rows: list[dict[str, Any]]) -> RosterStatus:
    if not rows:
        return RosterStatus.NOT_RELEASED

    statuses = [status_from_upstream(_fields(row).get("Status")) for row in rows]
    if all(s is ItemStatus.COMPLETED for s in statuses):
        return RosterStatus.COMPLETED
    if any(s is not ItemStatus.NOT_STARTED for s in statuses):
        return RosterStatus.IN_PROGRESS
    return RosterStatus.NOT_STARTED


def role_from_rows(rows: list[dict[str, Any]]) -> str | None:
    for row in rows:
        role = _first_str(_fields(row), "RoleNameText", "Role", "RoleCodeText")
        if role and role.strip():
            return role
    return None


def parse_item_id(raw: str) -> int:
    text = raw.strip()
    if not _ITEM_ID.fullmatch(text):
        raise InvalidRequestError("Invalid itemId in route.")
    return int(text)


class OrientationService:
    def __init__(self, client: FunctionClient) -> None:
        self.client = client

    async def get_rows(self, employee_id: str, principal: str | None = None) -> list[dict[str, Any]]:
        response = ensure_ok(
            await self.client.request(
                "GET",
                "OrientationTrackerGet",
                params={"employeeProfileId": employee_id},
                principal=principal,
            )
        )
        return tracker_rows(response.json(default={}))

    async def release(self, employee_id: str, principal: str | None = None) -> UpstreamResponse:
        return ensure_ok(
            await self.client.request(
                "POST",
                "OrientationUpdater",
                params={"employeeProfileId": employee_id},
                principal=principal,
            )
        )

    async def update_item_status(self, item_id: int, status: str, actor: str) -> UpstreamResponse:
        return await self.client.request(
            "POST",
            "OrientationTrackerUpdate",
            json_body={"itemId": item_id, "status": status, "actor": actor},
            principal=actor,
        )

    async def set_item_status_with_fallback(self, item_id: int, status: ItemStatus, actor: str) -> UpstreamResponse:
        """Write the display label first; some tracker deployments only take machine values."""
        response = await self.update_item_status(item_id, status_label(status), actor)
        if response.status == 400:
            logger.info("Tracker item %s rejected label %r, retrying with %r", item_id, status_label(status), status.value)
            response = await self.update_item_status(item_id, status.value, actor)
        return ensure_ok(response)


orientation_service = OrientationService(function_client)
