"""Employee profiles: creation, roster, detail view, and the review sign-off."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from onboarding.core.config import Settings, settings
from onboarding.core.errors import InvalidRequestError, OnboardingError
from onboarding.models.employee import EmployeeDetail, EmployeeHeader, OnboardResult, RosterRow
from onboarding.models.orientation import RosterStatus
from onboarding.services.function_client import FunctionClient, UpstreamResponse, ensure_ok, function_client
from onboarding.services.orientation import (
    OrientationService,
    aggregate_status,
    all_completed,
    build_checklist,
    orientation_service,
    role_from_rows,
    summarize,
)

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("onboarding.audit")

ROLE_OPTIONS: dict[str, str] = {
    "ASD": "Administrative Services Director",
    "CRA": "Community Relations Associate",
    "CRD": "Community Relations Director",
    "DED": "Dining Experience Director",
    "EOO": "Executive Operations Officer",
    "HA": "Hospitality Associate",
    "HEA": "Hospitality Executive Associate",
    "LSLS": "Dual role - LifeStages/LifeStories",
    "LStaD": "LifeStages Director",
    "LStoD": "LifeStories Director",
    "MA": "Maintenance Assistant",
    "RWD": "Resident Wellness Director",
    "SME": "Safety & Maintenance Engineering",
}


def role_display(code: str | None) -> str:
    code = (code or "").strip()
    if not code:
        return "—"
    name = ROLE_OPTIONS.get(code)
    return f"{code} — {name}" if name else code


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def build_create_payload(body: Any) -> dict[str, Any]:
    """Validate the new-employee form and shape the EmployeeProfileCreate body."""
    body = body if isinstance(body, dict) else {}

    title = _text(body.get("title"))
    start_date = _text(body.get("startDate"))
    role_lookup_id = body.get("roleLookupId")
    role_code = _text(body.get("roleCode"))

    if not title:
        raise InvalidRequestError("Missing required field: title")
    if not start_date:
        raise InvalidRequestError("Missing required field: startDate")
    if _text(role_lookup_id) == "" and not role_code:
        raise InvalidRequestError("Provide roleLookupId (number) OR roleCode (string)")

    return {
        "title": title,
        "startDate": start_date,
        "roleLookupId": role_lookup_id,
        "roleCode": role_code,
        "employeeEmail": _text(body.get("employeeEmail") or body.get("email")),
        "supervisorName": _text(body.get("supervisorName")),
        "supervisorEmail": _text(body.get("supervisorEmail")),
        "supervisorLookupId": body.get("supervisorLookupId"),
    }


def created_id(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    for name in ("id", "employeeProfileId", "employeeId"):
        value = payload.get(name)
        if value not in (None, ""):
            return str(value)
    return None


def profile_fields(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        return {}
    item = payload.get("item")
    if isinstance(item, dict) and isinstance(item.get("fields"), dict):
        return item["fields"]
    if isinstance(payload.get("fields"), dict):
        return payload["fields"]
    return payload


def role_from_fields(fields: dict[str, Any]) -> str | None:
    for name in ("RoleName", "RoleNameText", "Role", "RoleCodeText"):
        value = fields.get(name)
        if value is not None and str(value).strip():
            return str(value)
    return None


def summary_items(payload: Any) -> list[dict[str, Any]]:
    items = payload.get("items") if isinstance(payload, dict) else None
    return [i for i in items if isinstance(i, dict)] if isinstance(items, list) else []


class EmployeeService:
    def __init__(self, client: FunctionClient, orientation: OrientationService, config: Settings) -> None:
        self.client = client
        self.orientation = orientation
        self.settings = config

    async def list_profiles(self) -> list[Any]:
        response = ensure_ok(await self.client.request("GET", "EmployeeProfileGet", key_in_header=False))
        data = response.json(default={})
        items = data.get("items") if isinstance(data, dict) else None
        return items if isinstance(items, list) else []

    async def create(self, body: Any, principal: str | None = None) -> UpstreamResponse:
        payload = build_create_payload(body)
        logger.info("Creating employee profile %r (role %s)", payload["title"], payload["roleCode"] or payload["roleLookupId"])
        return ensure_ok(
            await self.client.request("POST", "EmployeeProfileCreate", json_body=payload, principal=principal)
        )

    async def get_summary(self, top: str = "500") -> Any:
        response = ensure_ok(await self.client.request("GET", "EmployeeListSummary", params={"top": top}))
        return response.json(default={})

    async def headcount(self) -> int:
        """Roster size for the executive dashboard; 0 when the summary is unavailable."""
        try:
            return len(summary_items(await self.get_summary()))
        except OnboardingError as e:
            logger.warning("Headcount unavailable: %s", e.message)
            return 0

    async def get_profile(self, employee_id: str) -> Any:
        response = ensure_ok(
            await self.client.request("GET", "EmployeeProfilesGet", params={"employeeProfileId": employee_id})
        )
        return response.json(default={})

    async def mark_reviewed(
        self,
        employee_id: str,
        *,
        reviewed: Any = True,
        reviewed_at: str | None = None,
        reviewed_by: str | None = None,
    ) -> Any:
        body = {
            "employeeId": employee_id,
            "reviewed": True if reviewed is None else reviewed,
            "reviewedAt": reviewed_at,
            "reviewedBy": reviewed_by,
        }
        response = ensure_ok(
            await self.client.request(
                "POST", "EmployeeProfileReviewed", json_body=body, key_in_header=False, principal=reviewed_by
            )
        )
        return response.json(default={})

    async def _row_status(self, employee_id: str, semaphore: asyncio.Semaphore) -> tuple[bool, RosterStatus]:
        async with semaphore:
            try:
                rows = await self.orientation.get_rows(employee_id)
            except OnboardingError as e:
                logger.warning("Tracker status unavailable for %s: %s", employee_id, e.message)
                return False, RosterStatus.NOT_RELEASED
        status = aggregate_status(rows)
        return status is not RosterStatus.NOT_RELEASED, status

    async def roster(self, top: str = "500") -> list[RosterRow]:
        items = summary_items(await self.get_summary(top))
        semaphore = asyncio.Semaphore(max(1, self.settings.TRACKER_STATUS_CONCURRENCY))
        statuses = await asyncio.gather(*(self._row_status(_text(item.get("id")), semaphore) for item in items))

        return [
            RosterRow(
                id=_text(item.get("id")),
                name=_text(item.get("name")),
                role_code=_text(item.get("roleCode")),
                role=role_display(_text(item.get("roleCode"))),
                released=released,
                status=status,
                reviewed=_text(item.get("reviewed")),
                review_audit=_text(item.get("reviewAudit")),
                last_updated=_text(item.get("modified")),
            )
            for item, (released, status) in zip(items, statuses, strict=True)
        ]

    async def detail(self, employee_id: str, can_edit: bool = False) -> EmployeeDetail:
        profile, rows = await asyncio.gather(self.get_profile(employee_id), self.orientation.get_rows(employee_id))
        fields = profile_fields(profile)
        sections = build_checklist(rows)
        items = sections.items

        return EmployeeDetail(
            employee=EmployeeHeader(
                id=employee_id,
                name=_text(fields.get("Title")) or f"Employee {employee_id}",
                role=role_from_fields(fields) or role_from_rows(rows) or "—",
                last_updated=_text(fields.get("Modified")) or "—",
            ),
            general=sections.general,
            department=sections.department,
            summary=summarize(items),
            all_completed=all_completed(items),
            released=bool(rows),
            can_edit=can_edit,
        )

    async def onboard(self, body: Any, principal: str | None = None) -> OnboardResult:
        """Create the profile, then release its orientation items."""
        created = await self.create(body, principal=principal)
        profile = created.json(default={})
        employee_id = created_id(profile)
        if not employee_id:
            raise OnboardingError("EmployeeProfileCreate returned no id")

        await self.orientation.release(employee_id, principal=principal)
        logger.info("Employee %s created and orientation released", employee_id)
        return OnboardResult(employee_id=employee_id, released=True, profile=profile if isinstance(profile, dict) else {})

    async def review(self, employee_id: str, reviewer: str) -> dict[str, Any]:
        rows = await self.orientation.get_rows(employee_id)
        items = build_checklist(rows).items
        if not items or not all_completed(items):
            raise InvalidRequestError("All orientation items must be Completed before marking as Reviewed.")

        reviewed_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        record_audit({"employeeId": employee_id, "page": "Orientation", "reviewedBy": reviewer, "reviewedAt": reviewed_at})

        flagged = True
        try:
            await self.mark_reviewed(employee_id, reviewed=True, reviewed_at=reviewed_at, reviewed_by=reviewer)
        except OnboardingError as e:
            flagged = False
            logger.warning("Reviewed flag not written for %s: %s", employee_id, e.message)

        return {"employeeId": employee_id, "reviewedAt": reviewed_at, "reviewedBy": reviewer, "reviewedFlagSaved": flagged}


def record_audit(event: Any) -> dict[str, Any]:
    audit_logger.info("AUDIT EVENT: %s", event)
    return {"ok": True, "message": "Audit logged (local no-op)"}


employee_service = EmployeeService(function_client, orientation_service, settings)
