"""Acknowledgement gating, confirmation, and the dashboard rollups."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

from onboarding.core.errors import InvalidRequestError, OnboardingError, UpstreamPayloadError
from onboarding.models.acknowledgement import (
    AcknowledgementBanner,
    AcknowledgementState,
    ContentType,
    EmployeeAckRow,
    ExecRoleRow,
    ExecRollup,
)
from onboarding.services.function_client import FunctionClient, ensure_ok, function_client

logger = logging.getLogger(__name__)

CHECKBOX_TEXT = {
    ContentType.DAY_IN_LIFE: (
        "Acknowledge that you have reviewed the Day in the Life and Days of Week documentation for this role."
    ),
    ContentType.IN_ABSENCE: "Acknowledge that you have reviewed the In the Absence Of documentation for this role.",
}

CONFIRM_SUBJECT = {
    ContentType.DAY_IN_LIFE: "the Day in the Life and the Days of the Week documentation",
    ContentType.IN_ABSENCE: "the In the Absence Of documentation",
}

FIRST_TIME_HELPER = "We trust you. Here’s the information. Please acknowledge when you’ve reviewed it."


def needs_ack(
    current_version: int | None,
    state: AcknowledgementState | None,
    role_code: str | None = None,
) -> bool:
    # No role selected: nothing to acknowledge yet.
    if role_code is not None and not role_code.strip():
        return False
    if not current_version or current_version < 1:
        return True
    acknowledged = state.acknowledged_version if state else None
    if not acknowledged:
        return True
    return acknowledged < current_version


def format_date(iso: str | None) -> str:
    if not iso:
        return ""
    try:
        parsed = datetime.fromisoformat(iso.replace("Z", "+00:00"))
    except ValueError:
        return ""
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def build_banner(
    role_code: str,
    content_type: ContentType,
    current_version: int,
    state: AcknowledgementState | None,
    updated_at: str | None = None,
) -> AcknowledgementBanner:
    acknowledged = state.acknowledged_version if state else None
    needed = needs_ack(current_version, state, role_code)
    updated_since = bool(acknowledged) and acknowledged < current_version

    helper = None
    if needed and updated_since:
        when = format_date(updated_at)
        helper = (
            "This document has been updated since you last reviewed it"
            + (f" ({when})" if when else "")
            + ". Please review the changes and re‑acknowledge when ready."
        )
    elif needed:
        helper = FIRST_TIME_HELPER

    reviewed_label = None
    if not needed:
        when = format_date(state.acknowledged_at if state else None)
        reviewed_label = f"Reviewed on {when}" if when else "Reviewed"

    return AcknowledgementBanner(
        role_code=role_code,
        content_type=content_type,
        current_version=current_version,
        needs_ack=needed,
        updated_since=updated_since,
        reviewed_label=reviewed_label,
        helper=helper,
        checkbox_text=CHECKBOX_TEXT[content_type],
        confirm_text=(
            "By acknowledging this, your supervisor will be able to see that you’ve reviewed "
            f"{CONFIRM_SUBJECT[content_type]} for this role."
        ),
        state=state,
    )


def parse_state(payload: Any) -> AcknowledgementState:
    if not isinstance(payload, dict):
        return AcknowledgementState()
    version = payload.get("acknowledgedVersion")
    at = payload.get("acknowledgedAt")
    return AcknowledgementState(
        acknowledged_version=version if isinstance(version, int) and not isinstance(version, bool) else None,
        acknowledged_at=at if isinstance(at, str) else None,
    )


def _record_at(record: Any) -> str | None:
    if isinstance(record, dict) and isinstance(record.get("acknowledgedAt"), str):
        return record["acknowledgedAt"]
    return None


def employee_rows(ack_map: dict[str, Any], user_key: str) -> list[EmployeeAckRow]:
    user_data = ack_map.get(user_key)
    if not isinstance(user_data, dict):
        return []

    rows = []
    for role, rec in user_data.items():
        rec = rec if isinstance(rec, dict) else {}
        times = [t for t in (_record_at(rec.get("dayInLife")), _record_at(rec.get("inAbsence"))) if t]
        rows.append(
            EmployeeAckRow(
                role=role,
                day_complete=bool(rec.get("dayInLife")),
                absence_complete=bool(rec.get("inAbsence")),
                last_activity=max(times) if times else None,
            )
        )
    return rows


def exec_rollup(ack_map: dict[str, Any], headcount: int) -> ExecRollup:
    users = [u for u, data in ack_map.items() if isinstance(data, dict)]
    roles = sorted({role for u in users for role in ack_map[u]})

    rows = []
    for role in roles:
        day_count = absence_count = 0
        latest: str | None = None
        for u in users:
            rec = ack_map[u].get(role)
            if not isinstance(rec, dict):
                continue
            day_count += bool(rec.get("dayInLife"))
            absence_count += bool(rec.get("inAbsence"))
            for at in (_record_at(rec.get("dayInLife")), _record_at(rec.get("inAbsence"))):
                if at and (latest is None or at > latest):
                    latest = at
        rows.append(
            ExecRoleRow(
                role=role,
                day_complete=bool(users) and day_count == len(users),
                absence_complete=bool(users) and absence_count == len(users),
                latest=latest,
            )
        )

    return ExecRollup(
        users_observed=len(users),
        headcount=headcount,
        role_count=len(rows),
        day_complete_count=sum(r.day_complete for r in rows),
        absence_complete_count=sum(r.absence_complete for r in rows),
        outstanding=sum(not (r.day_complete and r.absence_complete) for r in rows),
        roles=rows,
    )


class AcknowledgementService:
    def __init__(self, client: FunctionClient) -> None:
        self.client = client

    async def get_state(self, role: str, content_type: ContentType, principal: str | None = None) -> AcknowledgementState:
        response = ensure_ok(
            await self.client.request(
                "GET",
                "Acknowledgements",
                params={"role": role, "contentType": content_type.value},
                principal=principal,
            )
        )
        return parse_state(response.json(default={}))

    async def try_get_state(
        self, role: str, content_type: ContentType, principal: str | None = None
    ) -> AcknowledgementState | None:
        """Banner state for a page; an unavailable store never fails the page."""
        if not role:
            return None
        try:
            return await self.get_state(role, content_type, principal)
        except OnboardingError:
            logger.exception("Failed to load acknowledgement for %s/%s", role, content_type.value)
            return None

    async def get_all(self) -> dict[str, Any]:
        response = ensure_ok(await self.client.request("GET", "Acknowledgements"))
        data = response.json(default={})
        return data if isinstance(data, dict) else {}

    async def confirm(
        self,
        role_code: str,
        content_type: ContentType,
        current_version: int | None,
        principal: str | None = None,
    ) -> AcknowledgementState:
        if not role_code.strip():
            raise InvalidRequestError("Missing role or contentType")

        version = current_version if current_version and current_version > 0 else 1
        response = ensure_ok(
            await self.client.request(
                "POST",
                "Acknowledgements",
                json_body={"roleCode": role_code, "contentType": content_type.value, "acknowledgedVersion": version},
                principal=principal,
            )
        )

        acknowledged_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        try:
            echoed = response.json(default={})
        except UpstreamPayloadError:
            echoed = {}
        if isinstance(echoed, dict) and echoed.get("acknowledgedAt"):
            acknowledged_at = str(echoed["acknowledgedAt"])

        logger.info("%s acknowledged %s/%s at version %d", principal or "unknown", role_code, content_type.value, version)
        return AcknowledgementState(acknowledged_version=version, acknowledged_at=acknowledged_at)

    async def exec_dashboard(self, headcount_loader: Callable[[], Awaitable[int]]) -> ExecRollup:
        ack_map, headcount = await asyncio.gather(self.get_all(), headcount_loader())
        return exec_rollup(ack_map, headcount)


acknowledgement_service = AcknowledgementService(function_client)
