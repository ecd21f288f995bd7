from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from onboarding.core.errors import InvalidRequestError, OnboardingError, UpstreamUnreachableError
from onboarding.models.orientation import RosterStatus
from onboarding.services.employees import (
    EmployeeService,
    build_create_payload,
    created_id,
    employee_service,
    profile_fields,
    record_audit,
    role_display,
)
from tests.conftest import upstream

SUMMARY = {
    "items": [
        {"id": "11", "name": "Jane Doe", "roleCode": "CRD", "modified": "2025-02-01", "reviewed": ""},
        {"id": "12", "name": "John Roe", "roleCode": "ZZZ"},
        {"id": "13", "name": "Kim Lee", "roleCode": ""},
    ]
}


def _tracker(*statuses):
    return {"items": [{"id": str(i), "fields": {"Title": f"Item {i}", "Status": s}} for i, s in enumerate(statuses)]}


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({}, "Missing required field: title"),
        ({"title": "  ", "startDate": "2025-01-15", "roleCode": "CRD"}, "Missing required field: title"),
        ({"title": "Jane"}, "Missing required field: startDate"),
        ({"title": "Jane", "startDate": "2025-01-15"}, "Provide roleLookupId (number) OR roleCode (string)"),
    ],
)
def test_build_create_payload_validation(body, message):
    with pytest.raises(InvalidRequestError) as exc_info:
        build_create_payload(body)
    assert exc_info.value.message == message


def test_build_create_payload_shapes_body():
    payload = build_create_payload(
        {
            "title": " Jane Doe ",
            "startDate": "2025-01-15",
            "roleLookupId": 4,
            "email": "jane@integracare.org",
            "supervisorName": "Sam",
        }
    )

    assert payload["title"] == "Jane Doe"
    assert payload["roleLookupId"] == 4
    assert payload["roleCode"] == ""
    assert payload["employeeEmail"] == "jane@integracare.org"
    assert payload["supervisorName"] == "Sam"
    assert payload["supervisorLookupId"] is None


def test_role_display():
    assert role_display("CRD") == "CRD — Community Relations Director"
    assert role_display("ZZZ") == "ZZZ"
    assert role_display("") == "—"
    assert role_display(None) == "—"


def test_created_id_and_profile_fields():
    assert created_id({"id": 77}) == "77"
    assert created_id({"employeeProfileId": "78"}) == "78"
    assert created_id({"employeeId": "79"}) == "79"
    assert created_id({"id": ""}) is None
    assert created_id([]) is None

    assert profile_fields({"item": {"fields": {"Title": "A"}}}) == {"Title": "A"}
    assert profile_fields({"fields": {"Title": "B"}}) == {"Title": "B"}
    assert profile_fields({"Title": "C"}) == {"Title": "C"}


def test_record_audit_is_local():
    assert record_audit({"employeeId": "1"}) == {"ok": True, "message": "Audit logged (local no-op)"}


@pytest.mark.anyio
async def test_roster_computes_status_per_row(fake_upstream):
    fake_upstream.on("GET", "EmployeeListSummary", upstream(200, SUMMARY))
    trackers = {
        "11": upstream(200, _tracker("Completed", "Completed")),
        "12": upstream(200, _tracker("Not Started", "In Progress")),
        "13": upstream(500, {"error": "tracker down"}),
    }
    fake_upstream.on("GET", "OrientationTrackerGet", lambda call: trackers[call["query"]["employeeProfileId"]])

    rows = await employee_service.roster()

    assert [r.id for r in rows] == ["11", "12", "13"]
    assert [r.status for r in rows] == [RosterStatus.COMPLETED, RosterStatus.IN_PROGRESS, RosterStatus.NOT_RELEASED]
    assert [r.released for r in rows] == [True, True, False]
    assert rows[0].role == "CRD — Community Relations Director"
    assert rows[1].role == "ZZZ"
    assert rows[2].role == "—"
    assert fake_upstream.calls_to("EmployeeListSummary")[0]["query"]["top"] == "500"


@pytest.mark.anyio
async def test_roster_bounds_tracker_concurrency(function_settings, monkeypatch):
    monkeypatch.setattr(function_settings, "TRACKER_STATUS_CONCURRENCY", 2)
    in_flight = 0
    peak = 0

    async def get_rows(employee_id, principal=None):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return []

    orientation = MagicMock()
    orientation.get_rows = get_rows
    service = EmployeeService(MagicMock(), orientation, function_settings)
    service.get_summary = AsyncMock(return_value={"items": [{"id": str(i), "name": f"E{i}"} for i in range(7)]})

    rows = await service.roster()

    assert len(rows) == 7
    assert peak == 2


@pytest.mark.anyio
async def test_headcount_falls_back_to_zero(fake_upstream):
    fake_upstream.on("GET", "EmployeeListSummary", UpstreamUnreachableError("down"))
    assert await employee_service.headcount() == 0


@pytest.mark.anyio
async def test_detail_builds_header_and_checklist(fake_upstream):
    fake_upstream.on(
        "GET",
        "EmployeeProfilesGet",
        upstream(200, {"item": {"fields": {"Title": "Jane Doe", "Modified": "2025-02-02"}}}),
    )
    tracker = _tracker("Completed", "Not Started")
    tracker["items"][0]["fields"]["RoleNameText"] = "Community Relations Director"
    fake_upstream.on("GET", "OrientationTrackerGet", upstream(200, tracker))

    detail = await employee_service.detail("11", can_edit=True)

    assert detail.employee.name == "Jane Doe"
    assert detail.employee.role == "Community Relations Director"
    assert detail.employee.last_updated == "2025-02-02"
    assert detail.summary.completed == 1
    assert detail.all_completed is False
    assert detail.released is True
    assert detail.can_edit is True


@pytest.mark.anyio
async def test_onboard_creates_then_releases(fake_upstream):
    fake_upstream.on("POST", "EmployeeProfileCreate", upstream(201, {"id": 501, "title": "Jane Doe"}))
    fake_upstream.on("POST", "OrientationUpdater", upstream(200, {"created": 12}))

    result = await employee_service.onboard(
        {"title": "Jane Doe", "startDate": "2025-01-15", "roleCode": "CRD"}, principal="sam@integracare.org"
    )

    assert result.employee_id == "501"
    assert result.released is True
    assert fake_upstream.calls_to("OrientationUpdater")[0]["query"]["employeeProfileId"] == "501"
    assert [c["function"] for c in fake_upstream.calls] == ["EmployeeProfileCreate", "OrientationUpdater"]


@pytest.mark.anyio
async def test_onboard_without_id_fails(fake_upstream):
    fake_upstream.on("POST", "EmployeeProfileCreate", upstream(200, {"ok": True}))

    with pytest.raises(OnboardingError):
        await employee_service.onboard({"title": "Jane", "startDate": "2025-01-15", "roleCode": "CRD"})

    assert fake_upstream.calls_to("OrientationUpdater") == []


@pytest.mark.anyio
async def test_review_requires_all_items_completed(fake_upstream):
    fake_upstream.on("GET", "OrientationTrackerGet", upstream(200, _tracker("Completed", "In Progress")))

    with pytest.raises(InvalidRequestError) as exc_info:
        await employee_service.review("11", "sam@integracare.org")

    assert exc_info.value.message == "All orientation items must be Completed before marking as Reviewed."
    assert fake_upstream.calls_to("EmployeeProfileReviewed") == []


@pytest.mark.anyio
async def test_review_flags_profile(fake_upstream):
    fake_upstream.on("GET", "OrientationTrackerGet", upstream(200, _tracker("Completed", "Completed")))
    fake_upstream.on("POST", "EmployeeProfileReviewed", upstream(200, {"ok": True}))

    result = await employee_service.review("11", "sam@integracare.org")

    call = fake_upstream.calls_to("EmployeeProfileReviewed")[0]
    assert call["body"]["reviewed"] is True
    assert call["body"]["reviewedBy"] == "sam@integracare.org"
    assert "x-functions-key" not in call["headers"]
    assert result["reviewedFlagSaved"] is True
    assert result["reviewedAt"] == call["body"]["reviewedAt"]


@pytest.mark.anyio
async def test_review_flag_write_is_best_effort(fake_upstream):
    fake_upstream.on("GET", "OrientationTrackerGet", upstream(200, _tracker("Completed")))
    fake_upstream.on("POST", "EmployeeProfileReviewed", upstream(500, {"error": "nope"}))

    result = await employee_service.review("11", "sam@integracare.org")

    assert result["reviewedFlagSaved"] is False
