"""Roster, new-employee flow and the per-employee checklist."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request

from onboarding.api.common import no_store, read_json_body
from onboarding.core.dependencies import get_request_context, require_supervisor
from onboarding.core.errors import InvalidRequestError
from onboarding.models.auth import RequestContext, UserInfo
from onboarding.models.orientation import MyOrientation, StatusChangeRequest
from onboarding.services.employees import employee_service
from onboarding.services.orientation import (
    all_completed,
    build_checklist,
    orientation_service,
    parse_item_id,
    summarize,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["views"])


def _can_edit(ctx: RequestContext) -> bool:
    return not ctx.read_only and ctx.user.has_role("supervisor", "admin")


@router.get("/employees")
async def roster(top: str = "500", ctx: RequestContext = Depends(get_request_context)):  # noqa: B008
    rows = await employee_service.roster(top or "500")
    return no_store({"items": rows, "canCreate": _can_edit(ctx)})


@router.post("/employees")
async def onboard_employee(request: Request, user: UserInfo = Depends(require_supervisor)):  # noqa: B008
    body = await read_json_body(request, strict=True)
    result = await employee_service.onboard(body, principal=user.principal)
    return no_store({"employeeId": result.employee_id, "released": result.released})


@router.get("/employees/{employee_id}")
async def employee_detail(employee_id: str, ctx: RequestContext = Depends(get_request_context)):  # noqa: B008
    return no_store(await employee_service.detail(employee_id, can_edit=_can_edit(ctx)))


@router.post("/employees/{employee_id}/items/{item_id}/status")
async def change_item_status(
    employee_id: str,
    item_id: str,
    body: StatusChangeRequest,
    ctx: RequestContext = Depends(get_request_context),  # noqa: B008
):
    numeric_id = parse_item_id(item_id)
    await orientation_service.set_item_status_with_fallback(numeric_id, body.status, ctx.user.principal)
    logger.info("Employee %s item %d -> %s", employee_id, numeric_id, body.status.value)
    return no_store(await employee_service.detail(employee_id, can_edit=_can_edit(ctx)))


@router.post("/employees/{employee_id}/reviewed")
async def mark_reviewed(employee_id: str, user: UserInfo = Depends(require_supervisor)):  # noqa: B008
    return no_store(await employee_service.review(employee_id, user.principal))


@router.get("/me/orientation")
async def my_orientation(
    employee_id: str | None = Query(None, alias="employeeId"),
    ctx: RequestContext = Depends(get_request_context),  # noqa: B008
):
    employee_id = (employee_id or "").strip()
    if not employee_id:
        raise InvalidRequestError("Missing employeeId")

    rows = await orientation_service.get_rows(employee_id, principal=ctx.user.principal)
    sections = build_checklist(rows)
    items = sections.items
    return no_store(
        MyOrientation(
            employee_id=employee_id,
            general=sections.general,
            department=sections.department,
            summary=summarize(items),
            all_completed=all_completed(items),
        )
    )
