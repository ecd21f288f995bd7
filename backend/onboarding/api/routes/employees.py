from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from onboarding.api.common import no_store, read_json_body, relay
from onboarding.core.dependencies import get_current_user, require_supervisor
from onboarding.models.auth import UserInfo
from onboarding.services.employees import employee_service

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("")
async def list_employees(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return no_store({"items": await employee_service.list_profiles()})


@router.post("")
async def create_employee(request: Request, user: UserInfo = Depends(require_supervisor)):  # noqa: B008
    body = await read_json_body(request)
    created = await employee_service.create(body, principal=user.principal)
    return relay(created, status_code=200)


@router.get("/summary")
async def employee_summary(top: str = "500", user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return no_store(await employee_service.get_summary(top or "500"))


@router.post("/reviewed/{employee_id}")
async def mark_reviewed(
    employee_id: str,
    request: Request,
    user: UserInfo = Depends(require_supervisor),  # noqa: B008
):
    body = await read_json_body(request)
    body = body if isinstance(body, dict) else {}
    result = await employee_service.mark_reviewed(
        employee_id,
        reviewed=body.get("reviewed"),
        reviewed_at=body.get("reviewedAt"),
        reviewed_by=body.get("reviewedBy"),
    )
    return no_store(result)


@router.get("/{employee_id}")
async def get_employee(employee_id: str, user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return no_store(await employee_service.get_profile(employee_id))
