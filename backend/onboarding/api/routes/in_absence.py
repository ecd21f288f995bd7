from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from onboarding.api.common import relay
from onboarding.core.dependencies import get_current_user, require_supervisor
from onboarding.core.errors import InvalidRequestError
from onboarding.models.auth import UserInfo
from onboarding.services.function_client import ensure_ok, function_client

router = APIRouter(prefix="/in-the-absence", tags=["in-the-absence"])


@router.get("/summary")
async def in_absence_summary(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return relay(ensure_ok(await function_client.request("GET", "InAbsenceOfGet")))


@router.put("/{role}")
async def put_in_absence(
    role: str,
    request: Request,
    user: UserInfo = Depends(require_supervisor),  # noqa: B008
):
    normalized = role.strip()
    if not normalized:
        raise InvalidRequestError("Missing role")

    response = await function_client.request(
        "PUT",
        "InAbsenceOfPut",
        segment=normalized,
        content=await request.body(),
        content_type="application/json",
        principal=user.principal,
    )
    return relay(ensure_ok(response))
