from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from onboarding.api.common import relay
from onboarding.core.dependencies import get_current_user, require_supervisor
from onboarding.models.auth import UserInfo
from onboarding.services.function_client import ensure_ok, function_client

router = APIRouter(prefix="/day-in-life", tags=["day-in-life"])


@router.get("/summary")
async def day_in_life_summary(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return relay(ensure_ok(await function_client.request("GET", "DayInLifeGet")))


@router.get("/days-of-week/{role}")
async def get_days_of_week(role: str, user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return relay(ensure_ok(await function_client.request("GET", "DaysOfWeekGet", segment=role)))


@router.put("/days-of-week/{role}")
async def put_days_of_week(
    role: str,
    request: Request,
    user: UserInfo = Depends(require_supervisor),  # noqa: B008
):
    response = await function_client.request(
        "PUT",
        "DaysOfWeekPut",
        segment=role,
        content=await request.body(),
        content_type="application/json",
        principal=user.principal,
    )
    return relay(ensure_ok(response))


@router.post("/item")
async def create_item(request: Request, user: UserInfo = Depends(require_supervisor)):  # noqa: B008
    response = await function_client.request(
        "POST",
        "DayInLifeItemCreate",
        content=await request.body(),
        content_type=request.headers.get("content-type"),
        principal=user.principal,
    )
    return relay(ensure_ok(response))


@router.patch("/item/{item_id}")
async def update_item(
    item_id: str,
    request: Request,
    user: UserInfo = Depends(require_supervisor),  # noqa: B008
):
    response = await function_client.request(
        "PATCH",
        "DayInLifeItemUpdate",
        segment=item_id,
        content=await request.body(),
        content_type=request.headers.get("content-type"),
        principal=user.principal,
    )
    return relay(ensure_ok(response))


@router.delete("/item/{item_id}")
async def delete_item(item_id: str, user: UserInfo = Depends(require_supervisor)):  # noqa: B008
    response = await function_client.request(
        "DELETE", "DayInLifeItemDelete", segment=item_id, principal=user.principal
    )
    return relay(ensure_ok(response))
