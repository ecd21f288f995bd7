from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from onboarding.api.common import relay
from onboarding.core.dependencies import get_current_user
from onboarding.core.errors import InvalidRequestError
from onboarding.models.auth import UserInfo
from onboarding.services.function_client import ensure_ok, function_client

router = APIRouter(prefix="/acknowledgements", tags=["acknowledgements"])


@router.get("")
async def get_acknowledgement(
    role: str | None = None,
    content_type: str | None = Query(None, alias="contentType"),
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    if not role or not content_type:
        raise InvalidRequestError("Missing role or contentType")

    response = await function_client.request(
        "GET",
        "Acknowledgements",
        params={"role": role, "contentType": content_type},
        principal=user.principal,
    )
    return relay(ensure_ok(response))


@router.post("")
async def post_acknowledgement(
    request: Request,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    response = await function_client.request(
        "POST",
        "Acknowledgements",
        content=await request.body(),
        content_type=request.headers.get("content-type"),
        principal=user.principal,
    )
    return relay(ensure_ok(response))
