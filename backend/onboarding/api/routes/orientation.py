from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from onboarding.api.common import no_store, read_json_body
from onboarding.core.dependencies import get_current_user, require_supervisor
from onboarding.core.errors import InvalidRequestError
from onboarding.models.auth import UserInfo
from onboarding.services.function_client import ensure_ok
from onboarding.services.orientation import (
    INVALID_STATUS_MESSAGE,
    normalize_status,
    orientation_service,
    parse_item_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orientation-tracker", tags=["orientation-tracker"])


@router.post("/item/{item_id}")
@router.patch("/item/{item_id}")
async def update_item_status(
    item_id: str,
    request: Request,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    numeric_id = parse_item_id(item_id)
    payload = await read_json_body(request, strict=True)
    payload = payload if isinstance(payload, dict) else {}

    status = normalize_status(payload.get("status"))
    if status is None:
        raise InvalidRequestError(INVALID_STATUS_MESSAGE)

    actor = payload.get("actor")
    actor = actor.strip() if isinstance(actor, str) and actor.strip() else "unknown"

    response = ensure_ok(await orientation_service.update_item_status(numeric_id, status.value, actor))
    logger.info("Tracker item %d set to %s by %s", numeric_id, status.value, actor)
    return no_store(response.json(default=None) or {"ok": True})


@router.post("/release/{employee_id}")
async def release_orientation(employee_id: str, user: UserInfo = Depends(require_supervisor)):  # noqa: B008
    response = await orientation_service.release(employee_id, principal=user.principal)
    return no_store(response.json(default={}))


@router.get("/{employee_id}")
async def get_tracker(employee_id: str, user: UserInfo = Depends(get_current_user)):  # noqa: B008
    items = await orientation_service.get_rows(employee_id, principal=user.principal)
    return no_store({"employeeId": employee_id, "items": items})
