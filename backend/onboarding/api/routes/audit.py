from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from onboarding.api.common import no_store, read_json_body
from onboarding.core.dependencies import get_current_user
from onboarding.models.auth import UserInfo
from onboarding.services.employees import record_audit

router = APIRouter(prefix="/audit", tags=["audit"])


@router.post("/reviewed")
async def audit_reviewed(
    request: Request,
    user: UserInfo = Depends(get_current_user),  # noqa: B008
):
    event = await read_json_body(request)
    if isinstance(event, dict):
        event.setdefault("reviewedBy", user.principal)
    return no_store(record_audit(event))
