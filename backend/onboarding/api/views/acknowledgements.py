from __future__ import annotations

from fastapi import APIRouter, Depends

from onboarding.api.common import no_store
from onboarding.core.dependencies import get_current_user
from onboarding.models.acknowledgement import ConfirmRequest
from onboarding.models.auth import UserInfo
from onboarding.services.acknowledgements import acknowledgement_service, build_banner

router = APIRouter(prefix="/acknowledgements", tags=["views"])


@router.post("/confirm")
async def confirm(body: ConfirmRequest, user: UserInfo = Depends(get_current_user)):  # noqa: B008
    state = await acknowledgement_service.confirm(
        body.role_code, body.content_type, body.current_version, principal=user.principal
    )
    version = state.acknowledged_version or 1
    return no_store(build_banner(body.role_code, body.content_type, version, state))
