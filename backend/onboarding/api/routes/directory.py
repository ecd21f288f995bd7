from __future__ import annotations

from fastapi import APIRouter, Depends

from onboarding.api.common import no_store
from onboarding.core.dependencies import get_current_user
from onboarding.models.auth import UserInfo
from onboarding.services.directory import directory_service

router = APIRouter(prefix="/directory", tags=["directory"])


@router.get("/users/search")
async def search_users(q: str = "", user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return no_store(await directory_service.fetch_raw(q))
