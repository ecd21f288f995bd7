from __future__ import annotations

from fastapi import APIRouter, Depends

from onboarding.core.config import settings
from onboarding.core.dependencies import get_current_user
from onboarding.models.auth import UserInfo
from onboarding.services.directory import directory_service
from onboarding.services.function_client import function_client

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    services = {
        "azure_functions": "configured" if settings.functions_configured else "not_configured",
        "directory_search": "configured"
        if (settings.DIRECTORY_SEARCH_URL or settings.AZURE_FUNCTION_BASE_URL)
        else "not_configured",
        "azure_ad": "configured" if settings.auth_configured else "not_configured",
    }
    return {
        "status": "healthy" if settings.functions_configured else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
    }


@router.get("/protected")
async def health_protected(user: UserInfo = Depends(get_current_user)):  # noqa: B008
    return {"status": "ok", "user": user.model_dump()}


@router.get("/ready")
async def readiness():
    return {"ready": function_client.initialized and directory_service.initialized}
