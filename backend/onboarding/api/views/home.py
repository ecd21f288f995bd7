from __future__ import annotations

from fastapi import APIRouter, Depends

from onboarding.api.common import no_store
from onboarding.core.dependencies import get_request_context
from onboarding.models.auth import RequestContext, ViewMode
from onboarding.services.acknowledgements import acknowledgement_service, employee_rows
from onboarding.services.employees import employee_service
from onboarding.services.navigation import home_view, navigation

router = APIRouter(tags=["views"])


@router.get("/home")
async def home(ctx: RequestContext = Depends(get_request_context)):  # noqa: B008
    return no_store(home_view(ctx))


@router.get("/dashboard")
async def dashboard(ctx: RequestContext = Depends(get_request_context)):  # noqa: B008
    content: dict = {"mode": ctx.mode.value, "navigation": navigation(ctx)}

    if ctx.mode is ViewMode.EMPLOYEE:
        ack_map = await acknowledgement_service.get_all()
        content["rows"] = employee_rows(ack_map, ctx.user.principal)
    elif ctx.mode is ViewMode.EXEC:
        content["rollup"] = await acknowledgement_service.exec_dashboard(employee_service.headcount)
    else:
        content["message"] = "Supervisor dashboard coming soon."

    return no_store(content)
