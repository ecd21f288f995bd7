from fastapi import APIRouter, Depends

from onboarding.api.common import require_upstream_config
from onboarding.api.routes import acknowledgements, audit, day_in_life, directory, employees, in_absence, orientation
from onboarding.api.views import acknowledgements as ack_views
from onboarding.api.views import content, home
from onboarding.api.views import directory as directory_views
from onboarding.api.views import employees as employee_views

upstream = [Depends(require_upstream_config)]

api_router = APIRouter(prefix="/api")
api_router.include_router(audit.router)
api_router.include_router(directory.router)
api_router.include_router(acknowledgements.router, dependencies=upstream)
api_router.include_router(day_in_life.router, dependencies=upstream)
api_router.include_router(employees.router, dependencies=upstream)
api_router.include_router(in_absence.router, dependencies=upstream)
api_router.include_router(orientation.router, dependencies=upstream)

views_router = APIRouter(prefix="/views")
views_router.include_router(home.router)
views_router.include_router(directory_views.router)
views_router.include_router(ack_views.router, dependencies=upstream)
views_router.include_router(content.router, dependencies=upstream)
views_router.include_router(employee_views.router, dependencies=upstream)
