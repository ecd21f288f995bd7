from __future__ import annotations

from fastapi import APIRouter

from onboarding.api.common import no_store

router = APIRouter(prefix="/api", tags=["base"])


@router.get("")
async def api_root():
    return no_store(
        {
            "ok": True,
            "message": (
                "Base API route. Use /api/orientation-tracker/release/[employeeId] for release "
                "and /api/orientation-tracker/[employeeId] for tracker read."
            ),
        }
    )


@router.post("")
async def api_root_post():
    return no_store(
        {
            "error": "Invalid route",
            "message": "POST is not supported on /api. Use POST /api/orientation-tracker/release/[employeeId].",
        },
        status_code=405,
    )
