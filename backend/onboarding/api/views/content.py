"""Role documents: Day in the Life, Days of Week and In the Absence Of."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from onboarding.api.common import no_store
from onboarding.core.dependencies import get_edit_context, get_request_context
from onboarding.models.acknowledgement import AcknowledgementBanner, ContentType
from onboarding.models.auth import RequestContext, ViewMode
from onboarding.models.day_in_life import DayInLifeSaveRequest, SaveResult
from onboarding.models.days_of_week import DaysOfWeekEdits
from onboarding.models.in_absence import InAbsenceEdits
from onboarding.services.acknowledgements import acknowledgement_service, build_banner
from onboarding.services.day_in_life import compute_change_set, day_in_life_service, normalize_payload, summary_meta
from onboarding.services.days_of_week import days_of_week_service, to_payload
from onboarding.services.in_absence import current_version, in_absence_service, sheet_view, updated_at

router = APIRouter(tags=["views"])


async def _banner(
    ctx: RequestContext, role: str, content_type: ContentType, version: int, updated: str | None
) -> AcknowledgementBanner | None:
    if ctx.mode is not ViewMode.EMPLOYEE or not role:
        return None
    state = await acknowledgement_service.try_get_state(role, content_type, principal=ctx.user.principal)
    return build_banner(role, content_type, version, state, updated)


def _sheets(payload: dict | None) -> list:
    sheets = (payload or {}).get("sheets")
    return [sheet_view(s) for s in sheets if isinstance(s, dict)] if isinstance(sheets, list) else []


@router.get("/day-in-life")
async def day_in_life(role: str = "", ctx: RequestContext = Depends(get_request_context)):  # noqa: B008
    role = role.strip()
    summary = await day_in_life_service.get_summary()
    sections = normalize_payload(summary)
    version, updated = summary_meta(summary)

    return no_store(
        {
            "role": role,
            "readOnly": ctx.read_only,
            "currentVersion": version,
            "updatedAt": updated,
            "sections": {key.value: items for key, items in sections.items()},
            "banner": await _banner(ctx, role, ContentType.DAY_IN_LIFE, version, updated),
        }
    )


@router.post("/day-in-life/save")
async def save_day_in_life(
    body: DayInLifeSaveRequest,
    ctx: RequestContext = Depends(get_edit_context),  # noqa: B008
):
    before = normalize_payload({"sections": body.before})
    after = normalize_payload({"sections": body.after})
    changes = compute_change_set(before, after)
    if changes.empty:
        return no_store(SaveResult(changed=False))

    result = await day_in_life_service.apply_change_set(changes, body.role.strip(), principal=ctx.user.principal)
    return no_store(result)


@router.get("/days-of-week/{role}")
async def days_of_week(role: str, ctx: RequestContext = Depends(get_request_context)):  # noqa: B008
    doc = await days_of_week_service.get(role)
    return no_store({"role": role, "readOnly": ctx.read_only, "document": to_payload(doc)})


@router.post("/days-of-week/{role}/edits")
async def edit_days_of_week(
    role: str,
    body: DaysOfWeekEdits,
    ctx: RequestContext = Depends(get_edit_context),  # noqa: B008
):
    doc = await days_of_week_service.edit(
        role, body.commands, base_version=body.base_version, principal=ctx.user.principal
    )
    return no_store({"role": role, "document": to_payload(doc)})


@router.get("/in-the-absence")
async def in_the_absence(role: str = "", ctx: RequestContext = Depends(get_request_context)):  # noqa: B008
    role = role.strip()
    summary = await in_absence_service.get_summary()
    roles = summary.get("roles") if isinstance(summary.get("roles"), dict) else {}
    payload = roles.get(role) if role else None
    payload = payload if isinstance(payload, dict) else None

    version = current_version(payload, summary)
    updated = updated_at(payload, summary)
    return no_store(
        {
            "roles": sorted(roles),
            "role": role,
            "readOnly": ctx.read_only,
            "currentVersion": version,
            "updatedAt": updated,
            "sheets": _sheets(payload),
            "banner": await _banner(ctx, role, ContentType.IN_ABSENCE, version, updated),
        }
    )


@router.post("/in-the-absence/{role}/edits")
async def edit_in_the_absence(
    role: str,
    body: InAbsenceEdits,
    ctx: RequestContext = Depends(get_edit_context),  # noqa: B008
):
    payload, saved = await in_absence_service.edit(
        role.strip(), body.commands, base_version=body.base_version, principal=ctx.user.principal
    )
    return no_store(
        {
            "role": role.strip(),
            "saved": saved,
            "currentVersion": current_version(payload),
            "sheets": _sheets(payload),
        }
    )
