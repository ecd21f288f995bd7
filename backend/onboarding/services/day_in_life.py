"""Day in the Life board: payload normalization, edit-session diffing, batched save."""

from __future__ import annotations

import logging
from typing import Any

from onboarding.core.errors import InvalidRequestError, OnboardingError
from onboarding.models.day_in_life import (
    ChangeSet,
    DayInLifeItem,
    ItemUpdate,
    SaveResult,
    SectionKey,
    SectionsMap,
)
from onboarding.services.function_client import FunctionClient, ensure_ok, function_client

logger = logging.getLogger(__name__)

DIFF_FIELDS = ("text", "section", "order", "active")


def empty_sections() -> SectionsMap:
    return {key: [] for key in SectionKey}


def _as_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def normalize_payload(payload: Any) -> SectionsMap:
    """Coerce a DayInLifeGet answer (or a client board) into the four known sections."""
    sections = empty_sections()
    raw_sections = payload.get("sections") if isinstance(payload, dict) else None
    if not isinstance(raw_sections, dict):
        return sections

    for key, items in raw_sections.items():
        try:
            section = SectionKey(key)
        except ValueError:
            continue
        sections[section] = [
            DayInLifeItem(
                id=str(item.get("id")),
                text=str(item.get("text") or ""),
                order=_as_int(item.get("order")),
                active=bool(item.get("active")),
                role=str(item.get("role") or ""),
                section=section,
            )
            for item in items or []
            if isinstance(item, dict)
        ]
    return sections


def summary_meta(payload: Any) -> tuple[int, str | None]:
    """``(currentVersion, updatedAt)`` from the top level or a ``meta`` block; version defaults to 1."""
    if not isinstance(payload, dict):
        return 1, None
    meta = payload.get("meta") if isinstance(payload.get("meta"), dict) else {}

    version = payload.get("currentVersion")
    if not isinstance(version, int) or isinstance(version, bool):
        version = meta.get("currentVersion")
    updated_at = payload.get("updatedAt")
    if not isinstance(updated_at, str):
        updated_at = meta.get("updatedAt")

    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        version = 1
    return version, updated_at if isinstance(updated_at, str) else None


def _flatten(sections: SectionsMap) -> dict[str, DayInLifeItem]:
    by_id: dict[str, DayInLifeItem] = {}
    for items in sections.values():
        for item in items:
            by_id[item.id] = item
    return by_id


def update_patch(before: DayInLifeItem, after: DayInLifeItem) -> dict[str, Any]:
    patch: dict[str, Any] = {}
    for name in DIFF_FIELDS:
        new = getattr(after, name)
        if getattr(before, name) != new:
            patch[name] = new.value if isinstance(new, SectionKey) else new
    return patch


def compute_change_set(before: SectionsMap, after: SectionsMap) -> ChangeSet:
    prev = _flatten(before)
    nxt = _flatten(after)

    changes = ChangeSet()
    for item_id, old in prev.items():
        new = nxt.get(item_id)
        if new is None:
            changes.deletes.append(old)
        elif update_patch(old, new):
            changes.updates.append(ItemUpdate(id=item_id, before=old, after=new))

    changes.creates.extend(item for item_id, item in nxt.items() if item_id not in prev)
    return changes


class ChangeSetAborted(OnboardingError):
    """A write inside a batched save failed; earlier writes stay applied."""

    def __init__(self, stage: str, cause: OnboardingError, applied: SaveResult) -> None:
        super().__init__(f"{stage} failed: {cause.message}")
        self.status_code = cause.status_code
        self.cause = cause
        self.applied = applied

    def envelope(self) -> dict[str, Any]:
        return {
            **self.cause.envelope(),
            "message": self.message,
            "applied": self.applied.model_dump(by_alias=True),
        }


class DayInLifeService:
    def __init__(self, client: FunctionClient) -> None:
        self.client = client

    async def get_summary(self) -> Any:
        response = ensure_ok(await self.client.request("GET", "DayInLifeGet"))
        return response.json(default={})

    async def apply_change_set(self, changes: ChangeSet, role: str, principal: str | None = None) -> SaveResult:
        """Deletes, then updates, then creates, one request at a time; the first failure stops the batch."""
        if changes.creates and not role:
            raise InvalidRequestError("Please select a role before adding new items.")

        result = SaveResult(changed=not changes.empty)
        stage = "Delete"
        try:
            for item in changes.deletes:
                ensure_ok(await self.client.request("DELETE", "DayInLifeItemDelete", segment=item.id, principal=principal))
                result.deleted += 1

            stage = "Update"
            for update in changes.updates:
                patch = update_patch(update.before, update.after)
                if not patch:
                    continue
                ensure_ok(
                    await self.client.request(
                        "PATCH", "DayInLifeItemUpdate", segment=update.id, json_body=patch, principal=principal
                    )
                )
                result.updated += 1

            stage = "Create"
            for item in changes.creates:
                body = {
                    "role": role,
                    "section": item.section.value,
                    "text": item.text,
                    "order": item.order,
                    "active": True,
                }
                ensure_ok(await self.client.request("POST", "DayInLifeItemCreate", json_body=body, principal=principal))
                result.created += 1
        except OnboardingError as e:
            logger.error("Day in the Life save aborted at %s after %s", stage, result.model_dump())
            raise ChangeSetAborted(stage, e, result) from e

        logger.info("Day in the Life saved for role %s: %s", role or "-", result.model_dump())
        return result


day_in_life_service = DayInLifeService(function_client)
