"""Days of Week matrix documents and their edit commands."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from onboarding.core.errors import InvalidRequestError, UpstreamPayloadError, VersionConflictError
from onboarding.models.days_of_week import (
    DayBuckets,
    DaysOfWeekDocument,
    Entry,
    EntryCommand,
    WeekOfMonth,
    Weekday,
)
from onboarding.services.function_client import FunctionClient, ensure_ok, function_client

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _with_ids(entries: tuple[Entry, ...]) -> tuple[Entry, ...]:
    return tuple(e if e.id else e.model_copy(update={"id": _new_id()}) for e in entries)


def _fill_days(buckets: DayBuckets) -> DayBuckets:
    return {day: _with_ids(buckets.get(day, ())) for day in Weekday}


def normalize_document(raw: Any) -> DaysOfWeekDocument:
    """Parse an upstream document, filling every weekday/week bucket and giving each entry an id.

    Top-level keys the model does not know are kept and written back on save.
    """
    try:
        doc = DaysOfWeekDocument.model_validate(raw if isinstance(raw, dict) else {})
    except ValidationError as e:
        raise UpstreamPayloadError(
            "DaysOfWeekGet",
            json.dumps(raw, default=str),
            f"Malformed Days of Week document: {e.error_count()} invalid field(s)",
        ) from e

    return doc.model_copy(
        update={
            "weekly": _fill_days(doc.weekly),
            "monthly": {week: _fill_days(doc.monthly.get(week, {})) for week in WeekOfMonth},
        }
    )


def _edit_bucket(entries: tuple[Entry, ...], command: EntryCommand) -> tuple[Entry, ...]:
    if command.op == "add_entry":
        entry = Entry(id=_new_id(), text=command.text or "", href=command.href or None)
        if command.index is None:
            return (*entries, entry)
        return (*entries[: command.index], entry, *entries[command.index :])

    index = command.index
    if index is None or not 0 <= index < len(entries):
        raise InvalidRequestError(f"No entry at index {index} for {command.day.value}")

    if command.op == "remove_entry":
        return (*entries[:index], *entries[index + 1 :])

    changes: dict[str, Any] = {}
    if command.text is not None:
        changes["text"] = command.text
    if command.href is not None:
        changes["href"] = command.href or None
    return (*entries[:index], entries[index].model_copy(update=changes), *entries[index + 1 :])


def apply_command(doc: DaysOfWeekDocument, command: EntryCommand) -> DaysOfWeekDocument:
    """Return a new document; containers off the edited path are shared with ``doc``."""
    if command.scope == "weekly":
        weekly = dict(doc.weekly)
        weekly[command.day] = _edit_bucket(doc.weekly.get(command.day, ()), command)
        return doc.model_copy(update={"weekly": weekly})

    if command.week is None:
        raise InvalidRequestError("Monthly edits require a week")
    week = dict(doc.monthly.get(command.week, {}))
    week[command.day] = _edit_bucket(week.get(command.day, ()), command)
    monthly = dict(doc.monthly)
    monthly[command.week] = week
    return doc.model_copy(update={"monthly": monthly})


def apply_commands(doc: DaysOfWeekDocument, commands: list[EntryCommand]) -> DaysOfWeekDocument:
    for command in commands:
        doc = apply_command(doc, command)
    return doc


def to_payload(doc: DaysOfWeekDocument) -> dict[str, Any]:
    payload = doc.model_dump(mode="json", by_alias=True, exclude_none=True)
    return {**(doc.model_extra or {}), **payload}


class DaysOfWeekService:
    def __init__(self, client: FunctionClient) -> None:
        self.client = client

    async def get(self, role: str) -> DaysOfWeekDocument:
        response = ensure_ok(await self.client.request("GET", "DaysOfWeekGet", segment=role))
        raw = response.json(default={})
        if not isinstance(raw, dict):
            raise UpstreamPayloadError("DaysOfWeekGet", response.text)
        return normalize_document(raw)

    async def put(self, role: str, doc: DaysOfWeekDocument, principal: str | None = None) -> DaysOfWeekDocument:
        saved = doc.model_copy(update={"updated_at": utc_now()})
        ensure_ok(
            await self.client.request(
                "PUT", "DaysOfWeekPut", segment=role, json_body=to_payload(saved), principal=principal
            )
        )
        return saved

    async def edit(
        self,
        role: str,
        commands: list[EntryCommand],
        *,
        base_version: int | None = None,
        principal: str | None = None,
    ) -> DaysOfWeekDocument:
        current = await self.get(role)
        if base_version is not None and base_version != current.version:
            raise VersionConflictError(base_version, current.version)

        edited = apply_commands(current, commands)
        if edited == current:
            return current

        logger.info("Saving Days of Week for %s (%d command(s))", role, len(commands))
        await self.put(role, edited, principal=principal)
        return await self.get(role)


days_of_week_service = DaysOfWeekService(function_client)
