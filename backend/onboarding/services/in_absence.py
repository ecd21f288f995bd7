"""In the Absence Of role documents.

The upstream summary is ``{ok, version, updatedAt, roles: {role: payload}, count}``
where each role payload carries ``sheets`` of free-form tables.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any

from onboarding.core.errors import InvalidRequestError, VersionConflictError
from onboarding.models.in_absence import (
    AbsenceCommand,
    ColumnRef,
    ColumnView,
    ResponsibilityTable,
    SheetView,
    TableRow,
)
from onboarding.services.function_client import FunctionClient, ensure_ok, function_client

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def _as_cell(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def build_columns(raw_columns: list[dict[str, Any]]) -> list[ColumnRef]:
    seen: dict[str, int] = {}
    columns: list[ColumnRef] = []
    for idx, col in enumerate(raw_columns):
        key = col.get("key") or None
        raw_label = col.get("label") or None
        label = raw_label or key or f"Column {idx + 1}"
        base = raw_label or key or f"col_{idx + 1}"

        n = seen.get(base, 0) + 1
        seen[base] = n
        columns.append(
            ColumnRef(
                id=f"{_WHITESPACE.sub('_', key or raw_label or 'col')}_{idx}",
                label=label if n == 1 else f"{label} ({n})",
                storage_key=base if n == 1 else f"{base} ({n})",
                key=key,
            )
        )
    return columns


def read_cell(row: TableRow, col: ColumnRef) -> str:
    if col.id in row.edits:
        return row.edits[col.id]
    for name in (col.storage_key, col.key, col.label, col.id):
        if name and name in row.raw:
            return _as_cell(row.raw[name])
    return ""


def to_record(row: TableRow, columns: list[ColumnRef]) -> dict[str, Any]:
    """Upstream record for a row: the original keys plus edited cells (mirrored into ``key``)."""
    record = dict(row.raw)
    for col in columns:
        if col.id not in row.edits:
            continue
        value = row.edits[col.id]
        record[col.storage_key] = value
        if col.key:
            record[col.key] = value
    return record


def table_from_sheet(sheet: dict[str, Any]) -> ResponsibilityTable:
    table = sheet.get("table") if isinstance(sheet.get("table"), dict) else {}
    raw_columns = [c for c in table.get("columns") or [] if isinstance(c, dict)]
    raw_rows = [r for r in table.get("rows") or [] if isinstance(r, dict)]
    return ResponsibilityTable(
        columns=build_columns(raw_columns),
        rows=[TableRow(raw=dict(r)) for r in raw_rows],
    )


def sheet_with_table(sheet: dict[str, Any], table: ResponsibilityTable) -> dict[str, Any]:
    next_sheet = dict(sheet)
    next_table = dict(sheet.get("table") or {})
    next_table["rows"] = [to_record(row, table.columns) for row in table.rows]
    next_sheet["table"] = next_table
    return next_sheet


def sheet_view(sheet: dict[str, Any]) -> SheetView:
    table = table_from_sheet(sheet)
    return SheetView(
        name=sheet.get("name"),
        title=sheet.get("title"),
        meta_lines=[str(line) for line in sheet.get("metaLines") or []],
        objective=sheet.get("objective"),
        columns=[ColumnView(id=c.id, label=c.label) for c in table.columns],
        rows=[{c.id: read_cell(row, c) for c in table.columns} for row in table.rows],
    )


def apply_command(table: ResponsibilityTable, command: AbsenceCommand) -> None:
    if command.op == "add_row":
        raw: dict[str, Any] = {}
        for col in table.columns:
            raw[col.storage_key] = ""
            if col.key:
                raw[col.key] = ""
        table.rows.append(TableRow(raw=raw))
        return

    if command.row is None or not 0 <= command.row < len(table.rows):
        raise InvalidRequestError(f"No row at index {command.row}")

    if command.op == "remove_row":
        del table.rows[command.row]
        return

    col = table.column(command.column or "")
    if col is None:
        raise InvalidRequestError(f"Unknown column: {command.column}")
    table.rows[command.row].edits[col.id] = command.value


def apply_commands(payload: dict[str, Any], commands: list[AbsenceCommand]) -> dict[str, Any]:
    """Apply table edits to a role payload, returning a new payload; ``payload`` is left untouched."""
    sheets = [s for s in payload.get("sheets") or [] if isinstance(s, dict)]
    tables: dict[int, ResponsibilityTable] = {}

    for command in commands:
        if not 0 <= command.sheet < len(sheets):
            raise InvalidRequestError(f"No sheet at index {command.sheet}")
        table = tables.get(command.sheet)
        if table is None:
            table = tables[command.sheet] = table_from_sheet(sheets[command.sheet])
        apply_command(table, command)

    if not tables:
        return payload

    next_payload = copy.copy(payload)
    next_payload["sheets"] = [
        sheet_with_table(sheet, tables[idx]) if idx in tables else sheet for idx, sheet in enumerate(sheets)
    ]
    return next_payload


def current_version(payload: dict[str, Any] | None, summary: dict[str, Any] | None = None) -> int:
    for source in (payload or {}, summary or {}):
        version = source.get("version")
        if isinstance(version, int) and not isinstance(version, bool):
            return version if version > 0 else 1
    return 1


def updated_at(payload: dict[str, Any] | None, summary: dict[str, Any] | None = None) -> str | None:
    for source in (payload or {}, summary or {}):
        value = source.get("updatedAt")
        if isinstance(value, str):
            return value
    return None


class InAbsenceService:
    def __init__(self, client: FunctionClient) -> None:
        self.client = client

    async def get_summary(self) -> dict[str, Any]:
        response = ensure_ok(await self.client.request("GET", "InAbsenceOfGet"))
        summary = response.json(default={})
        return summary if isinstance(summary, dict) else {}

    async def get_role(self, role: str) -> tuple[dict[str, Any] | None, dict[str, Any]]:
        summary = await self.get_summary()
        roles = summary.get("roles") if isinstance(summary.get("roles"), dict) else {}
        payload = roles.get(role)
        return (payload if isinstance(payload, dict) else None), summary

    async def put_role(self, role: str, payload: dict[str, Any], principal: str | None = None) -> Any:
        if not role.strip():
            raise InvalidRequestError("Missing role")
        response = ensure_ok(
            await self.client.request("PUT", "InAbsenceOfPut", segment=role, json_body=payload, principal=principal)
        )
        return response.json(default={"ok": True})

    async def edit(
        self,
        role: str,
        commands: list[AbsenceCommand],
        *,
        base_version: int | None = None,
        principal: str | None = None,
    ) -> tuple[dict[str, Any], bool]:
        """Returns ``(payload, saved)``; ``saved`` is False when the edits changed nothing."""
        payload, summary = await self.get_role(role)
        if payload is None:
            raise InvalidRequestError(f"No In the Absence Of data for role {role}")

        version = current_version(payload, summary)
        if base_version is not None and base_version != version:
            raise VersionConflictError(base_version, version)

        edited = apply_commands(payload, commands)
        if edited == payload:
            return payload, False

        logger.info("Saving In the Absence Of for %s (%d command(s))", role, len(commands))
        await self.put_role(role, edited, principal=principal)
        return edited, True


in_absence_service = InAbsenceService(function_client)
