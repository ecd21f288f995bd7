"""In the Absence Of: per-role coverage tables.

Upstream rows are free-form records keyed by whatever headers the source
spreadsheet had. ``ResponsibilityTable`` gives them an ordered column
identity list and keeps edits as a sparse column-id -> value overlay on
top of the untouched upstream record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from onboarding.models.common import CamelModel


@dataclass(frozen=True)
class ColumnRef:
    id: str
    label: str
    storage_key: str
    key: str | None = None


@dataclass
class TableRow:
    raw: dict[str, Any] = field(default_factory=dict)
    edits: dict[str, str] = field(default_factory=dict)


@dataclass
class ResponsibilityTable:
    columns: list[ColumnRef] = field(default_factory=list)
    rows: list[TableRow] = field(default_factory=list)

    def column(self, column_id: str) -> ColumnRef | None:
        for col in self.columns:
            if col.id == column_id:
                return col
        return None


class AbsenceCommand(CamelModel):
    """One table edit against the sheet at ``sheet`` (index into the role's sheets)."""

    op: Literal["set_cell", "add_row", "remove_row"]
    sheet: int = 0
    row: int | None = None
    column: str | None = None
    value: str = ""


class InAbsenceEdits(CamelModel):
    base_version: int | None = None
    commands: list[AbsenceCommand] = []


class ColumnView(CamelModel):
    id: str
    label: str


class SheetView(CamelModel):
    name: str | None = None
    title: str | None = None
    meta_lines: list[str] = []
    objective: str | None = None
    columns: list[ColumnView] = []
    rows: list[dict[str, str]] = []
