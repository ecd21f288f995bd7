"""Caller identity and the per-request view context."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class UserInfo(BaseModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    roles: list[str] = []

    @property
    def principal(self) -> str:
        return self.email or self.id or "unknown"

    def has_role(self, *roles: str) -> bool:
        return any(r in self.roles for r in roles)


class ViewMode(str, Enum):
    SUPERVISOR = "supervisor"
    EMPLOYEE = "employee"
    EXEC = "exec"

    @classmethod
    def parse(cls, raw: str | None) -> ViewMode:
        value = (raw or "").strip().lower()
        for mode in cls:
            if mode.value == value:
                return mode
        return cls.SUPERVISOR


class RequestContext(BaseModel):
    mode: ViewMode = ViewMode.SUPERVISOR
    user: UserInfo

    @property
    def read_only(self) -> bool:
        return self.mode is ViewMode.EMPLOYEE

    @property
    def mode_query(self) -> str:
        return f"mode={self.mode.value}"
