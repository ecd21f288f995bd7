from __future__ import annotations

from pydantic import BaseModel


class DirectoryUser(BaseModel):
    """A directory (Entra ID) person as returned by the people search."""

    id: str
    displayName: str
    mail: str | None = None
    userPrincipalName: str | None = None
    jobTitle: str | None = None

    @property
    def email(self) -> str:
        return (self.mail or self.userPrincipalName or "").strip()
