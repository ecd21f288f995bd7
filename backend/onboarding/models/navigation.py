from __future__ import annotations

from onboarding.models.common import CamelModel


class NavLink(CamelModel):
    label: str
    href: str
    external: bool = False


class HomeTile(CamelModel):
    title: str
    description: str
    href: str


class HomeView(CamelModel):
    mode: str
    user_name: str | None = None
    tiles: list[HomeTile] = []
    navigation: list[NavLink] = []
    hallmarks: NavLink | None = None
