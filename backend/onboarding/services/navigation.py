from __future__ import annotations

from onboarding.core.config import settings
from onboarding.models.auth import RequestContext, ViewMode
from onboarding.models.navigation import HomeTile, HomeView, NavLink

SUPERVISOR_NAV = [
    ("Dashboard", "/dashboard"),
    ("Employees", "/employees"),
    ("Day in Life", "/day-in-life"),
    ("In Absence Of", "/in-the-absence"),
]

EMPLOYEE_NAV = [
    ("Dashboard", "/me/dashboard"),
    ("My Orientation", "/me/orientation"),
    ("Day in Life", "/me/day-in-life"),
    ("In Absence Of", "/in-the-absence"),
]

DASHBOARD_HREF = {
    ViewMode.SUPERVISOR: "/dashboard",
    ViewMode.EMPLOYEE: "/me/dashboard",
    ViewMode.EXEC: "/exec/dashboard",
}


def with_mode(href: str, ctx: RequestContext) -> str:
    return f"{href}?{ctx.mode_query}"


def hallmarks_link(ctx: RequestContext) -> NavLink | None:
    if ctx.mode is ViewMode.EMPLOYEE:
        return None
    return NavLink(label="Hallmarks", href=settings.HALLMARKS_URL, external=True)


def navigation(ctx: RequestContext) -> list[NavLink]:
    entries = EMPLOYEE_NAV if ctx.mode is ViewMode.EMPLOYEE else SUPERVISOR_NAV
    links = [NavLink(label=label, href=with_mode(href, ctx)) for label, href in entries]
    hallmarks = hallmarks_link(ctx)
    if hallmarks:
        links.append(hallmarks)
    return links


def home_tiles(ctx: RequestContext) -> list[HomeTile]:
    employee = ctx.mode is ViewMode.EMPLOYEE
    tiles = [
        HomeTile(
            title="Dashboard",
            description="See progress, alerts, and upcoming orientation activity.",
            href=DASHBOARD_HREF[ctx.mode],
        )
    ]
    if employee:
        tiles.append(
            HomeTile(
                title="My Orientation",
                description="View and update your orientation items.",
                href=with_mode("/me/orientation", ctx),
            )
        )
    else:
        tiles.append(
            HomeTile(
                title="Employees",
                description="Manage employees and release orientation items.",
                href=with_mode("/employees", ctx),
            )
        )
    tiles.append(
        HomeTile(
            title="Day in the Life",
            description="Living role playbooks and calendars by role.",
            href=with_mode("/me/day-in-life" if employee else "/day-in-life", ctx),
        )
    )
    tiles.append(
        HomeTile(
            title="In the Absence Of",
            description="Coverage plans and handoff guidance.",
            href=with_mode("/me/in-the-absence" if employee else "/in-the-absence", ctx),
        )
    )
    return tiles


def home_view(ctx: RequestContext) -> HomeView:
    return HomeView(
        mode=ctx.mode.value,
        user_name=ctx.user.name,
        tiles=home_tiles(ctx),
        navigation=navigation(ctx),
        hallmarks=hallmarks_link(ctx),
    )
