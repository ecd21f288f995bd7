from __future__ import annotations

import pytest

from onboarding.core.config import settings
from onboarding.models.auth import RequestContext, UserInfo, ViewMode
from onboarding.services.navigation import hallmarks_link, home_tiles, home_view, navigation

USER = UserInfo(id="u1", name="Sam Supervisor", email="sam@integracare.org", roles=["supervisor"])


def _ctx(mode: ViewMode) -> RequestContext:
    return RequestContext(mode=mode, user=USER)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, ViewMode.SUPERVISOR),
        ("", ViewMode.SUPERVISOR),
        ("EMPLOYEE", ViewMode.EMPLOYEE),
        (" exec ", ViewMode.EXEC),
        ("admin", ViewMode.SUPERVISOR),
    ],
)
def test_view_mode_parse(raw, expected):
    assert ViewMode.parse(raw) is expected


def test_supervisor_navigation_carries_mode_and_hallmarks():
    links = navigation(_ctx(ViewMode.SUPERVISOR))

    assert [link.label for link in links] == ["Dashboard", "Employees", "Day in Life", "In Absence Of", "Hallmarks"]
    assert links[1].href == "/employees?mode=supervisor"
    assert links[-1].href == settings.HALLMARKS_URL
    assert links[-1].external is True


def test_employee_navigation_has_no_hallmarks():
    ctx = _ctx(ViewMode.EMPLOYEE)
    links = navigation(ctx)

    assert [link.label for link in links] == ["Dashboard", "My Orientation", "Day in Life", "In Absence Of"]
    assert links[0].href == "/me/dashboard?mode=employee"
    assert hallmarks_link(ctx) is None


def test_exec_dashboard_tile():
    tiles = home_tiles(_ctx(ViewMode.EXEC))
    assert tiles[0].href == "/exec/dashboard"
    assert tiles[1].href == "/employees?mode=exec"


def test_employee_tiles_point_at_me_pages():
    tiles = home_tiles(_ctx(ViewMode.EMPLOYEE))
    assert [t.href for t in tiles] == [
        "/me/dashboard",
        "/me/orientation?mode=employee",
        "/me/day-in-life?mode=employee",
        "/me/in-the-absence?mode=employee",
    ]


def test_home_view_serializes_camel_case():
    data = home_view(_ctx(ViewMode.SUPERVISOR)).model_dump(by_alias=True)
    assert data["userName"] == "Sam Supervisor"
    assert data["mode"] == "supervisor"
    assert len(data["tiles"]) == 4
