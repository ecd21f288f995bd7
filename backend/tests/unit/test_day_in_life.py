from __future__ import annotations

import pytest

from onboarding.core.errors import InvalidRequestError, UpstreamUnreachableError
from onboarding.models.day_in_life import SectionKey
from onboarding.services.day_in_life import (
    ChangeSetAborted,
    compute_change_set,
    day_in_life_service,
    normalize_payload,
    summary_meta,
    update_patch,
)
from tests.conftest import upstream


def _item(item_id, text, section="PriorToStandUp", order=0, active=True, role="CRD"):
    return {"id": item_id, "text": text, "order": order, "active": active, "role": role, "section": section}


def _board(**sections):
    return normalize_payload({"sections": sections})


def test_normalize_payload_keeps_known_sections_only():
    sections = _board(
        PriorToStandUp=[_item(1, "Check email")],
        Calendar=[_item(2, "Legacy")],
        Whatever=[_item(3, "Unknown")],
    )

    assert set(sections) == set(SectionKey)
    assert [i.id for i in sections[SectionKey.PRIOR_TO_STAND_UP]] == ["1"]
    assert sections[SectionKey.OTHER] == []


def test_normalize_payload_coerces_fields():
    sections = _board(AfterStandUp=[{"id": 9, "text": None, "order": "3", "active": 1}])
    item = sections[SectionKey.AFTER_STAND_UP][0]

    assert item.id == "9"
    assert item.text == ""
    assert item.order == 3
    assert item.active is True
    assert item.role == ""
    assert item.section is SectionKey.AFTER_STAND_UP


def test_normalize_payload_tolerates_garbage():
    assert all(items == [] for items in normalize_payload(None).values())
    assert all(items == [] for items in normalize_payload({"sections": []}).values())


def test_summary_meta_reads_top_level_then_meta():
    assert summary_meta({"currentVersion": 4, "updatedAt": "2025-02-01T00:00:00Z"}) == (4, "2025-02-01T00:00:00Z")
    assert summary_meta({"meta": {"currentVersion": 2, "updatedAt": "x"}}) == (2, "x")
    assert summary_meta({"currentVersion": 0}) == (1, None)
    assert summary_meta([]) == (1, None)


def test_compute_change_set_detects_creates_updates_deletes():
    before = _board(
        PriorToStandUp=[_item("a", "Keep"), _item("b", "Edit me"), _item("c", "Remove")],
    )
    after = _board(
        PriorToStandUp=[_item("a", "Keep"), _item("b", "Edited")],
        Other=[_item("tmp-1", "Brand new", section="Other")],
    )

    changes = compute_change_set(before, after)

    assert [i.id for i in changes.deletes] == ["c"]
    assert [u.id for u in changes.updates] == ["b"]
    assert [i.id for i in changes.creates] == ["tmp-1"]


def test_compute_change_set_moving_sections_is_an_update():
    before = _board(PriorToStandUp=[_item("a", "Walk the floor")])
    after = _board(AfterStandUp=[_item("a", "Walk the floor", section="AfterStandUp")])

    changes = compute_change_set(before, after)

    assert changes.creates == [] and changes.deletes == []
    assert update_patch(changes.updates[0].before, changes.updates[0].after) == {"section": "AfterStandUp"}


def test_compute_change_set_identical_boards_is_empty():
    board = _board(PriorToStandUp=[_item("a", "Same")])
    assert compute_change_set(board, board).empty


def test_update_patch_only_includes_changed_fields():
    before = _board(Other=[_item("a", "Old", section="Other", order=1, active=True)])[SectionKey.OTHER][0]
    after = _board(Other=[_item("a", "Old", section="Other", order=5, active=False)])[SectionKey.OTHER][0]
    assert update_patch(before, after) == {"order": 5, "active": False}


@pytest.mark.anyio
async def test_apply_change_set_runs_deletes_updates_creates_in_order(fake_upstream):
    fake_upstream.on("DELETE", "DayInLifeItemDelete", upstream(204))
    fake_upstream.on("PATCH", "DayInLifeItemUpdate", upstream(200, {"ok": True}))
    fake_upstream.on("POST", "DayInLifeItemCreate", upstream(201, {"id": "n1"}))

    before = _board(PriorToStandUp=[_item("a", "Old"), _item("b", "Gone")])
    after = _board(PriorToStandUp=[_item("a", "New"), _item("tmp", "Added", order=2)])

    result = await day_in_life_service.apply_change_set(compute_change_set(before, after), "CRD", "sam@integracare.org")

    assert (result.deleted, result.updated, result.created) == (1, 1, 1)
    assert [c["method"] for c in fake_upstream.calls] == ["DELETE", "PATCH", "POST"]
    assert fake_upstream.calls[0]["segment"] == "b"
    assert fake_upstream.calls[1]["body"] == {"text": "New"}
    assert fake_upstream.calls[2]["body"] == {
        "role": "CRD",
        "section": "PriorToStandUp",
        "text": "Added",
        "order": 2,
        "active": True,
    }


@pytest.mark.anyio
async def test_apply_change_set_requires_role_for_creates(fake_upstream):
    changes = compute_change_set(_board(), _board(Other=[_item("tmp", "New", section="Other")]))

    with pytest.raises(InvalidRequestError) as exc_info:
        await day_in_life_service.apply_change_set(changes, "")

    assert exc_info.value.message == "Please select a role before adding new items."
    assert fake_upstream.calls == []


@pytest.mark.anyio
async def test_apply_change_set_stops_at_first_failure(fake_upstream):
    fake_upstream.on("DELETE", "DayInLifeItemDelete", upstream(204))
    fake_upstream.on("PATCH", "DayInLifeItemUpdate", UpstreamUnreachableError("connection reset"))

    before = _board(Other=[_item("a", "Old", section="Other"), _item("b", "Gone", section="Other")])
    after = _board(Other=[_item("a", "New", section="Other"), _item("tmp", "Added", section="Other")])

    with pytest.raises(ChangeSetAborted) as exc_info:
        await day_in_life_service.apply_change_set(compute_change_set(before, after), "CRD")

    error = exc_info.value
    assert error.status_code == 502
    assert error.applied.deleted == 1
    assert error.applied.updated == 0
    envelope = error.envelope()
    assert envelope["error"] == "Function unreachable"
    assert envelope["applied"] == {"deleted": 1, "updated": 0, "created": 0, "changed": True}
    assert fake_upstream.calls_to("DayInLifeItemCreate") == []
