"""Tests for workspace persistence."""

import pytest

from wxdash.config.constants import LEGACY_WORKSPACES_KEY, WORKSPACES_KEY
from wxdash.exceptions import UnknownWidgetError, WorkspaceNotFoundError
from wxdash.layout.types import GridItem
from wxdash.workspace import Workspace, WorkspaceStore, WorkspaceWidget


@pytest.fixture
def workspaces(storage, clock):
    return WorkspaceStore(storage, clock=clock)


def test_create_lays_out_six_across(workspaces):
    cities = ["austin", "houston", "dallas", "denver", "miami", "chicago", "seattle"]
    ws = workspaces.create("Research", cities)

    assert ws.id.startswith("ws-")
    assert ws.cities == cities
    assert [w.widget_id for w in ws.widgets] == ["live-station-data"] * 7
    assert [(w.x, w.y) for w in ws.widgets] == [
        (0, 0), (2, 0), (4, 0), (6, 0), (8, 0), (10, 0), (0, 5)
    ]
    assert all((w.w, w.h) == (6, 5) for w in ws.widgets)
    assert workspaces.get(ws.id) == ws


def test_list_most_recent_first(workspaces):
    first = workspaces.create("First", ["austin"])
    second = workspaces.create("Second", ["denver"])
    assert [ws.id for ws in workspaces.list()] == [second.id, first.id]

    workspaces.update(first.id, name="First again")
    listed = workspaces.list()
    assert listed[0].id == first.id
    assert listed[0].name == "First again"


def test_add_widget_uses_first_free_slot(workspaces):
    ws = workspaces.create("Texas", ["austin"])
    widget = workspaces.add_widget(ws.id, "forecast-models", "austin")

    # live-station-data covers columns 0-5 on rows 0-4
    assert (widget.x, widget.y, widget.w, widget.h) == (6, 0, 4, 5)
    stored = workspaces.require(ws.id)
    assert stored.find_widget(widget.id) == widget


def test_added_widgets_never_overlap(workspaces):
    ws = workspaces.create("Texas", ["austin"])
    for widget_id in ("forecast-models", "daily-summary", "live-market-brackets", "forecast-discussion"):
        workspaces.add_widget(ws.id, widget_id, "austin")

    items = workspaces.require(ws.id).grid_items()
    for i, a in enumerate(items):
        for b in items[i + 1 :]:
            assert not a.overlaps(b), f"{a.id} overlaps {b.id}"
        assert a.x + a.w <= 12


def test_instance_ids_are_unique(storage):
    ws_store = WorkspaceStore(storage, clock=lambda: 42)
    ws = ws_store.create("Frozen clock", ["austin"])
    a = ws_store.add_widget(ws.id, "daily-summary", "austin")
    b = ws_store.add_widget(ws.id, "daily-summary", "austin")
    assert a.id != b.id


def test_replace_widget_keeps_geometry(workspaces):
    ws = workspaces.create("Texas", ["austin"])
    old = ws.widgets[0]

    new = workspaces.replace_widget(ws.id, old.id, "forecast-models")

    assert new.widget_id == "forecast-models"
    assert new.id != old.id
    assert (new.x, new.y, new.w, new.h) == (old.x, old.y, old.w, old.h)
    assert workspaces.require(ws.id).find_widget(old.id) is None


def test_replace_unknown_instance(workspaces):
    ws = workspaces.create("Texas", ["austin"])
    with pytest.raises(UnknownWidgetError):
        workspaces.replace_widget(ws.id, "nope", "forecast-models")


def test_remove_widget(workspaces):
    ws = workspaces.create("Texas", ["austin", "houston"])
    target = ws.widgets[1].id

    assert workspaces.remove_widget(ws.id, target) is True
    assert workspaces.remove_widget(ws.id, target) is False
    assert [w.city_slug for w in workspaces.require(ws.id).widgets] == ["austin"]


def test_update_layout_by_instance_id(workspaces):
    ws = workspaces.create("Texas", ["austin"])
    instance = ws.widgets[0].id

    workspaces.update_layout(ws.id, [GridItem(instance, 3, 2, 5, 6), GridItem("ghost", 0, 0, 1, 1)])

    widget = workspaces.require(ws.id).widgets[0]
    assert (widget.x, widget.y, widget.w, widget.h) == (3, 2, 5, 6)


def test_delete(workspaces):
    ws = workspaces.create("Texas", ["austin"])
    assert workspaces.delete(ws.id) is True
    assert workspaces.delete(ws.id) is False
    assert workspaces.get(ws.id) is None


def test_missing_workspace_raises(workspaces):
    with pytest.raises(WorkspaceNotFoundError) as exc_info:
        workspaces.add_widget("ws-missing", "daily-summary", "austin")
    assert exc_info.value.workspace_id == "ws-missing"
    with pytest.raises(WorkspaceNotFoundError):
        workspaces.require("ws-missing")


def test_persisted_format(workspaces, storage):
    ws = workspaces.create("Texas", ["austin"])
    raw = storage.get_item(WORKSPACES_KEY)
    record = raw["workspaces"][ws.id]
    assert record["name"] == "Texas"
    assert set(record["widgets"][0]) == {"id", "widgetId", "citySlug", "x", "y", "w", "h", "visible"}
    assert Workspace.from_dict(record) == ws


def test_corrupt_record_reads_as_empty(workspaces, storage):
    path = storage.path_for(WORKSPACES_KEY)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("[[[")
    assert workspaces.list() == []


def test_legacy_column_format_is_migrated(workspaces, storage):
    storage.set_item(
        LEGACY_WORKSPACES_KEY,
        {
            "workspaces": {
                "ws-old": {
                    "id": "ws-old",
                    "name": "Old",
                    "cities": ["austin"],
                    "widgets": [
                        {"id": "a", "widgetId": "live-station-data", "citySlug": "austin", "column": 0, "order": 0},
                        {"id": "c", "widgetId": "daily-summary", "citySlug": "austin", "column": 1, "order": 0},
                        {"id": "b", "widgetId": "forecast-models", "citySlug": "austin", "column": 0, "order": 1},
                    ],
                    "createdAt": 1,
                    "updatedAt": 2,
                }
            }
        },
    )

    ws = workspaces.require("ws-old")

    geometry = {w.id: (w.x, w.y, w.w, w.h) for w in ws.widgets}
    assert geometry == {"a": (0, 0, 6, 5), "b": (0, 5, 4, 5), "c": (2, 0, 4, 4)}
    assert storage.get_item(WORKSPACES_KEY) is not None


def test_malformed_legacy_widgets_are_dropped(workspaces, storage):
    storage.set_item(
        LEGACY_WORKSPACES_KEY,
        {
            "workspaces": {
                "ws-old": {
                    "id": "ws-old",
                    "name": "Old",
                    "widgets": [
                        {"widgetId": "live-station-data", "column": 0},
                        "not a widget",
                        {"id": "ok", "widgetId": "daily-summary", "column": 0, "order": 1},
                    ],
                },
                "ws-broken": {"id": "ws-broken", "name": "Broken", "widgets": 5},
                "ws-no-id": {
                    "name": "No id",
                    "widgets": [{"id": "a", "widgetId": "daily-summary", "column": 1}],
                },
            }
        },
    )

    listed = workspaces.list()

    assert [ws.id for ws in listed] == ["ws-old"]
    geometry = [(w.id, w.x, w.y, w.w, w.h) for w in listed[0].widgets]
    assert geometry == [("ok", 0, 0, 4, 4)]


def test_invalid_stored_geometry_skips_workspace(workspaces, storage):
    ws = workspaces.create("Texas", ["austin"])
    raw = storage.get_item(WORKSPACES_KEY)
    raw["workspaces"][ws.id]["widgets"][0]["w"] = 0
    storage.set_item(WORKSPACES_KEY, raw)

    assert workspaces.get(ws.id) is None
    assert workspaces.list() == []
    with pytest.raises(WorkspaceNotFoundError):
        workspaces.add_widget(ws.id, "daily-summary", "austin")


def test_widget_from_dict_rejects_negative_origin():
    record = {"id": "a", "widgetId": "daily-summary", "x": -1, "y": 0, "w": 4, "h": 4}
    with pytest.raises(ValueError):
        WorkspaceWidget.from_dict(record)
