"""Tests for per-owner layout persistence."""

import json
import logging

import pytest

from wxdash.exceptions import StorageReadError, StorageWriteError
from wxdash.layout.registry import city_registry
from wxdash.layout.store import DEFAULT_CITY_TEMPLATE, LayoutStore, parse_layout_record
from wxdash.layout.types import GridItem, find_item, layout_geometry
from wxdash.services.cache import TTLCache


def _write_raw(storage, key, text):
    path = storage.path_for(key)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


class TestLoad:
    def test_unseen_owner_gets_default_template(self, store):
        layout = store.load("austin")
        assert layout_geometry(layout) == layout_geometry(list(DEFAULT_CITY_TEMPLATE))

    def test_constraints_are_merged(self, store):
        models = find_item(store.load("austin"), "models")
        assert models.constraint is not None
        assert (models.constraint.min_w, models.constraint.max_w) == (1, 4)
        assert models.constraint.max_h == 2

    def test_default_template_has_eleven_widgets(self, store):
        ids = [item.id for item in store.default_template()]
        assert len(ids) == 11
        assert ids[0] == "models"
        assert "alerts" in ids

    def test_corrupt_json_falls_back_to_template(self, store, storage, caplog):
        _write_raw(storage, store.storage_key("austin"), "{not json")
        with caplog.at_level(logging.WARNING, logger="wxdash.layout.store"):
            layout = store.load("austin")
        assert layout_geometry(layout) == layout_geometry(store.default_template())
        assert "unreadable layout" in caplog.text

    @pytest.mark.parametrize(
        "record",
        [
            {"i": "models"},
            [],
            [{"i": "models", "x": 0, "y": 0, "w": 2}],
            [{"i": "models", "x": "0", "y": 0, "w": 2, "h": 2}],
            [{"i": "models", "x": True, "y": 0, "w": 2, "h": 2}],
            [{"x": 0, "y": 0, "w": 2, "h": 2}],
            [{"i": "models", "x": -1, "y": 0, "w": 2, "h": 2}],
        ],
    )
    def test_malformed_records_fall_back_to_template(self, store, storage, record):
        storage.set_item(store.storage_key("austin"), record)
        layout = store.load("austin")
        assert layout_geometry(layout) == layout_geometry(store.default_template())

    def test_missing_template_widgets_are_placed(self, store, storage):
        storage.set_item(store.storage_key("austin"), [{"i": "models", "x": 0, "y": 0, "w": 2, "h": 2}])
        layout = store.load("austin")

        assert {item.id for item in layout} == {item.id for item in DEFAULT_CITY_TEMPLATE}
        assert find_item(layout, "models").geometry == (0, 0, 2, 2)
        for i, a in enumerate(layout):
            for b in layout[i + 1 :]:
                assert not a.overlaps(b), f"{a.id} overlaps {b.id}"
            assert a.x + a.w <= 4

    def test_unknown_widget_is_kept_without_constraint(self, store, storage):
        record = layout_geometry(list(DEFAULT_CITY_TEMPLATE)) + [
            {"i": "radar", "x": 0, "y": 6, "w": 1, "h": 1}
        ]
        storage.set_item(store.storage_key("austin"), record)
        radar = find_item(store.load("austin"), "radar")
        assert radar is not None
        assert radar.constraint is None


class TestSave:
    def test_save_then_load_is_idempotent(self, store):
        layout = store.load("austin")
        layout = [item.moved(y=item.y + 1) if item.id == "pressure" else item for item in layout]
        assert store.save("austin", layout) is True
        assert layout_geometry(store.load("austin")) == layout_geometry(layout)

    def test_only_geometry_is_persisted(self, store, storage):
        store.save("austin", store.load("austin"))
        raw = json.loads(storage.path_for(store.storage_key("austin")).read_text())
        assert all(set(entry) == {"i", "x", "y", "w", "h"} for entry in raw)

    def test_owners_are_isolated(self, store):
        austin = [GridItem("models", 0, 0, 3, 2)]
        store.save("austin", austin)
        assert layout_geometry(store.load("denver")) == layout_geometry(store.default_template())

    def test_write_failure_is_swallowed(self, store, storage, monkeypatch, caplog):
        def fail(key, value):
            raise StorageWriteError("disk full", key=key)

        monkeypatch.setattr(storage, "set_item", fail)
        with caplog.at_level(logging.WARNING, logger="wxdash.layout.store"):
            assert store.save("austin", store.load("austin")) is False
        assert "Failed to save layout" in caplog.text

    def test_list_owners(self, store):
        store.save("austin", store.load("austin"))
        store.save("new york", store.load("new york"))
        assert store.list_owners() == ["austin", "new york"]


class TestConstraintMerge:
    def test_registry_change_applies_to_saved_layout(self, storage):
        before = LayoutStore(storage)
        layout = before.load("austin")
        layout = [item.moved(w=3) if item.id == "models" else item for item in layout]
        before.save("austin", layout)

        after = LayoutStore(storage, registry=city_registry.with_overrides({"models": {"max_w": 2}}))
        models = find_item(after.load("austin"), "models")

        assert models.constraint.max_w == 2
        # Stored geometry is not corrected on load
        assert models.w == 3


class TestReset:
    def test_reset_restores_default(self, store, storage):
        layout = [item.moved(x=0) if item.id == "map" else item for item in store.load("austin")]
        store.save("austin", layout)

        store.reset("austin")

        assert storage.get_item(store.storage_key("austin")) is None
        reloaded = store.load("austin")
        assert reloaded == store.default_template()
        assert [i.constraint for i in reloaded] == [i.constraint for i in store.default_template()]

    def test_reset_unseen_owner_is_harmless(self, store):
        store.reset("nowhere")
        assert store.load("nowhere") == store.default_template()


class TestCache:
    def test_second_load_is_served_from_cache(self, storage):
        cache = TTLCache(maxsize=8, ttl=60, name="layouts")
        store = LayoutStore(storage, cache=cache)

        store.load("austin")
        store.load("austin")

        assert cache.stats.hits == 1
        assert cache.stats.misses == 1

    def test_reset_drops_cache_entry(self, storage):
        cache = TTLCache(maxsize=8, ttl=60, name="layouts")
        store = LayoutStore(storage, cache=cache)
        store.save("austin", [GridItem("models", 0, 0, 3, 2)])
        assert "austin" in cache

        store.reset("austin")

        assert "austin" not in cache
        assert store.load("austin") == store.default_template()


class TestParseLayoutRecord:
    def test_valid_record(self):
        layout = parse_layout_record([{"i": "map", "x": 3, "y": 0, "w": 1, "h": 2}])
        assert layout == [GridItem("map", 3, 0, 1, 2)]

    def test_not_a_list(self):
        with pytest.raises(StorageReadError):
            parse_layout_record({"i": "map"})
