"""Shared pytest fixtures for wxdash tests."""

import itertools
import logging

import pytest

from wxdash.layout.debounce import ManualScheduler
from wxdash.layout.engine import GridEngine
from wxdash.layout.storage import JsonFileStorage
from wxdash.layout.store import LayoutStore


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.config/wxdash."""
    monkeypatch.setenv("WXDASH_STORAGE_DIR", str(tmp_path / "storage"))
    monkeypatch.setenv("WXDASH_WIDGETS_FILE", str(tmp_path / "widgets.yaml"))
    monkeypatch.delenv("WXDASH_LOG_LEVEL", raising=False)
    # CLI invocations set the package log level; keep it per-test
    logger = logging.getLogger("wxdash")
    level = logger.level
    yield
    logger.setLevel(level)


@pytest.fixture
def storage(tmp_path):
    return JsonFileStorage(tmp_path / "storage")


@pytest.fixture
def store(storage):
    return LayoutStore(storage)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def writes(storage, monkeypatch):
    """Record every set_item call made through the storage fixture."""
    calls = []
    original = storage.set_item

    def recording(key, value):
        calls.append((key, value))
        original(key, value)

    monkeypatch.setattr(storage, "set_item", recording)
    return calls


@pytest.fixture
def make_engine(store, scheduler):
    """Factory for engines sharing the store and manual scheduler."""
    engines = []

    def make(owner_id="austin", **kwargs):
        kwargs.setdefault("scheduler", scheduler)
        engine = GridEngine(owner_id, store, **kwargs)
        engines.append(engine)
        return engine

    yield make
    for engine in engines:
        engine.dispose()


@pytest.fixture
def clock():
    """Millisecond clock that ticks once per call."""
    counter = itertools.count(1_700_000_000_000)
    return lambda: next(counter)
