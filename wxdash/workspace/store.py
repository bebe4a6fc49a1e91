"""
Workspace persistence.

All workspaces live in one record (``{"workspaces": {id: {...}}}``) on a
12-column grid. New widgets are placed with the first-fit allocator.
Older records in the column/order format are migrated to x/y/w/h on
first read and re-saved under the current key.

Like the layout store, read failures yield an empty collection and write
failures are logged and dropped.
"""

import logging
import secrets
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from wxdash.config.constants import (
    LEGACY_WORKSPACES_KEY,
    WORKSPACE_GRID_COLUMNS,
    WORKSPACES_KEY,
)
from wxdash.exceptions import StorageError, UnknownWidgetError, WorkspaceNotFoundError
from wxdash.layout.placement import find_open_position
from wxdash.layout.registry import WidgetRegistry, workspace_registry
from wxdash.layout.storage import JsonFileStorage
from wxdash.layout.types import GridItem

from .models import Workspace, WorkspaceWidget

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE_WIDGET = "live-station-data"
# Default workspace grid: six cities across, two columns each
_CITIES_PER_ROW = 6
_FALLBACK_W = 2
_FALLBACK_H = 5


def _now_ms() -> int:
    return int(time.time() * 1000)


class WorkspaceStore:
    """CRUD over the workspace collection.

    Usage:
        store = WorkspaceStore(JsonFileStorage(get_storage_dir()))
        ws = store.create("Texas", ["austin", "houston"])
        store.add_widget(ws.id, "forecast-models", "austin")
    """

    def __init__(
        self,
        storage: JsonFileStorage,
        *,
        registry: WidgetRegistry = workspace_registry,
        columns: int = WORKSPACE_GRID_COLUMNS,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.storage = storage
        self.registry = registry
        self.columns = columns
        self._clock = clock

    # Raw record access

    def _default_size(self, widget_id: str) -> tuple[int, int]:
        registration = self.registry.get(widget_id)
        if registration is None:
            return _FALLBACK_W, _FALLBACK_H
        return registration.default_w, registration.default_h

    def _read_all(self) -> Dict[str, Workspace]:
        try:
            data = self.storage.get_item(WORKSPACES_KEY)
            if data is not None:
                return self._parse(data.get("workspaces", {}) if isinstance(data, dict) else None)

            legacy = self.storage.get_item(LEGACY_WORKSPACES_KEY)
            if legacy is not None:
                raw = legacy.get("workspaces", {}) if isinstance(legacy, dict) else None
                if not isinstance(raw, dict):
                    return {}
                workspaces = self._parse(self._migrate_all(raw))
                logger.info(f"Migrated {len(workspaces)} workspaces to the grid format")
                self._write_all(workspaces)
                return workspaces
        except StorageError as e:
            logger.warning(f"Ignoring unreadable workspaces: {e}")
        return {}

    def _parse(self, raw: Optional[Any]) -> Dict[str, Workspace]:
        if not isinstance(raw, dict):
            logger.warning("Stored workspaces are not a mapping, ignoring them")
            return {}
        workspaces = {}
        for ws_id, data in raw.items():
            try:
                workspaces[ws_id] = Workspace.from_dict(data)
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                logger.warning(f"Skipping malformed workspace {ws_id}: {e}")
        return workspaces

    def _write_all(self, workspaces: Dict[str, Workspace]) -> bool:
        record = {"workspaces": {ws_id: ws.to_dict() for ws_id, ws in workspaces.items()}}
        try:
            self.storage.set_item(WORKSPACES_KEY, record)
        except StorageError as e:
            logger.warning(f"Failed to save workspaces: {e}")
            return False
        return True

    def _migrate_all(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        migrated = {}
        for ws_id, ws in raw.items():
            if not isinstance(ws, dict):
                continue
            try:
                migrated[ws_id] = self.migrate_legacy(ws)
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                logger.warning(f"Skipping unmigratable workspace {ws_id}: {e}")
        return migrated

    def migrate_legacy(self, workspace: Dict[str, Any]) -> Dict[str, Any]:
        """Convert a column/order workspace record to x/y/w/h.

        Column 0 widgets stack at x=0, column 1 widgets at x=2, each at its
        registry default size. Widgets without an id or kind are dropped.
        Records already in the grid format pass through unchanged.
        """
        widgets = [w for w in workspace.get("widgets") or [] if isinstance(w, dict)]
        if not widgets or widgets[0].get("x") is not None:
            return workspace

        migrated = []
        for column, x in ((0, 0), (1, 2)):
            in_column = sorted(
                (w for w in widgets if w.get("column") == column),
                key=lambda w: w.get("order", 0),
            )
            y = 0
            for old in in_column:
                if "id" not in old or "widgetId" not in old:
                    logger.warning(f"Dropping legacy widget without id or kind: {old}")
                    continue
                w, h = self._default_size(old["widgetId"])
                migrated.append(
                    {
                        "id": old["id"],
                        "widgetId": old["widgetId"],
                        "citySlug": old.get("citySlug", ""),
                        "x": x,
                        "y": y,
                        "w": w,
                        "h": h,
                        "visible": old.get("visible", True) is not False,
                    }
                )
                y += h
        return {**workspace, "widgets": migrated}

    # Queries

    def get(self, workspace_id: str) -> Optional[Workspace]:
        return self._read_all().get(workspace_id)

    def require(self, workspace_id: str) -> Workspace:
        """Like get, but raises WorkspaceNotFoundError."""
        workspace = self.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        return workspace

    def list(self) -> List[Workspace]:
        """All workspaces, most recently updated first."""
        return sorted(self._read_all().values(), key=lambda ws: ws.updated_at, reverse=True)

    # Mutations

    def _new_id(self) -> str:
        return f"ws-{self._clock()}-{secrets.token_hex(3)}"

    def create(self, name: str, cities: Iterable[str]) -> Workspace:
        """Create a workspace with one live-station widget per city."""
        cities = list(cities)
        now = self._clock()
        w, h = self._default_size(DEFAULT_WORKSPACE_WIDGET)
        widgets = [
            WorkspaceWidget(
                id=f"live-{city}-{now}-{index}",
                widget_id=DEFAULT_WORKSPACE_WIDGET,
                city_slug=city,
                x=(index % _CITIES_PER_ROW) * 2,
                y=(index // _CITIES_PER_ROW) * h,
                w=w,
                h=h,
            )
            for index, city in enumerate(cities)
        ]
        workspace = Workspace(
            id=self._new_id(),
            name=name,
            cities=cities,
            widgets=widgets,
            created_at=now,
            updated_at=now,
        )
        workspaces = self._read_all()
        workspaces[workspace.id] = workspace
        self._write_all(workspaces)
        logger.info(f"Created workspace {workspace.id} ({name}) with {len(cities)} cities")
        return workspace

    def _save_one(self, workspaces: Dict[str, Workspace], workspace: Workspace) -> Workspace:
        workspace.updated_at = self._clock()
        workspaces[workspace.id] = workspace
        self._write_all(workspaces)
        return workspace

    def update(self, workspace_id: str, *, name: Optional[str] = None,
               cities: Optional[Iterable[str]] = None) -> Workspace:
        workspaces = self._read_all()
        workspace = workspaces.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        if name is not None:
            workspace.name = name
        if cities is not None:
            workspace.cities = list(cities)
        return self._save_one(workspaces, workspace)

    def update_layout(self, workspace_id: str, items: Iterable[GridItem]) -> Workspace:
        """Apply grid geometry by instance id; unknown ids are ignored."""
        workspaces = self._read_all()
        workspace = workspaces.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        by_id = {item.id: item for item in items}
        for widget in workspace.widgets:
            item = by_id.get(widget.id)
            if item is not None:
                widget.x, widget.y, widget.w, widget.h = item.geometry
        return self._save_one(workspaces, workspace)

    def delete(self, workspace_id: str) -> bool:
        workspaces = self._read_all()
        if workspace_id not in workspaces:
            return False
        del workspaces[workspace_id]
        self._write_all(workspaces)
        logger.info(f"Deleted workspace {workspace_id}")
        return True

    def _instance_id(self, workspace: Workspace, widget_id: str, city_slug: str) -> str:
        base = f"{widget_id}-{city_slug}-{self._clock()}"
        instance_id, suffix = base, 1
        while workspace.find_widget(instance_id) is not None:
            instance_id = f"{base}-{suffix}"
            suffix += 1
        return instance_id

    def add_widget(self, workspace_id: str, widget_id: str, city_slug: str) -> WorkspaceWidget:
        """Add a widget at its default size in the first free slot."""
        workspaces = self._read_all()
        workspace = workspaces.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)

        w, h = self._default_size(widget_id)
        x, y = find_open_position(workspace.grid_items(), w, h, columns=self.columns)
        widget = WorkspaceWidget(
            id=self._instance_id(workspace, widget_id, city_slug),
            widget_id=widget_id,
            city_slug=city_slug,
            x=x,
            y=y,
            w=w,
            h=h,
        )
        workspace.widgets.append(widget)
        self._save_one(workspaces, workspace)
        logger.debug(f"Added {widget_id} for {city_slug} to {workspace_id} at ({x}, {y})")
        return widget

    def replace_widget(self, workspace_id: str, instance_id: str, widget_id: str) -> WorkspaceWidget:
        """Swap a widget's kind in place, keeping its geometry."""
        workspaces = self._read_all()
        workspace = workspaces.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        old = workspace.find_widget(instance_id)
        if old is None:
            raise UnknownWidgetError(instance_id, "Widget not in workspace", workspace_id=workspace_id)

        old.id = self._instance_id(workspace, widget_id, old.city_slug)
        old.widget_id = widget_id
        self._save_one(workspaces, workspace)
        return old

    def remove_widget(self, workspace_id: str, instance_id: str) -> bool:
        workspaces = self._read_all()
        workspace = workspaces.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        remaining = [w for w in workspace.widgets if w.id != instance_id]
        if len(remaining) == len(workspace.widgets):
            return False
        workspace.widgets = remaining
        self._save_one(workspaces, workspace)
        return True
