"""
Per-owner layout persistence.

The store reads and writes one record per owner id (a city slug or a
workspace id) under ``"<namespace>_<owner_id>"``. Only geometry is
written; constraints are merged back from the widget registry on every
read, so a registry change applies to layouts saved before it.

Storage failures never escape: an unreadable record loads as the default
template and a failed write is logged and dropped (the next mutation
writes again).
"""

import logging
from typing import Any, List, Optional, Sequence

from wxdash.config.constants import CITY_GRID_MAX_COLUMNS, CITY_LAYOUT_NAMESPACE
from wxdash.exceptions import StorageError, StorageReadError
from wxdash.services.cache import TTLCache

from .placement import find_open_position
from .registry import WidgetRegistry, city_registry
from .storage import JsonFileStorage
from .types import GridItem, Layout, layout_geometry

logger = logging.getLogger(__name__)

# 4-column city dashboard
DEFAULT_CITY_TEMPLATE: Sequence[GridItem] = (
    # Row 1: models 2x2, brackets 1x2, map 1x2
    GridItem("models", x=0, y=0, w=2, h=2),
    GridItem("brackets", x=2, y=0, w=1, h=2),
    GridItem("map", x=3, y=0, w=1, h=2),
    # Row 3: discussion 2x2, nearby 2x1
    GridItem("discussion", x=0, y=2, w=2, h=2),
    GridItem("nearby", x=2, y=2, w=2, h=1),
    # Row 4
    GridItem("wind", x=2, y=3, w=1, h=1),
    GridItem("resolution", x=3, y=3, w=1, h=1),
    # Row 5: small widgets
    GridItem("pressure", x=0, y=4, w=1, h=1),
    GridItem("visibility", x=1, y=4, w=1, h=1),
    GridItem("rounding", x=2, y=4, w=1, h=1),
    # Only rendered while alerts are active
    GridItem("alerts", x=3, y=4, w=1, h=1),
)


def parse_layout_record(data: Any) -> Layout:
    """Turn a stored JSON value into layout items.

    Raises:
        StorageReadError: Unless the value is a non-empty list of
            well-formed ``{i, x, y, w, h}`` records
    """
    if not isinstance(data, list) or not data:
        raise StorageReadError("Stored layout is not a non-empty list")
    try:
        return [GridItem.from_record(entry) for entry in data]
    except ValueError as e:
        raise StorageReadError(f"Stored layout has a malformed item: {e}") from e


class LayoutStore:
    """Durable layout CRUD keyed by owner id.

    Usage:
        store = LayoutStore(JsonFileStorage(get_storage_dir()))
        layout = store.load("austin")      # default template on first use
        store.save("austin", layout)
        store.reset("austin")
    """

    def __init__(
        self,
        storage: JsonFileStorage,
        *,
        registry: WidgetRegistry = city_registry,
        template: Sequence[GridItem] = DEFAULT_CITY_TEMPLATE,
        namespace: str = CITY_LAYOUT_NAMESPACE,
        columns: int = CITY_GRID_MAX_COLUMNS,
        cache: Optional[TTLCache[Layout]] = None,
    ) -> None:
        """
        Args:
            storage: Record backend
            registry: Source of constraints merged on load
            template: Default layout for owners with no saved record
            namespace: Key prefix for this kind of layout
            columns: Grid width used to place template widgets missing
                from an older saved layout
            cache: Optional cache of loaded layouts, owned by the caller
        """
        self.storage = storage
        self.registry = registry
        self.namespace = namespace
        self.columns = columns
        self._template = tuple(template)
        self._cache = cache

    def storage_key(self, owner_id: str) -> str:
        return f"{self.namespace}_{owner_id}"

    def merge_constraints(self, layout: Layout) -> Layout:
        """Annotate each item with the registry's current constraint."""
        return [item.with_constraint(self.registry.constraint_for(item.id)) for item in layout]

    def default_template(self) -> Layout:
        """The hand-authored default layout with current constraints."""
        return self.merge_constraints(list(self._template))

    def load(self, owner_id: str) -> Layout:
        """Load the layout for an owner, falling back to the default template."""
        if self._cache is not None:
            cached = self._cache.get(owner_id)
            if cached is not None:
                return list(cached)

        key = self.storage_key(owner_id)
        layout: Optional[Layout] = None
        try:
            data = self.storage.get_item(key)
            if data is not None:
                layout = self._fill_missing(parse_layout_record(data))
        except StorageReadError as e:
            logger.warning(f"Ignoring unreadable layout for {owner_id}: {e}")

        if layout is None:
            layout = list(self._template)
        else:
            logger.debug(f"Loaded {len(layout)} layout items for {owner_id}")

        layout = self.merge_constraints(layout)
        if self._cache is not None:
            self._cache.set(owner_id, list(layout))
        return layout

    def _fill_missing(self, layout: Layout) -> Layout:
        """Append template widgets that an older saved layout lacks."""
        present = {item.id for item in layout}
        filled = list(layout)
        for template_item in self._template:
            if template_item.id in present:
                continue
            x, y = find_open_position(
                filled, template_item.w, template_item.h, columns=self.columns
            )
            filled.append(template_item.moved(x=x, y=y))
            logger.info(f"Placed new widget {template_item.id} at ({x}, {y})")
        return filled

    def save(self, owner_id: str, layout: Layout) -> bool:
        """Persist geometry only.

        Returns:
            True if the write succeeded; failures are logged, not raised
        """
        key = self.storage_key(owner_id)
        if self._cache is not None:
            self._cache.set(owner_id, self.merge_constraints(list(layout)))
        try:
            self.storage.set_item(key, layout_geometry(layout))
        except StorageError as e:
            logger.warning(f"Failed to save layout for {owner_id}: {e}")
            return False
        logger.debug(f"Saved {len(layout)} layout items for {owner_id}")
        return True

    def reset(self, owner_id: str) -> None:
        """Forget the saved layout; the next load yields the default template."""
        if self._cache is not None:
            self._cache.delete(owner_id)
        try:
            self.storage.remove_item(self.storage_key(owner_id))
        except StorageError as e:
            logger.warning(f"Failed to reset layout for {owner_id}: {e}")
            return
        logger.info(f"Reset layout for {owner_id}")

    def list_owners(self) -> List[str]:
        """Owner ids that currently have a saved layout."""
        prefix = f"{self.namespace}_"
        return [key[len(prefix):] for key in self.storage.keys(prefix)]
