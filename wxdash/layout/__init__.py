"""
Widget grid layout and persistence for wxdash.

Provides:
- A static widget registry with size constraints
- A per-owner layout store (JSON records, constraints merged on load)
- The expansion policy deciding when a widget shows expanded content
- First-fit placement for newly added widgets
- The grid engine: column breakpoints, display clamping, vertical
  compaction, and debounced saves

Example usage:
    from wxdash.layout import GridEngine, JsonFileStorage, LayoutStore

    store = LayoutStore(JsonFileStorage(storage_dir))
    engine = GridEngine("austin", store)
    engine.set_container_width(640)
    items = engine.render_items()
"""

from .compaction import compact_vertical
from .debounce import Debouncer, ManualScheduler, asyncio_scheduler
from .engine import GridEngine, clamp_to_columns, columns_for_width
from .expansion import EXPANSION_THRESHOLDS, should_expand, thresholds_with_overrides
from .placement import find_open_position, occupied_cells
from .registry import (
    WidgetRegistration,
    WidgetRegistry,
    build_city_registry,
    city_registry,
    load_overrides,
    workspace_registry,
)
from .storage import JsonFileStorage
from .store import DEFAULT_CITY_TEMPLATE, LayoutStore, parse_layout_record
from .types import (
    ExpansionThreshold,
    GridItem,
    GridPanel,
    Layout,
    WidgetConstraint,
    find_item,
    layout_geometry,
)

__all__ = [
    # Types
    "ExpansionThreshold",
    "GridItem",
    "GridPanel",
    "Layout",
    "WidgetConstraint",
    "find_item",
    "layout_geometry",
    # Registry
    "WidgetRegistration",
    "WidgetRegistry",
    "build_city_registry",
    "city_registry",
    "load_overrides",
    "workspace_registry",
    # Store
    "DEFAULT_CITY_TEMPLATE",
    "JsonFileStorage",
    "LayoutStore",
    "parse_layout_record",
    # Policies
    "EXPANSION_THRESHOLDS",
    "should_expand",
    "thresholds_with_overrides",
    "find_open_position",
    "occupied_cells",
    "compact_vertical",
    # Engine
    "Debouncer",
    "GridEngine",
    "ManualScheduler",
    "asyncio_scheduler",
    "clamp_to_columns",
    "columns_for_width",
]
