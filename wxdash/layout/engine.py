"""
Interactive grid engine.

The engine owns the in-session copy of one owner's layout. It turns the
measured container width into a column count, produces the items to
render (absent widgets filtered out, x/w clamped to the columns), takes
the geometry that comes back from drag/resize, and schedules a debounced
save through the layout store.

Clamping is display-only: stored geometry keeps its original x and w, so
widening the container restores what the user arranged.
"""

import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from wxdash.config.constants import (
    CITY_GRID_MAX_COLUMNS,
    COLUMN_BREAKPOINTS,
    DEFAULT_CONTAINER_WIDTH,
    SAVE_DEBOUNCE_SECONDS,
)
from wxdash.exceptions import InvalidGeometryError, UnknownWidgetError

from .compaction import compact_vertical
from .debounce import Debouncer, Scheduler
from .expansion import should_expand
from .store import LayoutStore
from .types import ExpansionThreshold, GridItem, Layout, find_item

logger = logging.getLogger(__name__)

ExpansionCallback = Callable[[str, bool], None]
LayoutCallback = Callable[[Layout], None]


def columns_for_width(
    width: float,
    breakpoints: Sequence[tuple[int, int]] = COLUMN_BREAKPOINTS,
    max_columns: int = CITY_GRID_MAX_COLUMNS,
) -> int:
    """Column count for a container width in px."""
    for upper, columns in breakpoints:
        if width < upper:
            return columns
    return max_columns


def clamp_to_columns(item: GridItem, columns: int) -> GridItem:
    """Fit an item's x and w inside the column count (y and h untouched)."""
    x = min(item.x, columns - 1)
    w = min(item.w, columns)
    if x == item.x and w == item.w:
        return item
    return item.moved(x=x, w=w)


class GridEngine:
    """Runtime state of one dashboard grid.

    Usage:
        engine = GridEngine("austin", store, on_expansion_change=switch_density)
        engine.set_container_width(640)
        for item in engine.render_items():
            draw(item)
        engine.resize_item("map", w=2, h=2)   # clamps, compacts, saves later
        engine.dispose()
    """

    def __init__(
        self,
        owner_id: str,
        store: LayoutStore,
        *,
        absent: Iterable[str] = (),
        on_expansion_change: Optional[ExpansionCallback] = None,
        on_layout_change: Optional[LayoutCallback] = None,
        scheduler: Optional[Scheduler] = None,
        save_delay: float = SAVE_DEBOUNCE_SECONDS,
        thresholds: Optional[Mapping[str, ExpansionThreshold]] = None,
        width: float = DEFAULT_CONTAINER_WIDTH,
    ) -> None:
        """
        Args:
            owner_id: City slug or workspace id the layout belongs to
            store: Layout persistence
            absent: Widget ids not to render right now
            on_expansion_change: Called with (widget_id, expanded) on a flip
            on_layout_change: Called with the new layout after each change
            scheduler: Debounce scheduler (defaults to the asyncio loop)
            save_delay: Debounce quiet period in seconds
            thresholds: Expansion threshold table (defaults to built-ins)
            width: Container width in px until the first measurement
        """
        self.owner_id = owner_id
        self.store = store
        self.on_expansion_change = on_expansion_change
        self.on_layout_change = on_layout_change
        self._thresholds = thresholds
        self._absent = frozenset(absent)
        self._width = width
        self._columns = columns_for_width(width)
        self._expanded: Dict[str, bool] = {}
        self._rendered: Dict[str, GridItem] = {}
        self._saver = Debouncer(save_delay, self._persist, scheduler)
        self._disposed = False
        self._layout: Layout = store.load(owner_id)

    # State

    @property
    def layout(self) -> Layout:
        """Stored geometry with constraints, unclamped and unfiltered."""
        return list(self._layout)

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def width(self) -> float:
        return self._width

    @property
    def interactive(self) -> bool:
        """Drag and resize are off on a single-column grid."""
        return self._columns > 1 and not self._disposed

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def save_pending(self) -> bool:
        return self._saver.pending

    def is_expanded(self, widget_id: str) -> bool:
        return self._expanded.get(widget_id, False)

    @property
    def expansion_state(self) -> Dict[str, bool]:
        return dict(self._expanded)

    # Measurement and visibility

    def set_container_width(self, width: float) -> bool:
        """Record a new container measurement.

        Non-positive widths (an unlaid-out container) are ignored.

        Returns:
            True if the column count changed
        """
        if self._disposed or width <= 0:
            return False
        self._width = width
        columns = columns_for_width(width)
        if columns == self._columns:
            return False
        logger.debug(f"{self.owner_id}: {self._columns} -> {columns} columns at {width}px")
        self._columns = columns
        self.render_items()
        return True

    def set_absent(self, widget_ids: Iterable[str]) -> None:
        self._absent = frozenset(widget_ids)

    @property
    def absent(self) -> frozenset:
        return self._absent

    def render_items(self) -> List[GridItem]:
        """Items to draw: absent widgets dropped, x/w fitted to the columns."""
        rendered = [
            clamp_to_columns(item, self._columns)
            for item in self._layout
            if item.id not in self._absent
        ]
        self._rendered = {item.id: item for item in rendered}
        return rendered

    # Interaction

    def apply_layout_change(self, items: Sequence[GridItem]) -> Layout:
        """Accept the full geometry produced by a drag or resize.

        An x or w equal to what was last rendered is the column clamp, not
        a user change, so the stored value is kept. Widgets missing from
        ``items`` (absent ones) keep their stored geometry. Constraints are
        re-merged from the registry. The save is debounced.

        Returns:
            The new in-memory layout
        """
        if self._disposed:
            return self.layout

        stored = {item.id: item for item in self._layout}
        incoming: Dict[str, GridItem] = {}
        for item in items:
            current = stored.get(item.id)
            shown = self._rendered.get(item.id)
            if current is not None and shown is not None:
                item = item.moved(
                    x=current.x if item.x == shown.x else item.x,
                    w=current.w if item.w == shown.w else item.w,
                )
            incoming[item.id] = item

        updated = [incoming.pop(item.id, item) for item in self._layout]
        updated.extend(incoming.values())
        self._layout = self.store.merge_constraints(updated)

        if self.on_layout_change is not None:
            self.on_layout_change(self.layout)
        self._saver(self.layout)
        return self.layout

    def _rendered_item(self, widget_id: str) -> tuple[List[GridItem], GridItem]:
        rendered = self.render_items()
        item = find_item(rendered, widget_id)
        if item is None:
            raise UnknownWidgetError(widget_id, "Widget is not on the grid", owner=self.owner_id)
        return rendered, item

    def move_item(self, widget_id: str, x: int, y: int) -> GridItem:
        """Drag a widget to (x, y) in rendered coordinates.

        x is kept inside the columns; the grid is compacted afterwards.

        Returns:
            The widget's rendered geometry after compaction

        Raises:
            UnknownWidgetError: If the widget is not rendered
            InvalidGeometryError: For a negative origin
        """
        if x < 0 or y < 0:
            raise InvalidGeometryError("Grid origin must be non-negative", x=x, y=y)
        rendered, item = self._rendered_item(widget_id)
        if self._disposed:
            return item
        x = min(x, self._columns - item.w)
        moved = [other.moved(x=x, y=y) if other.id == widget_id else other for other in rendered]
        compacted = compact_vertical(moved)
        self.apply_layout_change(compacted)
        return find_item(compacted, widget_id)  # type: ignore[return-value]

    def resize_item(self, widget_id: str, w: int, h: int) -> GridItem:
        """Resize a widget, then evaluate its expansion state.

        A changed width is first capped to the columns right of the origin;
        the widget's constraint is applied last and always wins.

        Raises:
            UnknownWidgetError: If the widget is not rendered
            InvalidGeometryError: For a size below 1x1
        """
        if w < 1 or h < 1:
            raise InvalidGeometryError("Grid size must be at least 1x1", w=w, h=h)
        rendered, item = self._rendered_item(widget_id)
        if self._disposed:
            return item
        # An unchanged rendered width is the column clamp; let it echo back
        if w != item.w:
            w = max(1, min(w, self._columns - item.x))
        constraint = self.store.registry.constraint_for(widget_id)
        if constraint is not None:
            w, h = constraint.clamp_w(w), constraint.clamp_h(h)
        resized = [other.moved(w=w, h=h) if other.id == widget_id else other for other in rendered]
        compacted = compact_vertical(resized)
        self.apply_layout_change(compacted)
        result = find_item(compacted, widget_id)
        assert result is not None
        self.handle_resize_stop(widget_id, result.w, result.h)
        return result

    def handle_resize_stop(self, widget_id: str, w: int, h: int) -> bool:
        """Re-evaluate expansion once a resize ends.

        The callback only fires when the flag flips.

        Returns:
            The widget's expansion state
        """
        expanded = should_expand(widget_id, w, h, self._thresholds)
        if self._disposed:
            return expanded
        if expanded != self._expanded.get(widget_id, False):
            self._expanded[widget_id] = expanded
            logger.debug(f"{self.owner_id}: {widget_id} expanded={expanded}")
            if self.on_expansion_change is not None:
                self.on_expansion_change(widget_id, expanded)
        return expanded

    def reset(self) -> Layout:
        """Throw away the arrangement and return to the default template."""
        if self._disposed:
            return self.layout
        self._saver.cancel()
        self.store.reset(self.owner_id)
        self._layout = self.store.load(self.owner_id)
        self._rendered = {}
        if self.on_layout_change is not None:
            self.on_layout_change(self.layout)
        return self.layout

    # Persistence and teardown

    def _persist(self, layout: Layout) -> None:
        self.store.save(self.owner_id, layout)

    def flush(self) -> bool:
        """Write a pending save now. Returns True if one was pending."""
        return self._saver.flush()

    def dispose(self) -> None:
        """Cancel the pending save and drop callbacks.

        A save still pending here is lost; that window is bounded by the
        debounce delay.
        """
        if self._disposed:
            return
        self._disposed = True
        self._saver.cancel()
        self.on_expansion_change = None
        self.on_layout_change = None
        logger.debug(f"{self.owner_id}: grid engine disposed")
