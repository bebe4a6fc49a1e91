"""
Interactive widget grid for the Textual dashboard.

WidgetGridView wraps a GridEngine: it measures itself on resize, draws
the rendered items, and turns keys into moves and resizes. Tab cycles
the selection, arrows move the selected widget, shift+arrows resize it.
Editing is off on a single-column grid.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from rich.text import Text
from textual import events
from textual.binding import Binding
from textual.message import Message
from textual.widget import Widget

from wxdash.config.constants import CELL_WIDTH_PX
from wxdash.exceptions import LayoutError
from wxdash.layout.debounce import Scheduler
from wxdash.layout.engine import GridEngine
from wxdash.layout.store import LayoutStore
from wxdash.layout.types import ExpansionThreshold, GridItem, GridPanel, Layout

from .grid_render import box_regions, render_grid

logger = logging.getLogger(__name__)


class WidgetGridView(Widget, can_focus=True):
    """Grid of dashboard panels backed by a GridEngine."""

    BINDINGS = [
        Binding("tab", "select(1)", "Next", show=False),
        Binding("shift+tab", "select(-1)", "Previous", show=False),
        Binding("left", "move(-1, 0)", "Move", show=False),
        Binding("right", "move(1, 0)", "Move", show=False),
        Binding("up", "move(0, -1)", "Move", show=False),
        Binding("down", "move(0, 1)", "Move", show=False),
        Binding("shift+left", "resize(-1, 0)", "Resize", show=False),
        Binding("shift+right", "resize(1, 0)", "Resize", show=False),
        Binding("shift+up", "resize(0, -1)", "Resize", show=False),
        Binding("shift+down", "resize(0, 1)", "Resize", show=False),
        Binding("r", "reset_layout", "Reset layout"),
    ]

    DEFAULT_CSS = """
    WidgetGridView {
        height: auto;
        width: 100%;
    }
    """

    class ExpansionChanged(Message):
        """Posted when a widget crosses its expansion threshold."""

        def __init__(self, widget_id: str, expanded: bool) -> None:
            self.widget_id = widget_id
            self.expanded = expanded
            super().__init__()

    class LayoutChanged(Message):
        """Posted after a move, resize or reset."""

        def __init__(self, layout: Layout) -> None:
            self.layout = layout
            super().__init__()

    def __init__(
        self,
        owner_id: str,
        store: LayoutStore,
        panels: Iterable[GridPanel] = (),
        *,
        absent: Iterable[str] = (),
        thresholds: Optional[Mapping[str, ExpansionThreshold]] = None,
        scheduler: Optional[Scheduler] = None,
        name: Optional[str] = None,
        id: Optional[str] = None,
        classes: Optional[str] = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self._panels: Dict[str, GridPanel] = {panel.id: panel for panel in panels}
        self._selected_id: Optional[str] = None
        self.engine = GridEngine(
            owner_id,
            store,
            absent=absent,
            on_expansion_change=self._on_expansion_change,
            on_layout_change=self._on_layout_change,
            scheduler=scheduler,
            thresholds=thresholds,
        )

    # Engine callbacks

    def _on_expansion_change(self, widget_id: str, expanded: bool) -> None:
        self.post_message(self.ExpansionChanged(widget_id, expanded))

    def _on_layout_change(self, layout: Layout) -> None:
        self.post_message(self.LayoutChanged(layout))
        self.refresh(layout=True)

    # Panels and selection

    @property
    def selected(self) -> Optional[str]:
        return self._selected_id

    @property
    def panels(self) -> Dict[str, GridPanel]:
        return dict(self._panels)

    def set_panel(self, panel: GridPanel) -> None:
        """Replace the content drawn for one widget."""
        self._panels[panel.id] = panel
        self.refresh()

    def set_absent(self, widget_ids: Iterable[str]) -> None:
        self.engine.set_absent(widget_ids)
        if self._selected_id in self.engine.absent:
            self._selected_id = None
        self.refresh(layout=True)

    def _ordered_items(self) -> List[GridItem]:
        return sorted(self.engine.render_items(), key=lambda item: (item.y, item.x))

    def _selected_item(self) -> Optional[GridItem]:
        for item in self.engine.render_items():
            if item.id == self._selected_id:
                return item
        return None

    # Measurement and drawing

    def on_resize(self, event: events.Resize) -> None:
        if self.engine.set_container_width(event.size.width * CELL_WIDTH_PX):
            logger.debug(f"{self.engine.owner_id}: grid now {self.engine.columns} columns")
        self.refresh(layout=True)

    def get_content_height(self, container, viewport, width: int) -> int:
        return max(1, len(self.render().plain.splitlines()))

    def render(self) -> Text:
        items = self.engine.render_items()
        if not items:
            return Text("No widgets", style="dim")
        width = self.size.width or self.engine.width // CELL_WIDTH_PX
        return render_grid(
            items,
            self.engine.columns,
            int(width),
            contents={panel_id: str(panel.content) for panel_id, panel in self._panels.items()},
            selected=self._selected_id if self.has_focus else None,
            expanded={item.id for item in items if self.engine.is_expanded(item.id)},
        )

    def on_click(self, event: events.Click) -> None:
        items = self.engine.render_items()
        width = self.size.width or self.engine.width // CELL_WIDTH_PX
        regions = box_regions(items, self.engine.columns, int(width))
        for widget_id, (left, top, w, h) in regions.items():
            if left <= event.x < left + w and top <= event.y < top + h:
                self._selected_id = widget_id
                self.refresh()
                return

    # Actions

    def action_select(self, step: int) -> None:
        items = self._ordered_items()
        if not items:
            return
        ids = [item.id for item in items]
        if self._selected_id in ids:
            index = (ids.index(self._selected_id) + step) % len(ids)
        else:
            index = 0 if step > 0 else len(ids) - 1
        self._selected_id = ids[index]
        self.refresh()

    def action_move(self, dx: int, dy: int) -> None:
        item = self._selected_item()
        if item is None or not self.engine.interactive:
            self.app.bell()
            return
        try:
            self.engine.move_item(item.id, max(0, item.x + dx), max(0, item.y + dy))
        except LayoutError as e:
            logger.warning(f"Move rejected: {e}")
            self.app.bell()

    def action_resize(self, dw: int, dh: int) -> None:
        item = self._selected_item()
        if item is None or not self.engine.interactive:
            self.app.bell()
            return
        try:
            self.engine.resize_item(item.id, max(1, item.w + dw), max(1, item.h + dh))
        except LayoutError as e:
            logger.warning(f"Resize rejected: {e}")
            self.app.bell()

    def action_reset_layout(self) -> None:
        self.engine.reset()

    def on_unmount(self) -> None:
        self.engine.dispose()
