"""
City dashboard application.

Composes the widget grid for one city. Panel contents come from the
widget registry; a panel switches to its detailed content when the grid
reports that the widget crossed its expansion threshold.
"""

import logging
from typing import Iterable, List, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Static

from wxdash.layout.debounce import Scheduler
from wxdash.layout.registry import WidgetRegistry
from wxdash.layout.types import GridPanel
from wxdash.services.dashboard_service import DashboardServices

from .grid_view import WidgetGridView

logger = logging.getLogger(__name__)


def panel_content(registry: WidgetRegistry, widget_id: str, expanded: bool = False) -> str:
    """Text for one panel: the title, plus details when expanded."""
    registration = registry.get(widget_id)
    if registration is None:
        return widget_id
    if not expanded:
        return registration.name
    return "\n".join(
        [
            registration.name,
            registration.description,
            f"[{registration.category}]",
        ]
    )


def build_panels(registry: WidgetRegistry, widget_ids: Iterable[str]) -> List[GridPanel]:
    return [GridPanel(widget_id, panel_content(registry, widget_id)) for widget_id in widget_ids]


class DashboardApp(App[None]):
    """One city's research dashboard."""

    TITLE = "wxdash"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
    ]

    DEFAULT_CSS = """
    #status-bar {
        height: 1;
        background: $surface;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        city: str,
        *,
        services: Optional[DashboardServices] = None,
        absent: Iterable[str] = (),
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        super().__init__()
        self.city = city
        self.services = services or DashboardServices.from_environment(cached=True)
        self._absent_ids = list(absent)
        self._save_scheduler = scheduler
        self.grid: Optional[WidgetGridView] = None

    def compose(self) -> ComposeResult:
        registry = self.services.registry
        layout = self.services.layouts.load(self.city)
        self.grid = WidgetGridView(
            self.city,
            self.services.layouts,
            build_panels(registry, [item.id for item in layout]),
            absent=self._absent_ids,
            thresholds=self.services.thresholds,
            scheduler=self._save_scheduler,
            id="grid",
        )
        yield Static(self._status_text(), id="status-bar")
        yield self.grid
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = self.city
        if self.grid is not None:
            self.grid.focus()

    def _status_text(self) -> str:
        if self.grid is None:
            return self.city
        engine = self.grid.engine
        mode = "tab select │ arrows move │ shift+arrows resize" if engine.interactive else "read-only"
        return f"[bold]{self.city}[/bold] │ {engine.columns} columns │ [dim]{mode}[/dim]"

    def _update_status(self) -> None:
        self.query_one("#status-bar", Static).update(self._status_text())

    def on_widget_grid_view_expansion_changed(self, event: WidgetGridView.ExpansionChanged) -> None:
        logger.info(f"{self.city}: {event.widget_id} expanded={event.expanded}")
        if self.grid is not None:
            self.grid.set_panel(
                GridPanel(
                    event.widget_id,
                    panel_content(self.services.registry, event.widget_id, event.expanded),
                )
            )

    def on_widget_grid_view_layout_changed(self, event: WidgetGridView.LayoutChanged) -> None:
        self._update_status()

    def on_resize(self) -> None:
        if self.grid is not None:
            self.call_after_refresh(self._update_status)

    async def action_quit(self) -> None:
        # Write the last edit instead of dropping it on unmount
        if self.grid is not None:
            self.grid.engine.flush()
        if self.services.cache is not None:
            self.services.cache.clear()
        self.exit()
