"""
Widget registry for the dashboard grids.

The registry is the static catalog of widget kinds: their display name,
default size and size constraints. The grid engine and layout store only
read from it; overrides produce a new registry instead of mutating the
shared one, so every holder of a reference sees the same catalog.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from wxdash.exceptions import ConfigurationError

from .types import WidgetConstraint

logger = logging.getLogger(__name__)

_SIZE_FIELDS = ("default_w", "default_h", "min_w", "min_h", "max_w", "max_h")


@dataclass(frozen=True)
class WidgetRegistration:
    """Registration information for a widget kind.

    Attributes:
        id: Unique widget id, also the grid item id on city dashboards
        name: Human-readable title
        description: One-line description shown in listings
        category: Grouping used by the add-widget listing
        default_w, default_h: Size used when the widget is first placed
        min_w, min_h, max_w, max_h: Resize limits (max None = unbounded)
    """

    id: str
    name: str
    description: str = ""
    category: str = "weather"
    default_w: int = 1
    default_h: int = 1
    min_w: int = 1
    min_h: int = 1
    max_w: Optional[int] = None
    max_h: Optional[int] = None

    @property
    def constraint(self) -> WidgetConstraint:
        return WidgetConstraint(
            id=self.id,
            min_w=self.min_w,
            min_h=self.min_h,
            max_w=self.max_w,
            max_h=self.max_h,
        )


class WidgetRegistry:
    """Read-only catalog of widget kinds.

    Usage:
        registry = WidgetRegistry([WidgetRegistration("map", "Satellite Map")])
        registry.constraint_for("map")   # WidgetConstraint or None
        registry.get("map").default_w
    """

    def __init__(self, registrations: Iterable[WidgetRegistration] = ()) -> None:
        self._widgets: Dict[str, WidgetRegistration] = {}
        for registration in registrations:
            if registration.id in self._widgets:
                logger.warning(f"Duplicate widget registration: {registration.id}")
            self._widgets[registration.id] = registration

    def get(self, widget_id: str) -> Optional[WidgetRegistration]:
        return self._widgets.get(widget_id)

    def has(self, widget_id: str) -> bool:
        return widget_id in self._widgets

    def __contains__(self, widget_id: object) -> bool:
        return widget_id in self._widgets

    def __len__(self) -> int:
        return len(self._widgets)

    def constraint_for(self, widget_id: str) -> Optional[WidgetConstraint]:
        """Current constraint for a widget, or None for unregistered ids."""
        registration = self._widgets.get(widget_id)
        return registration.constraint if registration else None

    def list_ids(self) -> List[str]:
        return list(self._widgets)

    def list_registrations(self) -> List[WidgetRegistration]:
        return list(self._widgets.values())

    def by_category(self, category: str) -> List[WidgetRegistration]:
        return [r for r in self._widgets.values() if r.category == category]

    def categories(self) -> List[str]:
        return sorted({r.category for r in self._widgets.values()})

    def with_overrides(self, overrides: Mapping[str, Mapping[str, Any]]) -> "WidgetRegistry":
        """Return a new registry with size fields replaced per widget id.

        Unknown widget ids and non-size keys are ignored (with a warning);
        expansion thresholds in the same mapping are handled by the
        expansion module.

        Raises:
            ConfigurationError: If a size value is not a positive integer
        """
        updated: List[WidgetRegistration] = []
        for registration in self._widgets.values():
            fields = overrides.get(registration.id)
            if not fields:
                updated.append(registration)
                continue
            changes: Dict[str, Any] = {}
            for key, value in fields.items():
                if key not in _SIZE_FIELDS:
                    continue
                if value is not None and (
                    not isinstance(value, int) or isinstance(value, bool) or value < 1
                ):
                    raise ConfigurationError(
                        f"Size override must be a positive integer, got {value!r}",
                        widget_id=registration.id,
                        field=key,
                    )
                changes[key] = value
            updated.append(replace(registration, **changes))

        for widget_id in overrides:
            if widget_id not in self._widgets:
                logger.warning(f"Ignoring override for unknown widget: {widget_id}")

        return WidgetRegistry(updated)


def load_overrides(path: Path) -> Dict[str, Dict[str, Any]]:
    """Load per-widget overrides from a YAML file.

    The file maps widget ids to size fields and/or expansion thresholds:

        map:
          max_w: 3
          expand_w: 3

    Returns:
        Mapping of widget id to override fields ({} if the file is absent)

    Raises:
        ConfigurationError: If the file cannot be parsed or has the wrong shape
    """
    if not path.exists():
        return {}

    import yaml

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError("Failed to read widget overrides", path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
        raise ConfigurationError(
            "Widget overrides must map widget ids to field mappings", path=str(path)
        )
    return {str(k): dict(v) for k, v in data.items()}


# City dashboard widgets, 4-column grid
CITY_WIDGETS = (
    WidgetRegistration(
        "models", "Forecast Models", "Multi-model forecast comparison",
        category="forecast", default_w=2, default_h=2, min_w=1, min_h=1, max_w=4, max_h=2,
    ),
    WidgetRegistration(
        "brackets", "Market Brackets", "Prediction-market brackets with live prices",
        category="market", default_w=1, default_h=2, min_w=1, min_h=2, max_w=2, max_h=3,
    ),
    WidgetRegistration(
        "map", "Satellite Map", "Satellite imagery around the station",
        default_w=1, default_h=2, min_w=1, min_h=1, max_w=4, max_h=3,
    ),
    WidgetRegistration(
        "discussion", "NWS Discussion", "Forecaster discussion text",
        category="forecast", default_w=2, default_h=2, min_w=1, min_h=1, max_w=4, max_h=4,
    ),
    WidgetRegistration(
        "nearby", "Nearby Stations", "Readings from surrounding stations",
        default_w=2, default_h=1, min_w=2, min_h=1, max_w=4, max_h=2,
    ),
    WidgetRegistration(
        "wind", "Wind", "Wind speed, gusts and direction",
        default_w=1, default_h=1, min_w=1, min_h=1, max_w=2, max_h=2,
    ),
    WidgetRegistration(
        "resolution", "Resolution", "Settlement source and timing",
        category="market", default_w=1, default_h=1, min_w=1, min_h=1, max_w=2, max_h=2,
    ),
    WidgetRegistration(
        "pressure", "Pressure", "Barometric pressure trend",
        default_w=1, default_h=1, min_w=1, min_h=1, max_w=2, max_h=2,
    ),
    WidgetRegistration(
        "visibility", "Visibility", "Visibility and sky cover",
        default_w=1, default_h=1, min_w=1, min_h=1, max_w=2, max_h=2,
    ),
    WidgetRegistration(
        "rounding", "Rounding", "Celsius/Fahrenheit rounding ranges",
        category="market", default_w=1, default_h=1, min_w=1, min_h=1, max_w=2, max_h=2,
    ),
    WidgetRegistration(
        "alerts", "Weather Alerts", "Active NWS alerts (hidden when none)",
        default_w=1, default_h=1, min_w=1, min_h=1, max_w=2, max_h=2,
    ),
)

# Workspace widgets, 12-column grid
WORKSPACE_WIDGETS = (
    WidgetRegistration(
        "live-market-brackets", "Live Market Brackets",
        "Real-time market brackets with Yes/No prices and volume",
        category="market", default_w=4, default_h=5, min_w=3, min_h=4,
    ),
    WidgetRegistration(
        "live-station-data", "Live Station Data",
        "Real-time observations with temperature, humidity, and wind",
        default_w=6, default_h=5, min_w=4, min_h=4,
    ),
    WidgetRegistration(
        "nearby-stations-map", "Nearby Stations",
        "Map of nearby weather stations with current readings",
        default_w=4, default_h=5, min_w=3, min_h=4,
    ),
    WidgetRegistration(
        "forecast-models", "Forecast Models",
        "Multi-model weather forecast comparison",
        category="forecast", default_w=4, default_h=5, min_w=3, min_h=4,
    ),
    WidgetRegistration(
        "forecast-discussion", "NWS Discussion",
        "Official forecast analysis and meteorologist discussion",
        category="forecast", default_w=4, default_h=4, min_w=3, min_h=3,
    ),
    WidgetRegistration(
        "nws-hourly-forecast", "NWS Hourly Forecast",
        "Official hourly temperature forecast curve",
        category="forecast", default_w=4, default_h=5, min_w=3, min_h=4,
    ),
    WidgetRegistration(
        "daily-summary", "Daily Summary (DSM)",
        "Daily summary with high/low temperatures",
        default_w=4, default_h=4, min_w=3, min_h=3,
    ),
)

city_registry = WidgetRegistry(CITY_WIDGETS)
workspace_registry = WidgetRegistry(WORKSPACE_WIDGETS)


def build_city_registry(overrides: Optional[Mapping[str, Mapping[str, Any]]] = None) -> WidgetRegistry:
    """City registry with optional user overrides applied."""
    if not overrides:
        return city_registry
    return city_registry.with_overrides(overrides)
