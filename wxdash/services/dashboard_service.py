"""
Composition of the dashboard's stores.

Reads the optional widget override file once and builds the registry,
expansion thresholds and stores the CLI and the TUI share. A broken
override file is logged and the built-in catalog is used instead.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from wxdash.config.constants import LAYOUT_CACHE_MAXSIZE, LAYOUT_CACHE_TTL_SECONDS
from wxdash.config.settings import get_registry_overrides_path, get_storage_dir
from wxdash.exceptions import ConfigurationError
from wxdash.layout.expansion import EXPANSION_THRESHOLDS, thresholds_with_overrides
from wxdash.layout.registry import WidgetRegistry, build_city_registry, load_overrides
from wxdash.layout.storage import JsonFileStorage
from wxdash.layout.store import LayoutStore
from wxdash.layout.types import ExpansionThreshold, Layout
from wxdash.workspace.store import WorkspaceStore

from .cache import TTLCache

logger = logging.getLogger(__name__)


def read_widget_overrides(path: Optional[Path] = None) -> Dict[str, Dict[str, Any]]:
    """Widget overrides from YAML, or {} if the file is missing or invalid."""
    path = path or get_registry_overrides_path()
    try:
        overrides = load_overrides(path)
    except ConfigurationError as e:
        logger.warning(f"Ignoring widget overrides: {e}")
        return {}
    if overrides:
        logger.info(f"Loaded widget overrides for {len(overrides)} widgets from {path}")
    return overrides


@dataclass
class DashboardServices:
    """Everything a dashboard surface needs, built from one config read.

    Usage:
        services = DashboardServices.from_environment()
        engine = GridEngine("austin", services.layouts, thresholds=services.thresholds)
    """

    storage: JsonFileStorage
    registry: WidgetRegistry
    thresholds: Mapping[str, ExpansionThreshold]
    layouts: LayoutStore
    workspaces: WorkspaceStore
    cache: Optional[TTLCache[Layout]] = field(default=None)

    @classmethod
    def from_environment(
        cls,
        storage_dir: Optional[Path] = None,
        overrides_path: Optional[Path] = None,
        *,
        cached: bool = False,
    ) -> "DashboardServices":
        """
        Args:
            storage_dir: Record directory (defaults to WXDASH_STORAGE_DIR or
                the config dir)
            overrides_path: Widget override YAML (defaults to
                WXDASH_WIDGETS_FILE or the config dir)
            cached: Keep loaded layouts in a TTL cache (long-running TUI)
        """
        storage = JsonFileStorage(storage_dir or get_storage_dir())
        overrides = read_widget_overrides(overrides_path)

        try:
            registry = build_city_registry(overrides)
            thresholds = thresholds_with_overrides(overrides) if overrides else EXPANSION_THRESHOLDS
        except (ConfigurationError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring widget overrides: {e}")
            registry = build_city_registry()
            thresholds = EXPANSION_THRESHOLDS

        cache: Optional[TTLCache[Layout]] = None
        if cached:
            cache = TTLCache(
                maxsize=LAYOUT_CACHE_MAXSIZE, ttl=LAYOUT_CACHE_TTL_SECONDS, name="layouts"
            )

        return cls(
            storage=storage,
            registry=registry,
            thresholds=thresholds,
            layouts=LayoutStore(storage, registry=registry, cache=cache),
            workspaces=WorkspaceStore(storage),
            cache=cache,
        )
