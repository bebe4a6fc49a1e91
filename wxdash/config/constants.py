"""
Centralized constants for wxdash.

All magic numbers used by the grid engine, the layout store and the
terminal surfaces live here so the behaviour of the dashboard can be
read (and tuned) in one place.
"""

from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

WXDASH_CONFIG_DIR = Path.home() / ".config" / "wxdash"

# Persisted layouts live in their own directory, one JSON file per key
STORAGE_DIR_NAME = "storage"
WIDGETS_OVERRIDE_FILENAME = "widgets.yaml"

# =============================================================================
# STORAGE NAMESPACES
# =============================================================================

# Record key is f"{namespace}_{owner_id}"
CITY_LAYOUT_NAMESPACE = "wxdash_city_layout_v1"

# Workspaces are stored as a single record
WORKSPACES_KEY = "wxdash_workspaces_v2"
LEGACY_WORKSPACES_KEY = "wxdash_workspaces_v1"

# =============================================================================
# GRID ENGINE
# =============================================================================

# Quiet period before a layout mutation is written to storage
SAVE_DEBOUNCE_SECONDS = 0.5

# (exclusive upper width in px, column count); widths past the last bound
# get CITY_GRID_MAX_COLUMNS
COLUMN_BREAKPOINTS = (
    (400, 1),
    (550, 2),
    (700, 3),
)
CITY_GRID_MAX_COLUMNS = 4

# Width assumed until the container has been measured
DEFAULT_CONTAINER_WIDTH = 800

# =============================================================================
# PLACEMENT
# =============================================================================

WORKSPACE_GRID_COLUMNS = 12
PLACEMENT_MAX_ROWS = 100  # Row scan bound before falling back to append-at-bottom

# =============================================================================
# CACHING
# =============================================================================

LAYOUT_CACHE_TTL_SECONDS = 300
LAYOUT_CACHE_MAXSIZE = 64

# =============================================================================
# TERMINAL RENDERING
# =============================================================================

CELL_WIDTH_PX = 8  # One terminal column counts as this many px for breakpoints
GRID_ROW_HEIGHT_LINES = 6

# =============================================================================
# ENVIRONMENT VARIABLES
# =============================================================================

ENV_VAR_DEFINITIONS = {
    "WXDASH_STORAGE_DIR": {
        "description": "Directory holding persisted layouts and workspaces",
        "default": None,
        "valid_values": None,
    },
    "WXDASH_WIDGETS_FILE": {
        "description": "YAML file overriding widget sizes and expansion thresholds",
        "default": None,
        "valid_values": None,
    },
    "WXDASH_LOG_LEVEL": {
        "description": "Log level for the CLI",
        "default": "WARNING",
        "valid_values": ["DEBUG", "INFO", "WARNING", "ERROR"],
    },
}
