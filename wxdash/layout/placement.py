"""
First-fit placement for widgets added to a grid.

The grid is bounded in columns and unbounded in rows. Candidates are
scanned row-major (top row first, then left to right) and the first
origin whose whole footprint is free wins. Grids here are small, so the
plain cell-set check is fast enough.
"""

import logging
from typing import Iterable, Set, Tuple

from wxdash.config.constants import PLACEMENT_MAX_ROWS, WORKSPACE_GRID_COLUMNS

from .types import GridItem

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


def occupied_cells(items: Iterable[GridItem]) -> Set[Cell]:
    """Set of (x, y) cells covered by any of the items."""
    cells: Set[Cell] = set()
    for item in items:
        cells.update(item.cells())
    return cells


def _fits(occupied: Set[Cell], x: int, y: int, w: int, h: int) -> bool:
    for dy in range(h):
        for dx in range(w):
            if (x + dx, y + dy) in occupied:
                return False
    return True


def find_open_position(
    items: Iterable[GridItem],
    w: int,
    h: int,
    columns: int = WORKSPACE_GRID_COLUMNS,
    max_rows: int = PLACEMENT_MAX_ROWS,
) -> Tuple[int, int]:
    """Find the top-left-most origin that can hold a w x h widget.

    Args:
        items: Widgets already on the grid
        w, h: Size of the new widget in cells
        columns: Grid width in cells
        max_rows: How many rows to scan before giving up

    Returns:
        (x, y) origin. When the scan is exhausted the widget goes to
        column 0 below the lowest occupied row.
    """
    items = list(items)
    # A widget wider than the grid still gets column 0
    w = min(w, columns)
    occupied = occupied_cells(items)

    for y in range(max_rows):
        for x in range(columns - w + 1):
            if _fits(occupied, x, y, w, h):
                return x, y

    bottom = max((item.y + item.h for item in items), default=0)
    logger.debug(f"No free {w}x{h} slot in {max_rows} rows, appending at row {bottom}")
    return 0, bottom
