"""Vertical compaction for grid layouts.

Items float upward until they touch the item above them or the top of
the grid. Horizontal positions are never changed, and items that already
overlap are left overlapping.
"""

from typing import List

from .types import GridItem, Layout


def _blocked(item: GridItem, y: int, placed: List[GridItem]) -> bool:
    probe = item.moved(y=y)
    return any(probe.overlaps(other) for other in placed)


def compact_vertical(layout: Layout) -> Layout:
    """Return the layout with empty rows above each item closed.

    Items are processed top to bottom (left to right within a row) and
    keep their original list order in the result.
    """
    order = sorted(range(len(layout)), key=lambda i: (layout[i].y, layout[i].x))
    placed: List[GridItem] = []
    compacted: dict[int, GridItem] = {}

    for index in order:
        item = layout[index]
        y = item.y
        while y > 0 and not _blocked(item, y - 1, placed):
            y -= 1
        moved = item if y == item.y else item.moved(y=y)
        placed.append(moved)
        compacted[index] = moved

    return [compacted[i] for i in range(len(layout))]
