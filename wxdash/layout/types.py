"""
Shared grid types.

A layout is an ordered list of GridItem, one per widget id. Coordinates
are grid cells (zero-based, y grows downward). Constraint fields are an
annotation merged in from the widget registry; they are never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

# Only these keys are durable
RECORD_KEYS = ("i", "x", "y", "w", "h")


@dataclass(frozen=True)
class WidgetConstraint:
    """Static size limits for one widget kind, in grid cells."""

    id: str
    min_w: int = 1
    min_h: int = 1
    max_w: Optional[int] = None
    max_h: Optional[int] = None

    def clamp_w(self, w: int) -> int:
        w = max(self.min_w, w)
        if self.max_w is not None:
            w = min(self.max_w, w)
        return w

    def clamp_h(self, h: int) -> int:
        h = max(self.min_h, h)
        if self.max_h is not None:
            h = min(self.max_h, h)
        return h


@dataclass(frozen=True)
class ExpansionThreshold:
    """Size at which a widget switches to its expanded content."""

    id: str
    expand_w: int
    expand_h: int


@dataclass(frozen=True)
class GridItem:
    """Position and size of one widget on the grid.

    Attributes:
        id: Widget id (``i`` in the persisted record)
        x, y: Origin cell
        w, h: Size in cells
        constraint: Registry limits merged in on load, None when the
            registry does not know the widget
    """

    id: str
    x: int
    y: int
    w: int
    h: int
    constraint: Optional[WidgetConstraint] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError(f"Grid origin must be non-negative, got ({self.x}, {self.y})")
        if self.w < 1 or self.h < 1:
            raise ValueError(f"Grid size must be at least 1x1, got {self.w}x{self.h}")

    @property
    def geometry(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.w, self.h)

    def moved(self, **changes: int) -> "GridItem":
        """Copy with some of x/y/w/h replaced, keeping the constraint."""
        return replace(self, **changes)

    def with_constraint(self, constraint: Optional[WidgetConstraint]) -> "GridItem":
        return replace(self, constraint=constraint)

    def cells(self) -> List[tuple[int, int]]:
        """Every (x, y) unit cell this item covers."""
        return [
            (cx, cy)
            for cy in range(self.y, self.y + self.h)
            for cx in range(self.x, self.x + self.w)
        ]

    def overlaps(self, other: "GridItem") -> bool:
        return (
            self.x < other.x + other.w
            and other.x < self.x + self.w
            and self.y < other.y + other.h
            and other.y < self.y + self.h
        )

    def to_record(self) -> Dict[str, Any]:
        """Durable form: geometry only, constraint stripped."""
        return {"i": self.id, "x": self.x, "y": self.y, "w": self.w, "h": self.h}

    def to_dict(self) -> Dict[str, Any]:
        """Record plus the constraint annotation, for display and JSON output."""
        result = self.to_record()
        if self.constraint is not None:
            result.update(
                minW=self.constraint.min_w,
                minH=self.constraint.min_h,
                maxW=self.constraint.max_w,
                maxH=self.constraint.max_h,
            )
        return result

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "GridItem":
        """Build an item from a persisted record.

        Raises:
            ValueError: If the record is not a well-formed geometry record
        """
        if not isinstance(data, dict):
            raise ValueError(f"Layout record must be an object, got {type(data).__name__}")
        widget_id = data.get("i")
        if not isinstance(widget_id, str) or not widget_id:
            raise ValueError("Layout record is missing its 'i' field")
        values = []
        for key in ("x", "y", "w", "h"):
            value = data.get(key)
            # bool is an int subclass; true/false is not a coordinate
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"Layout record '{widget_id}' has a bad '{key}': {value!r}")
            values.append(value)
        x, y, w, h = values
        return cls(id=widget_id, x=x, y=y, w=w, h=h)


# A layout is just the ordered items; ownership lives with the store
Layout = List[GridItem]


@dataclass(frozen=True)
class GridPanel:
    """Content handed to the grid for one widget id."""

    id: str
    content: Any = ""


def layout_geometry(layout: Layout) -> List[Dict[str, Any]]:
    """Constraint-free records for a whole layout."""
    return [item.to_record() for item in layout]


def find_item(layout: Layout, widget_id: str) -> Optional[GridItem]:
    for item in layout:
        if item.id == widget_id:
            return item
    return None
