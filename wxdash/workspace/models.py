"""Workspace data structures."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from wxdash.layout.types import GridItem


@dataclass
class WorkspaceWidget:
    """One widget instance placed on a workspace grid.

    ``id`` is the instance id (unique within the workspace); ``widget_id``
    is the registry kind.
    """

    id: str
    widget_id: str
    city_slug: str
    x: int
    y: int
    w: int
    h: int
    visible: bool = True

    def to_grid_item(self) -> GridItem:
        return GridItem(self.id, x=self.x, y=self.y, w=self.w, h=self.h)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["widgetId"] = data.pop("widget_id")
        data["citySlug"] = data.pop("city_slug")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkspaceWidget":
        """Build from a stored record.

        Raises:
            ValueError: If the geometry is not a valid grid rectangle
        """
        widget = cls(
            id=str(data["id"]),
            widget_id=str(data["widgetId"]),
            city_slug=str(data.get("citySlug", "")),
            x=int(data["x"]),
            y=int(data["y"]),
            w=int(data["w"]),
            h=int(data["h"]),
            visible=data.get("visible", True) is not False,
        )
        widget.to_grid_item()
        return widget


@dataclass
class Workspace:
    """A named multi-city research workspace."""

    id: str
    name: str
    cities: List[str] = field(default_factory=list)
    widgets: List[WorkspaceWidget] = field(default_factory=list)
    created_at: int = 0  # ms since epoch
    updated_at: int = 0

    def grid_items(self) -> List[GridItem]:
        return [widget.to_grid_item() for widget in self.widgets]

    def find_widget(self, instance_id: str) -> WorkspaceWidget | None:
        for widget in self.widgets:
            if widget.id == instance_id:
                return widget
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "cities": list(self.cities),
            "widgets": [w.to_dict() for w in self.widgets],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workspace":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            cities=list(data.get("cities", [])),
            widgets=[WorkspaceWidget.from_dict(w) for w in data.get("widgets", [])],
            created_at=int(data.get("createdAt", 0)),
            updated_at=int(data.get("updatedAt", 0)),
        )
