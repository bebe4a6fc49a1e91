"""Draw rendered grid items as boxes on a character canvas."""

from typing import Dict, List, Mapping, Optional, Sequence, Set

from rich.text import Text

from wxdash.config.constants import GRID_ROW_HEIGHT_LINES
from wxdash.layout.types import GridItem

# (top-left, top-right, bottom-left, bottom-right, horizontal, vertical)
LIGHT_BOX = ("┌", "┐", "└", "┘", "─", "│")
HEAVY_BOX = ("┏", "┓", "┗", "┛", "━", "┃")

MIN_COLUMN_CELLS = 4

BORDER_STYLE = "dim"
SELECTED_STYLE = "bold cyan"
EXPANDED_STYLE = "magenta"


def column_cells(width_cells: int, columns: int) -> int:
    """Terminal cells per grid column."""
    return max(MIN_COLUMN_CELLS, width_cells // max(1, columns))


def render_grid(
    items: Sequence[GridItem],
    columns: int,
    width_cells: int,
    *,
    contents: Optional[Mapping[str, str]] = None,
    selected: Optional[str] = None,
    expanded: Optional[Set[str]] = None,
    row_height: int = GRID_ROW_HEIGHT_LINES,
) -> Text:
    """Draw each item as a box sized to its grid cells.

    Args:
        items: Rendered items (already clamped to ``columns``)
        columns: Column count of the grid
        width_cells: Terminal width available, in cells
        contents: Text shown inside each box, by widget id
        selected: Widget id drawn with a heavy border
        expanded: Widget ids drawn in the expanded style
        row_height: Terminal lines per grid row

    Returns:
        The canvas as Rich text, one line per terminal row
    """
    contents = contents or {}
    expanded = expanded or set()
    col_w = column_cells(width_cells, columns)
    canvas_w = col_w * columns
    canvas_h = max((item.y + item.h for item in items), default=0) * row_height

    chars: List[List[str]] = [[" "] * canvas_w for _ in range(canvas_h)]
    styles: List[List[Optional[str]]] = [[None] * canvas_w for _ in range(canvas_h)]

    def put(x: int, y: int, char: str, style: Optional[str]) -> None:
        if 0 <= x < canvas_w and 0 <= y < canvas_h:
            chars[y][x] = char
            styles[y][x] = style

    for item in items:
        left = item.x * col_w
        right = min((item.x + item.w) * col_w, canvas_w) - 1
        top = item.y * row_height
        bottom = (item.y + item.h) * row_height - 1
        if right - left < 1 or bottom - top < 1:
            continue

        is_selected = item.id == selected
        tl, tr, bl, br, hz, vt = HEAVY_BOX if is_selected else LIGHT_BOX
        border = SELECTED_STYLE if is_selected else BORDER_STYLE
        body = EXPANDED_STYLE if item.id in expanded else None

        for x in range(left + 1, right):
            put(x, top, hz, border)
            put(x, bottom, hz, border)
        for y in range(top + 1, bottom):
            put(left, y, vt, border)
            put(right, y, vt, border)
        put(left, top, tl, border)
        put(right, top, tr, border)
        put(left, bottom, bl, border)
        put(right, bottom, br, border)

        title = f" {item.id} "
        if item.id in expanded:
            title = f" {item.id} + "
        for offset, char in enumerate(title[: max(0, right - left - 1)]):
            put(left + 1 + offset, top, char, border)

        inner_w = right - left - 1
        lines = contents.get(item.id, "").splitlines()
        for row, line in enumerate(lines[: bottom - top - 1]):
            for offset, char in enumerate(line[:inner_w]):
                put(left + 1 + offset, top + 1 + row, char, body)

    return _to_text(chars, styles)


def _to_text(chars: List[List[str]], styles: List[List[Optional[str]]]) -> Text:
    text = Text()
    for row_index, (row, row_styles) in enumerate(zip(chars, styles)):
        if row_index:
            text.append("\n")
        # Append runs of equal style
        run: List[str] = []
        run_style: Optional[str] = None
        for char, style in zip(row, row_styles):
            if run and style != run_style:
                text.append("".join(run), style=run_style)
                run = []
            run_style = style
            run.append(char)
        if run:
            text.append("".join(run).rstrip() if run_style is None else "".join(run), style=run_style)
    return text


def box_regions(
    items: Sequence[GridItem], columns: int, width_cells: int, row_height: int = GRID_ROW_HEIGHT_LINES
) -> Dict[str, tuple[int, int, int, int]]:
    """Terminal (left, top, width, height) of each item's box, for hit-testing clicks."""
    col_w = column_cells(width_cells, columns)
    return {
        item.id: (item.x * col_w, item.y * row_height, item.w * col_w, item.h * row_height)
        for item in items
    }
