"""Tests for drawing grid items as boxes."""

from wxdash.layout.types import GridItem
from wxdash.ui.grid_render import box_regions, column_cells, render_grid

ITEMS = [GridItem("a", 0, 0, 1, 1), GridItem("b", 1, 0, 1, 1)]


def test_boxes_side_by_side():
    text = render_grid(ITEMS, 2, 20, contents={"a": "hi"}, row_height=3)
    lines = text.plain.splitlines()

    assert lines == [
        "┌ a ─────┐┌ b ─────┐",
        "│hi      ││        │",
        "└────────┘└────────┘",
    ]


def test_selected_box_is_heavy():
    lines = render_grid(ITEMS, 2, 20, selected="b", row_height=3).plain.splitlines()
    assert lines[0].startswith("┌ a ")
    assert lines[0][10:] == "┏ b ━━━━━┓"


def test_expanded_box_is_marked():
    lines = render_grid(ITEMS, 2, 20, expanded={"a"}, row_height=3).plain.splitlines()
    assert lines[0][:10] == "┌ a + ───┐"


def test_content_is_truncated_to_box():
    text = render_grid(ITEMS, 2, 20, contents={"a": "much too long for a box"}, row_height=3)
    assert text.plain.splitlines()[1][:10] == "│much too│"


def test_empty_grid():
    assert render_grid([], 4, 80).plain == ""


def test_column_cells_has_a_floor():
    assert column_cells(100, 4) == 25
    assert column_cells(8, 4) == 4


def test_box_regions():
    regions = box_regions([GridItem("a", 1, 2, 2, 1)], 4, 80, row_height=6)
    assert regions == {"a": (20, 12, 40, 6)}
