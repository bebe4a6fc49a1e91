"""CLI tests using Typer's CliRunner against a temp storage dir."""

import json

from typer.testing import CliRunner

from wxdash.main import app

runner = CliRunner()


def _json(args):
    result = runner.invoke(app, args)
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def _item(payload, widget_id):
    return next(item for item in payload["items"] if item["i"] == widget_id)


class TestBasics:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "layout" in result.stdout
        assert "workspace" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "wxdash version" in result.stdout

    def test_verbose_and_quiet_conflict(self):
        result = runner.invoke(app, ["--verbose", "--quiet", "version"])
        assert result.exit_code == 1

    def test_invalid_log_level_warns(self, monkeypatch):
        monkeypatch.setenv("WXDASH_LOG_LEVEL", "LOUD")
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Invalid value 'LOUD'" in result.output


class TestLayoutShow:
    def test_default_width(self):
        payload = _json(["layout", "show", "austin", "--json"])
        assert payload["columns"] == 4
        assert payload["interactive"] is True
        assert len(payload["items"]) == 11
        assert _item(payload, "map") == {
            "i": "map", "x": 3, "y": 0, "w": 1, "h": 2,
            "minW": 1, "minH": 1, "maxW": 4, "maxH": 3,
            "expanded": True,
        }

    def test_narrow_width_is_single_column(self):
        payload = _json(["layout", "show", "austin", "--width", "320", "--json"])
        assert payload["columns"] == 1
        assert payload["interactive"] is False
        assert all(item["x"] == 0 and item["w"] == 1 for item in payload["items"])

    def test_absent_widgets(self):
        payload = _json(["layout", "show", "austin", "--absent", "alerts,nearby", "--json"])
        ids = {item["i"] for item in payload["items"]}
        assert len(ids) == 9
        assert "alerts" not in ids

    def test_table_output(self):
        result = runner.invoke(app, ["layout", "show", "austin", "--width", "500"])
        assert result.exit_code == 0
        assert "2 columns" in result.stdout
        assert "discussion" in result.stdout


class TestLayoutEdit:
    def test_resize_persists_and_expands(self):
        result = runner.invoke(app, ["layout", "resize", "austin", "wind", "--w", "2", "--h", "1"])
        assert result.exit_code == 0, result.output
        assert "Resized wind" in result.stdout
        assert "expanded" in result.stdout

        wind = _item(_json(["layout", "show", "austin", "--json"]), "wind")
        assert (wind["w"], wind["h"]) == (2, 1)
        assert wind["expanded"] is True

    def test_resize_is_clamped_to_limits(self):
        result = runner.invoke(app, ["layout", "resize", "austin", "nearby", "--w", "1", "--h", "9"])
        assert result.exit_code == 0
        nearby = _item(_json(["layout", "show", "austin", "--json"]), "nearby")
        assert (nearby["w"], nearby["h"]) == (2, 2)

    def test_move_compacts(self):
        result = runner.invoke(app, ["layout", "move", "austin", "pressure", "--x", "3", "--y", "10"])
        assert result.exit_code == 0, result.output
        assert "(3, 5)" in result.stdout

    def test_move_unknown_widget_fails(self):
        result = runner.invoke(app, ["layout", "move", "austin", "radar", "--x", "0", "--y", "0"])
        assert result.exit_code == 1
        assert "Error moving widget" in result.stdout

    def test_move_negative_origin_fails(self):
        result = runner.invoke(app, ["layout", "move", "austin", "wind", "--x=-1", "--y", "0"])
        assert result.exit_code == 1

    def test_reset_and_list(self):
        runner.invoke(app, ["layout", "resize", "austin", "wind", "--w", "2", "--h", "2"])
        assert "austin" in runner.invoke(app, ["layout", "list"]).stdout

        result = runner.invoke(app, ["layout", "reset", "austin", "--force"])
        assert result.exit_code == 0

        wind = _item(_json(["layout", "show", "austin", "--json"]), "wind")
        assert (wind["w"], wind["h"]) == (1, 1)
        assert _json(["layout", "list", "--json"]) == []

    def test_reset_asks_for_confirmation(self):
        result = runner.invoke(app, ["layout", "reset", "austin"], input="n\n")
        assert result.exit_code != 0

    def test_widgets_listing(self):
        widgets = _json(["layout", "widgets", "--json"])
        models = next(w for w in widgets if w["id"] == "models")
        assert models["expand"] == [3, 2]
        assert next(w for w in widgets if w["id"] == "pressure")["expand"] is None

    def test_widget_overrides_file(self, tmp_path):
        (tmp_path / "widgets.yaml").write_text("wind:\n  max_w: 1\n")
        runner.invoke(app, ["layout", "resize", "austin", "wind", "--w", "2", "--h", "1"])
        wind = _item(_json(["layout", "show", "austin", "--json"]), "wind")
        assert wind["w"] == 1
        assert wind["maxW"] == 1


class TestWorkspaceCommands:
    def _create(self):
        result = runner.invoke(app, ["workspace", "create", "Texas", "austin", "houston"])
        assert result.exit_code == 0, result.output
        return _json(["workspace", "list", "--json"])[0]["id"]

    def test_create_and_list(self):
        ws_id = self._create()
        listed = _json(["workspace", "list", "--json"])
        assert len(listed) == 1
        assert listed[0]["id"] == ws_id
        assert listed[0]["cities"] == ["austin", "houston"]
        assert len(listed[0]["widgets"]) == 2

    def test_add_remove_replace(self):
        ws_id = self._create()

        result = runner.invoke(app, ["workspace", "add", ws_id, "daily-summary", "austin"])
        assert result.exit_code == 0, result.output
        widgets = _json(["workspace", "show", ws_id, "--json"])["widgets"]
        assert len(widgets) == 3
        added = widgets[-1]
        assert added["widgetId"] == "daily-summary"

        result = runner.invoke(app, ["workspace", "replace", ws_id, added["id"], "forecast-models"])
        assert result.exit_code == 0, result.output
        widgets = _json(["workspace", "show", ws_id, "--json"])["widgets"]
        replaced = next(w for w in widgets if w["widgetId"] == "forecast-models")
        assert (replaced["x"], replaced["y"]) == (added["x"], added["y"])

        result = runner.invoke(app, ["workspace", "remove", ws_id, replaced["id"]])
        assert result.exit_code == 0
        assert len(_json(["workspace", "show", ws_id, "--json"])["widgets"]) == 2

    def test_unknown_widget_kind(self):
        ws_id = self._create()
        result = runner.invoke(app, ["workspace", "add", ws_id, "radar", "austin"])
        assert result.exit_code == 1
        assert "Unknown widget" in result.stdout

    def test_rename_and_delete(self):
        ws_id = self._create()
        assert runner.invoke(app, ["workspace", "rename", ws_id, "Gulf"]).exit_code == 0
        assert _json(["workspace", "show", ws_id, "--json"])["name"] == "Gulf"

        assert runner.invoke(app, ["workspace", "delete", ws_id, "--force"]).exit_code == 0
        assert _json(["workspace", "list", "--json"]) == []

    def test_missing_workspace(self):
        result = runner.invoke(app, ["workspace", "show", "ws-missing"])
        assert result.exit_code == 1
        assert "Workspace not found" in result.stdout

    def test_empty_list(self):
        result = runner.invoke(app, ["workspace", "list"])
        assert result.exit_code == 0
        assert "No workspaces" in result.stdout
