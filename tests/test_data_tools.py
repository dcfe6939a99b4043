"""Tests for import_kasane_json tool."""
import json
import pytest
from unittest.mock import MagicMock


def _get_data_tools():
    from voxel_layers.tools.data import register_data_tools
    tools = {}
    mock_mcp = MagicMock()
    def capture(**kwargs):
        def decorator(fn):
            tools[fn.__name__] = fn
            return fn
        return decorator
    mock_mcp.tool = capture
    register_data_tools(mock_mcp)
    return tools


@pytest.fixture(autouse=True)
def reset_state():
    from voxel_layers.state import state, RenderSettings
    state.items = []
    state.tooltips = {}
    state.viewport = None
    state.current_time = 0.0
    state.settings = RenderSettings()
    state.reset_caches()
    yield


def _write(tmp_path, document):
    path = tmp_path / "sensors.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return str(path)


DOCUMENT = {
    "meta": {"kasaneSchemaVersion": "1.0"},
    "data": [{
        "name": "pm25",
        "value": [12, 30],
        "ids": [
            {"z": 4, "f": [0], "x": [8], "y": [8], "ref": 0},
            {"z": 4, "f": [0], "x": [9], "y": [8], "ref": 1},
        ],
    }],
}


def test_import_kasane_json(tmp_path):
    from voxel_layers.state import state
    tools = _get_data_tools()
    result = tools["import_kasane_json"](file_path=_write(tmp_path, DOCUMENT))
    assert result == "Imported item 1 from sensors.json: 2 voxel(s), 2 tooltip(s)."
    assert state.items[0].source == "json"
    assert state.items[0].color == "#00A0FF"
    assert state.tooltips["4/0/9/8"] == "4/0/9/8 | pm25: 30"


def test_import_missing_file(tmp_path):
    tools = _get_data_tools()
    result = tools["import_kasane_json"](file_path=str(tmp_path / "nope.json"))
    assert result.startswith("Error: File not found")


def test_import_invalid_document(tmp_path):
    from voxel_layers.state import state
    tools = _get_data_tools()
    result = tools["import_kasane_json"](file_path=_write(tmp_path, {"data": []}))
    assert result.startswith("Error: Not a Kasane document")
    assert state.items == []


def test_import_empty_document(tmp_path):
    tools = _get_data_tools()
    document = {"meta": {"kasaneSchemaVersion": "1.0"}, "data": []}
    result = tools["import_kasane_json"](file_path=_write(tmp_path, document))
    assert result == "Error: sensors.json contains no voxel ids."


def test_import_records_tooltip_keys(tmp_path):
    from voxel_layers.state import state
    tools = _get_data_tools()
    tools["import_kasane_json"](file_path=_write(tmp_path, DOCUMENT))
    assert state.items[0].tooltip_keys == ["4/0/8/8", "4/0/9/8"]


def test_import_skips_invalid_ids(tmp_path):
    from voxel_layers.state import state
    tools = _get_data_tools()
    document = {
        "meta": {"kasaneSchemaVersion": "1.0"},
        "data": [{
            "name": "pm25",
            "value": [12],
            "ids": [
                {"z": 4, "f": [0], "x": [8], "y": [8], "i": 60, "t": [3, 1], "ref": 0},
                {"z": 4, "f": [0], "x": [9], "y": [8], "ref": 0},
            ],
        }],
    }
    result = tools["import_kasane_json"](file_path=_write(tmp_path, document))
    assert result.startswith("Imported item 1 from sensors.json: 1 voxel(s)")
    assert result.endswith("Skipped 1 invalid id(s): pm25[0]")
    assert list(state.tooltips) == ["4/0/9/8"]


def test_import_only_invalid_ids(tmp_path):
    tools = _get_data_tools()
    document = {
        "meta": {"kasaneSchemaVersion": "1.0"},
        "data": [{"name": "pm25", "value": [12], "ids": [
            {"z": 1, "f": [0], "x": [5], "y": [0], "ref": 0},
        ]}],
    }
    result = tools["import_kasane_json"](file_path=_write(tmp_path, document))
    assert result.startswith("Error: sensors.json contains no valid voxel ids. pm25[0]:")
