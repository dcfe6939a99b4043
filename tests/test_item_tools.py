"""Tests for add_voxels, set_item_style, set_item_visibility and remove_item tools."""
import pytest
from unittest.mock import MagicMock


def _get_item_tools():
    from voxel_layers.tools.items import register_item_tools
    tools = {}
    mock_mcp = MagicMock()
    def capture(**kwargs):
        def decorator(fn):
            tools[fn.__name__] = fn
            return fn
        return decorator
    mock_mcp.tool = capture
    register_item_tools(mock_mcp)
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


def test_add_voxels_creates_item():
    from voxel_layers.state import state
    tools = _get_item_tools()
    result = tools["add_voxels"](ids="4/0/14:1/3, 20/2/931080/412913_60/10:12")
    assert result.startswith("Added item 1: 2 voxel(s)")
    assert len(state.items) == 1
    assert state.items[0].voxel_string == "4/0/14:1/3, 20/2/931080/412913_60/10:12"
    assert state.items[0].source == "manual"


def test_add_voxels_reports_skipped_tokens():
    from voxel_layers.state import state
    tools = _get_item_tools()
    result = tools["add_voxels"](ids="4/0/8/8, 4/zz/8/8")
    assert "Skipped 1 malformed id(s)" in result
    assert "#1 '4/zz/8/8'" in result
    assert len(state.items[0].voxels) == 1


def test_add_voxels_all_invalid():
    from voxel_layers.state import state
    tools = _get_item_tools()
    result = tools["add_voxels"](ids="nonsense")
    assert result.startswith("Error: No valid voxel ids.")
    assert state.items == []


def test_add_voxels_empty():
    tools = _get_item_tools()
    assert tools["add_voxels"](ids=" , ") == "Error: No voxel ids given."


def test_add_voxels_bad_color():
    from voxel_layers.state import state
    tools = _get_item_tools()
    result = tools["add_voxels"](ids="4/0/8/8", color="red")
    assert result.startswith("Error:")
    assert state.items == []


def test_item_ids_increase():
    tools = _get_item_tools()
    tools["add_voxels"](ids="4/0/8/8")
    assert tools["add_voxels"](ids="4/0/9/8").startswith("Added item 2")


def test_set_item_style_invalidates_cache():
    from voxel_layers.state import state
    from voxel_layers.core.layers import generate_polygons
    tools = _get_item_tools()
    tools["add_voxels"](ids="4/0/8/8")
    generate_polygons(state.items, state.polygon_cache)
    assert len(state.polygon_cache) == 1

    result = tools["set_item_style"](item_id=1, color="#00ff00", opacity=1.0)
    assert result == "Item 1: color #00FF00, opacity 1.0"
    assert len(state.polygon_cache) == 0


def test_set_item_style_unknown_item():
    tools = _get_item_tools()
    assert tools["set_item_style"](item_id=9, color="#00FF00").startswith("Error: No voxel item")


def test_set_item_style_invalid_opacity():
    tools = _get_item_tools()
    tools["add_voxels"](ids="4/0/8/8")
    assert tools["set_item_style"](item_id=1, opacity=2.0).startswith("Error:")


def test_set_item_visibility():
    from voxel_layers.state import state
    tools = _get_item_tools()
    tools["add_voxels"](ids="4/0/8/8")
    assert tools["set_item_visibility"](item_id=1, visible=False) == "Item 1 is now hidden."
    assert state.items[0].hidden is True
    assert tools["set_item_visibility"](item_id=1, visible=True) == "Item 1 is now visible."


def test_remove_item():
    from voxel_layers.state import state
    tools = _get_item_tools()
    tools["add_voxels"](ids="4/0/8/8")
    assert tools["remove_item"](item_id=1) == "Removed item 1."
    assert state.items == []
    assert tools["remove_item"](item_id=1).startswith("Error:")


def test_set_item_style_rejects_whole_update():
    from voxel_layers.state import state
    from voxel_layers.core.layers import generate_polygons
    tools = _get_item_tools()
    tools["add_voxels"](ids="2/0/1/1", color="#FF0000", opacity=1.0)
    generate_polygons(state.items, state.polygon_cache)

    result = tools["set_item_style"](item_id=1, color="#00FF00", opacity=2.0)
    assert result.startswith("Error:")
    assert state.items[0].color == "#FF0000"
    assert state.items[0].opacity == 1.0
    polygons = generate_polygons(state.items, state.polygon_cache)
    assert polygons[0].color == (255, 0, 0, 255)


def test_remove_item_drops_its_tooltips():
    from voxel_layers.state import state
    from voxel_layers.models import VoxelItem
    tools = _get_item_tools()
    state.items = [
        VoxelItem(id=1, source="json", tooltip_keys=["4/0/8/8", "4/0/9/8"]),
        VoxelItem(id=2, source="json", tooltip_keys=["4/0/9/8"]),
    ]
    state.tooltips = {"4/0/8/8": "a", "4/0/9/8": "b", "1/0/0/0": "c"}

    tools["remove_item"](item_id=1)
    assert state.tooltips == {"4/0/9/8": "b", "1/0/0/0": "c"}
    tools["remove_item"](item_id=2)
    assert state.tooltips == {"1/0/0/0": "c"}
