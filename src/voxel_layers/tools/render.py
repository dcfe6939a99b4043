"""Render tools: render_polygons, describe_voxel."""

import json
import logging

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state
from ..models import Polygon, is_unbounded_end
from ..core.colors import rgba_css
from ..core.layers import generate_polygons, group_polygons_by_color
from ..core.projection import ZoomOverflowError
from ._prereqs import require_state

logger = logging.getLogger(__name__)


def _polygon_to_dict(polygon: Polygon) -> dict:
    return {
        "voxel_id": polygon.voxel_id,
        "points": polygon.points,
        "elevation": polygon.elevation,
        "start_time": polygon.start_time,
        # JSON has no infinity; an open-ended window is reported as null
        "end_time": None if is_unbounded_end(polygon.end_time) else polygon.end_time,
        "open_ended": is_unbounded_end(polygon.end_time),
    }


def render_state_polygons() -> list[Polygon]:
    s = state.settings
    return generate_polygons(
        state.items,
        state.polygon_cache,
        current_time=state.current_time,
        viewport=state.viewport,
        compact=s.compact,
        margin_degrees=s.margin_degrees,
        hide_below_zoom=s.hide_below_zoom,
        memo=state.range_memo,
    )


def register_render_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def render_polygons(limit: int | None = None) -> str:
        """Project the current voxel items into extruded polygons, grouped by color.

        Each polygon is a closed 5-point [lon, lat, altitude] ring at its base
        altitude plus an 'elevation' (extrusion height in meters).
        **Requires:** add_voxels or import_kasane_json first.

        Args:
            limit: Maximum polygons to include per color group (all by default).
        """
        try:
            require_state(state, items=True)
        except ValueError as e:
            return f"Error: {e}"

        try:
            polygons = render_state_polygons()
        except ZoomOverflowError as e:
            return f"Error: {e}"

        groups = group_polygons_by_color(polygons)
        data = {
            "total": len(polygons),
            "current_time": state.current_time,
            "layers": [
                {
                    "color": [int(c) for c in key.split(",")],
                    "css": rgba_css(group[0].color),
                    "count": len(group),
                    "polygons": [_polygon_to_dict(p) for p in group[:limit]],
                }
                for key, group in groups.items()
            ],
        }
        logger.debug("Rendered %d polygon(s) in %d layer(s)", len(polygons), len(groups))
        return json.dumps(data)

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def describe_voxel(voxel_id: str) -> str:
        """Return the tooltip text for a picked polygon's voxel_id.

        Args:
            voxel_id: The voxel_id of a polygon from render_polygons.
        """
        text = state.tooltips.get(voxel_id.strip())
        if text is None:
            return f"No data for voxel {voxel_id}."
        return text
