"""View tools: set_viewport, clear_viewport, set_time, set_render_options."""

import math

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import ValidationError

from ..state import state
from ..models import Viewport
from ..core.viewport import detail_level, min_voxel_zoom_level


def register_view_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def set_viewport(zoom: float, longitude: float, latitude: float) -> str:
        """Set the map view used for culling and level of detail.

        Voxels finer than the zoom allows, or farther than the margin from
        the center, are skipped by render_polygons.
        **Next:** render_polygons.

        Args:
            zoom: Map zoom level (0 = whole world).
            longitude: View center longitude (degrees).
            latitude: View center latitude (degrees).
        """
        try:
            state.viewport = Viewport(zoom=zoom, longitude=longitude, latitude=latitude)
        except ValidationError as e:
            return f"Error: {e}"

        return (
            f"Viewport: zoom={zoom}, center=({latitude:.5f}, {longitude:.5f}); "
            f"voxels up to Z={min_voxel_zoom_level(zoom)}, detail level {detail_level(zoom)}"
        )

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def clear_viewport() -> str:
        """Drop the viewport so render_polygons returns every voxel at full detail."""
        state.viewport = None
        return "Viewport cleared."

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def set_time(current_time: float) -> str:
        """Set the playback time used to select time-bounded voxels.

        Voxels without a time window are always drawn; others only while
        start <= current_time < end.

        Args:
            current_time: Playback time, in the same units as id intervals.
        """
        if not math.isfinite(current_time):
            return "Error: current_time must be a finite number."
        state.current_time = current_time
        return f"Current time: {current_time}"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def set_render_options(
        compact: bool | None = None,
        margin_degrees: float | None = None,
        hide_below_zoom: float | None = None,
        cache_capacity: int | None = None,
    ) -> str:
        """Set render settings. Changing any of them clears the polygon cache.

        Args:
            compact: True keeps ranges as one polygon each (split only at the
                antimeridian); False draws one polygon per unit cell.
            margin_degrees: Padding around the view center for culling (default 10).
            hide_below_zoom: Map zoom under which no voxels are drawn (default 3).
            cache_capacity: Maximum cached polygon lists (default 500).
        """
        s = state.settings
        try:
            if compact is not None:
                s.compact = compact
            if margin_degrees is not None:
                s.margin_degrees = margin_degrees
            if hide_below_zoom is not None:
                s.hide_below_zoom = hide_below_zoom
            if cache_capacity is not None:
                s.cache_capacity = cache_capacity
        except ValidationError as e:
            return f"Error: {e}"

        state.reset_caches()
        return (
            f"Render options: compact={s.compact}, margin={s.margin_degrees} deg, "
            f"hide_below_zoom={s.hide_below_zoom}, cache_capacity={s.cache_capacity}"
        )
