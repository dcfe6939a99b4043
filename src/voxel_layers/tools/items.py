"""Voxel item tools: add_voxels, set_item_style, set_item_visibility, remove_item."""

import logging

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import ValidationError

from ..state import state
from ..models import VoxelItem
from ..core.parser import parse_voxel_ids
from ._prereqs import require_item

logger = logging.getLogger(__name__)


def register_item_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def add_voxels(ids: str, color: str = "#FF0000", opacity: float = 0.8) -> str:
        """Add a voxel item from spatiotemporal identifiers.

        Identifiers are comma-separated tokens of the form Z/F/X/Y or
        Z/F/X/Y_interval/T. Each axis is an integer, '-' (whole axis),
        'a:-', '-:b' or 'a:b'. An X range with a > b wraps the antimeridian.
        Malformed tokens are reported and skipped; the rest are still added.
        **Next:** set_viewport (optional), then render_polygons.

        Args:
            ids: Identifier list, e.g. "4/0/14:1/3, 20/2/931080/412913_60/10:12".
            color: Fill color as #RRGGBB.
            opacity: Fill opacity in [0, 1].
        """
        parsed = parse_voxel_ids(ids)
        if not parsed.voxels:
            if parsed.errors:
                details = "; ".join(f"'{e.token}': {e.message}" for e in parsed.errors)
                return f"Error: No valid voxel ids. {details}"
            return "Error: No voxel ids given."

        try:
            item = VoxelItem(
                id=state.next_item_id(),
                color=color,
                opacity=opacity,
                voxels=parsed.voxels,
                voxel_string=ids,
                source="manual",
            )
        except ValidationError as e:
            return f"Error: {e}"

        state.items.append(item)
        logger.info("Added voxel item %d with %d voxel(s)", item.id, len(item.voxels))

        message = f"Added item {item.id}: {len(item.voxels)} voxel(s), color {item.color}."
        if parsed.errors:
            skipped = "; ".join(
                f"#{e.index} '{e.token}': {e.message}" for e in parsed.errors
            )
            message += f" Skipped {len(parsed.errors)} malformed id(s): {skipped}"
        return message

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def set_item_style(item_id: int, color: str | None = None, opacity: float | None = None) -> str:
        """Change the fill color and/or opacity of a voxel item.

        Args:
            item_id: Item id returned by add_voxels or import_kasane_json.
            color: New fill color as #RRGGBB.
            opacity: New fill opacity in [0, 1].
        """
        try:
            item = require_item(state, item_id)
        except ValueError as e:
            return f"Error: {e}"

        # Validate both values before touching the item
        try:
            styled = VoxelItem(
                id=item.id,
                color=item.color if color is None else color,
                opacity=item.opacity if opacity is None else opacity,
            )
        except ValidationError as e:
            return f"Error: {e}"

        item.color = styled.color
        item.opacity = styled.opacity

        state.polygon_cache.invalidate_item(item_id)
        return f"Item {item_id}: color {item.color}, opacity {item.opacity}"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def set_item_visibility(item_id: int, visible: bool) -> str:
        """Show or hide a voxel item without removing it.

        Args:
            item_id: Item id returned by add_voxels or import_kasane_json.
            visible: False to hide the item from render_polygons.
        """
        try:
            item = require_item(state, item_id)
        except ValueError as e:
            return f"Error: {e}"

        item.hidden = not visible
        return f"Item {item_id} is now {'visible' if visible else 'hidden'}."

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def remove_item(item_id: int) -> str:
        """Remove a voxel item and drop its cached polygons and tooltips.

        Args:
            item_id: Item id returned by add_voxels or import_kasane_json.
        """
        try:
            item = require_item(state, item_id)
        except ValueError as e:
            return f"Error: {e}"

        state.items.remove(item)
        dropped = state.polygon_cache.invalidate_item(item_id)
        # Keep tooltips another imported item still points at
        still_used = {key for other in state.items for key in other.tooltip_keys}
        for key in item.tooltip_keys:
            if key not in still_used:
                state.tooltips.pop(key, None)
        logger.debug("Removed item %d, dropped %d cache entries", item_id, dropped)
        return f"Removed item {item_id}."
