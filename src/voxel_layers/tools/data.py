"""Data import tools: import_kasane_json."""

import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import ValidationError

from ..state import state
from ..models import VoxelItem
from ..core.kasane import KasaneImportError, load_kasane

logger = logging.getLogger(__name__)


def register_data_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def import_kasane_json(file_path: str, color: str = "#00A0FF", opacity: float = 0.8) -> str:
        """Load a Kasane JSON document as a new voxel item.

        Every id in the document becomes a voxel; values referenced by the
        ids become tooltips, retrievable with describe_voxel.
        **Next:** set_viewport (optional), then render_polygons.

        Args:
            file_path: Absolute path to a Kasane .json file.
            color: Fill color as #RRGGBB.
            opacity: Fill opacity in [0, 1].
        """
        path = Path(file_path)
        if not path.exists():
            return f"Error: File not found at {path}"

        try:
            result = load_kasane(path)
        except KasaneImportError as e:
            return f"Error: {e}"

        if not result.voxels:
            logger.debug("Kasane import of %s produced no voxels", path)
            if result.errors:
                details = "; ".join(f"{e.token}: {e.message}" for e in result.errors)
                return f"Error: {path.name} contains no valid voxel ids. {details}"
            return f"Error: {path.name} contains no voxel ids."

        try:
            item = VoxelItem(
                id=state.next_item_id(),
                color=color,
                opacity=opacity,
                voxels=result.voxels,
                source="json",
                tooltip_keys=list(result.tooltips),
            )
        except ValidationError as e:
            return f"Error: {e}"

        state.items.append(item)
        state.tooltips.update(result.tooltips)
        logger.info("Imported %d voxel(s) from %s as item %d", len(item.voxels), path, item.id)
        message = (
            f"Imported item {item.id} from {path.name}: {len(item.voxels)} voxel(s), "
            f"{len(result.tooltips)} tooltip(s)."
        )
        if result.errors:
            skipped = ", ".join(e.token for e in result.errors)
            message += f" Skipped {len(result.errors)} invalid id(s): {skipped}"
        return message
