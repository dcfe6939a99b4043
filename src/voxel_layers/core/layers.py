"""Per-frame polygon generation for voxel items."""

import logging
from typing import Optional, Sequence

from ..models import Polygon, Viewport, VoxelItem
from .cache import PolygonCache
from .colors import color_key, hex_to_rgba
from .expand import expand_voxels
from .projection import project_tiles
from .ranges import RangeMemo
from .viewport import (
    DEFAULT_MARGIN_DEGREES, detail_level, filter_voxels_by_viewport, subsample_for_detail,
)

logger = logging.getLogger(__name__)


def filter_active(polygons: Sequence[Polygon], current_time: float) -> list[Polygon]:
    """Keep timeless polygons and those whose window contains ``current_time``."""
    return [p for p in polygons if p.active_at(current_time)]


def build_item_polygons(
    item: VoxelItem,
    level: int,
    compact: bool = True,
    memo: Optional[RangeMemo] = None,
) -> list[Polygon]:
    voxels = subsample_for_detail(item.voxels, level)
    tiles = expand_voxels(voxels, compact=compact, memo=memo)
    return project_tiles(tiles, hex_to_rgba(item.color, item.opacity))


def generate_polygons(
    items: Sequence[VoxelItem],
    cache: PolygonCache,
    current_time: float = 0.0,
    viewport: Optional[Viewport] = None,
    compact: bool = True,
    margin_degrees: float = DEFAULT_MARGIN_DEGREES,
    hide_below_zoom: float = 3.0,
    memo: Optional[RangeMemo] = None,
) -> list[Polygon]:
    """Polygons for every visible item, concatenated in item order."""
    visible = [item for item in items if not item.hidden]
    if viewport is None:
        level = 3
    else:
        if viewport.zoom < hide_below_zoom:
            logger.debug("Zoom %.1f below %.1f, skipping voxels", viewport.zoom, hide_below_zoom)
            return []
        level = detail_level(viewport.zoom)
        filtered = []
        for item in visible:
            voxels = filter_voxels_by_viewport(item.voxels, viewport, margin_degrees)
            if voxels:
                filtered.append(item.model_copy(update={"voxels": voxels}))
        visible = filtered

    result: list[Polygon] = []
    for item in visible:
        cache.track_source(item.id, (compact, item.color, item.opacity, tuple(item.voxels)))
        polygons = cache.get_or_build(
            item.id, level, current_time,
            lambda item=item: build_item_polygons(item, level, compact, memo),
        )
        # Cached lists hold every window; the time filter runs each frame
        result.extend(filter_active(polygons, current_time))
    return result


def group_polygons_by_color(polygons: Sequence[Polygon]) -> dict[str, list[Polygon]]:
    """Bucket polygons by RGBA so each color can be drawn as one layer."""
    groups: dict[str, list[Polygon]] = {}
    for polygon in polygons:
        groups.setdefault(color_key(polygon.color), []).append(polygon)
    return groups
