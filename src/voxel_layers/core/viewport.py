"""Viewport culling and level-of-detail helpers."""

import logging
from typing import Sequence

from ..models import VoxelDefinition, Viewport
from .projection import tile_y_to_lat
from .ranges import axis_size, resolve_bounds, x_runs

logger = logging.getLogger(__name__)

DEFAULT_MARGIN_DEGREES = 10.0
MAX_VIEW_LATITUDE = 85.0


def min_voxel_zoom_level(map_zoom: float) -> int:
    """Finest voxel zoom still worth drawing at ``map_zoom``."""
    if map_zoom < 3:
        return 2
    elif map_zoom < 6:
        return 4
    elif map_zoom < 9:
        return 8
    elif map_zoom < 12:
        return 12
    elif map_zoom < 15:
        return 16
    else:
        return 24


def detail_level(zoom: float) -> int:
    """Coarse detail class 0..3; lower means more aggressive simplification."""
    if zoom < 5:
        return 0
    elif zoom < 10:
        return 1
    elif zoom < 15:
        return 2
    else:
        return 3


def _lon_pieces(lo: float, hi: float) -> list[tuple[float, float]]:
    """Split a longitude interval into pieces inside [-180, 180]."""
    if hi - lo >= 360:
        return [(-180.0, 180.0)]
    pieces = []
    if lo < -180:
        pieces.append((lo + 360, 180.0))
        lo = -180.0
    if hi > 180:
        pieces.append((-180.0, hi - 360))
        hi = 180.0
    pieces.append((lo, hi))
    return pieces


def lon_intervals_intersect(a: tuple[float, float], b: tuple[float, float]) -> bool:
    """Closed longitude interval overlap, treating +-180 as the same meridian."""
    for a_lo, a_hi in _lon_pieces(*a):
        for b_lo, b_hi in _lon_pieces(*b):
            if a_lo <= b_hi and b_lo <= a_hi:
                return True
    return False


def voxel_lon_spans(voxel: VoxelDefinition) -> list[tuple[float, float]]:
    lon_per_tile = 360.0 / axis_size(voxel.z)
    return [
        (-180.0 + lon_per_tile * lo, -180.0 + lon_per_tile * (hi + 1))
        for lo, hi in x_runs(voxel.x, voxel.z)
    ]


def voxel_lat_span(voxel: VoxelDefinition) -> tuple[float, float]:
    n = float(axis_size(voxel.z))
    y_min, y_max = resolve_bounds(voxel.y, voxel.z)
    return float(tile_y_to_lat(y_max + 1, n)), float(tile_y_to_lat(y_min, n))


def voxel_in_window(
    voxel: VoxelDefinition,
    lon_window: tuple[float, float],
    lat_window: tuple[float, float],
) -> bool:
    lat_min, lat_max = voxel_lat_span(voxel)
    if lat_max < lat_window[0] or lat_min > lat_window[1]:
        return False
    return any(lon_intervals_intersect(span, lon_window) for span in voxel_lon_spans(voxel))


def filter_voxels_by_viewport(
    voxels: Sequence[VoxelDefinition],
    viewport: Viewport,
    margin_degrees: float = DEFAULT_MARGIN_DEGREES,
) -> list[VoxelDefinition]:
    """Drop voxels too fine for the zoom or outside the padded view window.

    If that would leave nothing from a non-empty input, the input is
    returned unchanged so freshly added items stay visible.
    """
    max_zoom = min_voxel_zoom_level(viewport.zoom)
    lon_window = (viewport.longitude - margin_degrees, viewport.longitude + margin_degrees)
    lat_window = (
        max(-MAX_VIEW_LATITUDE, viewport.latitude - margin_degrees),
        min(MAX_VIEW_LATITUDE, viewport.latitude + margin_degrees),
    )

    kept = [
        v for v in voxels
        if v.z <= max_zoom and voxel_in_window(v, lon_window, lat_window)
    ]
    if not kept and voxels:
        logger.debug(
            "Viewport filter removed all %d voxel(s); keeping them unfiltered", len(voxels)
        )
        return list(voxels)
    return kept


def subsample_for_detail(voxels: Sequence[VoxelDefinition], level: int) -> list[VoxelDefinition]:
    """Shrink an oversized voxel list for coarse detail levels.

    A heuristic: keeps a head slice of the list, not a representative sample.
    """
    result = list(voxels)
    if level < 3:
        max_zoom = 8 + level * 3
        result = [v for v in result if v.z <= max_zoom]

    if level == 0 and len(result) > 100:
        result = result[:max(25, len(result) // 4)]
    elif level == 1 and len(result) > 200:
        result = result[:max(100, len(result) // 2)]
    return result
