"""Tile to polygon projection on the Web-Mercator tile pyramid.

Footprints follow the slippy-map tile formulas
(https://wiki.openstreetmap.org/wiki/Slippy_map_tilenames). The vertical
axis spans 2^25 m, split into 2^Z equal altitude bands at zoom Z.
"""

from typing import Sequence

import numpy as np

from ..models import Polygon, Tile

ALTITUDE_EXTENT_M = 2 ** 25

# Largest zoom for which 2.0 ** zoom is a finite double
MAX_ZOOM = 1023


class ZoomOverflowError(ValueError):
    """Zoom level too large to project with double precision."""

    def __init__(self, zoom: int):
        super().__init__(f"Zoom level {zoom} exceeds the projectable maximum of {MAX_ZOOM}")
        self.zoom = zoom


def check_zoom(zoom: int) -> None:
    if zoom < 0:
        raise ValueError(f"Zoom level must be non-negative, got {zoom}")
    if zoom > MAX_ZOOM:
        raise ZoomOverflowError(zoom)


def tile_y_to_lat(y, n):
    """Latitude (degrees) of the northern edge of tile row ``y`` with ``n`` rows.

    Works on scalars and numpy arrays alike.
    """
    return np.degrees(np.arctan(np.sinh(np.pi - (y / n) * 2 * np.pi)))


def band_height(zoom: int) -> float:
    """Height in meters of one altitude band at ``zoom``."""
    check_zoom(zoom)
    return ALTITUDE_EXTENT_M / 2.0 ** zoom


def tile_bounds(tile: Tile) -> tuple[float, float, float, float]:
    """Return ``(min_lon, min_lat, max_lon, max_lat)`` of a tile's footprint."""
    check_zoom(tile.z)
    n = 2.0 ** tile.z
    lon_per_tile = 360.0 / n
    min_lon = -180.0 + lon_per_tile * tile.x
    max_lon = -180.0 + lon_per_tile * (tile.x2 + 1)
    max_lat = float(tile_y_to_lat(tile.y, n))
    min_lat = float(tile_y_to_lat(tile.y2 + 1, n))
    return min_lon, min_lat, max_lon, max_lat


def base_altitude(tile: Tile) -> float:
    return tile.f * band_height(tile.z)


def extrusion_height(tile: Tile) -> float:
    return (tile.f2 - tile.f + 1) * band_height(tile.z)


def _span(lo: int, hi: int) -> str:
    return str(lo) if lo == hi else f"{lo}:{hi}"


def tile_voxel_id(tile: Tile) -> str:
    """Picking id for a tile.

    Tiles carrying an ``original_id`` (every compiled tile, including both
    halves of an antimeridian split) report it; otherwise the id is built
    from the tile's own indices.
    """
    if tile.original_id:
        return tile.original_id
    return f"{tile.z}/{_span(tile.f, tile.f2)}/{_span(tile.x, tile.x2)}/{_span(tile.y, tile.y2)}"


def rectangle_points(
    min_lon: float, min_lat: float, max_lon: float, max_lat: float, altitude: float,
) -> list[list[float]]:
    """Closed clockwise ring starting at the north-east corner."""
    return [
        [max_lon, max_lat, altitude],
        [min_lon, max_lat, altitude],
        [min_lon, min_lat, altitude],
        [max_lon, min_lat, altitude],
        [max_lon, max_lat, altitude],
    ]


def project_tile(tile: Tile, color: tuple[int, int, int, int]) -> Polygon:
    min_lon, min_lat, max_lon, max_lat = tile_bounds(tile)
    return Polygon(
        points=rectangle_points(min_lon, min_lat, max_lon, max_lat, base_altitude(tile)),
        elevation=extrusion_height(tile),
        voxel_id=tile_voxel_id(tile),
        color=color,
        start_time=tile.start_time,
        end_time=tile.end_time,
    )


def project_tiles(tiles: Sequence[Tile], color: tuple[int, int, int, int]) -> list[Polygon]:
    """Project a batch of tiles, vectorizing the coordinate math with numpy."""
    if not tiles:
        return []
    for tile in tiles:
        check_zoom(tile.z)

    z = np.array([t.z for t in tiles], dtype=np.float64)
    x = np.array([t.x for t in tiles], dtype=np.float64)
    x2 = np.array([t.x2 for t in tiles], dtype=np.float64)
    y = np.array([t.y for t in tiles], dtype=np.float64)
    y2 = np.array([t.y2 for t in tiles], dtype=np.float64)
    f = np.array([t.f for t in tiles], dtype=np.float64)
    f2 = np.array([t.f2 for t in tiles], dtype=np.float64)

    n = np.exp2(z)
    lon_per_tile = 360.0 / n
    min_lons = (-180.0 + lon_per_tile * x).tolist()
    max_lons = (-180.0 + lon_per_tile * (x2 + 1)).tolist()
    max_lats = tile_y_to_lat(y, n).tolist()
    min_lats = tile_y_to_lat(y2 + 1, n).tolist()

    band = ALTITUDE_EXTENT_M / n
    altitudes = (f * band).tolist()
    elevations = ((f2 - f + 1) * band).tolist()

    polygons = []
    for i, tile in enumerate(tiles):
        # Coordinates are computed here, not user input; skip re-validation
        polygons.append(Polygon.model_construct(
            points=rectangle_points(min_lons[i], min_lats[i], max_lons[i], max_lats[i], altitudes[i]),
            elevation=elevations[i],
            voxel_id=tile_voxel_id(tile),
            color=color,
            start_time=tile.start_time,
            end_time=tile.end_time,
        ))
    return polygons
