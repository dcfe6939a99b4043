"""Voxel definition to tile compilation.

Compact mode keeps ranges and only splits X at the antimeridian.
Exhaustive mode emits one unit tile per (x, y, f) cell.
"""

from typing import Iterable, Optional

from ..models import Tile, VoxelDefinition
from .ranges import RangeMemo, default_memo, format_dimension


def definition_id(voxel: VoxelDefinition) -> str:
    """Identifier of the unsplit definition, ranges written ``lo:hi``."""
    return (
        f"{voxel.z}/{format_dimension(voxel.f)}/"
        f"{format_dimension(voxel.x)}/{format_dimension(voxel.y)}"
    )


def compile_voxels(
    voxels: Iterable[VoxelDefinition], memo: Optional[RangeMemo] = None,
) -> list[Tile]:
    if memo is None:
        memo = default_memo
    tiles: list[Tile] = []
    for v in voxels:
        f_min, f_max = memo.bounds(v.f, v.z)
        y_min, y_max = memo.bounds(v.y, v.z)
        original_id = definition_id(v)
        # A wrapped X range yields two spans sharing one original_id
        for x_min, x_max in memo.x_spans(v.x, v.z):
            tiles.append(Tile(
                z=v.z, x=x_min, x2=x_max, y=y_min, y2=y_max, f=f_min, f2=f_max,
                original_id=original_id,
                start_time=v.start_time,
                end_time=v.end_time,
            ))
    return tiles


def expand_voxels_exhaustive(
    voxels: Iterable[VoxelDefinition], memo: Optional[RangeMemo] = None,
) -> list[Tile]:
    if memo is None:
        memo = default_memo
    tiles: list[Tile] = []
    for v in voxels:
        xs = memo.x_values(v.x, v.z)
        ys = memo.values(v.y, v.z)
        fs = memo.values(v.f, v.z)
        for x in xs:
            for y in ys:
                for f in fs:
                    # Indices come from validated ranges; skip per-cell validation
                    tiles.append(Tile.model_construct(
                        z=v.z, x=x, x2=x, y=y, y2=y, f=f, f2=f,
                        original_id=f"{v.z}/{f}/{x}/{y}",
                        start_time=v.start_time,
                        end_time=v.end_time,
                    ))
    return tiles


def expand_voxels(
    voxels: Iterable[VoxelDefinition],
    compact: bool = True,
    memo: Optional[RangeMemo] = None,
) -> list[Tile]:
    """Turn voxel definitions into tiles using the compact or exhaustive policy."""
    if compact:
        return compile_voxels(voxels, memo)
    return expand_voxels_exhaustive(voxels, memo)


def expand_tile(tile: Tile) -> list[Tile]:
    """Break a compiled tile into its unit cells."""
    return [
        Tile.model_construct(
            z=tile.z, x=x, x2=x, y=y, y2=y, f=f, f2=f,
            original_id=f"{tile.z}/{f}/{x}/{y}",
            start_time=tile.start_time,
            end_time=tile.end_time,
        )
        for x in range(tile.x, tile.x2 + 1)
        for y in range(tile.y, tile.y2 + 1)
        for f in range(tile.f, tile.f2 + 1)
    ]
