"""Pydantic domain models for voxel definitions, tiles and polygons."""

import math
import re
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Scalar(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["scalar"] = "scalar"
    value: int


class Range(BaseModel):
    """Inclusive index range. On the X axis ``lo > hi`` wraps the antimeridian."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["range"] = "range"
    lo: int
    hi: int


class Unbounded(BaseModel):
    """Every altitude band at the voxel's zoom level (the ``-`` F value)."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["unbounded"] = "unbounded"


SpatialDim = Annotated[Union[Scalar, Range], Field(discriminator="kind")]
AltitudeDim = Annotated[Union[Scalar, Range, Unbounded], Field(discriminator="kind")]


def _sorted_range(v):
    if isinstance(v, Range) and v.lo > v.hi:
        return Range(lo=v.hi, hi=v.lo)
    return v


def _index_values(dim) -> tuple[int, ...]:
    if isinstance(dim, Scalar):
        return (dim.value,)
    if isinstance(dim, Range):
        return (dim.lo, dim.hi)
    return ()


class VoxelDefinition(BaseModel):
    """One parsed spatiotemporal identifier, possibly spanning index ranges."""
    model_config = ConfigDict(frozen=True)

    z: int = Field(ge=0)
    f: AltitudeDim
    x: SpatialDim
    y: SpatialDim
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    @field_validator("f", "y")
    @classmethod
    def normalize_range(cls, v):
        return _sorted_range(v)

    @model_validator(mode="after")
    def check_time_window(self) -> "VoxelDefinition":
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("start_time and end_time must both be set or both be None")
        if self.start_time is not None and not self.start_time < self.end_time:
            raise ValueError(
                f"start_time ({self.start_time}) must be less than end_time ({self.end_time})"
            )
        return self

    @model_validator(mode="after")
    def check_indices_in_range(self) -> "VoxelDefinition":
        n = 1 << self.z
        for axis, dim, low, high in (
            ("F", self.f, -n, n - 1), ("X", self.x, 0, n - 1), ("Y", self.y, 0, n - 1),
        ):
            for value in _index_values(dim):
                if not low <= value <= high:
                    raise ValueError(
                        f"{axis} index {value} outside [{low}, {high}] at zoom {self.z}"
                    )
        return self

    @property
    def is_timeless(self) -> bool:
        return self.start_time is None


class Tile(BaseModel):
    """A single non-wrapping rectangular block of cells at one zoom level."""
    model_config = ConfigDict(frozen=True)

    z: int = Field(ge=0)
    x: int = Field(ge=0)
    x2: int = Field(ge=0)
    y: int = Field(ge=0)
    y2: int = Field(ge=0)
    f: int
    f2: int
    original_id: str = ""
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    @model_validator(mode="after")
    def check_ranges_ordered(self) -> "Tile":
        for lo, hi in (("x", "x2"), ("y", "y2"), ("f", "f2")):
            if getattr(self, lo) > getattr(self, hi):
                raise ValueError(
                    f"{lo} ({getattr(self, lo)}) must not exceed {hi} ({getattr(self, hi)})"
                )
        return self

    @property
    def cell_count(self) -> int:
        return (self.x2 - self.x + 1) * (self.y2 - self.y + 1) * (self.f2 - self.f + 1)


class Polygon(BaseModel):
    """Flat footprint ring at base altitude plus the height to extrude it by."""
    points: list[list[float]] = Field(min_length=5, max_length=5)
    elevation: float = Field(gt=0)
    voxel_id: str
    color: tuple[int, int, int, int]
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    @field_validator("points")
    @classmethod
    def points_must_be_3d(cls, v: list[list[float]]) -> list[list[float]]:
        for i, point in enumerate(v):
            if len(point) != 3:
                raise ValueError(f"Point {i} must have exactly 3 components, got {len(point)}")
        return v

    def active_at(self, current_time: float) -> bool:
        if self.start_time is None and self.end_time is None:
            return True
        if self.start_time is None or self.end_time is None:
            return False
        return self.start_time <= current_time < self.end_time


class Viewport(BaseModel):
    zoom: float = Field(ge=0)
    longitude: float = Field(ge=-180, le=180)
    latitude: float = Field(ge=-90, le=90)


class VoxelItem(BaseModel):
    """A group of voxel definitions drawn with one color."""
    model_config = ConfigDict(validate_assignment=True)

    id: int
    type: Literal["voxel"] = "voxel"
    color: str = "#FF0000"
    opacity: float = Field(default=0.8, ge=0, le=1)
    voxels: list[VoxelDefinition] = Field(default_factory=list)
    voxel_string: Optional[str] = None
    source: Literal["manual", "json"] = "manual"
    tooltip_keys: list[str] = Field(default_factory=list)
    hidden: bool = False

    @field_validator("color", mode="before")
    @classmethod
    def validate_and_normalize_hex(cls, v: str) -> str:
        if not isinstance(v, str):
            raise ValueError("Color must be a string")
        v = v.strip()
        if not re.match(r'^#[0-9A-Fa-f]{6}$', v):
            raise ValueError(f"Invalid hex color '{v}'. Must be #RRGGBB format.")
        return f"#{v[1:].upper()}"


def is_unbounded_end(value: Optional[float]) -> bool:
    return value is not None and math.isinf(value)
