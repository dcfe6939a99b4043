"""Spatiotemporal identifier parsing.

An identifier token looks like ``Z/F/X/Y`` or ``Z/F/X/Y_interval/T``.
Each axis is an integer, ``-`` (whole axis), ``a:-``, ``-:b`` or ``a:b``.
"""

import logging
import math
from typing import Literal, Optional

from ..models import Range, Scalar, Unbounded, VoxelDefinition
from .models import ParseResult, TokenError
from .ranges import altitude_bounds, axis_size

logger = logging.getLogger(__name__)

_DECORATION = str.maketrans("", "", "[]'\"")

Axis = Literal["F", "X", "Y"]


class VoxelIdError(ValueError):
    """A single identifier token could not be parsed."""

    def __init__(self, token: str, reason: str):
        super().__init__(f"Invalid voxel id '{token}': {reason}")
        self.token = token
        self.reason = reason


def _to_int(text: str, what: str) -> int:
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"{what} '{text}' is not an integer") from None


def _to_float(text: str, what: str) -> float:
    text = text.strip()
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"{what} '{text}' is not a number") from None
    if not math.isfinite(value):
        raise ValueError(f"{what} must be finite, got '{text}'")
    return value


def _axis_limits(zoom: int, axis: Axis) -> tuple[int, int]:
    if axis == "F":
        return altitude_bounds(zoom)
    return 0, axis_size(zoom) - 1


def parse_dimension(zoom: int, axis: Axis, item: str):
    """Parse one axis sub-token into a ``Scalar``, ``Range`` or ``Unbounded``."""
    item = item.strip()
    low, high = _axis_limits(zoom, axis)

    if item == "-":
        if axis == "F":
            return Unbounded()
        if zoom == 0:
            return Scalar(value=0)
        return Range(lo=low, hi=high)

    if ":" in item:
        start_text, _, end_text = item.partition(":")
        start = low if start_text.strip() == "-" else _to_int(start_text, axis)
        end = high if end_text.strip() == "-" else _to_int(end_text, axis)
        for value in (start, end):
            if not low <= value <= high:
                raise ValueError(f"{axis} index {value} outside [{low}, {high}] at zoom {zoom}")
        if axis != "X":
            start, end = min(start, end), max(start, end)
        return Range(lo=start, hi=end)

    value = _to_int(item, axis)
    if not low <= value <= high:
        raise ValueError(f"{axis} index {value} outside [{low}, {high}] at zoom {zoom}")
    return Scalar(value=value)


def parse_time_part(time_part: Optional[str]) -> tuple[Optional[float], Optional[float]]:
    """Turn ``interval/T`` into a ``[start, end)`` window; the upper tick is exclusive."""
    if time_part is None:
        return None, None

    interval_text, sep, tick = time_part.partition("/")
    if not sep:
        raise ValueError(f"time part '{time_part}' must be 'interval/T'")
    interval = _to_float(interval_text, "interval")
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval_text.strip()}")

    tick = tick.strip()
    if tick == "-":
        return None, None

    if ":" in tick:
        start_text, _, end_text = tick.partition(":")
        start_text, end_text = start_text.strip(), end_text.strip()
        if end_text == "-":
            return interval * _tick(start_text), math.inf
        if start_text == "-":
            return 0.0, interval * (_tick(end_text) + 1)
        t1, t2 = _tick(start_text), _tick(end_text)
        if t1 > t2:
            raise ValueError(f"time range {t1}:{t2} is inverted")
        return interval * t1, interval * (t2 + 1)

    t = _tick(tick)
    return interval * t, interval * (t + 1)


def _tick(text: str) -> int:
    value = _to_int(text, "T")
    if value < 0:
        raise ValueError(f"time index must be non-negative, got {value}")
    return value


def parse_voxel_id(token: str) -> VoxelDefinition:
    """Parse a single identifier token.

    Raises:
        VoxelIdError: if any part of the token is malformed or out of range.
    """
    token = token.strip()
    spatial, time_part = token, None
    if "_" in token:
        spatial, _, time_part = token.rpartition("_")

    parts = spatial.split("/")
    if len(parts) != 4:
        raise VoxelIdError(token, f"expected Z/F/X/Y, got {len(parts)} part(s)")

    try:
        zoom = _to_int(parts[0], "Z")
        if zoom < 0:
            raise ValueError(f"Z must be non-negative, got {zoom}")
        start_time, end_time = parse_time_part(time_part)
        return VoxelDefinition(
            z=zoom,
            f=parse_dimension(zoom, "F", parts[1]),
            x=parse_dimension(zoom, "X", parts[2]),
            y=parse_dimension(zoom, "Y", parts[3]),
            start_time=start_time,
            end_time=end_time,
        )
    except ValueError as e:
        raise VoxelIdError(token, str(e)) from e


def split_tokens(text: str) -> list[str]:
    """Strip bracket/quote decoration and split on commas, dropping blanks."""
    cleaned = text.translate(_DECORATION)
    return [t.strip() for t in cleaned.split(",") if t.strip()]


def parse_voxel_ids(text: str) -> ParseResult:
    """Parse a comma-separated identifier list.

    A malformed token is reported in ``errors`` and skipped; the rest of
    the batch still parses. Token order is preserved.
    """
    result = ParseResult()
    if not text or not text.strip():
        return result

    for index, token in enumerate(split_tokens(text)):
        try:
            result.voxels.append(parse_voxel_id(token))
        except VoxelIdError as e:
            logger.warning("Skipping voxel id %r: %s", token, e.reason)
            result.errors.append(TokenError(index=index, token=token, message=e.reason))
    return result
