"""Index range resolution and memoized enumeration.

The same ranges recur across frames and time ticks, so enumerations are
kept in a bounded table. When the table is full the oldest insertion is
dropped first (FIFO).
"""

import logging
from collections import OrderedDict
from threading import RLock
from typing import Callable, Union

from ..models import Range, Scalar, Unbounded

logger = logging.getLogger(__name__)

DEFAULT_MEMO_CAPACITY = 1000

Dimension = Union[Scalar, Range, Unbounded]


def axis_size(zoom: int) -> int:
    """Number of tiles along X or Y at ``zoom``."""
    return 1 << zoom


def altitude_bounds(zoom: int) -> tuple[int, int]:
    """Lowest and highest altitude band index at ``zoom``."""
    n = axis_size(zoom)
    return -n, n - 1


def resolve_bounds(dim: Dimension, zoom: int) -> tuple[int, int]:
    """Return ``(lo, hi)`` for a dimension, sorting plain ranges.

    Wraparound X ranges must not go through here; use ``x_runs``.
    """
    if isinstance(dim, Scalar):
        return dim.value, dim.value
    if isinstance(dim, Range):
        return min(dim.lo, dim.hi), max(dim.lo, dim.hi)
    if isinstance(dim, Unbounded):
        return altitude_bounds(zoom)
    raise TypeError(f"Unsupported dimension value: {dim!r}")


def x_runs(dim: Dimension, zoom: int) -> list[tuple[int, int]]:
    """Split an X dimension into non-wrapping ``(lo, hi)`` runs."""
    if isinstance(dim, Scalar):
        return [(dim.value, dim.value)]
    if isinstance(dim, Range):
        if dim.lo <= dim.hi:
            return [(dim.lo, dim.hi)]
        return [(dim.lo, axis_size(zoom) - 1), (0, dim.hi)]
    raise TypeError(f"X must be a scalar or a range, got {dim!r}")


def format_dimension(dim: Dimension) -> str:
    if isinstance(dim, Scalar):
        return str(dim.value)
    if isinstance(dim, Range):
        return f"{dim.lo}:{dim.hi}"
    if isinstance(dim, Unbounded):
        return "-"
    raise TypeError(f"Unsupported dimension value: {dim!r}")


class RangeMemo:
    """Bounded memo of range resolutions keyed by ``(dimension, zoom, kind)``."""

    def __init__(self, capacity: int = DEFAULT_MEMO_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._table: "OrderedDict[tuple, tuple[int, ...]]" = OrderedDict()
        self._lock = RLock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key) -> bool:
        return key in self._table

    def _lookup(self, key: tuple, build: Callable[[], tuple]) -> tuple:
        with self._lock:
            values = self._table.get(key)
            if values is not None:
                self.hits += 1
                return values
            self.misses += 1
            values = build()
            self._table[key] = values
            while len(self._table) > self.capacity:
                evicted, _ = self._table.popitem(last=False)
                logger.debug("Range memo full, evicted %s", evicted)
            return values

    def bounds(self, dim: Dimension, zoom: int) -> tuple[int, int]:
        return self._lookup((dim, zoom, "bounds"), lambda: resolve_bounds(dim, zoom))

    def x_spans(self, dim: Dimension, zoom: int) -> tuple[tuple[int, int], ...]:
        return self._lookup((dim, zoom, "x_spans"), lambda: tuple(x_runs(dim, zoom)))

    def values(self, dim: Dimension, zoom: int) -> tuple[int, ...]:
        """Every index in a Y or F dimension, ascending."""
        def build():
            lo, hi = self.bounds(dim, zoom)
            return tuple(range(lo, hi + 1))
        return self._lookup((dim, zoom, "values"), build)

    def x_values(self, dim: Dimension, zoom: int) -> tuple[int, ...]:
        """Every index in an X dimension, walking through the antimeridian if wrapped."""
        def build():
            out: list[int] = []
            for lo, hi in self.x_spans(dim, zoom):
                out.extend(range(lo, hi + 1))
            return tuple(out)
        return self._lookup((dim, zoom, "x_values"), build)

    def clear(self) -> None:
        with self._lock:
            self._table.clear()
            self.hits = 0
            self.misses = 0


default_memo = RangeMemo()
