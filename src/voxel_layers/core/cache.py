"""Polygon cache for projected voxel items.

Entries are keyed by item id, detail level and a coarse time bucket so
continuous playback does not invalidate the cache on every tick. Eviction
is first-in first-out: a hit does not refresh an entry's age.
"""

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from typing import Callable, Hashable, Optional

from ..models import Polygon

logger = logging.getLogger(__name__)

DEFAULT_CACHE_CAPACITY = 500
DEFAULT_TIME_BUCKET = 10.0


@dataclass(frozen=True)
class PolygonCacheKey:
    item_id: int
    detail_level: int
    time_bucket: int


class PolygonCache:
    def __init__(
        self,
        capacity: int = DEFAULT_CACHE_CAPACITY,
        time_bucket: float = DEFAULT_TIME_BUCKET,
    ):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        if time_bucket <= 0:
            raise ValueError(f"time_bucket must be positive, got {time_bucket}")
        self.capacity = capacity
        self.time_bucket = time_bucket
        self._entries: "OrderedDict[PolygonCacheKey, list[Polygon]]" = OrderedDict()
        self._sources: dict[int, Hashable] = {}
        self._lock = RLock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: PolygonCacheKey) -> bool:
        return key in self._entries

    def make_key(self, item_id: int, detail_level: int, current_time: float) -> PolygonCacheKey:
        return PolygonCacheKey(item_id, detail_level, math.floor(current_time / self.time_bucket))

    def keys(self) -> list[PolygonCacheKey]:
        with self._lock:
            return list(self._entries)

    def get(self, key: PolygonCacheKey) -> Optional[list[Polygon]]:
        with self._lock:
            polygons = self._entries.get(key)
            if polygons is not None:
                self.hits += 1
            return polygons

    def put(self, key: PolygonCacheKey, polygons: list[Polygon]) -> None:
        with self._lock:
            self._entries[key] = polygons
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Polygon cache full, evicted %s", evicted)

    def get_or_build(
        self,
        item_id: int,
        detail_level: int,
        current_time: float,
        build: Callable[[], list[Polygon]],
    ) -> list[Polygon]:
        """Return the cached polygon list for the key, building it on a miss."""
        key = self.make_key(item_id, detail_level, current_time)
        with self._lock:
            polygons = self.get(key)
            if polygons is not None:
                return polygons
            self.misses += 1
            polygons = build()
            self.put(key, polygons)
            return polygons

    def track_source(self, item_id: int, source: Hashable) -> bool:
        """Record the inputs an item's entries are built from.

        The key does not cover the viewport-filtered voxel set or the item's
        style, so when ``source`` differs from the last one recorded, the
        item's entries are dropped. Returns True if that happened.
        """
        with self._lock:
            previous = self._sources.get(item_id)
            self._sources[item_id] = source
            if previous is None or previous == source:
                return False
            dropped = self.invalidate_item(item_id, forget_source=False)
            logger.debug("Inputs of item %d changed, dropped %d entries", item_id, dropped)
            return True

    def invalidate_item(self, item_id: int, forget_source: bool = True) -> int:
        """Drop every entry for one item; returns how many were removed."""
        with self._lock:
            if forget_source:
                self._sources.pop(item_id, None)
            stale = [k for k in self._entries if k.item_id == item_id]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._sources.clear()
            self.hits = 0
            self.misses = 0
