"""Session state for the voxel-layers MCP server.

Holds the voxel items, tooltip table, viewport, playback time, render
settings and the caches that belong to this rendering session.
"""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from voxel_layers.core.cache import DEFAULT_CACHE_CAPACITY, DEFAULT_TIME_BUCKET, PolygonCache
from voxel_layers.core.ranges import DEFAULT_MEMO_CAPACITY, RangeMemo
from voxel_layers.core.viewport import DEFAULT_MARGIN_DEGREES, detail_level
from voxel_layers.models import Viewport, VoxelItem


class RenderSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    compact: bool = True
    margin_degrees: float = Field(default=DEFAULT_MARGIN_DEGREES, ge=0, le=180)
    hide_below_zoom: float = Field(default=3.0, ge=0)
    cache_capacity: int = Field(default=DEFAULT_CACHE_CAPACITY, gt=0)
    memo_capacity: int = Field(default=DEFAULT_MEMO_CAPACITY, gt=0)
    time_bucket: float = Field(default=DEFAULT_TIME_BUCKET, gt=0)


class SessionState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: list[VoxelItem] = []
    tooltips: dict[str, str] = {}
    viewport: Optional[Viewport] = None
    current_time: float = 0.0
    settings: RenderSettings = Field(default_factory=RenderSettings)
    polygon_cache: PolygonCache = Field(default_factory=PolygonCache)
    range_memo: RangeMemo = Field(default_factory=RangeMemo)

    def next_item_id(self) -> int:
        return max((item.id for item in self.items), default=0) + 1

    def find_item(self, item_id: int) -> Optional[VoxelItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def reset_caches(self) -> None:
        """Replace both caches so they pick up the current settings."""
        self.polygon_cache = PolygonCache(
            capacity=self.settings.cache_capacity,
            time_bucket=self.settings.time_bucket,
        )
        self.range_memo = RangeMemo(capacity=self.settings.memo_capacity)

    def summary(self) -> dict:
        return {
            "items": [
                {
                    "id": item.id,
                    "source": item.source,
                    "color": item.color,
                    "opacity": item.opacity,
                    "voxels": len(item.voxels),
                    "hidden": item.hidden,
                }
                for item in self.items
            ],
            "tooltips": len(self.tooltips),
            "viewport": self.viewport.model_dump() if self.viewport else None,
            "detail_level": detail_level(self.viewport.zoom) if self.viewport else 3,
            "current_time": self.current_time,
            "settings": self.settings.model_dump(),
            "cache": {
                "entries": len(self.polygon_cache),
                "capacity": self.polygon_cache.capacity,
                "hits": self.polygon_cache.hits,
                "misses": self.polygon_cache.misses,
                "range_memo_entries": len(self.range_memo),
            },
        }


# Global session state, one per MCP server process
state = SessionState()
