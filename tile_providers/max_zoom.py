from __future__ import annotations

"""
Overzoom adapter.

Requests above the zoom at which the source has data are redirected to the
ancestor tile at that zoom; the renderer scales it up. Typical chain:

    provider = MaxZoomTileProvider(
        max_zoom=14,
        delegate=CachingTileProvider(
            "data/tiles",
            delegate=NetworkTileProvider("https://example.com/tiles/{z}/{x}/{y}.pbf", maximum_zoom=14),
        ),
    )
    data = await provider.fetch(TileIdentity(16, 12345, 23456))   # delegate sees 14/3086/5864
"""

import logging
from typing import Optional

from common.errors import ConfigurationError
from common.types import TileIdentity, TileOffset, TileProviderType
from tile_providers.base import TileProvider

log = logging.getLogger(__name__)

# Zoom ceiling advertised to map layers when none is configured.
DEFAULT_REPORTED_MAX_ZOOM = 22


class MaxZoomTileProvider:
    def __init__(self, max_zoom: int, delegate: TileProvider, maximum_zoom: Optional[int] = None):
        """
        Params:
            max_zoom: highest zoom the delegate actually has tiles for
            delegate: provider that fetches the tiles
            maximum_zoom: zoom ceiling reported to callers (defaults to 22)
        """
        if max_zoom < 0:
            raise ConfigurationError(f"max_zoom must be >= 0, got {max_zoom}")
        reported = DEFAULT_REPORTED_MAX_ZOOM if maximum_zoom is None else int(maximum_zoom)
        if reported < max_zoom:
            raise ConfigurationError(
                f"maximum_zoom ({reported}) must not be lower than max_zoom ({max_zoom})"
            )
        self._max_zoom = int(max_zoom)
        self._reported_max_zoom = reported
        self._delegate = delegate

    @property
    def maximum_zoom(self) -> int:
        return self._reported_max_zoom

    @property
    def reported_maximum_zoom(self) -> int:
        return self._reported_max_zoom

    @property
    def source_maximum_zoom(self) -> int:
        """Zoom of the real data; use this for scale/positioning, not for zoom limits."""
        return self._max_zoom

    @property
    def minimum_zoom(self) -> int:
        return self._delegate.minimum_zoom

    @property
    def tile_offset(self) -> TileOffset:
        return self._delegate.tile_offset

    @property
    def type(self) -> TileProviderType:
        return self._delegate.type

    @property
    def delegate(self) -> TileProvider:
        return self._delegate

    def resolve(self, tile: TileIdentity) -> TileIdentity:
        """Identity the delegate is asked for: `tile` itself, or its ancestor at `max_zoom`."""
        if tile.z <= self._max_zoom:
            return tile
        divisor = 1 << (tile.z - self._max_zoom)
        return TileIdentity(self._max_zoom, tile.x // divisor, tile.y // divisor)

    async def fetch(self, tile: TileIdentity) -> bytes:
        source = self.resolve(tile)
        if source is not tile:
            log.debug("overzoom", extra={"tile": tile, "source_tile": source})
        return await self._delegate.fetch(source)

    def __repr__(self) -> str:
        return (
            f"MaxZoomTileProvider(max_zoom={self._max_zoom}, "
            f"maximum_zoom={self._reported_max_zoom}, delegate={self._delegate!r})"
        )
