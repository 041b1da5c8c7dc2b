from __future__ import annotations

"""
HTTP tile source.

Usage:
    src = NetworkTileProvider("https://example.com/tiles/{z}/{x}/{y}.pbf", maximum_zoom=14)
    data = await src.fetch(TileIdentity(14, 3086, 5864))

`requests` is blocking; each fetch runs in a worker thread so concurrent
fetches do not stall the event loop.
"""

import asyncio
import logging
from typing import Dict, Optional

import requests

from common.errors import ConfigurationError, TileFetchError, TileNotFoundError
from common.types import TileIdentity, TileOffset, TileProviderType


log = logging.getLogger(__name__)

_NOT_FOUND_STATUSES = (204, 404)


class NetworkTileProvider:
    def __init__(
        self,
        url_template: str,
        *,
        maximum_zoom: int = 16,
        minimum_zoom: int = 1,
        tile_offset: TileOffset = TileOffset.DEFAULT,
        type: TileProviderType = TileProviderType.VECTOR,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        """
        Params:
            url_template: URL with {z}, {x} and {y} placeholders
            maximum_zoom / minimum_zoom: zoom range the server provides
            tile_offset: zoom offset applied to {z} when building URLs
            headers: extra request headers (e.g. auth)
            session: optional requests.Session for connection reuse
            timeout: per-request timeout in seconds
        """
        missing = [p for p in ("{z}", "{x}", "{y}") if p not in url_template]
        if missing:
            raise ConfigurationError(f"url_template is missing placeholders: {', '.join(missing)}")
        if minimum_zoom < 0 or minimum_zoom > maximum_zoom:
            raise ConfigurationError(
                f"invalid zoom range: minimum_zoom={minimum_zoom}, maximum_zoom={maximum_zoom}"
            )
        self.url_template = url_template
        self._maximum_zoom = int(maximum_zoom)
        self._minimum_zoom = int(minimum_zoom)
        self._tile_offset = tile_offset
        self._type = TileProviderType(type)
        self.headers = dict(headers or {})
        self.session = session or requests.Session()
        self.timeout = float(timeout)

    @property
    def maximum_zoom(self) -> int:
        return self._maximum_zoom

    @property
    def minimum_zoom(self) -> int:
        return self._minimum_zoom

    @property
    def tile_offset(self) -> TileOffset:
        return self._tile_offset

    @property
    def type(self) -> TileProviderType:
        return self._type

    def url_for(self, tile: TileIdentity) -> str:
        z = tile.z + self._tile_offset.zoom
        return self.url_template.format(z=z, x=tile.x, y=tile.y)

    async def fetch(self, tile: TileIdentity) -> bytes:
        if not (self._minimum_zoom <= tile.z <= self._maximum_zoom):
            raise TileNotFoundError(
                f"zoom {tile.z} outside provider range [{self._minimum_zoom}, {self._maximum_zoom}]", tile
            )
        return await asyncio.to_thread(self._get, tile)

    def _get(self, tile: TileIdentity) -> bytes:
        url = self.url_for(tile)
        try:
            r = self.session.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("tile request failed: %s", e, extra={"tile": tile, "url": url})
            raise TileFetchError(f"request for {tile} failed: {e}", tile) from e

        if r.status_code in _NOT_FOUND_STATUSES:
            raise TileNotFoundError(f"no tile at {tile}", tile)
        if r.status_code != 200 or not r.content:
            log.warning(
                "tile request returned %s", r.status_code,
                extra={"tile": tile, "url": url, "status_code": r.status_code},
            )
            raise TileFetchError(f"unexpected response {r.status_code} for {tile}", tile, r.status_code)
        return r.content
