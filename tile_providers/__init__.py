"""
Tile providers — composable tile sources.

Providers share one shape (`TileProvider`) so they nest freely:

    MaxZoomTileProvider(max_zoom=14,
        delegate=CachingTileProvider("data/tiles",
            delegate=NetworkTileProvider("https://example.com/tiles/{z}/{x}/{y}.pbf", maximum_zoom=14)))
"""
from tile_providers.base import TileProvider
from tile_providers.caching import CachingTileProvider
from tile_providers.max_zoom import DEFAULT_REPORTED_MAX_ZOOM, MaxZoomTileProvider
from tile_providers.network import NetworkTileProvider

__all__ = [
    "DEFAULT_REPORTED_MAX_ZOOM",
    "CachingTileProvider",
    "MaxZoomTileProvider",
    "NetworkTileProvider",
    "TileProvider",
]
