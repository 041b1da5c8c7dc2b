"""
Unit tests for the disk-caching tile source
"""

import asyncio
import os
import sys

import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.errors import TileFetchError
from common.types import TileIdentity, TileOffset, TileProviderType
from tests.fakes import RecordingProvider
from tile_providers import CachingTileProvider, MaxZoomTileProvider


class TestCachingTileProvider:
    def test_miss_then_hit(self, tmp_path):
        delegate = RecordingProvider()
        cache = CachingTileProvider(tmp_path, delegate=delegate)
        tile = TileIdentity(14, 3086, 5864)

        first = asyncio.run(cache.fetch(tile))
        second = asyncio.run(cache.fetch(tile))

        assert first == second == b"tile:14/3086/5864"
        assert delegate.requests == [tile]
        assert (tmp_path / "14" / "3086" / "5864.pbf").read_bytes() == first
        assert cache.contains(tile)

    def test_custom_cache_key(self, tmp_path):
        cache = CachingTileProvider(
            tmp_path, delegate=RecordingProvider(), cache_key=lambda t: f"tiles-{t.z}-{t.x}-{t.y}.pbf"
        )
        asyncio.run(cache.fetch(TileIdentity(2, 1, 3)))
        assert (tmp_path / "tiles-2-1-3.pbf").is_file()

    def test_delegate_error_not_cached(self, tmp_path):
        cache = CachingTileProvider(tmp_path, delegate=RecordingProvider(error=TileFetchError("down")))
        tile = TileIdentity(3, 1, 1)

        with pytest.raises(TileFetchError):
            asyncio.run(cache.fetch(tile))

        assert not cache.contains(tile)
        assert cache.stats() == {"tiles": 0, "bytes": 0}

    def test_stats_and_clear(self, tmp_path):
        cache = CachingTileProvider(tmp_path / "cache", delegate=RecordingProvider())
        for t in (TileIdentity(1, 0, 0), TileIdentity(1, 1, 0)):
            asyncio.run(cache.fetch(t))

        assert cache.stats() == {"tiles": 2, "bytes": len(b"tile:1/0/0") * 2}
        cache.clear()
        assert cache.stats() == {"tiles": 0, "bytes": 0}

    def test_metadata_passthrough(self, tmp_path):
        delegate = RecordingProvider(
            minimum_zoom=2, maximum_zoom=12, tile_offset=TileOffset.MAPBOX, type=TileProviderType.RASTER
        )
        cache = CachingTileProvider(tmp_path, delegate=delegate)
        assert (cache.minimum_zoom, cache.maximum_zoom) == (2, 12)
        assert cache.tile_offset == TileOffset.MAPBOX
        assert cache.type is TileProviderType.RASTER

    def test_overzoomed_children_share_one_cached_parent(self, tmp_path):
        delegate = RecordingProvider()
        provider = MaxZoomTileProvider(max_zoom=14, delegate=CachingTileProvider(tmp_path, delegate=delegate))
        children = [TileIdentity(16, 12344 + dx, 23456 + dy) for dx in range(4) for dy in range(4)]

        results = {asyncio.run(provider.fetch(t)) for t in children}

        assert results == {b"tile:14/3086/5864"}
        assert delegate.requests == [TileIdentity(14, 3086, 5864)]
