from __future__ import annotations

"""
Disk cache in front of another provider.

    root/
      └─ {z}/
          └─ {x}/
              └─ {y}.pbf   (opaque tile bytes, as returned by the delegate)

The layout is set by `cache_key`; no eviction is performed.
"""

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from common.types import TileIdentity, TileOffset, TileProviderType
from tile_providers.base import TileProvider

log = logging.getLogger(__name__)

CacheKey = Callable[[TileIdentity], str]


def default_cache_key(tile: TileIdentity) -> str:
    return f"{tile.z}/{tile.x}/{tile.y}.pbf"


class CachingTileProvider:
    def __init__(self, root: Union[str, Path], delegate: TileProvider, cache_key: Optional[CacheKey] = None):
        self.root = Path(root)
        self._delegate = delegate
        self._cache_key = cache_key or default_cache_key

    # -------- provider metadata (passthrough) --------

    @property
    def maximum_zoom(self) -> int:
        return self._delegate.maximum_zoom

    @property
    def minimum_zoom(self) -> int:
        return self._delegate.minimum_zoom

    @property
    def tile_offset(self) -> TileOffset:
        return self._delegate.tile_offset

    @property
    def type(self) -> TileProviderType:
        return self._delegate.type

    # -------- public API --------

    def path_for(self, tile: TileIdentity) -> Path:
        return self.root / self._cache_key(tile)

    def contains(self, tile: TileIdentity) -> bool:
        return self.path_for(tile).is_file()

    async def fetch(self, tile: TileIdentity) -> bytes:
        path = self.path_for(tile)
        cached = await asyncio.to_thread(_read_if_exists, path)
        if cached is not None:
            log.debug("cache hit", extra={"tile": tile})
            return cached

        data = await self._delegate.fetch(tile)
        await asyncio.to_thread(_write_atomic, path, data)
        log.debug("cache store", extra={"tile": tile})
        return data

    def stats(self) -> Dict[str, int]:
        tiles = 0
        size = 0
        if self.root.exists():
            for p in self.root.rglob("*"):
                if p.is_file() and not p.name.startswith("."):
                    tiles += 1
                    size += p.stat().st_size
        return {"tiles": tiles, "bytes": size}

    def clear(self) -> None:
        if self.root.exists():
            shutil.rmtree(self.root)


def _read_if_exists(path: Path) -> Optional[bytes]:
    try:
        with path.open("rb") as f:
            return f.read()
    except FileNotFoundError:
        return None


def _write_atomic(path: Path, data: bytes) -> None:
    # Concurrent writers of the same tile: last rename wins.
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
