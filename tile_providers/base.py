from __future__ import annotations

from typing import Protocol, runtime_checkable

from common.types import TileIdentity, TileOffset, TileProviderType


@runtime_checkable
class TileProvider(Protocol):
    """
    Anything that can hand out tile bytes for a (z, x, y) identity.

    `fetch` may suspend on I/O and raises a `common.errors.TileProviderError`
    subclass on failure. Returned bytes are opaque to callers.
    """

    @property
    def minimum_zoom(self) -> int: ...

    @property
    def maximum_zoom(self) -> int: ...

    @property
    def tile_offset(self) -> TileOffset: ...

    @property
    def type(self) -> TileProviderType: ...

    async def fetch(self, tile: TileIdentity) -> bytes: ...
