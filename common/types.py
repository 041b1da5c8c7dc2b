from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Tuple


@dataclass(frozen=True, slots=True)
class TileIdentity:
    """
    Address of a single tile in a quad-tree (XYZ) tiling scheme.

    Attributes:
        z: zoom level, >= 0.
        x, y: column/row, each in [0, 2**z).
    """
    z: int
    x: int
    y: int

    def __post_init__(self) -> None:
        if self.z < 0:
            raise ValueError(f"zoom must be >= 0, got {self.z}")
        extent = 1 << self.z
        if not (0 <= self.x < extent) or not (0 <= self.y < extent):
            raise ValueError(f"x/y out of range for zoom {self.z}: ({self.x}, {self.y})")

    def parent(self, zoom: int) -> "TileIdentity":
        """Ancestor tile at `zoom` that spatially contains this tile."""
        if zoom < 0 or zoom > self.z:
            raise ValueError(f"parent zoom must be in [0, {self.z}], got {zoom}")
        shift = self.z - zoom
        return TileIdentity(zoom, self.x >> shift, self.y >> shift)

    def key(self) -> str:
        return f"{self.z}/{self.x}/{self.y}"

    @classmethod
    def from_key(cls, key: str) -> "TileIdentity":
        try:
            z, x, y = (int(p) for p in key.strip("/").split("/"))
        except ValueError:
            raise ValueError(f"expected 'z/x/y', got {key!r}") from None
        return cls(z, x, y)

    @property
    def zxy(self) -> Tuple[int, int, int]:
        return (self.z, self.x, self.y)

    def __str__(self) -> str:
        return self.key()


@dataclass(frozen=True, slots=True)
class TileOffset:
    """Zoom offset applied when a scheme addresses tiles one level off (e.g. 512px tiles)."""
    zoom: int = 0

    DEFAULT: ClassVar["TileOffset"]
    MAPBOX: ClassVar["TileOffset"]


TileOffset.DEFAULT = TileOffset(0)
TileOffset.MAPBOX = TileOffset(-1)


class TileProviderType(str, Enum):
    VECTOR = "vector"
    RASTER = "raster"
    RASTER_DEM = "raster_dem"
