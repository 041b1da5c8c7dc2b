from __future__ import annotations

from typing import Optional

from common.types import TileIdentity


class TileProviderError(Exception):
    """Base class for failures raised by a tile provider."""

    def __init__(self, message: str, tile: Optional[TileIdentity] = None):
        super().__init__(message)
        self.tile = tile


class TileNotFoundError(TileProviderError):
    """The source has no data for the requested tile."""


class TileFetchError(TileProviderError):
    """Transport failure or unexpected response from the source."""

    def __init__(self, message: str, tile: Optional[TileIdentity] = None, status_code: Optional[int] = None):
        super().__init__(message, tile)
        self.status_code = status_code


class ConfigurationError(ValueError):
    """Invalid provider or service configuration, raised at construction time."""
