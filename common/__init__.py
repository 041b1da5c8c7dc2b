"""
Shared building blocks: tile identities, provider metadata, errors and logging.
"""
from common.errors import ConfigurationError, TileFetchError, TileNotFoundError, TileProviderError
from common.types import TileIdentity, TileOffset, TileProviderType

__all__ = [
    "ConfigurationError",
    "TileFetchError",
    "TileIdentity",
    "TileNotFoundError",
    "TileOffset",
    "TileProviderError",
    "TileProviderType",
]
