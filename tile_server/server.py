from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import uvicorn
import yaml
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from common.errors import ConfigurationError, TileFetchError, TileNotFoundError
from common.logging_setup import get_logger, setup_logging
from common.types import TileIdentity, TileOffset, TileProviderType
from tile_providers import CachingTileProvider, MaxZoomTileProvider, NetworkTileProvider, TileProvider

log = get_logger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "source": {
        "url_template": "https://tiles.example.com/vector/{z}/{x}/{y}.pbf",
        "minzoom": 0,
        "maxzoom": 14,
        "type": "vector",
        "tile_offset": 0,
        "headers": {},
        "timeout": 10.0,
    },
    "overzoom": {"max_zoom": 14, "reported_max_zoom": None},
    "cache": {"enabled": True, "root": "data/tiles"},
    "logging": {"level": None},
}

_RASTER_FORMATS = {"png": "image/png", "jpg": "image/jpeg", "jpeg": "image/jpeg", "webp": "image/webp"}

# URL extension -> media type, per source kind; bytes are served as-is.
TILE_FORMATS: Dict[TileProviderType, Dict[str, str]] = {
    TileProviderType.VECTOR: {"pbf": "application/x-protobuf", "mvt": "application/vnd.mapbox-vector-tile"},
    TileProviderType.RASTER: _RASTER_FORMATS,
    TileProviderType.RASTER_DEM: _RASTER_FORMATS,
}


def _merge(base: Dict, override: Dict) -> Dict:
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: Optional[str] = None) -> Dict:
    """
    Load YAML config and fill in defaults for anything not set.
    Path precedence: explicit arg, env TILE_CONFIG, config/params.yaml.
    """
    path = path or os.environ.get("TILE_CONFIG", "config/params.yaml")
    if not Path(path).exists():
        return copy.deepcopy(DEFAULT_CONFIG)
    with open(path, "r") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"{path}: expected a mapping at top level")
    return _merge(DEFAULT_CONFIG, loaded)


def build_provider(config: Dict) -> MaxZoomTileProvider:
    """network -> (optional) disk cache -> overzoom adapter."""
    # An empty YAML section (`cache:`) loads as None.
    src = config.get("source") or {}
    oz = config.get("overzoom") or {}
    cache = config.get("cache") or {}
    try:
        provider: TileProvider = NetworkTileProvider(
            str(src["url_template"]),
            maximum_zoom=int(src.get("maxzoom", 16)),
            minimum_zoom=int(src.get("minzoom", 1)),
            tile_offset=TileOffset(int(src.get("tile_offset", 0))),
            type=TileProviderType(src.get("type", "vector")),
            headers=src.get("headers") or {},
            timeout=float(src.get("timeout", 10.0)),
        )
    except ConfigurationError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid source config: {e}") from e

    if cache.get("enabled", False):
        provider = CachingTileProvider(cache.get("root", "data/tiles"), delegate=provider)

    max_zoom = oz.get("max_zoom")
    reported = oz.get("reported_max_zoom")
    try:
        max_zoom = provider.maximum_zoom if max_zoom is None else int(max_zoom)
        reported = None if reported is None else int(reported)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid overzoom config: {e}") from e
    return MaxZoomTileProvider(max_zoom=max_zoom, delegate=provider, maximum_zoom=reported)


def create_app(config: Optional[Dict] = None, provider: Optional[MaxZoomTileProvider] = None) -> FastAPI:
    config = config if config is not None else load_config()
    setup_logging((config.get("logging") or {}).get("level"))
    provider = provider or build_provider(config)

    app = FastAPI(title="Overzoom Tile API", version="1.0.0")
    app.state.provider = provider

    # (Optional) CORS for map clients served from other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health(request: Request):
        p: MaxZoomTileProvider = request.app.state.provider
        cache = p.delegate if isinstance(p.delegate, CachingTileProvider) else None
        return {
            "status": "ok",
            "zoom": {
                "min": p.minimum_zoom,
                "max": p.maximum_zoom,
                "source_max": p.source_maximum_zoom,
            },
            "cache": cache.stats() if cache else None,
        }

    @app.get("/metadata")
    def metadata(request: Request):
        p: MaxZoomTileProvider = request.app.state.provider
        return {
            "minzoom": p.minimum_zoom,
            "maxzoom": p.maximum_zoom,
            "source_maxzoom": p.source_maximum_zoom,
            "type": p.type.value,
            "tile_offset": p.tile_offset.zoom,
        }

    @app.get("/tiles/{z}/{x}/{y}.{fmt}")
    async def tile(z: int, x: int, y: int, fmt: str, request: Request):
        p: MaxZoomTileProvider = request.app.state.provider
        media_type = TILE_FORMATS[p.type].get(fmt.lower())
        if media_type is None:
            raise HTTPException(status_code=404, detail="unsupported_format")
        # Range check first: TileIdentity computes 1 << z.
        if not (p.minimum_zoom <= z <= p.maximum_zoom):
            raise HTTPException(status_code=404, detail="zoom_out_of_range")
        try:
            ident = TileIdentity(z, x, y)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        source = p.resolve(ident)
        try:
            data = await p.fetch(ident)
        except TileNotFoundError:
            raise HTTPException(status_code=404, detail="tile_not_found")
        except TileFetchError as e:
            log.error("upstream fetch failed: %s", e, extra={"tile": ident, "source_tile": source})
            raise HTTPException(status_code=502, detail="upstream_fetch_failed")

        headers = {
            "X-Tile-Source": source.key(),
            "Cache-Control": "public, max-age=3600",
        }
        return Response(content=data, media_type=media_type, headers=headers)

    return app


# -------- local dev entrypoint --------
if __name__ == "__main__":
    uvicorn.run(create_app(), host=os.environ.get("HOST", "0.0.0.0"), port=int(os.environ.get("PORT", "8000")))
