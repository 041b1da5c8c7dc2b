"""
Unit tests for the HTTP tile source
"""

import asyncio
import os
import sys
from unittest.mock import Mock

import pytest
import requests

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.errors import ConfigurationError, TileFetchError, TileNotFoundError
from common.types import TileIdentity, TileOffset, TileProviderType
from tile_providers import MaxZoomTileProvider, NetworkTileProvider

TEMPLATE = "https://tiles.test/{z}/{x}/{y}.pbf"


def _response(status_code, content=b""):
    r = Mock()
    r.status_code = status_code
    r.content = content
    return r


def _provider(response=None, side_effect=None, **kwargs):
    session = Mock(spec=requests.Session)
    session.get.return_value = response
    session.get.side_effect = side_effect
    return NetworkTileProvider(TEMPLATE, session=session, **kwargs), session


class TestNetworkTileProvider:
    def test_defaults(self):
        provider = NetworkTileProvider(TEMPLATE)
        assert provider.maximum_zoom == 16
        assert provider.minimum_zoom == 1
        assert provider.tile_offset == TileOffset.DEFAULT
        assert provider.type is TileProviderType.VECTOR

    def test_template_requires_placeholders(self):
        with pytest.raises(ConfigurationError, match=r"\{y\}"):
            NetworkTileProvider("https://tiles.test/{z}/{x}.pbf")

    def test_invalid_zoom_range(self):
        with pytest.raises(ConfigurationError):
            NetworkTileProvider(TEMPLATE, minimum_zoom=10, maximum_zoom=5)

    def test_url_for_applies_offset(self):
        provider = NetworkTileProvider(TEMPLATE, tile_offset=TileOffset.MAPBOX)
        assert provider.url_for(TileIdentity(14, 3086, 5864)) == "https://tiles.test/13/3086/5864.pbf"

    def test_fetch_success(self):
        provider, session = _provider(_response(200, b"pbf-bytes"), headers={"Authorization": "Bearer t"}, timeout=3)

        data = asyncio.run(provider.fetch(TileIdentity(14, 3086, 5864)))

        assert data == b"pbf-bytes"
        session.get.assert_called_once_with(
            "https://tiles.test/14/3086/5864.pbf", headers={"Authorization": "Bearer t"}, timeout=3.0
        )

    @pytest.mark.parametrize("status", [404, 204])
    def test_fetch_not_found(self, status):
        provider, _ = _provider(_response(status))
        with pytest.raises(TileNotFoundError):
            asyncio.run(provider.fetch(TileIdentity(5, 1, 1)))

    def test_fetch_server_error(self):
        provider, _ = _provider(_response(503, b"busy"))
        with pytest.raises(TileFetchError) as exc:
            asyncio.run(provider.fetch(TileIdentity(5, 1, 1)))
        assert exc.value.status_code == 503
        assert exc.value.tile == TileIdentity(5, 1, 1)

    def test_fetch_empty_body_is_error(self):
        provider, _ = _provider(_response(200, b""))
        with pytest.raises(TileFetchError):
            asyncio.run(provider.fetch(TileIdentity(5, 1, 1)))

    def test_fetch_transport_error_is_chained(self):
        provider, _ = _provider(side_effect=requests.ConnectionError("refused"))
        with pytest.raises(TileFetchError) as exc:
            asyncio.run(provider.fetch(TileIdentity(5, 1, 1)))
        assert isinstance(exc.value.__cause__, requests.ConnectionError)

    def test_zoom_outside_range_skips_request(self):
        provider, session = _provider(_response(200, b"x"), maximum_zoom=14)
        with pytest.raises(TileNotFoundError):
            asyncio.run(provider.fetch(TileIdentity(15, 0, 0)))
        session.get.assert_not_called()

    def test_overzoom_chain_requests_parent_url(self):
        network, session = _provider(_response(200, b"parent"), maximum_zoom=14)
        provider = MaxZoomTileProvider(max_zoom=14, delegate=network)

        data = asyncio.run(provider.fetch(TileIdentity(16, 12345, 23456)))

        assert data == b"parent"
        assert session.get.call_args[0][0] == "https://tiles.test/14/3086/5864.pbf"
