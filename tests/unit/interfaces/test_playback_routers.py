"""Tests for the media proxy and manifest relay routers."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import respx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from vodhub.domain.exceptions import UpstreamProxyError
from vodhub.infrastructure.config import AppConfig
from vodhub.infrastructure.hls import ManifestRelay
from vodhub.infrastructure.proxy import MediaProxy
from vodhub.interfaces.api.proxy.router import router as proxy_router
from vodhub.interfaces.api.relay.router import router as relay_router

_VIDEO = "https://media.example.com/movie.mp4"
_MANIFEST = "https://cdn.example.com/show/index.m3u8"


def _make_app(
    *,
    config: AppConfig | None = None,
    media_proxy: object | None = None,
    manifest_relay: object | None = None,
) -> FastAPI:
    """Create a minimal FastAPI app with the playback routers."""
    app = FastAPI()
    app.include_router(relay_router, prefix="/api/v1")
    app.include_router(proxy_router)

    http = httpx.AsyncClient()
    app.state.config = config
    app.state.media_proxy = media_proxy or MediaProxy(
        http_client=http, user_agent="Fallback/1"
    )
    app.state.manifest_relay = manifest_relay or ManifestRelay(
        http_client=http, user_agent="Fallback/1"
    )
    return app


# ---------------------------------------------------------------------------
# /proxy
# ---------------------------------------------------------------------------


class TestProxyRouter:
    @respx.mock
    def test_range_request_passes_through(self) -> None:
        route = respx.get(_VIDEO).respond(
            206,
            content=b"y" * 100,
            headers={
                "Content-Type": "video/mp4",
                "Content-Range": "bytes 0-99/200",
                "Accept-Ranges": "bytes",
            },
        )
        client = TestClient(_make_app())

        resp = client.get(
            "/proxy", params={"url": _VIDEO}, headers={"Range": "bytes=0-99"}
        )

        assert resp.status_code == 206
        assert resp.headers["content-range"] == "bytes 0-99/200"
        assert resp.headers["accept-ranges"] == "bytes"
        assert resp.headers["access-control-allow-origin"] == "*"
        assert resp.content == b"y" * 100
        assert route.calls.last.request.headers["Range"] == "bytes=0-99"

    @respx.mock
    def test_missing_user_agent_uses_fallback(self) -> None:
        route = respx.get(_VIDEO).respond(200, content=b"z")
        client = TestClient(_make_app())

        client.get("/proxy", params={"url": _VIDEO}, headers={"User-Agent": ""})

        assert route.calls.last.request.headers["User-Agent"] == "Fallback/1"

    def test_missing_url(self) -> None:
        resp = TestClient(_make_app()).get("/proxy")

        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing url"}

    def test_upstream_error_status_mirrored(self) -> None:
        proxy = MagicMock()
        proxy.build_request = MagicMock()
        proxy.forward = AsyncMock(side_effect=UpstreamProxyError(404))
        client = TestClient(_make_app(media_proxy=proxy))

        resp = client.get("/proxy", params={"url": _VIDEO})

        assert resp.status_code == 404
        assert resp.json()["status"] == 404
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_unreachable_origin(self) -> None:
        proxy = MagicMock()
        proxy.forward = AsyncMock(
            side_effect=UpstreamProxyError(500, "Proxy request failed")
        )
        client = TestClient(_make_app(media_proxy=proxy))

        resp = client.get("/proxy", params={"url": _VIDEO})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Proxy request failed", "status": 500}

    @respx.mock
    def test_head(self) -> None:
        respx.head(_VIDEO).respond(200, headers={"Content-Type": "video/mp4"})
        client = TestClient(_make_app())

        resp = client.head("/proxy", params={"url": _VIDEO})

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "video/mp4"
        assert resp.headers["accept-ranges"] == "bytes"

    def test_preflight(self) -> None:
        resp = TestClient(_make_app()).options("/proxy")

        assert resp.status_code == 204
        assert resp.headers["access-control-max-age"] == "86400"
        assert "Range" in resp.headers["access-control-allow-headers"]


# ---------------------------------------------------------------------------
# /api/v1/relay/manifest
# ---------------------------------------------------------------------------


class TestRelayRouter:
    @respx.mock
    def test_filters_manifest(self, app_config: AppConfig) -> None:
        respx.get(_MANIFEST).respond(
            200, text="#EXTM3U\n#EXT-X-DISCONTINUITY\n#EXTINF:10,\nseg.ts\n"
        )
        client = TestClient(_make_app(config=app_config))

        resp = client.get("/api/v1/relay/manifest", params={"url": _MANIFEST})

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/vnd.apple.mpegurl")
        assert resp.headers["cache-control"] == "no-cache"
        assert "#EXT-X-DISCONTINUITY" not in resp.text
        assert "https://cdn.example.com/show/seg.ts" in resp.text

    def test_disabled_redirects_to_origin(self, app_config: AppConfig) -> None:
        client = TestClient(_make_app(config=app_config))

        resp = client.get(
            "/api/v1/relay/manifest",
            params={"url": _MANIFEST, "adblock": "false"},
            follow_redirects=False,
        )

        assert resp.status_code == 307
        assert resp.headers["location"] == _MANIFEST

    def test_config_default_disables_filtering(self) -> None:
        config = AppConfig.model_validate({"playback": {"adblock_enabled": False}})
        client = TestClient(_make_app(config=config))

        resp = client.get(
            "/api/v1/relay/manifest",
            params={"url": _MANIFEST},
            follow_redirects=False,
        )

        assert resp.status_code == 307

    def test_missing_url(self, app_config: AppConfig) -> None:
        resp = TestClient(_make_app(config=app_config)).get("/api/v1/relay/manifest")

        assert resp.status_code == 400

    def test_upstream_failure(self, app_config: AppConfig) -> None:
        relay = MagicMock()
        relay.relay = AsyncMock(side_effect=UpstreamProxyError(502, "unreachable"))
        client = TestClient(_make_app(config=app_config, manifest_relay=relay))

        resp = client.get("/api/v1/relay/manifest", params={"url": _MANIFEST})

        assert resp.status_code == 502
        assert resp.json()["error"] == "unreachable"
