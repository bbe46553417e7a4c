"""Ad-segment filtering relay.

Fetches a manifest for the chosen stream, strips discontinuity markers
and rewrites its URIs so the player keeps loading through vodhub:

- nested playlists (``.m3u8``) point back at the relay,
- media segments and keys point at their absolute origin URL, or at
  the media proxy when ``proxy_segments`` is set.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx
import structlog

from vodhub.domain.exceptions import UpstreamProxyError
from vodhub.infrastructure.hls import playlist
from vodhub.infrastructure.hls.ad_filter import DISCONTINUITY_MARKER, filter_manifest

log = structlog.get_logger(__name__)

_MAX_MANIFEST_BYTES = 4 * 1024 * 1024


class ManifestRelay:
    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        user_agent: str,
        relay_path: str = "/api/v1/relay/manifest",
        proxy_path: str = "/proxy",
        proxy_segments: bool = False,
        marker: str = DISCONTINUITY_MARKER,
    ) -> None:
        self._http = http_client
        self._user_agent = user_agent
        self._relay_path = relay_path
        self._proxy_path = proxy_path
        self._proxy_segments = proxy_segments
        self._marker = marker

    def relay_url(self, url: str) -> str:
        return f"{self._relay_path}?url={quote(url, safe='')}&adblock=true"

    def proxy_url(self, url: str) -> str:
        return f"{self._proxy_path}?url={quote(url, safe='')}"

    def _target(self, manifest_url: str, uri: str) -> str:
        absolute = playlist.resolve(manifest_url, uri)
        if playlist.is_playlist_url(absolute):
            return self.relay_url(absolute)
        if self._proxy_segments:
            return self.proxy_url(absolute)
        return absolute

    def rewrite(self, text: str, manifest_url: str) -> str:
        """Rewrite URI lines and ``URI="..."`` attributes; tags stay verbatim."""
        out: list[str] = []
        for line in text.split("\n"):
            stripped = line.strip()
            if not stripped:
                out.append(line)
            elif stripped.startswith("#"):
                out.append(
                    playlist.rewrite_uri_attributes(
                        line, lambda uri: self._target(manifest_url, uri)
                    )
                )
            else:
                out.append(self._target(manifest_url, stripped))
        return "\n".join(out)

    async def fetch(self, url: str) -> tuple[str, str]:
        """GET the manifest; returns ``(text, final_url)``."""
        try:
            async with self._http.stream(
                "GET",
                url,
                headers={"User-Agent": self._user_agent, "Cache-Control": "no-cache"},
                follow_redirects=True,
            ) as resp:
                if not resp.is_success:
                    log.warning(
                        "relay_upstream_error", url=url, status=resp.status_code
                    )
                    raise UpstreamProxyError(resp.status_code)
                chunks: list[bytes] = []
                size = 0
                async for chunk in resp.aiter_bytes():
                    size += len(chunk)
                    if size > _MAX_MANIFEST_BYTES:
                        raise UpstreamProxyError(502, "Manifest too large")
                    chunks.append(chunk)
                text = b"".join(chunks).decode(
                    resp.charset_encoding or "utf-8", errors="replace"
                )
                return text, str(resp.url)
        except httpx.HTTPError as exc:
            log.warning("relay_fetch_failed", url=url, exc_info=True)
            raise UpstreamProxyError(502, f"Failed to fetch manifest: {exc}") from exc

    async def relay(self, url: str) -> str:
        """Fetch, filter and rewrite one manifest."""
        text, final_url = await self.fetch(url)
        filtered = filter_manifest(text, self._marker)
        log.debug(
            "relay_manifest_filtered",
            url=url,
            removed=text.count(self._marker),
        )
        return self.rewrite(filtered, final_url)
