"""Server-side stream prober.

Measures, for one representative episode URL:

- latency: milliseconds until the response headers arrive,
- resolution: largest ``RESOLUTION=WxH`` of a master playlist,
- throughput: KB/s while reading up to ``max_sample_bytes`` of the
  first media segment.

Master playlists are followed to their highest-bandwidth variant to
find segments.  Non-playlist URLs are sampled directly.
"""

from __future__ import annotations

import time

import httpx
import structlog

from vodhub.domain.entities.probe import ProbeResult, Resolution
from vodhub.domain.exceptions import ProbeFailure
from vodhub.infrastructure.hls import playlist

log = structlog.get_logger(__name__)

_MAX_MANIFEST_BYTES = 2 * 1024 * 1024


class HttpxStreamProber:
    """Implements ``StreamProberPort`` with a shared httpx client."""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        user_agent: str,
        max_sample_bytes: int = 1_048_576,
    ) -> None:
        self._http = http_client
        self._user_agent = user_agent
        self._max_sample_bytes = max_sample_bytes

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self._user_agent, "Cache-Control": "no-cache"}

    async def _fetch_text(self, url: str) -> tuple[str, str, float]:
        """GET a playlist; returns ``(text, final_url, header_latency_ms)``."""
        t0 = time.monotonic()
        try:
            async with self._http.stream(
                "GET", url, headers=self._headers(), follow_redirects=True
            ) as resp:
                ping_ms = (time.monotonic() - t0) * 1000
                if not resp.is_success:
                    raise ProbeFailure(f"HTTP {resp.status_code} for {url}")
                chunks: list[bytes] = []
                size = 0
                async for chunk in resp.aiter_bytes():
                    chunks.append(chunk)
                    size += len(chunk)
                    if size > _MAX_MANIFEST_BYTES:
                        raise ProbeFailure(f"playlist too large: {url}")
                text = b"".join(chunks).decode("utf-8", errors="replace")
                return text, str(resp.url), ping_ms
        except httpx.HTTPError as exc:
            raise ProbeFailure(f"fetch failed for {url}: {exc}") from exc

    async def _sample_speed(self, url: str) -> tuple[float | None, float]:
        """Read up to max_sample_bytes; returns ``(kb_per_s, header_latency_ms)``."""
        t0 = time.monotonic()
        try:
            async with self._http.stream(
                "GET", url, headers=self._headers(), follow_redirects=True
            ) as resp:
                ping_ms = (time.monotonic() - t0) * 1000
                if not resp.is_success:
                    raise ProbeFailure(f"HTTP {resp.status_code} for {url}")
                t_body = time.monotonic()
                received = 0
                async for chunk in resp.aiter_bytes():
                    received += len(chunk)
                    if received >= self._max_sample_bytes:
                        break
                elapsed = time.monotonic() - t_body
        except httpx.HTTPError as exc:
            raise ProbeFailure(f"sample failed for {url}: {exc}") from exc

        if received == 0:
            return None, ping_ms
        # Sub-millisecond reads come from an in-memory body; clamp the divisor.
        elapsed = max(elapsed, 0.001)
        return (received / 1024) / elapsed, ping_ms

    async def probe(self, url: str) -> ProbeResult:
        if not playlist.is_playlist_url(url):
            speed, ping_ms = await self._sample_speed(url)
            return ProbeResult(
                resolution=Resolution.UNKNOWN, speed_kbps=speed, ping_ms=ping_ms
            )

        text, base_url, ping_ms = await self._fetch_text(url)
        if "#EXTM3U" not in text:
            raise ProbeFailure(f"not an HLS playlist: {url}")

        resolution = Resolution.UNKNOWN
        media_text, media_url = text, base_url
        if playlist.is_master_playlist(text):
            resolution = Resolution.from_width(playlist.max_width(text))
            variants = playlist.parse_variants(text)
            if not variants:
                raise ProbeFailure(f"master playlist without variants: {url}")
            best = max(variants, key=lambda v: v.bandwidth)
            media_text, media_url, _ = await self._fetch_text(
                playlist.resolve(base_url, best.uri)
            )

        segments = playlist.uri_lines(media_text)
        speed: float | None = None
        if segments:
            try:
                speed, _ = await self._sample_speed(
                    playlist.resolve(media_url, segments[0])
                )
            except ProbeFailure:
                log.debug("probe_segment_unmeasured", url=url, exc_info=True)

        log.debug(
            "probe_measured",
            url=url,
            resolution=resolution.value,
            speed_kbps=speed,
            ping_ms=round(ping_ms, 1),
        )
        return ProbeResult(resolution=resolution, speed_kbps=speed, ping_ms=ping_ms)
