"""Range-aware media proxy.

Forwards GET/HEAD requests to an arbitrary origin and streams the body
back without buffering, so seeking through large files stays cheap.
Permissive CORS headers are added to every response regardless of the
origin's own policy.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from typing import Literal

import httpx
import structlog

from vodhub.domain.exceptions import UpstreamProxyError

log = structlog.get_logger(__name__)

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
    "Access-Control-Allow-Headers": (
        "Range, Content-Type, Accept, Origin, Authorization, X-Requested-With"
    ),
    "Access-Control-Expose-Headers": (
        "Content-Length, Content-Range, Accept-Ranges, Content-Type"
    ),
}

PREFLIGHT_HEADERS: dict[str, str] = {
    **CORS_HEADERS,
    "Access-Control-Max-Age": "86400",
}

_CHUNK_SIZE = 65536

Method = Literal["GET", "HEAD"]


@dataclass(frozen=True)
class ProxyRequest:
    """One forwarded request.  Stateless per HTTP call."""

    url: str
    user_agent: str
    range: str | None = None
    accept: str | None = None

    def upstream_headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
            "Accept-Encoding": "identity",
        }
        if self.range:
            headers["Range"] = self.range
        if self.accept:
            headers["Accept"] = self.accept
        return headers


@dataclass
class ProxiedResponse:
    """Upstream status, mirrored headers and (for GET) the body stream."""

    status: int
    headers: dict[str, str]
    body: AsyncIterator[bytes] | None = None


def mirror_headers(upstream: httpx.Headers) -> dict[str, str]:
    """Content-Type/-Length/-Range and Accept-Ranges, plus CORS."""
    out: dict[str, str] = {}
    if ct := upstream.get("content-type"):
        out["Content-Type"] = ct
    # A decoded body no longer matches the encoded length.
    cl = upstream.get("content-length")
    if cl and not upstream.get("content-encoding"):
        out["Content-Length"] = cl
    if cr := upstream.get("content-range"):
        out["Content-Range"] = cr
    out["Accept-Ranges"] = upstream.get("accept-ranges") or "bytes"
    out.update(CORS_HEADERS)
    return out


class MediaProxy:
    def __init__(self, *, http_client: httpx.AsyncClient, user_agent: str) -> None:
        self._http = http_client
        self._user_agent = user_agent

    def build_request(self, url: str, headers: Mapping[str, str]) -> ProxyRequest:
        """Resolve the caller's headers into a ProxyRequest (UA fallback)."""
        return ProxyRequest(
            url=url,
            user_agent=headers.get("user-agent") or self._user_agent,
            range=headers.get("range"),
            accept=headers.get("accept"),
        )

    async def forward(
        self, request: ProxyRequest, method: Method = "GET"
    ) -> ProxiedResponse:
        """Send *request* upstream.

        Raises ``UpstreamProxyError`` when the origin is unreachable
        (status 500) or, for GET, answers with a non-success status.
        HEAD always mirrors the upstream status.
        """
        upstream_req = self._http.build_request(
            method, request.url, headers=request.upstream_headers()
        )
        try:
            resp = await self._http.send(
                upstream_req, stream=True, follow_redirects=True
            )
        except httpx.HTTPError as exc:
            log.warning("proxy_upstream_unreachable", url=request.url, exc_info=True)
            raise UpstreamProxyError(500, f"Proxy request failed: {exc}") from exc

        headers = mirror_headers(resp.headers)

        if method == "HEAD":
            await resp.aclose()
            return ProxiedResponse(status=resp.status_code, headers=headers)

        if not resp.is_success:
            await resp.aclose()
            status = resp.status_code if resp.status_code >= 400 else 500
            log.warning(
                "proxy_upstream_error", url=request.url, status=resp.status_code
            )
            raise UpstreamProxyError(status, f"Upstream returned {resp.status_code}")

        async def _iter() -> AsyncIterator[bytes]:
            try:
                async for chunk in resp.aiter_bytes(chunk_size=_CHUNK_SIZE):
                    yield chunk
            finally:
                await resp.aclose()

        log.debug(
            "proxy_stream_opened",
            url=request.url,
            status=resp.status_code,
            range=request.range,
        )
        return ProxiedResponse(status=resp.status_code, headers=headers, body=_iter())
