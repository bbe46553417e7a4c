"""Media proxy endpoint (GET/HEAD/OPTIONS /proxy)."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.responses import Response

from vodhub.domain.exceptions import UpstreamProxyError
from vodhub.infrastructure.proxy import CORS_HEADERS, PREFLIGHT_HEADERS
from vodhub.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/proxy", tags=["proxy"])


def _missing_url() -> JSONResponse:
    return JSONResponse(
        content={"error": "Missing url"}, status_code=400, headers=CORS_HEADERS
    )


def _upstream_error(exc: UpstreamProxyError) -> JSONResponse:
    return JSONResponse(
        content={"error": str(exc), "status": exc.status},
        status_code=exc.status,
        headers=CORS_HEADERS,
    )


@router.options("")
async def proxy_preflight() -> Response:
    return Response(status_code=204, headers=PREFLIGHT_HEADERS)


@router.head("", response_model=None)
async def proxy_head(request: Request) -> Response:
    state = cast(AppState, request.app.state)
    url = request.query_params.get("url")
    if not url:
        return _missing_url()

    proxy_request = state.media_proxy.build_request(url, request.headers)
    try:
        upstream = await state.media_proxy.forward(proxy_request, "HEAD")
    except UpstreamProxyError as exc:
        return _upstream_error(exc)
    return Response(status_code=upstream.status, headers=upstream.headers)


@router.get("", response_model=None)
async def proxy_get(request: Request) -> Response:
    """Stream the origin body; 206 and Content-Range pass through unchanged."""
    state = cast(AppState, request.app.state)
    url = request.query_params.get("url")
    if not url:
        return _missing_url()

    proxy_request = state.media_proxy.build_request(url, request.headers)
    try:
        upstream = await state.media_proxy.forward(proxy_request, "GET")
    except UpstreamProxyError as exc:
        return _upstream_error(exc)

    assert upstream.body is not None
    return StreamingResponse(
        upstream.body, status_code=upstream.status, headers=upstream.headers
    )
