"""Ad-segment filtering relay endpoint."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.responses import Response

from vodhub.domain.exceptions import UpstreamProxyError
from vodhub.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/relay", tags=["relay"])

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
}

_MANIFEST_MEDIA_TYPE = "application/vnd.apple.mpegurl"


@router.get("/manifest", response_model=None)
async def relay_manifest(
    request: Request,
    url: str | None = Query(None, description="Origin manifest URL"),
    adblock: bool | None = Query(
        None, description="Strip ad boundaries (defaults to playback.adblock_enabled)"
    ),
) -> Response:
    """Serve a filtered manifest, or redirect to the origin when disabled."""
    state = cast(AppState, request.app.state)
    if not url:
        return JSONResponse(
            content={"error": "Missing url"}, status_code=400, headers=_CORS_HEADERS
        )

    enabled = state.config.playback.adblock_enabled if adblock is None else adblock
    if not enabled:
        # Player reads the origin manifest byte-for-byte.
        return RedirectResponse(url, status_code=307, headers=_CORS_HEADERS)

    try:
        text = await state.manifest_relay.relay(url)
    except UpstreamProxyError as exc:
        return JSONResponse(
            content={"error": str(exc), "status": exc.status},
            status_code=exc.status,
            headers=_CORS_HEADERS,
        )

    return Response(
        content=text,
        media_type=_MANIFEST_MEDIA_TYPE,
        headers={**_CORS_HEADERS, "Cache-Control": "no-cache"},
    )
