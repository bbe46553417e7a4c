"""Search endpoints: SSE fan-out stream, JSON results and grouped results."""

from __future__ import annotations

import asyncio
from typing import cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.responses import Response

from vodhub.application.use_cases import normalize_query
from vodhub.infrastructure.aggregation import group_and_aggregate
from vodhub.infrastructure.streaming import SearchEventChannel
from vodhub.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
}

_SSE_HEADERS = {
    **_CORS_HEADERS,
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def _log_session_outcome(task: asyncio.Task[object]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        log.error("search_session_failed", error=str(exc), exc_info=exc)


@router.get("/stream", response_model=None)
async def search_stream(
    request: Request,
    q: str = Query("", description="Search query"),
) -> Response:
    """Stream ``start``/``source_result``/``source_error``/``complete`` events."""
    state = cast(AppState, request.app.state)
    query = normalize_query(q)
    if not query:
        return JSONResponse(
            content={"error": "query must not be empty"},
            status_code=400,
            headers=_CORS_HEADERS,
        )

    providers = await state.provider_catalog.enabled_sites()
    channel = SearchEventChannel()

    task: asyncio.Task[object] = asyncio.create_task(
        state.search_uc.execute(query, providers, channel)
    )
    state.search_tasks.add(task)
    task.add_done_callback(state.search_tasks.discard)
    task.add_done_callback(_log_session_outcome)

    async def _frames():
        try:
            async for frame in channel.sse():
                yield frame
        finally:
            # Consumer gone or stream finished: later writes become no-ops.
            await channel.close()
            log.debug(
                "search_stream_closed",
                query=query,
                sent=channel.sent,
                rejected=channel.rejected,
            )

    return StreamingResponse(
        _frames(), media_type="text/event-stream", headers=_SSE_HEADERS
    )


@router.get("", response_model=None)
async def search_json(
    request: Request,
    q: str | None = Query(None, description="Search query"),
) -> JSONResponse:
    """Non-streaming search; cacheable when it found something."""
    state = cast(AppState, request.app.state)
    query = normalize_query(q or "")
    if not query:
        return JSONResponse(content={"results": []}, headers=_CORS_HEADERS)

    providers = await state.provider_catalog.enabled_sites()
    summary = await state.search_uc.collect(query, providers)

    headers = dict(_CORS_HEADERS)
    if summary.results:
        cache_time = state.config.search.cache_time_seconds
        headers["Cache-Control"] = f"public, max-age={cache_time}"

    return JSONResponse(
        content={"results": [r.to_dict() for r in summary.results]},
        headers=headers,
    )


@router.get("/groups", response_model=None)
async def search_groups(
    request: Request,
    q: str | None = Query(None, description="Search query"),
) -> JSONResponse:
    """Fan-out search collapsed into same-title groups (first-seen order)."""
    state = cast(AppState, request.app.state)
    query = normalize_query(q or "")
    if not query:
        return JSONResponse(content={"groups": []}, headers=_CORS_HEADERS)

    providers = await state.provider_catalog.enabled_sites()
    summary = await state.search_uc.collect(query, providers)
    groups = group_and_aggregate(summary.results)

    return JSONResponse(
        content={"groups": [g.to_dict() for g in groups]},
        headers=_CORS_HEADERS,
    )
