"""Source selection endpoint."""

from __future__ import annotations

from typing import Any, cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from vodhub.domain.entities import SearchResult
from vodhub.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/sources", tags=["sources"])

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
}


class SelectRequest(BaseModel):
    """Candidates for one title, in the shape returned by /search."""

    candidates: list[dict[str, Any]] = Field(default_factory=list)


@router.post("/select")
async def select_source(request: Request, body: SelectRequest) -> JSONResponse:
    """Probe every candidate and return the winner with all score breakdowns."""
    state = cast(AppState, request.app.state)

    candidates = [SearchResult.from_dict(c) for c in body.candidates]
    if not candidates:
        return JSONResponse(
            content={"error": "candidates must not be empty"},
            status_code=400,
            headers=_CORS_HEADERS,
        )

    outcome = await state.source_selector.select_best(candidates)
    return JSONResponse(
        content={
            "best": outcome.best.to_dict(),
            "probed": outcome.probed,
            "scores": [s.to_dict() for s in outcome.scores],
        },
        headers=_CORS_HEADERS,
    )
