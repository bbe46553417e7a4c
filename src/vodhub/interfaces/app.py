"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from vodhub import __version__
from vodhub.infrastructure.config import AppConfig
from vodhub.interfaces.app_state import AppState
from vodhub.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app (configuration only, no resource initialization).

    Resources (HTTP client, providers, prober, proxy) are created in lifespan().
    """
    app = FastAPI(
        title="vodhub",
        description=(
            "Multi-provider video search with source scoring and ad-free playback"
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from vodhub.interfaces.api.proxy import router as proxy_router
    from vodhub.interfaces.api.relay import router as relay_router
    from vodhub.interfaces.api.search import router as search_router
    from vodhub.interfaces.api.sources import router as sources_router

    app.include_router(search_router, prefix="/api/v1")
    app.include_router(sources_router, prefix="/api/v1")
    app.include_router(relay_router, prefix="/api/v1")
    app.include_router(proxy_router)

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str | int]:
        """Liveness probe. Returns 200 while the process is running."""
        catalog = getattr(app.state, "provider_catalog", None)
        enabled = len(await catalog.enabled_sites()) if catalog else 0
        return {"status": "ok", "providers": enabled}

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
