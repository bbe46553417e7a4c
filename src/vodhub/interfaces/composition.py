"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

import asyncio
import functools
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from vodhub.application.use_cases import FanOutSearchUseCase, SourceSelector
from vodhub.infrastructure.aggregation import filter_results
from vodhub.infrastructure.config.schema import AppConfig
from vodhub.infrastructure.hls import ManifestRelay
from vodhub.infrastructure.providers import (
    ConfigProviderCatalog,
    HttpxProviderClient,
    ShortVideoProvider,
)
from vodhub.infrastructure.proxy import MediaProxy
from vodhub.infrastructure.scoring import (
    HttpxStreamProber,
    compute_bounds,
    score_probe,
)
from vodhub.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def _wire_search(state: AppState, config: AppConfig) -> None:
    """Providers, built-in provider and the fan-out use case."""
    state.provider_catalog = ConfigProviderCatalog(config.provider_sites())
    state.provider_client = HttpxProviderClient(
        http_client=state.http_client,
        user_agent=config.http_user_agent,
        max_pages=config.search.max_pages,
    )

    state.builtin_provider = None
    if config.builtin.enabled:
        state.builtin_provider = ShortVideoProvider(
            http_client=state.http_client,
            base_url=config.builtin.base_url,
            key=config.builtin.key,
            name=config.builtin.name,
            limit=config.builtin.limit,
            user_agent=config.http_user_agent,
        )

    state.search_uc = FanOutSearchUseCase(
        state.provider_client,
        state.builtin_provider,
        provider_timeout=config.search.provider_timeout_seconds,
        builtin_timeout=config.search.builtin_timeout_seconds,
        max_results_per_provider=config.search.max_results_per_provider,
        filter_fn=functools.partial(
            filter_results,
            blocklist=config.search.blocklist,
            enabled=config.search.content_filter_enabled,
        ),
    )
    log.info(
        "search_initialized",
        providers=len(state.provider_catalog),
        builtin=state.builtin_provider is not None,
        content_filter=config.search.content_filter_enabled,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP Client (required by every outbound component)
        2. Providers + fan-out search use case
        3. Stream prober + source selector
        4. Manifest relay + media proxy
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) Shared HTTP client
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        follow_redirects=config.http_follow_redirects,
        headers={"User-Agent": config.http_user_agent},
    )
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)

    # 2) Search
    _wire_search(state, config)
    state.search_tasks = set()

    # 3) Source selection
    state.stream_prober = HttpxStreamProber(
        http_client=state.http_client,
        user_agent=config.proxy.user_agent,
        max_sample_bytes=config.probe.max_sample_bytes,
    )
    state.source_selector = SourceSelector(
        state.stream_prober,
        bounds_fn=compute_bounds,
        score_fn=score_probe,
        probe_timeout=config.probe.timeout_seconds,
    )
    log.info("source_selector_initialized", probe_timeout=config.probe.timeout_seconds)

    # 4) Playback delivery
    state.manifest_relay = ManifestRelay(
        http_client=state.http_client,
        user_agent=config.proxy.user_agent,
        proxy_segments=config.playback.proxy_segments,
        marker=config.playback.discontinuity_marker,
    )
    state.media_proxy = MediaProxy(
        http_client=state.http_client,
        user_agent=config.proxy.user_agent,
    )
    log.info(
        "playback_initialized",
        adblock_default=config.playback.adblock_enabled,
        proxy_segments=config.playback.proxy_segments,
    )

    log.info("app_startup_complete")

    try:
        yield
    finally:
        pending = list(state.search_tasks)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        log.info("search_sessions_stopped")

        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
