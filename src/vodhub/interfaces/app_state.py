"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from vodhub.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from vodhub.application.use_cases import FanOutSearchUseCase, SourceSelector
    from vodhub.domain.ports import (
        BuiltinProviderPort,
        ProviderCatalogPort,
        ProviderClientPort,
        StreamProberPort,
    )
    from vodhub.infrastructure.hls import ManifestRelay
    from vodhub.infrastructure.proxy import MediaProxy


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient

    # Domain Ports
    provider_catalog: ProviderCatalogPort
    provider_client: ProviderClientPort
    builtin_provider: BuiltinProviderPort | None
    stream_prober: StreamProberPort

    # Application Services
    search_uc: FanOutSearchUseCase
    source_selector: SourceSelector

    # Playback delivery
    manifest_relay: ManifestRelay
    media_proxy: MediaProxy

    # Running search sessions (strong refs until they settle)
    search_tasks: set[asyncio.Task[object]]
