"""Fan-out search: query every provider concurrently and stream results."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from vodhub.domain.entities import (
    CompleteEvent,
    ProviderSite,
    SearchEvent,
    SearchResult,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
)
from vodhub.domain.exceptions import InvalidQueryError, ProviderError
from vodhub.domain.ports import BuiltinProviderPort, EventSinkPort, ProviderClientPort

log = structlog.get_logger(__name__)

_FilterFn = Callable[[list[SearchResult]], list[SearchResult]]


def normalize_query(query: str) -> str:
    """Trim and collapse internal whitespace."""
    return " ".join(query.split())


@dataclass
class SearchSummary:
    """What one fan-out session produced, in settle order."""

    query: str
    total_sources: int
    results: list[SearchResult] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
    completed_sources: int = 0


@dataclass(frozen=True)
class _Dispatch:
    site: ProviderSite
    client: ProviderClientPort
    timeout: float


class FanOutSearchUseCase:
    """Dispatches one query to N providers plus the built-in provider.

    Event order per session: ``start`` → one terminal event per provider
    (any interleaving) → ``complete``, then the sink is closed.  Provider
    failures become ``source_error`` events and never abort the session.
    """

    def __init__(
        self,
        provider_client: ProviderClientPort,
        builtin: BuiltinProviderPort | None = None,
        *,
        provider_timeout: float = 20.0,
        builtin_timeout: float = 10.0,
        max_results_per_provider: int = 50,
        filter_fn: _FilterFn | None = None,
    ) -> None:
        self._client = provider_client
        self._builtin = builtin
        self._provider_timeout = provider_timeout
        self._builtin_timeout = builtin_timeout
        self._max_results = max_results_per_provider
        self._filter_fn = filter_fn

    def _dispatches(self, providers: list[ProviderSite]) -> list[_Dispatch]:
        # Fixed at dispatch time; disabled sites never join.
        out = [
            _Dispatch(site, self._client, self._provider_timeout)
            for site in providers
            if site.enabled
        ]
        if self._builtin is not None:
            out.append(
                _Dispatch(self._builtin.site, self._builtin, self._builtin_timeout)
            )
        return out

    async def _run_one(
        self, dispatch: _Dispatch, query: str
    ) -> SourceResultEvent | SourceErrorEvent:
        """Search one provider; never raises (except on cancellation)."""
        site = dispatch.site
        try:
            results = await asyncio.wait_for(
                dispatch.client.search(site, query), timeout=dispatch.timeout
            )
        except TimeoutError:
            log.warning(
                "provider_search_timeout", source=site.key, timeout=dispatch.timeout
            )
            return SourceErrorEvent(
                source=site.key,
                source_name=site.name,
                error=f"timed out after {dispatch.timeout:g}s",
            )
        except ProviderError as exc:
            log.warning("provider_search_failed", source=site.key, error=str(exc))
            return SourceErrorEvent(
                source=site.key, source_name=site.name, error=str(exc)
            )
        except Exception as exc:
            log.warning("provider_search_crashed", source=site.key, exc_info=True)
            return SourceErrorEvent(
                source=site.key,
                source_name=site.name,
                error=str(exc) or type(exc).__name__,
            )

        kept = self._filter_fn(results) if self._filter_fn else list(results)
        return SourceResultEvent(
            source=site.key,
            source_name=site.name,
            results=kept[: self._max_results],
        )

    async def execute(
        self,
        query: str,
        providers: list[ProviderSite],
        sink: EventSinkPort,
    ) -> SearchSummary:
        """Run one session, writing every event to *sink*.

        Raises:
            InvalidQueryError: *query* is blank.
        """
        query = normalize_query(query)
        if not query:
            raise InvalidQueryError("query must not be empty")

        dispatches = self._dispatches(providers)
        summary = SearchSummary(query=query, total_sources=len(dispatches))
        t0 = time.monotonic()

        await sink.send(StartEvent(query=query, total_sources=summary.total_sources))

        tasks = [asyncio.create_task(self._run_one(d, query)) for d in dispatches]
        try:
            for next_done in asyncio.as_completed(tasks):
                event = await next_done
                summary.completed_sources += 1
                if isinstance(event, SourceResultEvent):
                    summary.results.extend(event.results)
                else:
                    summary.errors[event.source] = event.error
                await sink.send(event)

            await sink.send(
                CompleteEvent(
                    total_results=len(summary.results),
                    completed_sources=summary.completed_sources,
                )
            )
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await sink.close()

        log.info(
            "search_completed",
            query=query,
            sources=summary.total_sources,
            results=len(summary.results),
            errors=len(summary.errors),
            duration_ms=round((time.monotonic() - t0) * 1000, 1),
        )
        return summary

    async def collect(
        self, query: str, providers: list[ProviderSite]
    ) -> SearchSummary:
        """Non-streaming variant: run a session into an in-memory sink."""
        return await self.execute(query, providers, CollectingSink())


class CollectingSink:
    """In-memory ``EventSinkPort`` for non-streaming callers."""

    def __init__(self) -> None:
        self.events: list[SearchEvent] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, event: SearchEvent) -> bool:
        if self._closed:
            return False
        self.events.append(event)
        return True

    async def close(self) -> None:
        self._closed = True
