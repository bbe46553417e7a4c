"""Tests for FanOutSearchUseCase."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import pytest

from vodhub.application.use_cases import (
    CollectingSink,
    FanOutSearchUseCase,
    normalize_query,
)
from vodhub.domain.entities import (
    CompleteEvent,
    ProviderSite,
    SearchResult,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
)
from vodhub.domain.exceptions import InvalidQueryError, ProviderHTTPError
from vodhub.infrastructure.streaming import SearchEventChannel

_Behaviour = Callable[[ProviderSite, str], Awaitable[list[SearchResult]]]


class _FakeClient:
    """ProviderClientPort fake dispatching on ``site.key``."""

    def __init__(self, behaviours: dict[str, _Behaviour]) -> None:
        self._behaviours = behaviours
        self.calls: list[tuple[str, str]] = []

    async def search(self, site: ProviderSite, query: str) -> list[SearchResult]:
        self.calls.append((site.key, query))
        return await self._behaviours[site.key](site, query)


class _FakeBuiltin(_FakeClient):
    def __init__(self, behaviour: _Behaviour) -> None:
        super().__init__({"shortvideo": behaviour})
        self.site = ProviderSite(
            key="shortvideo", name="Short Videos", api="https://short.example.com"
        )


def _returns(results: list[SearchResult]) -> _Behaviour:
    async def _run(site: ProviderSite, query: str) -> list[SearchResult]:
        return results

    return _run


def _sleeps(seconds: float) -> _Behaviour:
    async def _run(site: ProviderSite, query: str) -> list[SearchResult]:
        await asyncio.sleep(seconds)
        return []

    return _run


def _raises(exc: Exception) -> _Behaviour:
    async def _run(site: ProviderSite, query: str) -> list[SearchResult]:
        raise exc

    return _run


class TestNormalizeQuery:
    def test_trim_and_collapse(self) -> None:
        assert normalize_query("  big   show \t") == "big show"

    def test_blank(self) -> None:
        assert normalize_query("   ") == ""


class TestFanOutSearch:
    async def test_mixed_outcomes_session(self, result_factory, provider_sites) -> None:
        client = _FakeClient(
            {
                "alpha": _returns(
                    [result_factory("A1", source="alpha"), result_factory("A2")]
                ),
                "beta": _sleeps(5),
                "gamma": _returns([]),
            }
        )
        builtin = _FakeBuiltin(_returns([result_factory("S", source="shortvideo")]))
        uc = FanOutSearchUseCase(client, builtin, provider_timeout=0.05)
        sink = CollectingSink()

        summary = await uc.execute("  show ", provider_sites, sink)

        events = sink.events
        assert isinstance(events[0], StartEvent)
        assert events[0].total_sources == 4
        assert events[0].query == "show"

        terminal = events[1:-1]
        assert len(terminal) == 4
        errors = [e for e in terminal if isinstance(e, SourceErrorEvent)]
        assert [e.source for e in errors] == ["beta"]
        assert "timed out" in errors[0].error
        assert {e.source for e in terminal} == {"alpha", "beta", "gamma", "shortvideo"}

        complete = events[-1]
        assert isinstance(complete, CompleteEvent)
        assert complete.completed_sources == 4
        assert complete.total_results == 3

        assert sink.closed
        assert summary.errors.keys() == {"beta"}
        assert len(summary.results) == 3

    async def test_provider_error_becomes_source_error(
        self, result_factory, provider_sites
    ) -> None:
        client = _FakeClient(
            {
                "alpha": _raises(ProviderHTTPError("alpha: HTTP 500", status=500)),
                "beta": _raises(RuntimeError("kaboom")),
                "gamma": _returns([result_factory()]),
            }
        )
        uc = FanOutSearchUseCase(client)
        sink = CollectingSink()

        summary = await uc.execute("q", provider_sites, sink)

        errors = {
            e.source: e.error for e in sink.events if isinstance(e, SourceErrorEvent)
        }
        assert errors == {"alpha": "alpha: HTTP 500", "beta": "kaboom"}
        assert summary.completed_sources == 3
        assert isinstance(sink.events[-1], CompleteEvent)

    async def test_disabled_sites_not_dispatched(self, provider_sites) -> None:
        sites = [
            provider_sites[0],
            ProviderSite(key="off", name="Off", api="https://off", enabled=False),
        ]
        client = _FakeClient({"alpha": _returns([])})
        uc = FanOutSearchUseCase(client)
        sink = CollectingSink()

        await uc.execute("q", sites, sink)

        assert client.calls == [("alpha", "q")]
        assert sink.events[0].total_sources == 1

    async def test_no_providers_still_completes(self) -> None:
        uc = FanOutSearchUseCase(_FakeClient({}))
        sink = CollectingSink()

        await uc.execute("q", [], sink)

        assert [e.type for e in sink.events] == ["start", "complete"]
        assert sink.events[1].completed_sources == 0

    async def test_results_filtered_then_truncated(
        self, result_factory, provider_site
    ) -> None:
        results = [result_factory(f"Blocked {i}", type_name="Adult") for i in range(5)]
        results += [result_factory(f"Kept {i}") for i in range(10)]

        def drop_adult(rs: list[SearchResult]) -> list[SearchResult]:
            return [r for r in rs if r.type_name != "Adult"]

        uc = FanOutSearchUseCase(
            _FakeClient({"alpha": _returns(results)}),
            max_results_per_provider=8,
            filter_fn=drop_adult,
        )
        sink = CollectingSink()

        await uc.execute("q", [provider_site], sink)

        event = sink.events[1]
        assert isinstance(event, SourceResultEvent)
        assert [r.title for r in event.results] == [f"Kept {i}" for i in range(8)]

    async def test_blank_query_rejected(self, provider_sites) -> None:
        uc = FanOutSearchUseCase(_FakeClient({}))
        sink = CollectingSink()

        with pytest.raises(InvalidQueryError):
            await uc.execute("   ", provider_sites, sink)

        assert sink.events == []

    async def test_closed_sink_receives_nothing(
        self, result_factory, provider_sites
    ) -> None:
        client = _FakeClient(
            {
                "alpha": _returns([result_factory()]),
                "beta": _returns([]),
                "gamma": _returns([]),
            }
        )
        uc = FanOutSearchUseCase(client)
        channel = SearchEventChannel()
        await channel.close()

        summary = await uc.execute("q", provider_sites, channel)

        # Session still runs to completion; every write is a no-op.
        assert summary.completed_sources == 3
        assert channel.sent == 0
        assert channel.rejected == 5
        assert [e async for e in channel.events()] == []

    async def test_channel_closed_after_complete(self, provider_sites) -> None:
        client = _FakeClient({k.key: _returns([]) for k in provider_sites})
        uc = FanOutSearchUseCase(client)
        channel = SearchEventChannel()

        await uc.execute("q", provider_sites, channel)

        assert channel.closed
        types = [e.type async for e in channel.events()]
        assert types[0] == "start"
        assert types[-1] == "complete"

    async def test_cancellation_cancels_provider_calls(self, provider_sites) -> None:
        client = _FakeClient({k.key: _sleeps(10) for k in provider_sites})
        uc = FanOutSearchUseCase(client, provider_timeout=30)
        channel = SearchEventChannel()

        task = asyncio.create_task(uc.execute("q", provider_sites, channel))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert channel.closed

    async def test_collect(self, result_factory, provider_site) -> None:
        uc = FanOutSearchUseCase(_FakeClient({"alpha": _returns([result_factory()])}))

        summary = await uc.collect("q", [provider_site])

        assert summary.total_sources == 1
        assert len(summary.results) == 1
