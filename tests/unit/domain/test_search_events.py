"""Tests for push-stream event payloads."""

from __future__ import annotations

from vodhub.domain.entities import (
    CompleteEvent,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
)


class TestEventPayloads:
    def test_start(self) -> None:
        p = StartEvent(query="q", total_sources=4, timestamp=1).to_payload()
        assert p == {"type": "start", "query": "q", "totalSources": 4, "timestamp": 1}

    def test_source_result(self, result_factory) -> None:
        r = result_factory()
        p = SourceResultEvent(
            source="alpha", source_name="Alpha", results=[r], timestamp=2
        ).to_payload()
        assert p["type"] == "source_result"
        assert p["sourceName"] == "Alpha"
        assert p["results"] == [r.to_dict()]

    def test_source_error(self) -> None:
        p = SourceErrorEvent(
            source="beta", source_name="Beta", error="timed out", timestamp=3
        ).to_payload()
        assert p == {
            "type": "source_error",
            "source": "beta",
            "sourceName": "Beta",
            "error": "timed out",
            "timestamp": 3,
        }

    def test_complete(self) -> None:
        event = CompleteEvent(total_results=3, completed_sources=4, timestamp=4)
        p = event.to_payload()
        assert p == {
            "type": "complete",
            "totalResults": 3,
            "completedSources": 4,
            "timestamp": 4,
        }

    def test_timestamp_defaults_to_epoch_millis(self) -> None:
        assert StartEvent(query="q", total_sources=0).timestamp > 1_600_000_000_000
