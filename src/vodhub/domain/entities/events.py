"""Push-stream events emitted by a fan-out search session.

A session always emits ``start``, then exactly one ``source_result`` or
``source_error`` per dispatched provider (in no particular order), then
``complete``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from vodhub.domain.entities.search import SearchResult

EventType = Literal["start", "source_result", "source_error", "complete"]


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class StartEvent:
    query: str
    total_sources: int
    timestamp: int = field(default_factory=_now_ms)

    type: EventType = "start"

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "query": self.query,
            "totalSources": self.total_sources,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class SourceResultEvent:
    source: str
    source_name: str
    results: list[SearchResult]
    timestamp: int = field(default_factory=_now_ms)

    type: EventType = "source_result"

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "source": self.source,
            "sourceName": self.source_name,
            "results": [r.to_dict() for r in self.results],
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class SourceErrorEvent:
    source: str
    source_name: str
    error: str
    timestamp: int = field(default_factory=_now_ms)

    type: EventType = "source_error"

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "source": self.source,
            "sourceName": self.source_name,
            "error": self.error,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class CompleteEvent:
    total_results: int
    completed_sources: int
    timestamp: int = field(default_factory=_now_ms)

    type: EventType = "complete"

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "totalResults": self.total_results,
            "completedSources": self.completed_sources,
            "timestamp": self.timestamp,
        }


SearchEvent = Union[StartEvent, SourceResultEvent, SourceErrorEvent, CompleteEvent]
