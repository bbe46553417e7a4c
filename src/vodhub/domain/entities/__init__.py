from .events import (
    CompleteEvent,
    SearchEvent,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
)
from .probe import (
    CandidateScore,
    ProbeResult,
    Resolution,
    ScoreBounds,
    SelectionOutcome,
)
from .search import UNKNOWN_YEAR, AggregateGroup, ProviderSite, SearchResult

__all__ = [
    "UNKNOWN_YEAR",
    "AggregateGroup",
    "CandidateScore",
    "CompleteEvent",
    "ProbeResult",
    "ProviderSite",
    "Resolution",
    "ScoreBounds",
    "SearchEvent",
    "SearchResult",
    "SelectionOutcome",
    "SourceErrorEvent",
    "SourceResultEvent",
    "StartEvent",
]
