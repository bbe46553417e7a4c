from .fanout_search import (
    CollectingSink,
    FanOutSearchUseCase,
    SearchSummary,
    normalize_query,
)
from .select_source import SourceSelector

__all__ = [
    "CollectingSink",
    "FanOutSearchUseCase",
    "SearchSummary",
    "SourceSelector",
    "normalize_query",
]
