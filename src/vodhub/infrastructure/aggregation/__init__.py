from .content_filter import filter_results, is_blocked
from .grouping import (
    ResultAggregator,
    group_and_aggregate,
    group_key,
    mode,
    normalize_title,
)

__all__ = [
    "ResultAggregator",
    "filter_results",
    "group_and_aggregate",
    "group_key",
    "is_blocked",
    "mode",
    "normalize_title",
]
