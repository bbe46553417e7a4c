"""Same-title grouping across providers.

Groups are keyed by normalized title + year + movie/tv and kept in
first-seen order.  Stats use the statistical mode with ties going to
the value encountered first.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import TypeVar

from vodhub.domain.entities.search import AggregateGroup, SearchResult

T = TypeVar("T")


def normalize_title(title: str) -> str:
    """Remove all whitespace and case-fold."""
    return "".join(title.split()).casefold()


def group_key(result: SearchResult) -> str:
    return f"{normalize_title(result.title)}-{result.year}-{result.kind}"


def mode(values: Iterable[T]) -> T | None:
    """Most frequent value; ties keep the first-encountered value."""
    counts: Counter[T] = Counter()
    order: list[T] = []
    for v in values:
        if v not in counts:
            order.append(v)
        counts[v] += 1
    best: T | None = None
    best_count = 0
    for v in order:
        if counts[v] > best_count:
            best, best_count = v, counts[v]
    return best


class ResultAggregator:
    """Incremental grouping for one search session.

    ``add`` may be called as provider results stream in; keys never
    change once assigned and groups are never re-sorted.
    """

    def __init__(self) -> None:
        self._groups: dict[str, AggregateGroup] = {}

    def add(self, result: SearchResult) -> AggregateGroup:
        key = group_key(result)
        group = self._groups.get(key)
        if group is None:
            group = AggregateGroup(key=key)
            self._groups[key] = group
        group.members.append(result)
        self._recompute(group)
        return group

    def extend(self, results: Iterable[SearchResult]) -> None:
        for r in results:
            self.add(r)

    @staticmethod
    def _recompute(group: AggregateGroup) -> None:
        group.episode_count = (
            mode(len(m.episodes) for m in group.members if m.episodes) or 0
        )
        names: list[str] = []
        for m in group.members:
            if m.source_name not in names:
                names.append(m.source_name)
        group.source_names = names
        group.douban_id = mode(
            m.douban_id for m in group.members if m.douban_id and m.douban_id > 0
        )

    @property
    def groups(self) -> list[AggregateGroup]:
        return list(self._groups.values())

    def __len__(self) -> int:
        return len(self._groups)


def group_and_aggregate(results: Iterable[SearchResult]) -> list[AggregateGroup]:
    aggregator = ResultAggregator()
    aggregator.extend(results)
    return aggregator.groups
