"""Content-classification blocklist filter."""

from __future__ import annotations

from collections.abc import Iterable

from vodhub.domain.entities.search import SearchResult


def is_blocked(type_name: str, blocklist: Iterable[str]) -> bool:
    """True when *type_name* contains any blocklisted keyword (case-insensitive)."""
    lowered = type_name.casefold()
    return any(word and word.casefold() in lowered for word in blocklist)


def filter_results(
    results: list[SearchResult],
    blocklist: list[str],
    enabled: bool = True,
) -> list[SearchResult]:
    """Drop blocklisted results, preserving the order of the rest."""
    if not enabled or not blocklist:
        return list(results)
    return [r for r in results if not is_blocked(r.type_name, blocklist)]
