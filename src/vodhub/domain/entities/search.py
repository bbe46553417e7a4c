"""Domain entities for multi-provider video search.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

MediaKind = Literal["movie", "tv"]

UNKNOWN_YEAR = "unknown"


def parse_douban_id(raw: Any) -> int | None:
    """Positive integer rating id, else None."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


@dataclass(frozen=True)
class ProviderSite:
    """One configured upstream provider (opaque HTTP JSON endpoint).

    Immutable for the duration of a search.
    """

    key: str
    name: str
    api: str
    enabled: bool = True
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SearchResult:
    """Normalized search result for one title on one provider.

    ``episodes`` and ``episode_titles`` are parallel lists ordered by
    episode index.  The order drives "play next episode" and must never
    be re-sorted.
    """

    source: str
    source_name: str
    title: str
    id: str = ""
    year: str = UNKNOWN_YEAR
    poster: str = ""
    episodes: list[str] = field(default_factory=list)
    episode_titles: list[str] = field(default_factory=list)
    type_name: str = ""
    douban_id: int | None = None
    description: str = ""

    @property
    def kind(self) -> MediaKind:
        """Single-episode results are movies, everything else is tv."""
        return "movie" if len(self.episodes) == 1 else "tv"

    def representative_episode(self) -> str | None:
        """Episode URL used for probing.

        The second episode when there is more than one (first episodes
        are often provider placeholders), otherwise the first.
        """
        if not self.episodes:
            return None
        return self.episodes[1] if len(self.episodes) > 1 else self.episodes[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "source_name": self.source_name,
            "title": self.title,
            "year": self.year,
            "poster": self.poster,
            "episodes": list(self.episodes),
            "episodes_titles": list(self.episode_titles),
            "type_name": self.type_name,
            "douban_id": self.douban_id,
            "desc": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SearchResult:
        """Rebuild a result from its ``to_dict`` shape (e.g. a client POST)."""
        return cls(
            source=str(data.get("source", "")),
            source_name=str(data.get("source_name", "")),
            title=str(data.get("title", "")),
            id=str(data.get("id", "")),
            year=str(data.get("year") or UNKNOWN_YEAR),
            poster=str(data.get("poster", "")),
            episodes=[str(e) for e in data.get("episodes") or []],
            episode_titles=[str(t) for t in data.get("episodes_titles") or []],
            type_name=str(data.get("type_name", "")),
            douban_id=parse_douban_id(data.get("douban_id")),
            description=str(data.get("desc", "")),
        )


@dataclass
class AggregateGroup:
    """Same-title candidates collapsed across providers.

    Members keep first-seen order.  The derived stats are recomputed
    every time a member is appended.
    """

    key: str
    members: list[SearchResult] = field(default_factory=list)
    episode_count: int = 0
    source_names: list[str] = field(default_factory=list)
    douban_id: int | None = None

    @property
    def title(self) -> str:
        return self.members[0].title if self.members else ""

    @property
    def year(self) -> str:
        return self.members[0].year if self.members else UNKNOWN_YEAR

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "year": self.year,
            "episodes": self.episode_count,
            "source_names": list(self.source_names),
            "douban_id": self.douban_id,
            "members": [m.to_dict() for m in self.members],
        }
