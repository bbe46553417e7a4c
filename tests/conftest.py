"""Shared test fixtures for the vodhub test suite."""

from __future__ import annotations

from typing import Any

import pytest

from vodhub.domain.entities import ProviderSite, SearchResult
from vodhub.infrastructure.config import AppConfig

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


def make_result(
    title: str = "Example Show",
    *,
    source: str = "alpha",
    source_name: str | None = None,
    year: str = "2023",
    episodes: int = 2,
    type_name: str = "Drama",
    douban_id: int | None = None,
    **extra: Any,
) -> SearchResult:
    """SearchResult with ``episodes`` numbered m3u8 URLs."""
    urls = [f"https://{source}.example.com/{title}/{i}.m3u8" for i in range(episodes)]
    return SearchResult(
        source=source,
        source_name=source_name or source.capitalize(),
        title=title,
        id=extra.pop("id", f"{source}-1"),
        year=year,
        episodes=urls,
        episode_titles=[str(i + 1) for i in range(episodes)],
        type_name=type_name,
        douban_id=douban_id,
        **extra,
    )


@pytest.fixture()
def result_factory():
    """Factory fixture building SearchResults (see ``make_result``)."""
    return make_result


@pytest.fixture()
def search_result() -> SearchResult:
    """Minimal valid two-episode SearchResult."""
    return make_result()


@pytest.fixture()
def provider_site() -> ProviderSite:
    return ProviderSite(
        key="alpha",
        name="Alpha",
        api="https://alpha.example.com/api.php/provide/vod",
    )


@pytest.fixture()
def provider_sites() -> list[ProviderSite]:
    return [
        ProviderSite(key="alpha", name="Alpha", api="https://alpha.example.com/api"),
        ProviderSite(key="beta", name="Beta", api="https://beta.example.com/api"),
        ProviderSite(key="gamma", name="Gamma", api="https://gamma.example.com/api"),
    ]


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def app_config() -> AppConfig:
    """Validated config with one provider and the built-in provider disabled."""
    return AppConfig.model_validate(
        {
            "environment": "test",
            "providers": [
                {
                    "key": "alpha",
                    "name": "Alpha",
                    "api": "https://alpha.example.com/api",
                }
            ],
            "builtin": {"enabled": False},
        }
    )
