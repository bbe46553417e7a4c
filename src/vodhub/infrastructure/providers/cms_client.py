"""Apple-CMS style provider client built on httpx.

Providers expose ``GET {api}?ac=videolist&wd=<query>`` and answer
``{"list": [...], "pagecount": N}``.  Each list item packs its player
groups into ``vod_play_url``::

    "HD$https://a/1.m3u8#EP2$https://a/2.m3u8$$$cloud$https://b/1#..."

Groups are separated by ``$$$``, episodes by ``#`` and each episode is
a ``label$url`` pair.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

import httpx
import structlog

from vodhub.domain.entities.search import (
    UNKNOWN_YEAR,
    ProviderSite,
    SearchResult,
    parse_douban_id,
)
from vodhub.domain.exceptions import (
    ProviderHTTPError,
    ProviderParseError,
    ProviderTimeout,
)

log = structlog.get_logger(__name__)

_GROUP_SEP = "$$$"
_EPISODE_SEP = "#"
_PAIR_SEP = "$"
_YEAR_RE = re.compile(r"(\d{4})")


def parse_play_url(play_url: str) -> tuple[list[str], list[str]]:
    """Pick the player group with the most ``.m3u8`` URLs.

    Returns ``(episode_urls, episode_labels)`` in provider order.  Pairs
    without a ``$`` use the whole chunk as URL and a 1-based index as
    label.  Empty input yields two empty lists.
    """
    best_urls: list[str] = []
    best_labels: list[str] = []
    best_m3u8 = -1

    for group in play_url.split(_GROUP_SEP):
        urls: list[str] = []
        labels: list[str] = []
        for chunk in group.split(_EPISODE_SEP):
            chunk = chunk.strip()
            if not chunk:
                continue
            if _PAIR_SEP in chunk:
                label, _, url = chunk.partition(_PAIR_SEP)
            else:
                label, url = "", chunk
            url = url.strip()
            if not url:
                continue
            urls.append(url)
            labels.append(label.strip() or str(len(urls)))

        m3u8_count = sum(1 for u in urls if ".m3u8" in u)
        # Strictly greater: ties keep the earlier group.
        if urls and m3u8_count > best_m3u8:
            best_urls, best_labels, best_m3u8 = urls, labels, m3u8_count

    return best_urls, best_labels


def parse_year(raw: Any) -> str:
    match = _YEAR_RE.search(str(raw or ""))
    return match.group(1) if match else UNKNOWN_YEAR


def item_to_result(site: ProviderSite, item: dict[str, Any]) -> SearchResult | None:
    """Map one CMS ``list`` item to a SearchResult (None when unplayable)."""
    episodes, labels = parse_play_url(str(item.get("vod_play_url") or ""))
    if not episodes:
        return None

    return SearchResult(
        source=site.key,
        source_name=site.name,
        title=str(item.get("vod_name") or "").strip(),
        id=str(item.get("vod_id") or ""),
        year=parse_year(item.get("vod_year")),
        poster=str(item.get("vod_pic") or ""),
        episodes=episodes,
        episode_titles=labels,
        type_name=str(item.get("type_name") or ""),
        douban_id=parse_douban_id(item.get("vod_douban_id")),
        description=str(item.get("vod_content") or "").strip(),
    )


class HttpxProviderClient:
    """Searches Apple-CMS compatible providers.

    Implements ``ProviderClientPort``.  Failures are raised as
    ``ProviderError`` subclasses; the fan-out coordinator turns them into
    ``source_error`` events.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        user_agent: str,
        max_pages: int = 1,
    ) -> None:
        self._http = http_client
        self._user_agent = user_agent
        self._max_pages = max_pages

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _headers(self, site: ProviderSite) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": self._user_agent,
            **site.headers,
        }

    async def _fetch_page(
        self, site: ProviderSite, query: str, page: int
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"ac": "videolist", "wd": query}
        if page > 1:
            params["pg"] = page

        try:
            resp = await self._http.get(
                site.api, params=params, headers=self._headers(site)
            )
        except httpx.TimeoutException as exc:
            raise ProviderTimeout(f"{site.key}: request timed out") from exc
        except httpx.HTTPError as exc:
            raise ProviderHTTPError(f"{site.key}: {exc}") from exc

        if not resp.is_success:
            raise ProviderHTTPError(
                f"{site.key}: HTTP {resp.status_code}", status=resp.status_code
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderParseError(f"{site.key}: invalid JSON") from exc

        if not isinstance(data, dict):
            raise ProviderParseError(f"{site.key}: expected a JSON object")
        items = data.get("list")
        if items is not None and not isinstance(items, list):
            raise ProviderParseError(f"{site.key}: 'list' is not an array")
        return data

    def _results(self, site: ProviderSite, data: dict[str, Any]) -> list[SearchResult]:
        results: list[SearchResult] = []
        for item in data.get("list") or []:
            if not isinstance(item, dict):
                continue
            result = item_to_result(site, item)
            if result is not None:
                results.append(result)
        return results

    @staticmethod
    def _page_count(data: dict[str, Any]) -> int:
        try:
            return int(data.get("pagecount") or 1)
        except (TypeError, ValueError):
            return 1

    # ------------------------------------------------------------------
    # Public API (ProviderClientPort)
    # ------------------------------------------------------------------

    async def search(self, site: ProviderSite, query: str) -> list[SearchResult]:
        """Search one provider.  Extra pages are fetched concurrently."""
        first = await self._fetch_page(site, query, 1)
        results = self._results(site, first)

        last_page = min(self._page_count(first), self._max_pages)
        if last_page <= 1:
            return results

        pages = list(range(2, last_page + 1))
        settled = await asyncio.gather(
            *(self._fetch_page(site, query, p) for p in pages),
            return_exceptions=True,
        )
        for page, outcome in zip(pages, settled):
            if isinstance(outcome, BaseException):
                log.warning(
                    "provider_page_failed",
                    source=site.key,
                    page=page,
                    error=str(outcome),
                )
                continue
            results.extend(self._results(site, outcome))

        log.debug(
            "provider_search_paged",
            source=site.key,
            pages=last_page,
            results=len(results),
        )
        return results
