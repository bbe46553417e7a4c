"""Built-in short-form video provider."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

import httpx
import structlog

from vodhub.domain.entities.search import UNKNOWN_YEAR, ProviderSite, SearchResult
from vodhub.domain.exceptions import (
    ProviderHTTPError,
    ProviderParseError,
    ProviderTimeout,
)
from vodhub.infrastructure.providers.cms_client import parse_year

log = structlog.get_logger(__name__)


class ShortVideoProvider:
    """Searches the short-form video catalogue that ships with vodhub.

    Implements ``BuiltinProviderPort``.  Each hit becomes a one-episode
    result whose URL points at the catalogue's parse endpoint.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        base_url: str,
        key: str = "shortvideo",
        name: str = "Short Videos",
        limit: int = 20,
        user_agent: str = "vodhub/0.1.0",
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._limit = limit
        self._user_agent = user_agent
        self._site = ProviderSite(
            key=key, name=name, api=f"{self._base_url}/vod/search"
        )

    @property
    def site(self) -> ProviderSite:
        return self._site

    def episode_url(self, item_id: str) -> str:
        params = urlencode({"id": item_id, "episode": 1, "proxy": "true"})
        return f"{self._base_url}/vod/parse/single?{params}"

    def _to_result(self, item: dict[str, Any]) -> SearchResult | None:
        item_id = str(item.get("id") or "")
        if not item_id:
            return None
        update_time = item.get("update_time")
        return SearchResult(
            source=self._site.key,
            source_name=self._site.name,
            title=str(item.get("name") or "").strip(),
            id=item_id,
            year=parse_year(update_time) if update_time else UNKNOWN_YEAR,
            poster=str(item.get("cover") or ""),
            episodes=[self.episode_url(item_id)],
            episode_titles=["1"],
            type_name=self._site.name,
        )

    async def search(self, site: ProviderSite, query: str) -> list[SearchResult]:
        params = {"name": query, "page": 1, "limit": self._limit}
        headers = {"Accept": "application/json", "User-Agent": self._user_agent}

        try:
            resp = await self._http.get(site.api, params=params, headers=headers)
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

        items = data.get("list") if isinstance(data, dict) else None
        if not isinstance(items, list):
            log.debug("shortvideo_empty_response", query=query)
            return []

        results: list[SearchResult] = []
        for item in items[: self._limit]:
            if isinstance(item, dict):
                result = self._to_result(item)
                if result is not None:
                    results.append(result)
        return results
