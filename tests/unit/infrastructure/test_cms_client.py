"""Tests for the Apple-CMS provider client."""

from __future__ import annotations

import httpx
import pytest
import respx

from vodhub.domain.entities import ProviderSite
from vodhub.domain.exceptions import (
    ProviderHTTPError,
    ProviderParseError,
    ProviderTimeout,
)
from vodhub.infrastructure.providers import (
    HttpxProviderClient,
    item_to_result,
    parse_play_url,
    parse_year,
)

_SITE = ProviderSite(
    key="alpha",
    name="Alpha",
    api="https://alpha.example.com/api",
    headers={"Referer": "https://alpha.example.com/"},
)


def _item(**overrides: object) -> dict[str, object]:
    item: dict[str, object] = {
        "vod_id": 101,
        "vod_name": " Big Show ",
        "vod_year": "2021",
        "vod_pic": "https://alpha.example.com/p.jpg",
        "vod_play_url": (
            "EP1$https://a.example.com/1.m3u8#EP2$https://a.example.com/2.m3u8"
        ),
        "type_name": "Drama",
        "vod_douban_id": "1234",
        "vod_content": " plot ",
    }
    item.update(overrides)
    return item


# ---------------------------------------------------------------------------
# Pure parsing
# ---------------------------------------------------------------------------


class TestParsePlayUrl:
    def test_single_group(self) -> None:
        urls, labels = parse_play_url("EP1$https://a/1.m3u8#EP2$https://a/2.m3u8")
        assert urls == ["https://a/1.m3u8", "https://a/2.m3u8"]
        assert labels == ["EP1", "EP2"]

    def test_group_with_most_m3u8_wins(self) -> None:
        play = "A$https://x/1.mp4#B$https://x/2.mp4$$$A$https://y/1.m3u8"
        urls, _ = parse_play_url(play)
        assert urls == ["https://y/1.m3u8"]

    def test_tie_keeps_earlier_group(self) -> None:
        play = "1$https://x/1.m3u8$$$1$https://y/1.m3u8"
        urls, _ = parse_play_url(play)
        assert urls == ["https://x/1.m3u8"]

    def test_missing_label_uses_index(self) -> None:
        urls, labels = parse_play_url("https://a/1.m3u8#$https://a/2.m3u8")
        assert urls == ["https://a/1.m3u8", "https://a/2.m3u8"]
        assert labels == ["1", "2"]

    def test_empty(self) -> None:
        assert parse_play_url("") == ([], [])

    def test_episode_order_preserved(self) -> None:
        play = "#".join(f"E{i}$https://a/{i}.m3u8" for i in range(10, 0, -1))
        urls, _ = parse_play_url(play)
        assert urls[0] == "https://a/10.m3u8"
        assert urls[-1] == "https://a/1.m3u8"


class TestParseYear:
    def test_plain(self) -> None:
        assert parse_year("2021") == "2021"

    def test_embedded(self) -> None:
        assert parse_year("2019-05-01") == "2019"

    def test_missing(self) -> None:
        assert parse_year(None) == "unknown"
        assert parse_year("n/a") == "unknown"


class TestItemToResult:
    def test_maps_fields(self) -> None:
        r = item_to_result(_SITE, _item())
        assert r is not None
        assert r.source == "alpha"
        assert r.source_name == "Alpha"
        assert r.title == "Big Show"
        assert r.id == "101"
        assert r.year == "2021"
        assert r.douban_id == 1234
        assert r.description == "plot"
        assert r.episode_titles == ["EP1", "EP2"]

    def test_no_episodes_returns_none(self) -> None:
        assert item_to_result(_SITE, _item(vod_play_url="")) is None

    def test_invalid_douban_id(self) -> None:
        r = item_to_result(_SITE, _item(vod_douban_id="abc"))
        assert r is not None
        assert r.douban_id is None


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


class TestHttpxProviderClient:
    @respx.mock
    async def test_search_sends_query_and_headers(self) -> None:
        route = respx.get(host="alpha.example.com", path="/api").respond(
            200, json={"list": [_item()], "pagecount": 1}
        )

        async with httpx.AsyncClient() as http:
            client = HttpxProviderClient(http_client=http, user_agent="UA/1")
            results = await client.search(_SITE, "big show")

        assert len(results) == 1
        request = route.calls.last.request
        assert request.url.params["ac"] == "videolist"
        assert request.url.params["wd"] == "big show"
        assert "pg" not in request.url.params
        assert request.headers["User-Agent"] == "UA/1"
        assert request.headers["Referer"] == "https://alpha.example.com/"

    @respx.mock
    async def test_unplayable_items_skipped(self) -> None:
        respx.get(host="alpha.example.com", path="/api").respond(
            200, json={"list": [_item(vod_play_url=""), "junk", _item(vod_id=2)]}
        )

        async with httpx.AsyncClient() as http:
            client = HttpxProviderClient(http_client=http, user_agent="UA/1")
            results = await client.search(_SITE, "q")

        assert [r.id for r in results] == ["2"]

    @respx.mock
    async def test_missing_list_is_empty(self) -> None:
        respx.get(host="alpha.example.com", path="/api").respond(200, json={})

        async with httpx.AsyncClient() as http:
            client = HttpxProviderClient(http_client=http, user_agent="UA/1")
            assert await client.search(_SITE, "q") == []

    @respx.mock
    async def test_http_error_status(self) -> None:
        respx.get(host="alpha.example.com", path="/api").respond(503)

        async with httpx.AsyncClient() as http:
            client = HttpxProviderClient(http_client=http, user_agent="UA/1")
            with pytest.raises(ProviderHTTPError) as exc_info:
                await client.search(_SITE, "q")

        assert exc_info.value.status == 503

    @respx.mock
    async def test_timeout(self) -> None:
        respx.get(host="alpha.example.com", path="/api").mock(
            side_effect=httpx.ReadTimeout("slow")
        )

        async with httpx.AsyncClient() as http:
            client = HttpxProviderClient(http_client=http, user_agent="UA/1")
            with pytest.raises(ProviderTimeout):
                await client.search(_SITE, "q")

    @respx.mock
    async def test_connect_error(self) -> None:
        respx.get(host="alpha.example.com", path="/api").mock(
            side_effect=httpx.ConnectError("refused")
        )

        async with httpx.AsyncClient() as http:
            client = HttpxProviderClient(http_client=http, user_agent="UA/1")
            with pytest.raises(ProviderHTTPError) as exc_info:
                await client.search(_SITE, "q")

        assert exc_info.value.status is None

    @respx.mock
    async def test_invalid_json(self) -> None:
        respx.get(host="alpha.example.com", path="/api").respond(
            200, text="<html>maintenance</html>"
        )

        async with httpx.AsyncClient() as http:
            client = HttpxProviderClient(http_client=http, user_agent="UA/1")
            with pytest.raises(ProviderParseError):
                await client.search(_SITE, "q")

    @respx.mock
    async def test_list_not_an_array(self) -> None:
        respx.get(host="alpha.example.com", path="/api").respond(
            200, json={"list": "nope"}
        )

        async with httpx.AsyncClient() as http:
            client = HttpxProviderClient(http_client=http, user_agent="UA/1")
            with pytest.raises(ProviderParseError):
                await client.search(_SITE, "q")

    @respx.mock
    async def test_extra_pages_fetched_up_to_max_pages(self) -> None:
        page2 = respx.get(
            host="alpha.example.com", path="/api", params__contains={"pg": "2"}
        ).respond(200, json={"list": [_item(vod_id=2)]})
        page3 = respx.get(
            host="alpha.example.com", path="/api", params__contains={"pg": "3"}
        ).respond(500)
        respx.get(host="alpha.example.com", path="/api").respond(
            200, json={"list": [_item(vod_id=1)], "pagecount": 9}
        )

        async with httpx.AsyncClient() as http:
            client = HttpxProviderClient(
                http_client=http, user_agent="UA/1", max_pages=3
            )
            results = await client.search(_SITE, "q")

        # Page 3 failed and is skipped; page 1 results come first.
        assert [r.id for r in results] == ["1", "2"]
        assert page2.called
        assert page3.called
