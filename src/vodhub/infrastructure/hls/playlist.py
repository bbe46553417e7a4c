"""Minimal HLS playlist inspection helpers.

Only what probing and relaying need: master/media detection, variant
attributes, and resolving URI lines against the playlist URL.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urljoin

_STREAM_INF = "#EXT-X-STREAM-INF"
_BANDWIDTH_RE = re.compile(r"(?:^|[:,])BANDWIDTH=(\d+)")
_RESOLUTION_RE = re.compile(r"RESOLUTION=(\d+)x(\d+)")
_URI_ATTR_RE = re.compile(r'URI="([^"]*)"')


@dataclass(frozen=True)
class Variant:
    uri: str
    bandwidth: int = 0
    width: int = 0
    height: int = 0


def is_playlist_url(url: str) -> bool:
    return ".m3u8" in url.split("?", 1)[0].lower()


def is_master_playlist(text: str) -> bool:
    return _STREAM_INF in text


def uri_lines(text: str) -> list[str]:
    """Non-empty, non-tag lines in order."""
    out: list[str] = []
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            out.append(stripped)
    return out


def parse_variants(text: str) -> list[Variant]:
    """Variants of a master playlist in declaration order."""
    variants: list[Variant] = []
    pending: str | None = None
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped.startswith(_STREAM_INF):
            pending = stripped
            continue
        if pending is None or not stripped or stripped.startswith("#"):
            continue
        bw = _BANDWIDTH_RE.search(pending)
        res = _RESOLUTION_RE.search(pending)
        variants.append(
            Variant(
                uri=stripped,
                bandwidth=int(bw.group(1)) if bw else 0,
                width=int(res.group(1)) if res else 0,
                height=int(res.group(2)) if res else 0,
            )
        )
        pending = None
    return variants


def max_width(text: str) -> int:
    """Largest ``RESOLUTION=WxH`` width declared anywhere (0 if none)."""
    widths = [int(m.group(1)) for m in _RESOLUTION_RE.finditer(text)]
    return max(widths, default=0)


def resolve(base_url: str, uri: str) -> str:
    return urljoin(base_url, uri)


def rewrite_uri_attributes(line: str, rewrite: Callable[[str], str]) -> str:
    """Apply *rewrite* to every ``URI="..."`` attribute of a tag line."""
    return _URI_ATTR_RE.sub(lambda m: f'URI="{rewrite(m.group(1))}"', line)
