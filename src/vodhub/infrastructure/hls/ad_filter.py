"""Ad-segment filtering for HLS manifests.

Providers splice adverts between ``#EXT-X-DISCONTINUITY`` boundaries.
Dropping the boundary lines is the whole transform: every other line
is kept verbatim and in order, so filtering twice equals filtering once.
"""

from __future__ import annotations

DISCONTINUITY_MARKER = "#EXT-X-DISCONTINUITY"


def is_discontinuity_marker(line: str, marker: str = DISCONTINUITY_MARKER) -> bool:
    return marker in line


def filter_manifest(text: str, marker: str = DISCONTINUITY_MARKER) -> str:
    """Remove every line equal to or containing *marker*."""
    if marker not in text:
        return text
    return "\n".join(
        line for line in text.split("\n") if not is_discontinuity_marker(line, marker)
    )
