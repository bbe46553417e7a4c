"""Port for measuring a candidate stream."""

from __future__ import annotations

from typing import Protocol

from vodhub.domain.entities.probe import ProbeResult


class StreamProberPort(Protocol):
    """Probes one stream URL.

    Raises ``ProbeFailure`` (or any exception) when the measurement fails.
    """

    async def probe(self, url: str) -> ProbeResult: ...
