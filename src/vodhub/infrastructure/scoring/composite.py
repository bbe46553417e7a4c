"""Composite source scoring.

Pure functions: no I/O, no shared state.  Bounds are computed once per
selection session after every probe has settled.

    score = round2(0.4 * quality + 0.4 * speed + 0.2 * latency)

round2 rounds half up, so 28.125 becomes 28.13.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from vodhub.domain.entities.probe import ProbeResult, Resolution, ScoreBounds

QUALITY_WEIGHT = 0.4
SPEED_WEIGHT = 0.4
LATENCY_WEIGHT = 0.2

FALLBACK_MAX_SPEED = 1024.0
FALLBACK_MIN_PING = 50.0
FALLBACK_MAX_PING = 1000.0
UNKNOWN_SPEED_SCORE = 30.0

QUALITY_SCORES: dict[Resolution, float] = {
    Resolution.UHD_4K: 100.0,
    Resolution.QHD_2K: 85.0,
    Resolution.FHD_1080P: 75.0,
    Resolution.HD_720P: 60.0,
    Resolution.SD_480P: 40.0,
    Resolution.SD: 20.0,
    Resolution.UNKNOWN: 0.0,
}


def _round2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def _clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))


def compute_bounds(probes: Iterable[ProbeResult]) -> ScoreBounds:
    """Session-wide bounds over successful probes, with fallbacks."""
    probes = list(probes)
    speeds = [
        p.speed_kbps for p in probes if p.speed_kbps is not None and p.speed_kbps > 0
    ]
    pings = [p.ping_ms for p in probes if p.ping_ms > 0]
    return ScoreBounds(
        max_speed=max(speeds) if speeds else FALLBACK_MAX_SPEED,
        min_ping=min(pings) if pings else FALLBACK_MIN_PING,
        max_ping=max(pings) if pings else FALLBACK_MAX_PING,
    )


def quality_score(resolution: Resolution) -> float:
    return QUALITY_SCORES.get(resolution, 0.0)


def speed_score(speed_kbps: float | None, max_speed: float) -> float:
    if speed_kbps is None:
        return UNKNOWN_SPEED_SCORE
    if max_speed <= 0:
        return 0.0
    return _clamp(100.0 * speed_kbps / max_speed)


def latency_score(ping_ms: float, min_ping: float, max_ping: float) -> float:
    if ping_ms <= 0:
        return 0.0
    if min_ping == max_ping:
        return 100.0
    return _clamp(100.0 * (max_ping - ping_ms) / (max_ping - min_ping))


def score_probe(
    probe: ProbeResult, bounds: ScoreBounds
) -> tuple[float, float, float, float]:
    """Return ``(quality, speed, latency, composite)`` for one probe."""
    q = quality_score(probe.resolution)
    s = speed_score(probe.speed_kbps, bounds.max_speed)
    lat = latency_score(probe.ping_ms, bounds.min_ping, bounds.max_ping)
    total = _round2(QUALITY_WEIGHT * q + SPEED_WEIGHT * s + LATENCY_WEIGHT * lat)
    return q, s, lat, total
