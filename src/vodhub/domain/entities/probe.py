"""Domain entities for stream probing and source scoring.

Pure value objects without framework dependencies or I/O.
Probe results are scoped to one selection session and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from vodhub.domain.entities.search import SearchResult


class Resolution(str, Enum):
    """Resolution class of a probed stream."""

    UHD_4K = "4K"
    QHD_2K = "2K"
    FHD_1080P = "1080p"
    HD_720P = "720p"
    SD_480P = "480p"
    SD = "SD"
    UNKNOWN = "unknown"

    @classmethod
    def from_width(cls, width: int) -> Resolution:
        """Classify a video width in pixels."""
        if width >= 3840:
            return cls.UHD_4K
        if width >= 2560:
            return cls.QHD_2K
        if width >= 1920:
            return cls.FHD_1080P
        if width >= 1280:
            return cls.HD_720P
        if width >= 854:
            return cls.SD_480P
        if width > 0:
            return cls.SD
        return cls.UNKNOWN


@dataclass(frozen=True)
class ProbeResult:
    """Measurements from one probe.

    ``speed_kbps`` is ``None`` when throughput could not be measured.
    ``ping_ms`` <= 0 marks an invalid latency.
    """

    resolution: Resolution = Resolution.UNKNOWN
    speed_kbps: float | None = None
    ping_ms: float = 0.0

    @property
    def load_speed(self) -> str:
        """Human readable throughput (``"1.5 MB/s"``, ``"512.0 KB/s"``)."""
        if self.speed_kbps is None:
            return "unknown"
        if self.speed_kbps >= 1024:
            return f"{self.speed_kbps / 1024:.1f} MB/s"
        return f"{self.speed_kbps:.1f} KB/s"

    def to_dict(self) -> dict[str, Any]:
        return {
            "quality": self.resolution.value,
            "loadSpeed": self.load_speed,
            "speedKBps": self.speed_kbps,
            "pingTime": self.ping_ms,
        }


@dataclass(frozen=True)
class ScoreBounds:
    """Session-wide normalisation bounds, computed after all probes settle."""

    max_speed: float
    min_ping: float
    max_ping: float


@dataclass(frozen=True)
class CandidateScore:
    """Score breakdown for one candidate of a selection session.

    Failed probes carry ``error`` and no scores; they never win.
    """

    candidate: SearchResult
    probe: ProbeResult | None = None
    quality_score: float = 0.0
    speed_score: float = 0.0
    latency_score: float = 0.0
    score: float | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.probe is not None and self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.candidate.source,
            "source_name": self.candidate.source_name,
            "id": self.candidate.id,
            "probe": self.probe.to_dict() if self.probe else None,
            "quality_score": self.quality_score,
            "speed_score": round(self.speed_score, 2),
            "latency_score": round(self.latency_score, 2),
            "score": self.score,
            "error": self.error,
        }


@dataclass(frozen=True)
class SelectionOutcome:
    """Winner of a selection session plus every candidate's breakdown."""

    best: SearchResult
    scores: list[CandidateScore]
    probed: bool = True
