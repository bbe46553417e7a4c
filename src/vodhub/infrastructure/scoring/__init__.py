from .composite import (
    QUALITY_SCORES,
    compute_bounds,
    latency_score,
    quality_score,
    score_probe,
    speed_score,
)
from .stream_prober import HttpxStreamProber

__all__ = [
    "QUALITY_SCORES",
    "HttpxStreamProber",
    "compute_bounds",
    "latency_score",
    "quality_score",
    "score_probe",
    "speed_score",
]
