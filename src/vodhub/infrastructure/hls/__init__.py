from .ad_filter import DISCONTINUITY_MARKER, filter_manifest, is_discontinuity_marker
from .relay import ManifestRelay

__all__ = [
    "DISCONTINUITY_MARKER",
    "ManifestRelay",
    "filter_manifest",
    "is_discontinuity_marker",
]
