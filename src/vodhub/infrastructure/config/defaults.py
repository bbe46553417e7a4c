"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "vodhub",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "follow_redirects": True,
        "user_agent": "vodhub/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "providers": [],
    "search": {
        "provider_timeout_seconds": 20.0,
        "builtin_timeout_seconds": 10.0,
        "max_results_per_provider": 50,
        "content_filter_enabled": True,
        "cache_time_seconds": 7200,
        "max_pages": 1,
    },
    "builtin": {
        "enabled": True,
        "limit": 20,
    },
    "probe": {
        "timeout_seconds": 5.0,
    },
    "playback": {
        "adblock_enabled": True,
        "discontinuity_marker": "#EXT-X-DISCONTINUITY",
        "proxy_segments": False,
    },
    "proxy": {},
}
