from .media_proxy import (
    CORS_HEADERS,
    PREFLIGHT_HEADERS,
    MediaProxy,
    ProxiedResponse,
    ProxyRequest,
    mirror_headers,
)

__all__ = [
    "CORS_HEADERS",
    "PREFLIGHT_HEADERS",
    "MediaProxy",
    "ProxiedResponse",
    "ProxyRequest",
    "mirror_headers",
]
