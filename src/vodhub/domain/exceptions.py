"""Domain exceptions."""

from __future__ import annotations


class VodhubError(Exception):
    """Base class for all vodhub errors."""


class ProviderError(VodhubError):
    """A provider search call failed.

    Always converted to a ``source_error`` event by the coordinator.
    """


class ProviderTimeout(ProviderError):
    """The provider did not answer within its deadline."""


class ProviderHTTPError(ProviderError):
    """Non-2xx answer, or a transport failure when ``status`` is None."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ProviderParseError(ProviderError):
    """Malformed JSON or an unexpected response shape."""


class ProbeFailure(VodhubError):
    """A probe fetch or measurement failed for one candidate."""


class UpstreamProxyError(VodhubError):
    """The media origin answered the proxy with an error status."""

    def __init__(self, status: int, message: str = "") -> None:
        super().__init__(message or f"Upstream returned {status}")
        self.status = status


class StreamWriteError(VodhubError):
    """A write was attempted on a closed event stream."""


class InvalidQueryError(VodhubError):
    """Search query is empty after trimming."""


class NoCandidatesError(VodhubError):
    """Source selection was called without candidates."""
