"""Port for provider search clients."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vodhub.domain.entities.search import ProviderSite, SearchResult


@runtime_checkable
class ProviderClientPort(Protocol):
    """Async interface for searching one upstream provider.

    Implementations raise ``ProviderError`` subclasses on failure.
    """

    async def search(self, site: ProviderSite, query: str) -> list[SearchResult]: ...


@runtime_checkable
class BuiltinProviderPort(Protocol):
    """A provider that ships with the service and is always dispatched.

    Exposes its own ``site`` descriptor so the coordinator can report it
    like any configured provider.
    """

    @property
    def site(self) -> ProviderSite: ...

    async def search(self, site: ProviderSite, query: str) -> list[SearchResult]: ...
