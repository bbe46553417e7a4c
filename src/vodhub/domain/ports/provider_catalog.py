"""Port for the read-only provider configuration."""

from __future__ import annotations

from typing import Protocol

from vodhub.domain.entities.search import ProviderSite


class ProviderCatalogPort(Protocol):
    """Supplies the enabled provider sites for a search."""

    async def enabled_sites(self) -> list[ProviderSite]: ...
