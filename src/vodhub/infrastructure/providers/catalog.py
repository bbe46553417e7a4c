"""Read-only provider catalogue backed by the validated AppConfig."""

from __future__ import annotations

from vodhub.domain.entities.search import ProviderSite


class ConfigProviderCatalog:
    """Implements ``ProviderCatalogPort`` over a fixed list of sites."""

    def __init__(self, sites: list[ProviderSite]) -> None:
        self._sites = list(sites)

    async def enabled_sites(self) -> list[ProviderSite]:
        return [s for s in self._sites if s.enabled]

    def __len__(self) -> int:
        return len(self._sites)
