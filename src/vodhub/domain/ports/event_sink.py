"""Port for the push stream a search session writes to."""

from __future__ import annotations

from typing import Protocol

from vodhub.domain.entities.events import SearchEvent


class EventSinkPort(Protocol):
    """Append-only event sink guarded by a closed flag.

    ``send`` returns False (and never raises) once the sink is closed.
    """

    @property
    def closed(self) -> bool: ...

    async def send(self, event: SearchEvent) -> bool: ...

    async def close(self) -> None: ...
