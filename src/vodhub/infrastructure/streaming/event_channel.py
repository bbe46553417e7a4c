"""Push-stream channel for one search session.

Writers call ``send``; the HTTP layer drains ``sse()``.  The closed flag
and the enqueue happen under one lock, so a provider finishing while
the consumer disconnects can never enqueue after close.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator

import structlog

from vodhub.domain.entities.events import CompleteEvent, SearchEvent
from vodhub.domain.exceptions import StreamWriteError

log = structlog.get_logger(__name__)

_CLOSE = object()


def encode_sse(event: SearchEvent) -> str:
    payload = json.dumps(
        event.to_payload(), ensure_ascii=False, separators=(",", ":")
    )
    return f"data: {payload}\n\n"


class SearchEventChannel:
    """Implements ``EventSinkPort`` over an unbounded ``asyncio.Queue``."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._lock = asyncio.Lock()
        self._closed = False
        self.sent = 0
        self.rejected = 0

    @property
    def closed(self) -> bool:
        return self._closed

    async def put(self, event: SearchEvent) -> None:
        """Enqueue *event* or raise ``StreamWriteError`` when closed."""
        async with self._lock:
            if self._closed:
                raise StreamWriteError("event stream is closed")
            self._queue.put_nowait(event)
            self.sent += 1

    async def send(self, event: SearchEvent) -> bool:
        """Like ``put``, but a write after close is a counted no-op."""
        try:
            await self.put(event)
        except StreamWriteError:
            self.rejected += 1
            log.debug("stream_write_rejected", event_type=event.type)
            return False
        return True

    async def close(self) -> None:
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put_nowait(_CLOSE)

    async def events(self) -> AsyncIterator[SearchEvent]:
        """Yield queued events until the channel closes or ``complete`` passes."""
        while True:
            item = await self._queue.get()
            if item is _CLOSE:
                return
            yield item  # type: ignore[misc]
            if isinstance(item, CompleteEvent):
                return

    async def sse(self) -> AsyncIterator[str]:
        async for event in self.events():
            yield encode_sse(event)

