"""Bounded per-connection queue of envelopes waiting for the client socket."""

from __future__ import annotations

import asyncio
import logging
from collections import deque

from live_relay.protocol.envelope import Envelope
from live_relay.config.websocket import WS_KEY_TYPE, WS_CRITICAL_TYPES

logger = logging.getLogger(__name__)


class OutboundQueue:
    """FIFO whose ``push`` never blocks.

    When full, the oldest non-critical envelope is evicted to make room.
    Critical envelopes (``error``/``end``) are never evicted and are always
    accepted, even past ``maxsize``. A non-critical envelope that finds the
    queue full of critical ones is dropped.

    Critical envelopes produced in response to client input should go through
    ``wait_for_room`` first, so a client that never reads cannot grow the queue.
    """

    def __init__(self, *, maxsize: int, critical_types: frozenset[str] = WS_CRITICAL_TYPES) -> None:
        self._maxsize = max(1, int(maxsize))
        self._critical = critical_types
        self._items: deque[Envelope] = deque()
        self._ready = asyncio.Event()
        self._room = asyncio.Event()
        self._room.set()
        self._closed = False
        self.dropped: int = 0

    def __len__(self) -> int:
        return len(self._items)

    @property
    def closed(self) -> bool:
        return self._closed

    def _is_critical(self, envelope: Envelope) -> bool:
        return envelope.get(WS_KEY_TYPE) in self._critical

    def _has_room(self) -> bool:
        if len(self._items) < self._maxsize:
            return True
        return any(not self._is_critical(queued) for queued in self._items)

    async def wait_for_room(self) -> None:
        """Wait until a critical envelope can be pushed without growing past ``maxsize``."""
        while not self._closed and not self._has_room():
            self._room.clear()
            await self._room.wait()

    def _evict_oldest_droppable(self) -> Envelope | None:
        for index, queued in enumerate(self._items):
            if not self._is_critical(queued):
                del self._items[index]
                return queued
        return None

    def push(self, envelope: Envelope) -> bool:
        if self._closed:
            return False
        if len(self._items) >= self._maxsize:
            evicted = self._evict_oldest_droppable()
            if evicted is not None:
                self.dropped += 1
                logger.warning("outbound: queue full, evicted oldest %s envelope", evicted.get(WS_KEY_TYPE))
            elif not self._is_critical(envelope):
                self.dropped += 1
                logger.warning("outbound: queue full of critical envelopes, dropping %s", envelope.get(WS_KEY_TYPE))
                return False
        self._items.append(envelope)
        self._ready.set()
        return True

    def close(self) -> None:
        """Stop accepting envelopes; ``get`` drains what is queued, then returns ``None``."""
        self._closed = True
        self._ready.set()
        self._room.set()

    async def get(self) -> Envelope | None:
        while not self._items:
            if self._closed:
                return None
            self._ready.clear()
            await self._ready.wait()
        envelope = self._items.popleft()
        self._room.set()
        return envelope


__all__ = ["OutboundQueue"]
