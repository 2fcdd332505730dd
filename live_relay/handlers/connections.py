"""WebSocket connection admission control and shutdown draining."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from live_relay.config.websocket import WS_DRAIN_SHUTDOWN

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Track admitted connections and the relay serving each one.

    Admission and release never await, so they need no lock on a single event loop.
    """

    def __init__(self, *, max_connections: int) -> None:
        self._max = max(1, int(max_connections))
        self._active: dict[int, Any] = {}

    def admit(self, ws: Any) -> bool:
        """Reserve a slot for a websocket connection (without accepting it)."""
        key = id(ws)
        if key in self._active:
            return True
        if len(self._active) >= self._max:
            return False
        self._active[key] = None
        return True

    def attach(self, ws: Any, relay: Any) -> None:
        key = id(ws)
        if key not in self._active:
            raise KeyError("connection was not admitted")
        self._active[key] = relay

    def release(self, ws: Any) -> None:
        self._active.pop(id(ws), None)

    def get_connection_count(self) -> int:
        return len(self._active)

    @property
    def max_connections(self) -> int:
        return self._max

    async def drain_all(self, *, timeout_s: float, reason: str = WS_DRAIN_SHUTDOWN) -> int:
        """Ask every attached relay to drain and wait up to ``timeout_s`` for them to close.

        Returns the number of relays still open when the wait gave up.
        """
        relays = [relay for relay in self._active.values() if relay is not None]
        if not relays:
            return 0
        logger.info("connections: draining %d relays (%s)", len(relays), reason)
        for relay in relays:
            relay.request_drain(reason)
        waiters = [asyncio.ensure_future(relay.wait_closed()) for relay in relays]
        _, pending = await asyncio.wait(waiters, timeout=max(0.0, float(timeout_s)))
        for waiter in pending:
            waiter.cancel()
        if pending:
            logger.warning("connections: %d relays still open after %.1fs", len(pending), timeout_s)
        return len(pending)


__all__ = ["ConnectionManager"]
