"""Per-connection watchdog (idle timeout and max connection duration)."""

from __future__ import annotations

import time
import asyncio
import logging
import contextlib
from collections.abc import Callable

from live_relay.config.websocket import (
    WS_DRAIN_IDLE,
    WS_DRAIN_MAX_DURATION,
    DEFAULT_WS_IDLE_TIMEOUT_S,
    DEFAULT_WS_WATCHDOG_TICK_S,
    DEFAULT_WS_MAX_CONNECTION_DURATION_S,
)

logger = logging.getLogger(__name__)

ExpireFn = Callable[[str], None]


class ConnectionWatchdog:
    def __init__(
        self,
        *,
        on_expire: ExpireFn,
        idle_timeout_s: float | None = None,
        watchdog_tick_s: float | None = None,
        max_connection_duration_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._on_expire = on_expire
        self._idle_timeout_s = float(DEFAULT_WS_IDLE_TIMEOUT_S if idle_timeout_s is None else idle_timeout_s)
        self._watchdog_tick_s = float(DEFAULT_WS_WATCHDOG_TICK_S if watchdog_tick_s is None else watchdog_tick_s)
        self._max_connection_duration_s = float(
            DEFAULT_WS_MAX_CONNECTION_DURATION_S if max_connection_duration_s is None else max_connection_duration_s
        )
        self._clock = clock
        self._connection_start = clock()
        self._last_activity = self._connection_start
        self._expired_reason: str | None = None
        self._task: asyncio.Task | None = None

    def touch(self) -> None:
        self._last_activity = self._clock()

    @property
    def expired_reason(self) -> str | None:
        return self._expired_reason

    def check(self) -> str | None:
        """Return the drain reason if a limit has been reached, else None."""
        now = self._clock()
        if self._max_connection_duration_s > 0 and (now - self._connection_start) >= self._max_connection_duration_s:
            return WS_DRAIN_MAX_DURATION
        if self._idle_timeout_s > 0 and (now - self._last_activity) >= self._idle_timeout_s:
            return WS_DRAIN_IDLE
        return None

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._watchdog_loop())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _watchdog_loop(self) -> None:
        while self._expired_reason is None:
            await asyncio.sleep(self._watchdog_tick_s)
            reason = self.check()
            if reason is None:
                continue
            logger.info("WebSocket watchdog expired (%s); draining connection", reason)
            self._expired_reason = reason
            try:
                self._on_expire(reason)
            except Exception:
                logger.exception("watchdog expiry callback failed")


__all__ = ["ConnectionWatchdog", "ExpireFn"]
