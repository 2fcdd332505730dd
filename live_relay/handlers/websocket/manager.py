"""Primary WebSocket connection handler orchestration."""

from __future__ import annotations

import logging
import contextlib

from fastapi import WebSocket

from live_relay.relay import RelayLoop
from live_relay.state.runtime import RuntimeDeps
from live_relay.config.websocket import WS_CLOSE_BUSY_CODE, WS_ERROR_SERVER_AT_CAPACITY

from .errors import reject_connection
from .lifecycle import ConnectionWatchdog

logger = logging.getLogger(__name__)


async def _prepare_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> bool:
    if not runtime_deps.connections.admit(ws):
        logger.warning(
            "WebSocket rejected: at capacity (%s)",
            runtime_deps.connections.get_connection_count(),
        )
        await reject_connection(
            ws,
            error_code=WS_ERROR_SERVER_AT_CAPACITY,
            message="Server cannot accept new connections. Please try again later.",
            close_code=WS_CLOSE_BUSY_CODE,
        )
        return False

    try:
        await ws.accept()
    except Exception:
        runtime_deps.connections.release(ws)
        raise
    return True


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    watchdog: ConnectionWatchdog | None = None
    relay: RelayLoop | None = None
    admitted = False
    try:
        if not await _prepare_connection(ws, runtime_deps):
            return
        admitted = True

        ws_settings = runtime_deps.settings.websocket
        relay = RelayLoop(
            ws,
            broker=runtime_deps.broker,
            translator=runtime_deps.translator,
            settings=runtime_deps.settings.relay,
        )
        watchdog = ConnectionWatchdog(
            on_expire=relay.request_drain,
            idle_timeout_s=ws_settings.idle_timeout_s,
            watchdog_tick_s=ws_settings.watchdog_tick_s,
            max_connection_duration_s=ws_settings.max_connection_duration_s,
        )
        relay.set_activity_hook(watchdog.touch)
        runtime_deps.connections.attach(ws, relay)
        watchdog.start()

        logger.info(
            "WebSocket connection accepted id=%s. Active: %s",
            relay.connection_id,
            runtime_deps.connections.get_connection_count(),
        )
        await relay.run()
    finally:
        if watchdog is not None:
            with contextlib.suppress(Exception):
                await watchdog.stop()

        if admitted:
            runtime_deps.connections.release(ws)
            logger.info(
                "WebSocket connection closed id=%s state=%s. Active: %s",
                relay.connection_id if relay is not None else None,
                relay.state.value if relay is not None else None,
                runtime_deps.connections.get_connection_count(),
            )


__all__ = ["handle_websocket_connection"]
