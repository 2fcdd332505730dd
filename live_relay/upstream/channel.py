"""Duplex JSON channel over the upstream live WebSocket."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import AsyncIterator

import orjson
from websockets.exceptions import ConnectionClosed, ConnectionClosedError

from live_relay.errors import UpstreamStreamError

logger = logging.getLogger(__name__)


class UpstreamChannel:
    def __init__(self, conn: Any, *, label: str = "upstream") -> None:
        self._conn = conn
        self._label = label

    async def send(self, frame: dict[str, Any]) -> None:
        try:
            await self._conn.send(orjson.dumps(frame).decode("utf-8"))
        except ConnectionClosed as exc:
            raise UpstreamStreamError(f"{self._label} stream closed while sending: {exc}") from exc

    async def frames(self) -> AsyncIterator[dict[str, Any]]:
        """Yield decoded frames until the upstream closes.

        Ends quietly on a normal close; raises ``UpstreamStreamError`` on an
        abnormal one. Frames that are not JSON objects are logged and skipped.
        """
        try:
            async for message in self._conn:
                try:
                    frame = orjson.loads(message)
                except orjson.JSONDecodeError:
                    logger.warning("%s: dropping non-JSON frame (%d bytes)", self._label, len(message))
                    continue
                if not isinstance(frame, dict):
                    logger.warning("%s: dropping non-object frame", self._label)
                    continue
                yield frame
        except ConnectionClosedError as exc:
            raise UpstreamStreamError(f"{self._label} stream closed abnormally: {exc}") from exc

    async def close(self) -> None:
        await self._conn.close()

    def abort(self) -> None:
        """Drop the connection without waiting for the close handshake."""
        transport = getattr(self._conn, "transport", None)
        if transport is not None:
            transport.abort()


__all__ = ["UpstreamChannel"]
