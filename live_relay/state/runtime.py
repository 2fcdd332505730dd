"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    import httpx

    from live_relay.state.settings import AppSettings
    from live_relay.upstream.broker import SessionBroker
    from live_relay.protocol.translator import ProtocolTranslator
    from live_relay.handlers.connections import ConnectionManager


@dataclass(slots=True)
class RuntimeDeps:
    connections: ConnectionManager
    broker: SessionBroker
    translator: ProtocolTranslator
    settings: AppSettings
    http_client: httpx.AsyncClient | None = None

    async def shutdown(self) -> None:
        try:
            await self.connections.drain_all(timeout_s=self.settings.relay.drain_grace_s * 2)
        except Exception:
            logger.exception("runtime: draining connections failed")
        if self.http_client is not None:
            try:
                await self.http_client.aclose()
            except Exception:
                logger.exception("runtime: http client shutdown failed")


__all__ = ["RuntimeDeps"]
