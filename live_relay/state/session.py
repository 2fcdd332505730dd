"""Live upstream session handed from the session broker to a relay loop."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from live_relay.upstream.channel import UpstreamChannel


@dataclass(slots=True)
class UpstreamSession:
    name: str | None
    token: str | None
    channel: UpstreamChannel
    closed: bool = False

    async def close(self, timeout: float | None = None) -> None:
        """Close the upstream channel once.

        With ``timeout`` set, a close handshake that does not finish in time
        is abandoned and the transport is aborted.
        """
        if self.closed:
            return
        self.closed = True
        try:
            await asyncio.wait_for(self.channel.close(), timeout)
        except asyncio.TimeoutError:
            logger.warning("upstream: close timed out after %.2fs session=%s; aborting", timeout, self.name)
            self.channel.abort()
        except Exception:
            logger.debug("upstream: close failed session=%s", self.name, exc_info=True)


__all__ = ["UpstreamSession"]
