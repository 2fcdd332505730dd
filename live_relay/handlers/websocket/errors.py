"""Send helpers for client envelopes."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from live_relay.protocol.envelope import Envelope, dumps_envelope, build_error_envelope

logger = logging.getLogger(__name__)


async def safe_send_text(ws: Any, text: str) -> bool:
    try:
        await ws.send_text(text)
    except WebSocketDisconnect:
        return False
    except Exception:
        logger.debug("WebSocket send failed", exc_info=True)
        return False
    return True


async def safe_send_envelope(ws: Any, envelope: Envelope) -> bool:
    return await safe_send_text(ws, dumps_envelope(envelope))


async def send_error(ws: Any, *, error_code: str, message: str) -> bool:
    return await safe_send_envelope(ws, build_error_envelope(error_code, message))


async def safe_close(ws: Any, *, code: int, reason: str = "") -> None:
    try:
        await ws.close(code=code, reason=reason)
    except Exception:
        # Already closed by the peer or by the server.
        logger.debug("WebSocket close failed code=%s", code, exc_info=True)


async def reject_connection(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    close_code: int,
) -> None:
    # Accept so we can send a structured error, then close.
    try:
        await ws.accept()
    except Exception:
        return
    await send_error(ws, error_code=error_code, message=message)
    await safe_close(ws, code=close_code, reason=message)


__all__ = [
    "reject_connection",
    "safe_close",
    "safe_send_envelope",
    "safe_send_text",
    "send_error",
]
