"""Main FastAPI server for the live relay gateway."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, WebSocket
from fastapi.responses import ORJSONResponse

from live_relay.runtime.logging import configure_logging
from live_relay.runtime.settings import load_settings, load_websocket_settings
from live_relay.runtime.dependencies import build_runtime_deps
from live_relay.handlers.websocket.manager import handle_websocket_connection

logger = logging.getLogger(__name__)

configure_logging()


@asynccontextmanager
async def _lifespan(app: FastAPI):
    runtime_deps = await build_runtime_deps()
    app.state.runtime_deps = runtime_deps
    logger.info("runtime: ready")
    try:
        yield
    finally:
        deps = getattr(app.state, "runtime_deps", None)
        if deps is not None:
            await deps.shutdown()


app = FastAPI(default_response_class=ORJSONResponse, lifespan=_lifespan)


@app.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/healthz")
async def healthz() -> dict[str, object]:
    deps = getattr(app.state, "runtime_deps", None)
    if deps is None:
        return {"status": "starting"}
    return {
        "status": "ok",
        "protocol": deps.translator.name,
        "connections": deps.connections.get_connection_count(),
    }


async def websocket_endpoint(websocket: WebSocket) -> None:
    runtime_deps = getattr(app.state, "runtime_deps", None)
    if runtime_deps is None:
        raise RuntimeError("Runtime dependencies are not initialized")
    await handle_websocket_connection(websocket, runtime_deps)


# HTTP and websocket routes may share a path; Starlette matches on scope type.
app.add_api_websocket_route(load_websocket_settings().endpoint_path, websocket_endpoint)


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        "live_relay.server:app",
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )


__all__ = ["app", "main"]
