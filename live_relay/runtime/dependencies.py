"""Runtime dependency construction (upstream broker + admission control)."""

from __future__ import annotations

import logging

import httpx

from live_relay.state import RuntimeDeps
from live_relay.upstream import SessionBroker
from live_relay.state.settings import AppSettings
from live_relay.config.upstream import PROTOCOL_VERTEX_LIVE
from live_relay.credentials import CredentialProvider
from live_relay.credentials.google import build_google_exchange
from live_relay.handlers.connections import ConnectionManager
from live_relay.protocol import build_translator, build_session_config

from .settings import load_settings

logger = logging.getLogger(__name__)


def build_credential_provider(settings: AppSettings) -> CredentialProvider | None:
    # Gemini API sessions authenticate with the key in the stream URL.
    if settings.upstream.protocol != PROTOCOL_VERTEX_LIVE:
        return None
    return CredentialProvider(
        build_google_exchange(settings.credentials),
        refresh_skew_s=settings.credentials.refresh_skew_s,
    )


async def build_runtime_deps(settings: AppSettings | None = None) -> RuntimeDeps:
    settings = settings or load_settings()

    translator = build_translator(settings.upstream)
    http_client = httpx.AsyncClient(timeout=settings.upstream.http_timeout_s)
    broker = SessionBroker(
        upstream=settings.upstream,
        session_config=build_session_config(settings.upstream),
        translator=translator,
        http_client=http_client,
        credentials=build_credential_provider(settings),
        close_timeout_s=settings.relay.drain_grace_s,
    )
    connections = ConnectionManager(max_connections=settings.limits.max_concurrent_connections)

    logger.info(
        "runtime: protocol=%s model=%s max_connections=%s",
        translator.name,
        settings.upstream.model,
        connections.max_connections,
    )
    return RuntimeDeps(
        connections=connections,
        broker=broker,
        translator=translator,
        settings=settings,
        http_client=http_client,
    )


__all__ = ["RuntimeDeps", "build_credential_provider", "build_runtime_deps"]
