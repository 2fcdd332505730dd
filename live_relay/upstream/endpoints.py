"""Upstream endpoint addressing."""

from __future__ import annotations

from live_relay.state.settings import UpstreamSettings
from live_relay.config.upstream import (
    PROTOCOL_GEMINI_LIVE,
    GEMINI_STREAM_URL_TEMPLATE,
    VERTEX_STREAM_URL_TEMPLATE,
    VERTEX_CREATE_SESSION_URL_TEMPLATE,
)

from live_relay.protocol.registry import model_path


def create_session_url(upstream: UpstreamSettings) -> str:
    if upstream.create_session_url:
        return upstream.create_session_url
    return VERTEX_CREATE_SESSION_URL_TEMPLATE.format(
        location=upstream.location,
        api_version=upstream.api_version,
        model_path=model_path(upstream),
    )


def stream_url(upstream: UpstreamSettings, session_name: str | None) -> str:
    if upstream.stream_url:
        # Plain substitution; override URLs may carry other braces in their query.
        return upstream.stream_url.replace("{session_name}", session_name or "")
    if upstream.protocol == PROTOCOL_GEMINI_LIVE:
        return GEMINI_STREAM_URL_TEMPLATE.format(api_version=upstream.api_version, api_key=upstream.api_key)
    return VERTEX_STREAM_URL_TEMPLATE.format(
        location=upstream.location,
        api_version=upstream.api_version,
        session_name=(session_name or "").lstrip("/"),
    )


__all__ = ["create_session_url", "stream_url"]
