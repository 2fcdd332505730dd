"""Select the protocol translator for the configured upstream."""

from __future__ import annotations

from collections.abc import Callable

from live_relay.state.settings import SessionConfig, UpstreamSettings
from live_relay.config.upstream import (
    PROTOCOL_GEMINI_LIVE,
    PROTOCOL_VERTEX_LIVE,
    GEMINI_MODEL_PATH_TEMPLATE,
    VERTEX_MODEL_PATH_TEMPLATE,
    DEFAULT_RESPONSE_MODALITIES,
)

from .gemini import GeminiLiveTranslator
from .vertex import VertexLiveTranslator
from .translator import ProtocolTranslator

TRANSLATORS: dict[str, Callable[..., ProtocolTranslator]] = {
    PROTOCOL_VERTEX_LIVE: VertexLiveTranslator,
    PROTOCOL_GEMINI_LIVE: GeminiLiveTranslator,
}


def build_translator(upstream: UpstreamSettings) -> ProtocolTranslator:
    factory = TRANSLATORS.get(upstream.protocol)
    if factory is None:
        raise ValueError(f"unknown relay protocol '{upstream.protocol}' (expected one of {sorted(TRANSLATORS)})")
    return factory(audio_mime_type=upstream.audio_mime_type)


def model_path(upstream: UpstreamSettings) -> str:
    if upstream.protocol == PROTOCOL_GEMINI_LIVE:
        if upstream.model.startswith("models/"):
            return upstream.model
        return GEMINI_MODEL_PATH_TEMPLATE.format(model=upstream.model)
    if upstream.model.startswith("projects/"):
        return upstream.model
    return VERTEX_MODEL_PATH_TEMPLATE.format(
        project=upstream.project_id,
        location=upstream.location,
        model=upstream.model,
    )


def build_session_config(upstream: UpstreamSettings) -> SessionConfig:
    return SessionConfig(
        model=model_path(upstream),
        response_modalities=DEFAULT_RESPONSE_MODALITIES,
        voice_name=upstream.voice_name,
    )


__all__ = ["TRANSLATORS", "build_session_config", "build_translator", "model_path"]
