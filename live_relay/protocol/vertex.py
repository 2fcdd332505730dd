"""Vertex AI live-session protocol (create session over HTTP, then stream)."""

from __future__ import annotations

from typing import Any

from live_relay.errors import UnsupportedEnvelope
from live_relay.state.settings import SessionConfig
from live_relay.config.upstream import PROTOCOL_VERTEX_LIVE, RESPONSE_MODALITY_AUDIO
from live_relay.config.websocket import (
    WS_KEY_TEXT,
    WS_KEY_TYPE,
    WS_TYPE_TEXT,
    WS_TYPE_AUDIO,
    WS_KEY_AUDIO_BASE64,
)

from .envelope import Envelope, build_end, build_audio_chunk
from .translator import UpstreamFrame, ProtocolTranslator


def user_turn(part: dict[str, Any]) -> dict[str, Any]:
    return {"role": "user", "parts": [part]}


class VertexLiveTranslator(ProtocolTranslator):
    name = PROTOCOL_VERTEX_LIVE
    session_setup = "http"

    def __init__(self, *, audio_mime_type: str) -> None:
        self._audio_mime_type = audio_mime_type

    def to_upstream_create_body(self, config: SessionConfig) -> UpstreamFrame:
        return {
            "model": config.model,
            "generationConfig": {
                "responseModalities": list(config.response_modalities),
                "audioConfig": {"voiceConfig": {"voiceName": config.voice_name}},
            },
        }

    def to_upstream_frame(self, envelope: Envelope) -> UpstreamFrame:
        msg_type = envelope.get(WS_KEY_TYPE)
        if msg_type == WS_TYPE_TEXT:
            part: dict[str, Any] = {"text": envelope[WS_KEY_TEXT]}
        elif msg_type == WS_TYPE_AUDIO:
            # The base64 string goes through untouched; decoding and re-encoding risks corrupting it.
            part = {"inlineData": {"mimeType": self._audio_mime_type, "data": envelope[WS_KEY_AUDIO_BASE64]}}
        else:
            raise UnsupportedEnvelope(f"message type '{msg_type}' cannot be sent upstream")
        return {"clientInput": {"turns": [user_turn(part)]}}

    def from_upstream_frame(self, frame: UpstreamFrame) -> list[Envelope]:
        if "goAway" in frame:
            return [build_end()]
        server_content = frame.get("serverContent")
        if not isinstance(server_content, dict):
            return []
        modalities = server_content.get("modalities")
        if isinstance(modalities, list) and RESPONSE_MODALITY_AUDIO in modalities:
            # Forwarded whole; the client demultiplexes the parts.
            return [build_audio_chunk(server_content)]
        return []


__all__ = ["VertexLiveTranslator", "user_turn"]
