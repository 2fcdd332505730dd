"""Gemini Live bidirectional protocol (in-band setup, speech-style envelopes)."""

from __future__ import annotations

from typing import Any

from live_relay.errors import UnsupportedEnvelope
from live_relay.state.settings import SessionConfig
from live_relay.config.upstream import PROTOCOL_GEMINI_LIVE
from live_relay.config.websocket import (
    WS_KEY_TEXT,
    WS_KEY_TYPE,
    WS_TYPE_TEXT,
    WS_TYPE_AUDIO,
    WS_KEY_AUDIO_BASE64,
)

from .vertex import user_turn
from .envelope import Envelope, build_end, build_ai_text, build_transcript, build_audio_output
from .translator import UpstreamFrame, ProtocolTranslator


def _transcription_text(server_content: dict[str, Any], key: str) -> str:
    transcription = server_content.get(key)
    if not isinstance(transcription, dict):
        return ""
    text = transcription.get("text")
    return text if isinstance(text, str) else ""


class GeminiLiveTranslator(ProtocolTranslator):
    """Direct streaming variant.

    Input transcription, model text and synthesized audio come back as
    separate ``transcript``, ``ai_text`` and ``audio_output`` envelopes, so the
    client sees the same shape as a speech-to-text / text-to-speech pipeline.
    """

    name = PROTOCOL_GEMINI_LIVE
    session_setup = "in_band"

    def __init__(self, *, audio_mime_type: str) -> None:
        self._audio_mime_type = audio_mime_type

    def to_upstream_create_body(self, config: SessionConfig) -> UpstreamFrame:
        return {
            "setup": {
                "model": config.model,
                "generationConfig": {
                    "responseModalities": list(config.response_modalities),
                    "speechConfig": {"voiceConfig": {"prebuiltVoiceConfig": {"voiceName": config.voice_name}}},
                },
                "inputAudioTranscription": {},
                "outputAudioTranscription": {},
            }
        }

    def to_upstream_frame(self, envelope: Envelope) -> UpstreamFrame:
        msg_type = envelope.get(WS_KEY_TYPE)
        if msg_type == WS_TYPE_TEXT:
            return {"clientContent": {"turns": [user_turn({"text": envelope[WS_KEY_TEXT]})], "turnComplete": True}}
        if msg_type == WS_TYPE_AUDIO:
            return {
                "realtimeInput": {
                    "audio": {"mimeType": self._audio_mime_type, "data": envelope[WS_KEY_AUDIO_BASE64]},
                }
            }
        raise UnsupportedEnvelope(f"message type '{msg_type}' cannot be sent upstream")

    def from_upstream_frame(self, frame: UpstreamFrame) -> list[Envelope]:
        if "goAway" in frame:
            return [build_end()]
        server_content = frame.get("serverContent")
        if not isinstance(server_content, dict):
            return []

        out: list[Envelope] = []
        heard = _transcription_text(server_content, "inputTranscription")
        if heard:
            out.append(build_transcript(heard))

        model_turn = server_content.get("modelTurn")
        parts = model_turn.get("parts") if isinstance(model_turn, dict) else None
        for part in parts if isinstance(parts, list) else []:
            if not isinstance(part, dict):
                continue
            text = part.get("text")
            if isinstance(text, str) and text:
                out.append(build_ai_text(text))
            inline = part.get("inlineData")
            if isinstance(inline, dict):
                mime = inline.get("mimeType")
                data = inline.get("data")
                if isinstance(data, str) and data and (not isinstance(mime, str) or mime.startswith("audio/")):
                    out.append(build_audio_output(data))

        spoken = _transcription_text(server_content, "outputTranscription")
        if spoken:
            out.append(build_ai_text(spoken))
        return out


__all__ = ["GeminiLiveTranslator"]
