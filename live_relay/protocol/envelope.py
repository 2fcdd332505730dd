"""Client envelope parsing and construction.

This is the single place where raw client frames become envelopes; anything
that does not parse raises ``MalformedEnvelope`` and is reported back to the
client without ending the session.
"""

from __future__ import annotations

import time
from typing import Any

import orjson

from live_relay.errors import MalformedEnvelope
from live_relay.config.websocket import (
    WS_KEY_DATA,
    WS_KEY_TEXT,
    WS_KEY_TIME,
    WS_KEY_TYPE,
    WS_TYPE_END,
    WS_KEY_ERROR,
    WS_TYPE_PONG,
    WS_TYPE_TEXT,
    WS_TYPE_AUDIO,
    WS_TYPE_ERROR,
    WS_KEY_MESSAGE,
    WS_TYPE_AI_TEXT,
    WS_ENVELOPE_TYPES,
    WS_TYPE_TRANSCRIPT,
    WS_KEY_AUDIO_BASE64,
    WS_TYPE_AUDIO_CHUNK,
    WS_TYPE_AUDIO_OUTPUT,
)

Envelope = dict[str, Any]


def _require_str(msg: Envelope, key: str, *, allow_empty: bool) -> str:
    value = msg.get(key)
    if not isinstance(value, str):
        raise MalformedEnvelope(f"'{msg[WS_KEY_TYPE]}' message requires a string '{key}'")
    if not allow_empty and not value.strip():
        raise MalformedEnvelope(f"'{msg[WS_KEY_TYPE]}' message requires a non-empty '{key}'")
    return value


def parse_client_envelope(raw: str | bytes) -> Envelope:
    try:
        msg = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise MalformedEnvelope(f"invalid JSON: {exc}") from exc

    if not isinstance(msg, dict):
        raise MalformedEnvelope("message must be a JSON object")

    msg_type = msg.get(WS_KEY_TYPE)
    if not isinstance(msg_type, str) or not msg_type.strip():
        raise MalformedEnvelope("message missing non-empty 'type'")
    msg_type = msg_type.strip()
    if msg_type not in WS_ENVELOPE_TYPES:
        raise MalformedEnvelope(f"message type '{msg_type}' is not recognized")
    msg[WS_KEY_TYPE] = msg_type

    if msg_type == WS_TYPE_TEXT:
        _require_str(msg, WS_KEY_TEXT, allow_empty=True)
    elif msg_type == WS_TYPE_AUDIO:
        _require_str(msg, WS_KEY_AUDIO_BASE64, allow_empty=False)
    return msg


def build_envelope(msg_type: str, **fields: Any) -> Envelope:
    envelope: Envelope = {WS_KEY_TYPE: msg_type}
    envelope.update(fields)
    return envelope


def build_error_envelope(code: str, message: str) -> Envelope:
    return build_envelope(WS_TYPE_ERROR, **{WS_KEY_ERROR: code, WS_KEY_MESSAGE: message})


def build_pong(now_ms: int | None = None) -> Envelope:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return build_envelope(WS_TYPE_PONG, **{WS_KEY_TIME: int(now_ms)})


def build_end() -> Envelope:
    return build_envelope(WS_TYPE_END)


def build_audio_chunk(fragment: Any) -> Envelope:
    return build_envelope(WS_TYPE_AUDIO_CHUNK, **{WS_KEY_DATA: fragment})


def build_audio_output(audio_b64: str) -> Envelope:
    return build_envelope(WS_TYPE_AUDIO_OUTPUT, **{WS_KEY_AUDIO_BASE64: audio_b64})


def build_transcript(text: str) -> Envelope:
    return build_envelope(WS_TYPE_TRANSCRIPT, **{WS_KEY_TEXT: text})


def build_ai_text(text: str) -> Envelope:
    return build_envelope(WS_TYPE_AI_TEXT, **{WS_KEY_TEXT: text})


def dumps_envelope(envelope: Envelope) -> str:
    return orjson.dumps(envelope).decode("utf-8")


__all__ = [
    "Envelope",
    "build_ai_text",
    "build_audio_chunk",
    "build_audio_output",
    "build_end",
    "build_envelope",
    "build_error_envelope",
    "build_pong",
    "build_transcript",
    "dumps_envelope",
    "parse_client_envelope",
]
