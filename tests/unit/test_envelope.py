from __future__ import annotations

import json

import pytest

from live_relay.errors import MalformedEnvelope
from live_relay.protocol.envelope import (
    build_end,
    build_pong,
    dumps_envelope,
    build_audio_chunk,
    build_error_envelope,
    parse_client_envelope,
)


def test_parse_text_envelope() -> None:
    msg = parse_client_envelope(json.dumps({"type": "text", "text": "Hello"}))
    assert msg == {"type": "text", "text": "Hello"}


def test_parse_audio_envelope_from_bytes() -> None:
    msg = parse_client_envelope(json.dumps({"type": "audio", "audioBase64": "AAEC"}).encode())
    assert msg["audioBase64"] == "AAEC"


def test_parse_ping_needs_no_payload() -> None:
    assert parse_client_envelope('{"type": "ping"}') == {"type": "ping"}


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        json.dumps([]),
        json.dumps("text"),
        json.dumps({"text": "missing type"}),
        json.dumps({"type": ""}),
        json.dumps({"type": "shout", "text": "x"}),
        json.dumps({"type": "text"}),
        json.dumps({"type": "text", "text": 5}),
        json.dumps({"type": "audio"}),
        json.dumps({"type": "audio", "audioBase64": "  "}),
    ],
)
def test_parse_invalid(raw: str) -> None:
    with pytest.raises(MalformedEnvelope):
        parse_client_envelope(raw)


def test_error_envelope_shape() -> None:
    assert build_error_envelope("upstream_error", "reset") == {
        "type": "error",
        "error": "upstream_error",
        "message": "reset",
    }


def test_pong_carries_time() -> None:
    assert build_pong(now_ms=1234) == {"type": "pong", "time": 1234}
    assert isinstance(build_pong()["time"], int)


def test_dumps_envelope_is_compact_json() -> None:
    raw = dumps_envelope(build_audio_chunk({"modalities": ["AUDIO"]}))
    assert json.loads(raw) == {"type": "audio_chunk", "data": {"modalities": ["AUDIO"]}}
    assert json.loads(dumps_envelope(build_end())) == {"type": "end"}
