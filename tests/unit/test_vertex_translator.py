from __future__ import annotations

import pytest

from live_relay.errors import UnsupportedEnvelope
from live_relay.state.settings import SessionConfig
from live_relay.protocol.vertex import VertexLiveTranslator


@pytest.fixture
def translator() -> VertexLiveTranslator:
    return VertexLiveTranslator(audio_mime_type="audio/pcm;rate=16000")


def test_create_body(translator: VertexLiveTranslator) -> None:
    config = SessionConfig(
        model="projects/p/locations/us-central1/models/m",
        response_modalities=("AUDIO",),
        voice_name="charlie",
    )
    assert translator.to_upstream_create_body(config) == {
        "model": "projects/p/locations/us-central1/models/m",
        "generationConfig": {
            "responseModalities": ["AUDIO"],
            "audioConfig": {"voiceConfig": {"voiceName": "charlie"}},
        },
    }
    assert translator.session_setup == "http"


def test_text_becomes_user_turn(translator: VertexLiveTranslator) -> None:
    frame = translator.to_upstream_frame({"type": "text", "text": "Hello"})
    assert frame == {"clientInput": {"turns": [{"role": "user", "parts": [{"text": "Hello"}]}]}}


def test_audio_payload_passes_through_unchanged(translator: VertexLiveTranslator) -> None:
    payload = "UklGRiQAAABXQVZF+/8="
    frame = translator.to_upstream_frame({"type": "audio", "audioBase64": payload})
    part = frame["clientInput"]["turns"][0]["parts"][0]
    assert part == {"inlineData": {"mimeType": "audio/pcm;rate=16000", "data": payload}}


@pytest.mark.parametrize("msg_type", ["ping", "pong", "end", "audio_chunk", "transcript"])
def test_non_input_types_are_unsupported(translator: VertexLiveTranslator, msg_type: str) -> None:
    with pytest.raises(UnsupportedEnvelope):
        translator.to_upstream_frame({"type": msg_type})


def test_audio_server_content_forwarded_whole(translator: VertexLiveTranslator) -> None:
    content = {"modalities": ["AUDIO", "TEXT"], "parts": [{"text": "hi"}]}
    assert translator.from_upstream_frame({"serverContent": content}) == [
        {"type": "audio_chunk", "data": content},
    ]


@pytest.mark.parametrize(
    "frame",
    [
        {"serverContent": {"modalities": ["TEXT"]}},
        {"serverContent": {"turnComplete": True}},
        {"serverContent": "nope"},
        {"setupComplete": {}},
        {},
    ],
)
def test_other_frames_produce_nothing(translator: VertexLiveTranslator, frame: dict) -> None:
    assert translator.from_upstream_frame(frame) == []


def test_go_away_maps_to_end(translator: VertexLiveTranslator) -> None:
    assert translator.from_upstream_frame({"goAway": {"timeLeft": "5s"}}) == [{"type": "end"}]
