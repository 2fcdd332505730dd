from __future__ import annotations

from typing import Any

from live_relay.state.settings import UpstreamSettings
from live_relay.upstream.endpoints import stream_url, create_session_url


def _upstream(**overrides: Any) -> UpstreamSettings:
    values: dict[str, Any] = {
        "protocol": "vertex_live",
        "project_id": "p",
        "location": "us-central1",
        "model": "gemini-live",
        "voice_name": "charlie",
        "audio_mime_type": "audio/pcm;rate=16000",
        "api_version": "v1beta",
        "api_key": "",
        "create_session_url": None,
        "stream_url": None,
        "http_timeout_s": 5.0,
        "connect_timeout_s": 5.0,
    }
    values.update(overrides)
    return UpstreamSettings(**values)


def test_vertex_stream_url_strips_leading_slash() -> None:
    assert stream_url(_upstream(), "/projects/p/sessions/s1") == (
        "wss://us-central1-aiplatform.googleapis.com/v1beta/projects/p/sessions/s1"
    )


def test_stream_url_override_substitutes_session_name() -> None:
    upstream = _upstream(stream_url="wss://proxy.internal/live/{session_name}")
    assert stream_url(upstream, "sessions/s1") == "wss://proxy.internal/live/sessions/s1"
    assert stream_url(upstream, None) == "wss://proxy.internal/live/"


def test_stream_url_override_keeps_other_braces() -> None:
    upstream = _upstream(stream_url='wss://proxy.internal/live?cfg={"a":1}&s={session_name}&t={unused}')
    assert stream_url(upstream, "s1") == 'wss://proxy.internal/live?cfg={"a":1}&s=s1&t={unused}'


def test_create_session_url_override_is_used_verbatim() -> None:
    upstream = _upstream(create_session_url="https://proxy.internal/create")
    assert create_session_url(upstream) == "https://proxy.internal/create"
