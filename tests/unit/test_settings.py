from __future__ import annotations

import pytest

from live_relay.runtime.settings import load_settings

_ENV_NAMES = (
    "RELAY_PROTOCOL",
    "GOOGLE_CLOUD_PROJECT",
    "GOOGLE_CLOUD_LOCATION",
    "UPSTREAM_MODEL",
    "UPSTREAM_STREAM_URL",
    "GEMINI_API_KEY",
    "WS_ENDPOINT_PATH",
    "RELAY_DRAIN_GRACE_S",
    "MAX_CONCURRENT_CONNECTIONS",
    "PORT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_vertex_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "my-project")
    settings = load_settings()

    assert settings.upstream.protocol == "vertex_live"
    assert settings.upstream.project_id == "my-project"
    assert settings.upstream.location == "us-central1"
    assert settings.upstream.voice_name == "charlie"
    assert settings.websocket.endpoint_path == "/"
    assert settings.server.port == 10000
    assert settings.credentials.scopes == ("https://www.googleapis.com/auth/cloud-platform",)


def test_overrides_and_bad_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "p")
    monkeypatch.setenv("GOOGLE_CLOUD_LOCATION", "europe-west4")
    monkeypatch.setenv("WS_ENDPOINT_PATH", "live")
    monkeypatch.setenv("RELAY_DRAIN_GRACE_S", "1.5")
    monkeypatch.setenv("MAX_CONCURRENT_CONNECTIONS", "lots")
    monkeypatch.setenv("PORT", "8080")
    settings = load_settings()

    assert settings.upstream.location == "europe-west4"
    assert settings.websocket.endpoint_path == "/live"
    assert settings.relay.drain_grace_s == 1.5
    assert settings.limits.max_concurrent_connections == 100
    assert settings.server.port == 8080


def test_vertex_requires_project() -> None:
    with pytest.raises(ValueError, match="GOOGLE_CLOUD_PROJECT"):
        load_settings()


def test_gemini_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RELAY_PROTOCOL", "gemini_live")
    with pytest.raises(ValueError, match="GEMINI_API_KEY"):
        load_settings()

    monkeypatch.setenv("GEMINI_API_KEY", "k")
    assert load_settings().upstream.api_key == "k"


def test_unknown_protocol_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RELAY_PROTOCOL", "carrier_pigeon")
    with pytest.raises(ValueError, match="RELAY_PROTOCOL"):
        load_settings()
