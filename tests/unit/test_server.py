from __future__ import annotations

import asyncio
from typing import Any

import pytest
from fastapi.testclient import TestClient

import live_relay.server as server
from live_relay.state import RuntimeDeps
from live_relay.handlers.connections import ConnectionManager
from live_relay.protocol.vertex import VertexLiveTranslator
from live_relay.handlers.websocket.manager import handle_websocket_connection
from live_relay.state.settings import (
    AppSettings,
    RelaySettings,
    LimitsSettings,
    ServerSettings,
    UpstreamSettings,
    WebSocketSettings,
    CredentialSettings,
)
from live_relay.config.websocket import WS_CLOSE_BUSY_CODE, WS_ERROR_SERVER_AT_CAPACITY

from .fakes import FakeBroker, FakeClientWebSocket, FakeUpstreamChannel

AUDIO_CONTENT = {"modalities": ["AUDIO"], "parts": [{"inlineData": {"data": "AAEC"}}]}


def _settings(max_connections: int = 4) -> AppSettings:
    return AppSettings(
        server=ServerSettings(host="127.0.0.1", port=0),
        credentials=CredentialSettings(credentials_json="", credentials_path="", scopes=(), refresh_skew_s=60.0),
        upstream=UpstreamSettings(
            protocol="vertex_live",
            project_id="p",
            location="us-central1",
            model="m",
            voice_name="charlie",
            audio_mime_type="audio/pcm;rate=16000",
            api_version="v1beta",
            api_key="",
            create_session_url=None,
            stream_url=None,
            http_timeout_s=5.0,
            connect_timeout_s=5.0,
        ),
        relay=RelaySettings(drain_grace_s=0.5, connecting_buffer_max=8, outbound_queue_max=32),
        limits=LimitsSettings(max_concurrent_connections=max_connections),
        websocket=WebSocketSettings(
            endpoint_path="/",
            idle_timeout_s=60.0,
            watchdog_tick_s=1.0,
            max_connection_duration_s=0.0,
        ),
    )


def _deps(broker: Any, *, max_connections: int = 4) -> RuntimeDeps:
    return RuntimeDeps(
        connections=ConnectionManager(max_connections=max_connections),
        broker=broker,
        translator=VertexLiveTranslator(audio_mime_type="audio/pcm;rate=16000"),
        settings=_settings(max_connections),
    )


def _echo_audio(frame: dict[str, Any]) -> list[dict[str, Any]]:
    return [{"serverContent": AUDIO_CONTENT}]


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch):
    async def _build() -> RuntimeDeps:
        return _deps(FakeBroker(FakeUpstreamChannel(responder=_echo_audio)))

    monkeypatch.setattr(server, "build_runtime_deps", _build)
    with TestClient(server.app) as test_client:
        yield test_client


def test_health_endpoints(client: TestClient) -> None:
    for path in ("/", "/health"):
        assert client.get(path).json() == {"status": "ok"}
    body = client.get("/healthz").json()
    assert body["status"] == "ok"
    assert body["protocol"] == "vertex_live"


def test_websocket_ping_and_text_turn(client: TestClient) -> None:
    with client.websocket_connect("/") as ws:
        ws.send_json({"type": "ping"})
        pong = ws.receive_json()
        assert pong["type"] == "pong"

        ws.send_json({"type": "text", "text": "Hello"})
        assert ws.receive_json() == {"type": "audio_chunk", "data": AUDIO_CONTENT}

        ws.send_text("not json")
        assert ws.receive_json()["error"] == "invalid_message"


@pytest.mark.asyncio
async def test_connection_rejected_at_capacity() -> None:
    deps = _deps(FakeBroker(), max_connections=1)
    deps.connections.admit(object())
    ws = FakeClientWebSocket()

    await handle_websocket_connection(ws, deps)

    assert ws.accepted
    assert ws.sent == [
        {
            "type": "error",
            "error": WS_ERROR_SERVER_AT_CAPACITY,
            "message": "Server cannot accept new connections. Please try again later.",
        }
    ]
    assert ws.close_code == WS_CLOSE_BUSY_CODE
    assert deps.connections.get_connection_count() == 1


@pytest.mark.asyncio
async def test_admitted_connection_is_released_after_relay_ends() -> None:
    broker = FakeBroker()
    deps = _deps(broker)
    ws = FakeClientWebSocket()
    task = asyncio.create_task(handle_websocket_connection(ws, deps))

    ws.feed_json({"type": "text", "text": "Hello"})
    while len(broker.channel.sent) < 1:
        await asyncio.sleep(0.005)
    assert deps.connections.get_connection_count() == 1

    broker.channel.finish()
    await asyncio.wait_for(task, timeout=2.0)

    assert ws.sent_types() == ["end"]
    assert deps.connections.get_connection_count() == 0


@pytest.mark.asyncio
async def test_shutdown_drains_open_relays() -> None:
    broker = FakeBroker()
    deps = _deps(broker)
    ws = FakeClientWebSocket()
    task = asyncio.create_task(handle_websocket_connection(ws, deps))
    while broker.open_calls < 1 or deps.connections.get_connection_count() < 1:
        await asyncio.sleep(0.005)
    await asyncio.sleep(0.01)

    await deps.shutdown()
    await asyncio.wait_for(task, timeout=2.0)

    assert ws.sent_types()[-1] == "end"
    assert ws.close_code == 1001
