"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ServerSettings:
    host: str
    port: int


@dataclass(frozen=True, slots=True)
class CredentialSettings:
    credentials_json: str
    credentials_path: str
    scopes: tuple[str, ...]
    refresh_skew_s: float


@dataclass(frozen=True, slots=True)
class UpstreamSettings:
    protocol: str
    project_id: str
    location: str
    model: str
    voice_name: str
    audio_mime_type: str
    api_version: str
    api_key: str
    create_session_url: str | None
    stream_url: str | None
    http_timeout_s: float
    connect_timeout_s: float


@dataclass(frozen=True, slots=True)
class SessionConfig:
    model: str
    response_modalities: tuple[str, ...]
    voice_name: str


@dataclass(frozen=True, slots=True)
class RelaySettings:
    drain_grace_s: float
    connecting_buffer_max: int
    outbound_queue_max: int


@dataclass(frozen=True, slots=True)
class LimitsSettings:
    max_concurrent_connections: int


@dataclass(frozen=True, slots=True)
class WebSocketSettings:
    endpoint_path: str
    idle_timeout_s: float
    watchdog_tick_s: float
    max_connection_duration_s: float


@dataclass(frozen=True, slots=True)
class AppSettings:
    server: ServerSettings
    credentials: CredentialSettings
    upstream: UpstreamSettings
    relay: RelaySettings
    limits: LimitsSettings
    websocket: WebSocketSettings


__all__ = [
    "AppSettings",
    "CredentialSettings",
    "LimitsSettings",
    "RelaySettings",
    "ServerSettings",
    "SessionConfig",
    "UpstreamSettings",
    "WebSocketSettings",
]
