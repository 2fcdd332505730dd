"""Environment parsing for runtime settings."""

from __future__ import annotations

import os

from live_relay.config.server import ENV_HOST, ENV_PORT, DEFAULT_HOST, DEFAULT_PORT
from live_relay.config.limits import ENV_MAX_CONCURRENT_CONNECTIONS, DEFAULT_MAX_CONCURRENT_CONNECTIONS
from live_relay.state.settings import (
    AppSettings,
    RelaySettings,
    LimitsSettings,
    ServerSettings,
    UpstreamSettings,
    WebSocketSettings,
    CredentialSettings,
)
from live_relay.config.secrets import (
    ENV_GEMINI_API_KEY,
    CLOUD_PLATFORM_SCOPE,
    ENV_TOKEN_REFRESH_SKEW_S,
    DEFAULT_TOKEN_REFRESH_SKEW_S,
    ENV_GOOGLE_APPLICATION_CREDENTIALS,
    ENV_GOOGLE_APPLICATION_CREDENTIALS_JSON,
)
from live_relay.config.relay import (
    ENV_RELAY_DRAIN_GRACE_S,
    DEFAULT_RELAY_DRAIN_GRACE_S,
    ENV_RELAY_OUTBOUND_QUEUE_MAX,
    ENV_RELAY_CONNECTING_BUFFER_MAX,
    DEFAULT_RELAY_OUTBOUND_QUEUE_MAX,
    DEFAULT_RELAY_CONNECTING_BUFFER_MAX,
)
from live_relay.config.websocket import (
    ENV_WS_ENDPOINT_PATH,
    ENV_WS_IDLE_TIMEOUT_S,
    ENV_WS_WATCHDOG_TICK_S,
    DEFAULT_WS_ENDPOINT_PATH,
    DEFAULT_WS_IDLE_TIMEOUT_S,
    DEFAULT_WS_WATCHDOG_TICK_S,
    ENV_WS_MAX_CONNECTION_DURATION_S,
    DEFAULT_WS_MAX_CONNECTION_DURATION_S,
)
from live_relay.config.upstream import (
    PROTOCOLS,
    ENV_RELAY_PROTOCOL,
    ENV_UPSTREAM_MODEL,
    ENV_UPSTREAM_VOICE,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_VERTEX_MODEL,
    PROTOCOL_GEMINI_LIVE,
    PROTOCOL_VERTEX_LIVE,
    DEFAULT_RELAY_PROTOCOL,
    DEFAULT_UPSTREAM_VOICE,
    ENV_UPSTREAM_STREAM_URL,
    ENV_GOOGLE_CLOUD_PROJECT,
    ENV_UPSTREAM_API_VERSION,
    ENV_GOOGLE_CLOUD_LOCATION,
    DEFAULT_GOOGLE_CLOUD_PROJECT,
    DEFAULT_UPSTREAM_API_VERSION,
    ENV_UPSTREAM_AUDIO_MIME_TYPE,
    DEFAULT_GOOGLE_CLOUD_LOCATION,
    ENV_UPSTREAM_HTTP_TIMEOUT_S,
    ENV_UPSTREAM_CREATE_SESSION_URL,
    ENV_UPSTREAM_CONNECT_TIMEOUT_S,
    DEFAULT_UPSTREAM_HTTP_TIMEOUT_S,
    DEFAULT_UPSTREAM_AUDIO_MIME_TYPE,
    DEFAULT_UPSTREAM_CONNECT_TIMEOUT_S,
)


def _str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _optional_str_env(name: str) -> str | None:
    v = _str_env(name, "")
    return v or None


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _load_server_settings() -> ServerSettings:
    return ServerSettings(
        host=_str_env(ENV_HOST, DEFAULT_HOST),
        port=_int_env(ENV_PORT, DEFAULT_PORT),
    )


def _load_credential_settings() -> CredentialSettings:
    return CredentialSettings(
        credentials_json=_str_env(ENV_GOOGLE_APPLICATION_CREDENTIALS_JSON, ""),
        credentials_path=_str_env(ENV_GOOGLE_APPLICATION_CREDENTIALS, ""),
        scopes=(CLOUD_PLATFORM_SCOPE,),
        refresh_skew_s=_float_env(ENV_TOKEN_REFRESH_SKEW_S, DEFAULT_TOKEN_REFRESH_SKEW_S),
    )


def _load_upstream_settings() -> UpstreamSettings:
    protocol = _str_env(ENV_RELAY_PROTOCOL, DEFAULT_RELAY_PROTOCOL).lower()
    if protocol not in PROTOCOLS:
        raise ValueError(f"{ENV_RELAY_PROTOCOL} must be one of {sorted(PROTOCOLS)}, got '{protocol}'")

    default_model = DEFAULT_GEMINI_MODEL if protocol == PROTOCOL_GEMINI_LIVE else DEFAULT_VERTEX_MODEL
    settings = UpstreamSettings(
        protocol=protocol,
        project_id=_str_env(ENV_GOOGLE_CLOUD_PROJECT, DEFAULT_GOOGLE_CLOUD_PROJECT),
        location=_str_env(ENV_GOOGLE_CLOUD_LOCATION, DEFAULT_GOOGLE_CLOUD_LOCATION),
        model=_str_env(ENV_UPSTREAM_MODEL, default_model),
        voice_name=_str_env(ENV_UPSTREAM_VOICE, DEFAULT_UPSTREAM_VOICE),
        audio_mime_type=_str_env(ENV_UPSTREAM_AUDIO_MIME_TYPE, DEFAULT_UPSTREAM_AUDIO_MIME_TYPE),
        api_version=_str_env(ENV_UPSTREAM_API_VERSION, DEFAULT_UPSTREAM_API_VERSION),
        api_key=_str_env(ENV_GEMINI_API_KEY, ""),
        create_session_url=_optional_str_env(ENV_UPSTREAM_CREATE_SESSION_URL),
        stream_url=_optional_str_env(ENV_UPSTREAM_STREAM_URL),
        http_timeout_s=_float_env(ENV_UPSTREAM_HTTP_TIMEOUT_S, DEFAULT_UPSTREAM_HTTP_TIMEOUT_S),
        connect_timeout_s=_float_env(ENV_UPSTREAM_CONNECT_TIMEOUT_S, DEFAULT_UPSTREAM_CONNECT_TIMEOUT_S),
    )
    _validate_upstream(settings)
    return settings


def _validate_upstream(settings: UpstreamSettings) -> None:
    if settings.protocol == PROTOCOL_VERTEX_LIVE:
        if not settings.project_id and not settings.create_session_url:
            raise ValueError(f"{ENV_GOOGLE_CLOUD_PROJECT} is required for the {PROTOCOL_VERTEX_LIVE} protocol")
    elif settings.protocol == PROTOCOL_GEMINI_LIVE:
        if not settings.api_key and not settings.stream_url:
            raise ValueError(f"{ENV_GEMINI_API_KEY} is required for the {PROTOCOL_GEMINI_LIVE} protocol")


def _load_relay_settings() -> RelaySettings:
    return RelaySettings(
        drain_grace_s=max(0.0, _float_env(ENV_RELAY_DRAIN_GRACE_S, DEFAULT_RELAY_DRAIN_GRACE_S)),
        connecting_buffer_max=max(1, _int_env(ENV_RELAY_CONNECTING_BUFFER_MAX, DEFAULT_RELAY_CONNECTING_BUFFER_MAX)),
        outbound_queue_max=max(1, _int_env(ENV_RELAY_OUTBOUND_QUEUE_MAX, DEFAULT_RELAY_OUTBOUND_QUEUE_MAX)),
    )


def _load_limits_settings() -> LimitsSettings:
    return LimitsSettings(
        max_concurrent_connections=_int_env(ENV_MAX_CONCURRENT_CONNECTIONS, DEFAULT_MAX_CONCURRENT_CONNECTIONS),
    )


def _load_websocket_settings() -> WebSocketSettings:
    endpoint_path = _str_env(ENV_WS_ENDPOINT_PATH, DEFAULT_WS_ENDPOINT_PATH)
    if not endpoint_path.startswith("/"):
        endpoint_path = f"/{endpoint_path}"
    return WebSocketSettings(
        endpoint_path=endpoint_path,
        idle_timeout_s=_float_env(ENV_WS_IDLE_TIMEOUT_S, DEFAULT_WS_IDLE_TIMEOUT_S),
        watchdog_tick_s=_float_env(ENV_WS_WATCHDOG_TICK_S, DEFAULT_WS_WATCHDOG_TICK_S),
        max_connection_duration_s=_float_env(ENV_WS_MAX_CONNECTION_DURATION_S, DEFAULT_WS_MAX_CONNECTION_DURATION_S),
    )


def load_websocket_settings() -> WebSocketSettings:
    return _load_websocket_settings()


def load_settings() -> AppSettings:
    return AppSettings(
        server=_load_server_settings(),
        credentials=_load_credential_settings(),
        upstream=_load_upstream_settings(),
        relay=_load_relay_settings(),
        limits=_load_limits_settings(),
        websocket=_load_websocket_settings(),
    )


__all__ = ["load_settings", "load_websocket_settings"]
