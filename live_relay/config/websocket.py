"""WebSocket protocol configuration and constants."""

from __future__ import annotations

# Envelope keys
WS_KEY_TYPE = "type"
WS_KEY_TEXT = "text"
WS_KEY_AUDIO_BASE64 = "audioBase64"
WS_KEY_DATA = "data"
WS_KEY_TIME = "time"
WS_KEY_ERROR = "error"
WS_KEY_MESSAGE = "message"

# Envelope tags
WS_TYPE_PING = "ping"
WS_TYPE_PONG = "pong"
WS_TYPE_TEXT = "text"
WS_TYPE_AUDIO = "audio"
WS_TYPE_TRANSCRIPT = "transcript"
WS_TYPE_AI_TEXT = "ai_text"
WS_TYPE_AUDIO_CHUNK = "audio_chunk"
WS_TYPE_AUDIO_OUTPUT = "audio_output"
WS_TYPE_END = "end"
WS_TYPE_ERROR = "error"

WS_ENVELOPE_TYPES = frozenset(
    {
        WS_TYPE_PING,
        WS_TYPE_PONG,
        WS_TYPE_TEXT,
        WS_TYPE_AUDIO,
        WS_TYPE_TRANSCRIPT,
        WS_TYPE_AI_TEXT,
        WS_TYPE_AUDIO_CHUNK,
        WS_TYPE_AUDIO_OUTPUT,
        WS_TYPE_END,
        WS_TYPE_ERROR,
    }
)

# Outbound envelopes the backpressure policy never evicts.
WS_CRITICAL_TYPES = frozenset({WS_TYPE_ERROR, WS_TYPE_END})

# Close codes
WS_CLOSE_NORMAL_CODE = 1000
WS_CLOSE_GOING_AWAY_CODE = 1001
WS_CLOSE_INTERNAL_ERROR_CODE = 1011
WS_CLOSE_IDLE_CODE = 4000
WS_CLOSE_BUSY_CODE = 4002
WS_CLOSE_MAX_DURATION_CODE = 4003

WS_CLOSE_IDLE_REASON = "idle timeout"
WS_CLOSE_MAX_DURATION_REASON = "max connection duration"
WS_CLOSE_SHUTDOWN_REASON = "server shutting down"

# Drain reasons (requested by the watchdog or the connection manager)
WS_DRAIN_IDLE = "idle_timeout"
WS_DRAIN_MAX_DURATION = "max_duration"
WS_DRAIN_SHUTDOWN = "server_shutdown"

# Errors (the "error" field of error envelopes)
WS_ERROR_INVALID_MESSAGE = "invalid_message"
WS_ERROR_UNSUPPORTED_MESSAGE = "unsupported_message"
WS_ERROR_SESSION_NOT_READY = "session_not_ready"
WS_ERROR_AUTH_FAILED = "auth_failed"
WS_ERROR_SESSION_CREATE_FAILED = "session_create_failed"
WS_ERROR_UPSTREAM = "upstream_error"
WS_ERROR_SERVER_AT_CAPACITY = "server_at_capacity"
WS_ERROR_INTERNAL = "internal_error"

# Endpoint + watchdog (env names and defaults)
ENV_WS_ENDPOINT_PATH = "WS_ENDPOINT_PATH"
ENV_WS_IDLE_TIMEOUT_S = "WS_IDLE_TIMEOUT_S"
ENV_WS_WATCHDOG_TICK_S = "WS_WATCHDOG_TICK_S"
ENV_WS_MAX_CONNECTION_DURATION_S = "WS_MAX_CONNECTION_DURATION_S"

DEFAULT_WS_ENDPOINT_PATH = "/"
DEFAULT_WS_IDLE_TIMEOUT_S = 150.0
DEFAULT_WS_WATCHDOG_TICK_S = 5.0
DEFAULT_WS_MAX_CONNECTION_DURATION_S = 3600.0

__all__ = [
    "DEFAULT_WS_ENDPOINT_PATH",
    "DEFAULT_WS_IDLE_TIMEOUT_S",
    "DEFAULT_WS_MAX_CONNECTION_DURATION_S",
    "DEFAULT_WS_WATCHDOG_TICK_S",
    "ENV_WS_ENDPOINT_PATH",
    "ENV_WS_IDLE_TIMEOUT_S",
    "ENV_WS_MAX_CONNECTION_DURATION_S",
    "ENV_WS_WATCHDOG_TICK_S",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_GOING_AWAY_CODE",
    "WS_CLOSE_IDLE_CODE",
    "WS_CLOSE_IDLE_REASON",
    "WS_CLOSE_INTERNAL_ERROR_CODE",
    "WS_CLOSE_MAX_DURATION_CODE",
    "WS_CLOSE_MAX_DURATION_REASON",
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_SHUTDOWN_REASON",
    "WS_CRITICAL_TYPES",
    "WS_DRAIN_IDLE",
    "WS_DRAIN_MAX_DURATION",
    "WS_DRAIN_SHUTDOWN",
    "WS_ENVELOPE_TYPES",
    "WS_ERROR_AUTH_FAILED",
    "WS_ERROR_INTERNAL",
    "WS_ERROR_INVALID_MESSAGE",
    "WS_ERROR_SERVER_AT_CAPACITY",
    "WS_ERROR_SESSION_CREATE_FAILED",
    "WS_ERROR_SESSION_NOT_READY",
    "WS_ERROR_UNSUPPORTED_MESSAGE",
    "WS_ERROR_UPSTREAM",
    "WS_KEY_AUDIO_BASE64",
    "WS_KEY_DATA",
    "WS_KEY_ERROR",
    "WS_KEY_MESSAGE",
    "WS_KEY_TEXT",
    "WS_KEY_TIME",
    "WS_KEY_TYPE",
    "WS_TYPE_AI_TEXT",
    "WS_TYPE_AUDIO",
    "WS_TYPE_AUDIO_CHUNK",
    "WS_TYPE_AUDIO_OUTPUT",
    "WS_TYPE_END",
    "WS_TYPE_ERROR",
    "WS_TYPE_PING",
    "WS_TYPE_PONG",
    "WS_TYPE_TEXT",
    "WS_TYPE_TRANSCRIPT",
]
