"""Upstream live-session configuration (env names, defaults and endpoint templates)."""

from __future__ import annotations

PROTOCOL_VERTEX_LIVE = "vertex_live"
PROTOCOL_GEMINI_LIVE = "gemini_live"
PROTOCOLS = frozenset({PROTOCOL_VERTEX_LIVE, PROTOCOL_GEMINI_LIVE})

ENV_RELAY_PROTOCOL = "RELAY_PROTOCOL"
ENV_GOOGLE_CLOUD_PROJECT = "GOOGLE_CLOUD_PROJECT"
ENV_GOOGLE_CLOUD_LOCATION = "GOOGLE_CLOUD_LOCATION"
ENV_UPSTREAM_MODEL = "UPSTREAM_MODEL"
ENV_UPSTREAM_VOICE = "UPSTREAM_VOICE"
ENV_UPSTREAM_AUDIO_MIME_TYPE = "UPSTREAM_AUDIO_MIME_TYPE"
ENV_UPSTREAM_API_VERSION = "UPSTREAM_API_VERSION"
ENV_UPSTREAM_CREATE_SESSION_URL = "UPSTREAM_CREATE_SESSION_URL"
ENV_UPSTREAM_STREAM_URL = "UPSTREAM_STREAM_URL"
ENV_UPSTREAM_HTTP_TIMEOUT_S = "UPSTREAM_HTTP_TIMEOUT_S"
ENV_UPSTREAM_CONNECT_TIMEOUT_S = "UPSTREAM_CONNECT_TIMEOUT_S"

DEFAULT_RELAY_PROTOCOL = PROTOCOL_VERTEX_LIVE
DEFAULT_GOOGLE_CLOUD_PROJECT = ""
DEFAULT_GOOGLE_CLOUD_LOCATION = "us-central1"
DEFAULT_VERTEX_MODEL = "gemini-2.5-flash-native-audio-preview-09-2025"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash-native-audio-preview-09-2025"
DEFAULT_UPSTREAM_VOICE = "charlie"
DEFAULT_UPSTREAM_AUDIO_MIME_TYPE = "audio/pcm;rate=16000"
DEFAULT_UPSTREAM_API_VERSION = "v1beta"
DEFAULT_UPSTREAM_HTTP_TIMEOUT_S = 15.0
DEFAULT_UPSTREAM_CONNECT_TIMEOUT_S = 10.0

RESPONSE_MODALITY_AUDIO = "AUDIO"
DEFAULT_RESPONSE_MODALITIES: tuple[str, ...] = (RESPONSE_MODALITY_AUDIO,)

# Vertex AI: no "publishers/google" segment in the model path for live sessions.
VERTEX_MODEL_PATH_TEMPLATE = "projects/{project}/locations/{location}/models/{model}"
VERTEX_CREATE_SESSION_URL_TEMPLATE = "https://{location}-aiplatform.googleapis.com/{api_version}/{model_path}/liveSessions"
VERTEX_STREAM_URL_TEMPLATE = "wss://{location}-aiplatform.googleapis.com/{api_version}/{session_name}"

GEMINI_MODEL_PATH_TEMPLATE = "models/{model}"
GEMINI_STREAM_URL_TEMPLATE = (
    "wss://generativelanguage.googleapis.com/ws/"
    "google.ai.generativelanguage.{api_version}.GenerativeService.BidiGenerateContent?key={api_key}"
)

# First frame the Gemini API sends once it has accepted the in-band setup.
SETUP_COMPLETE_KEY = "setupComplete"

# Ordered fallback: create-session responses nest the name differently across API versions.
SESSION_NAME_PATHS: tuple[tuple[str, ...], ...] = (
    ("session", "name"),
    ("name",),
)

__all__ = [
    "DEFAULT_GEMINI_MODEL",
    "DEFAULT_GOOGLE_CLOUD_LOCATION",
    "DEFAULT_GOOGLE_CLOUD_PROJECT",
    "DEFAULT_RELAY_PROTOCOL",
    "DEFAULT_RESPONSE_MODALITIES",
    "DEFAULT_UPSTREAM_API_VERSION",
    "DEFAULT_UPSTREAM_AUDIO_MIME_TYPE",
    "DEFAULT_UPSTREAM_CONNECT_TIMEOUT_S",
    "DEFAULT_UPSTREAM_HTTP_TIMEOUT_S",
    "DEFAULT_UPSTREAM_VOICE",
    "DEFAULT_VERTEX_MODEL",
    "ENV_GOOGLE_CLOUD_LOCATION",
    "ENV_GOOGLE_CLOUD_PROJECT",
    "ENV_RELAY_PROTOCOL",
    "ENV_UPSTREAM_API_VERSION",
    "ENV_UPSTREAM_AUDIO_MIME_TYPE",
    "ENV_UPSTREAM_CONNECT_TIMEOUT_S",
    "ENV_UPSTREAM_CREATE_SESSION_URL",
    "ENV_UPSTREAM_HTTP_TIMEOUT_S",
    "ENV_UPSTREAM_MODEL",
    "ENV_UPSTREAM_STREAM_URL",
    "ENV_UPSTREAM_VOICE",
    "GEMINI_MODEL_PATH_TEMPLATE",
    "GEMINI_STREAM_URL_TEMPLATE",
    "PROTOCOLS",
    "PROTOCOL_GEMINI_LIVE",
    "PROTOCOL_VERTEX_LIVE",
    "RESPONSE_MODALITY_AUDIO",
    "SESSION_NAME_PATHS",
    "SETUP_COMPLETE_KEY",
    "VERTEX_CREATE_SESSION_URL_TEMPLATE",
    "VERTEX_MODEL_PATH_TEMPLATE",
    "VERTEX_STREAM_URL_TEMPLATE",
]
