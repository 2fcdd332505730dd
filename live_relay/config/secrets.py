"""Secrets and upstream credential configuration (env names and defaults only)."""

from __future__ import annotations

ENV_GEMINI_API_KEY = "GEMINI_API_KEY"

# Inline service-account JSON. Parsed in memory; never written to disk.
ENV_GOOGLE_APPLICATION_CREDENTIALS_JSON = "GOOGLE_APPLICATION_CREDENTIALS_JSON"
ENV_GOOGLE_APPLICATION_CREDENTIALS = "GOOGLE_APPLICATION_CREDENTIALS"

ENV_TOKEN_REFRESH_SKEW_S = "TOKEN_REFRESH_SKEW_S"
DEFAULT_TOKEN_REFRESH_SKEW_S = 60.0

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"

__all__ = [
    "CLOUD_PLATFORM_SCOPE",
    "DEFAULT_TOKEN_REFRESH_SKEW_S",
    "ENV_GEMINI_API_KEY",
    "ENV_GOOGLE_APPLICATION_CREDENTIALS",
    "ENV_GOOGLE_APPLICATION_CREDENTIALS_JSON",
    "ENV_TOKEN_REFRESH_SKEW_S",
]
