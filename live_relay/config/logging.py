"""Logging configuration."""

from __future__ import annotations

import os

LOG_LEVEL: str = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
LOG_FORMAT: str = (os.getenv("LOG_FORMAT") or "").strip() or "%(asctime)s %(levelname)s %(name)s: %(message)s"

# websockets and httpx log every frame/request at DEBUG; keep them quiet unless asked.
SHOW_CLIENT_LOGS: bool = (os.getenv("SHOW_CLIENT_LOGS") or "").strip().lower() in {"1", "true", "yes"}
CLIENT_LOGGERS: tuple[str, ...] = ("websockets", "httpx", "httpcore", "google.auth")

__all__ = ["CLIENT_LOGGERS", "LOG_FORMAT", "LOG_LEVEL", "SHOW_CLIENT_LOGS"]
