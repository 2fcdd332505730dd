"""Logging initialization."""

from __future__ import annotations

import logging

from live_relay.config.logging import LOG_LEVEL, LOG_FORMAT, CLIENT_LOGGERS, SHOW_CLIENT_LOGS


def configure_logging() -> None:
    # Network client libraries are chatty at DEBUG. Keep them tame unless explicitly enabled.
    if not SHOW_CLIENT_LOGS:
        for name in CLIENT_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)


__all__ = ["configure_logging"]
