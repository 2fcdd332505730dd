"""Relay loop tuning (env names and defaults only)."""

from __future__ import annotations

ENV_RELAY_DRAIN_GRACE_S = "RELAY_DRAIN_GRACE_S"
ENV_RELAY_CONNECTING_BUFFER_MAX = "RELAY_CONNECTING_BUFFER_MAX"
ENV_RELAY_OUTBOUND_QUEUE_MAX = "RELAY_OUTBOUND_QUEUE_MAX"

# Time the surviving side gets to flush already accepted messages once draining starts.
DEFAULT_RELAY_DRAIN_GRACE_S = 3.0

# Client frames accepted while the upstream session is still being created.
DEFAULT_RELAY_CONNECTING_BUFFER_MAX = 32

# Envelopes waiting for a slow client before the oldest audio starts getting evicted.
DEFAULT_RELAY_OUTBOUND_QUEUE_MAX = 256

__all__ = [
    "DEFAULT_RELAY_CONNECTING_BUFFER_MAX",
    "DEFAULT_RELAY_DRAIN_GRACE_S",
    "DEFAULT_RELAY_OUTBOUND_QUEUE_MAX",
    "ENV_RELAY_CONNECTING_BUFFER_MAX",
    "ENV_RELAY_DRAIN_GRACE_S",
    "ENV_RELAY_OUTBOUND_QUEUE_MAX",
]
