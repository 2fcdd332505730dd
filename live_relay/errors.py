"""Shared error types for the relay gateway.

Every error carries the code reported to the client in the ``error`` field of
an error envelope. Only the envelope errors are recoverable: the offending
message is discarded and the session stays active. The rest end the relay.
"""

from __future__ import annotations

from live_relay.config.websocket import (
    WS_ERROR_UPSTREAM,
    WS_ERROR_INTERNAL,
    WS_ERROR_AUTH_FAILED,
    WS_ERROR_INVALID_MESSAGE,
    WS_ERROR_UNSUPPORTED_MESSAGE,
    WS_ERROR_SESSION_CREATE_FAILED,
)


class GatewayError(Exception):
    code: str = WS_ERROR_INTERNAL
    recoverable: bool = False


class AuthFailure(GatewayError):
    """Credential exchange for the upstream bearer token failed."""

    code = WS_ERROR_AUTH_FAILED


class SessionCreateFailure(GatewayError):
    """The upstream session could not be created or its stream could not be opened."""

    code = WS_ERROR_SESSION_CREATE_FAILED


class UpstreamStreamError(GatewayError):
    """The upstream stream failed after it was established."""

    code = WS_ERROR_UPSTREAM


class MalformedEnvelope(GatewayError):
    """Client sent invalid JSON, a non-object, or an unknown/incomplete envelope."""

    code = WS_ERROR_INVALID_MESSAGE
    recoverable = True


class UnsupportedEnvelope(GatewayError):
    """A recognized envelope type that cannot be sent upstream."""

    code = WS_ERROR_UNSUPPORTED_MESSAGE
    recoverable = True


__all__ = [
    "AuthFailure",
    "GatewayError",
    "MalformedEnvelope",
    "SessionCreateFailure",
    "UnsupportedEnvelope",
    "UpstreamStreamError",
]
