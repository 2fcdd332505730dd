"""Upstream session handshake: token, create-session call, stream connect."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable, Awaitable

import httpx
import orjson
import websockets
from websockets.exceptions import WebSocketException

from live_relay.state.session import UpstreamSession
from live_relay.config.upstream import SESSION_NAME_PATHS, SETUP_COMPLETE_KEY
from live_relay.credentials.provider import CredentialProvider
from live_relay.protocol.translator import ProtocolTranslator
from live_relay.errors import UpstreamStreamError, SessionCreateFailure
from live_relay.state.settings import SessionConfig, UpstreamSettings

from .channel import UpstreamChannel
from .endpoints import stream_url, create_session_url

logger = logging.getLogger(__name__)

ConnectFn = Callable[..., Awaitable[Any]]

_BODY_PREVIEW_CHARS = 200


def extract_session_name(body: Any) -> str | None:
    for path in SESSION_NAME_PATHS:
        node = body
        for key in path:
            node = node.get(key) if isinstance(node, dict) else None
        if isinstance(node, str) and node.strip():
            return node.strip()
    return None


def _connect_websocket(
    url: str,
    *,
    headers: dict[str, str],
    open_timeout: float,
    close_timeout: float,
) -> Awaitable[Any]:
    return websockets.connect(
        url,
        additional_headers=headers,
        open_timeout=open_timeout,
        close_timeout=close_timeout,
        max_size=None,
    )


async def _first_frame(channel: UpstreamChannel) -> dict[str, Any] | None:
    async with contextlib.aclosing(channel.frames()) as frames:
        async for frame in frames:
            return frame
    return None


class SessionBroker:
    def __init__(
        self,
        *,
        upstream: UpstreamSettings,
        session_config: SessionConfig,
        translator: ProtocolTranslator,
        http_client: httpx.AsyncClient,
        credentials: CredentialProvider | None = None,
        connect: ConnectFn | None = None,
        close_timeout_s: float = 10.0,
    ) -> None:
        self._upstream = upstream
        self._session_config = session_config
        self._translator = translator
        self._http = http_client
        self._credentials = credentials
        self._connect = connect or _connect_websocket
        self._close_timeout_s = close_timeout_s

    async def open(self) -> UpstreamSession:
        """Open an upstream session or raise ``AuthFailure`` / ``SessionCreateFailure``.

        No stream is opened unless every earlier step succeeded, and a stream
        that fails its in-band setup is closed before the error propagates.
        """
        token = await self._credentials.token() if self._credentials is not None else None
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        create_body = self._translator.to_upstream_create_body(self._session_config)

        session_name: str | None = None
        if self._translator.session_setup == "http":
            session_name = await self._create_session(create_body, headers)

        channel = await self._open_stream(session_name, headers)
        try:
            if self._translator.session_setup == "in_band":
                await channel.send(create_body)
                await self._await_setup_complete(channel)
        except BaseException as exc:
            with contextlib.suppress(Exception):
                await channel.close()
            if isinstance(exc, UpstreamStreamError):
                raise SessionCreateFailure(f"upstream setup frame rejected: {exc}") from exc
            raise

        logger.info("broker: upstream session open name=%s protocol=%s", session_name, self._translator.name)
        return UpstreamSession(name=session_name, token=token, channel=channel)

    async def _create_session(self, body: dict[str, Any], headers: dict[str, str]) -> str:
        url = create_session_url(self._upstream)
        try:
            response = await self._http.post(
                url,
                content=orjson.dumps(body),
                headers={**headers, "Content-Type": "application/json"},
                timeout=self._upstream.http_timeout_s,
            )
        except httpx.HTTPError as exc:
            raise SessionCreateFailure(f"create-session request failed: {exc}") from exc

        raw = response.text
        try:
            parsed = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            # A malformed model path makes the endpoint answer with an HTML error page.
            logger.error(
                "broker: create-session returned non-JSON status=%s body=%r",
                response.status_code,
                raw[:_BODY_PREVIEW_CHARS],
            )
            raise SessionCreateFailure("upstream returned a non-JSON body; check the model path and endpoint") from exc

        if response.is_error:
            logger.error(
                "broker: create-session failed status=%s body=%r",
                response.status_code,
                raw[:_BODY_PREVIEW_CHARS],
            )
            raise SessionCreateFailure(f"create-session failed with HTTP {response.status_code}")

        name = extract_session_name(parsed)
        if name is None:
            raise SessionCreateFailure("create-session response carried no session name")
        return name

    async def _open_stream(self, session_name: str | None, headers: dict[str, str]) -> UpstreamChannel:
        url = stream_url(self._upstream, session_name)
        try:
            conn = await self._connect(
                url,
                headers=headers,
                open_timeout=self._upstream.connect_timeout_s,
                close_timeout=self._close_timeout_s,
            )
        except (WebSocketException, OSError, TimeoutError) as exc:
            raise SessionCreateFailure(f"upstream stream connect failed: {exc}") from exc
        return UpstreamChannel(conn, label=self._translator.name or "upstream")

    async def _await_setup_complete(self, channel: UpstreamChannel) -> None:
        timeout = self._upstream.connect_timeout_s
        try:
            frame = await asyncio.wait_for(_first_frame(channel), timeout)
        except asyncio.TimeoutError as exc:
            raise SessionCreateFailure(f"upstream did not acknowledge setup within {timeout:.1f}s") from exc
        if frame is None:
            raise SessionCreateFailure("upstream closed the stream before acknowledging setup")
        if SETUP_COMPLETE_KEY not in frame:
            keys = ", ".join(sorted(frame)) or "empty frame"
            raise SessionCreateFailure(f"upstream answered setup with {keys} instead of {SETUP_COMPLETE_KEY}")


__all__ = ["SessionBroker", "extract_session_name"]
