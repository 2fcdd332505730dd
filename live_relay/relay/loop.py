"""Bidirectional relay between one client WebSocket and one upstream live session."""

from __future__ import annotations

import uuid
import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable, Coroutine

from fastapi import WebSocketDisconnect

from live_relay.state.session import UpstreamSession
from live_relay.state.settings import RelaySettings
from live_relay.protocol.translator import UpstreamFrame, ProtocolTranslator
from live_relay.errors import GatewayError, MalformedEnvelope, UnsupportedEnvelope
from live_relay.handlers.websocket.errors import safe_close, safe_send_envelope
from live_relay.protocol.envelope import (
    Envelope,
    build_end,
    build_pong,
    build_error_envelope,
    parse_client_envelope,
)
from live_relay.config.websocket import (
    WS_KEY_TYPE,
    WS_TYPE_END,
    WS_TYPE_PING,
    WS_DRAIN_IDLE,
    WS_ERROR_INTERNAL,
    WS_DRAIN_SHUTDOWN,
    WS_CLOSE_IDLE_CODE,
    WS_CLOSE_IDLE_REASON,
    WS_CLOSE_NORMAL_CODE,
    WS_DRAIN_MAX_DURATION,
    WS_CLOSE_GOING_AWAY_CODE,
    WS_CLOSE_SHUTDOWN_REASON,
    WS_CLOSE_MAX_DURATION_CODE,
    WS_ERROR_SESSION_NOT_READY,
    WS_CLOSE_INTERNAL_ERROR_CODE,
    WS_CLOSE_MAX_DURATION_REASON,
)

from .state import RelayState, can_transition
from .outbound import OutboundQueue

logger = logging.getLogger(__name__)

_DRAIN_CLOSE: dict[str, tuple[int, str]] = {
    WS_DRAIN_SHUTDOWN: (WS_CLOSE_GOING_AWAY_CODE, WS_CLOSE_SHUTDOWN_REASON),
    WS_DRAIN_IDLE: (WS_CLOSE_IDLE_CODE, WS_CLOSE_IDLE_REASON),
    WS_DRAIN_MAX_DURATION: (WS_CLOSE_MAX_DURATION_CODE, WS_CLOSE_MAX_DURATION_REASON),
}


def _task_error(task: asyncio.Task) -> BaseException | None:
    if not task.done() or task.cancelled():
        return None
    return task.exception()


class RelayLoop:
    """Own one client connection and its upstream session until both are closed.

    ``run`` moves through CONNECTING -> ACTIVE -> DRAINING -> CLOSED (or FAILED)
    and returns the terminal state. Four tasks do the pumping:

    * client reader: parse, answer pings, translate, queue for upstream
    * upstream writer: send queued frames upstream in order
    * upstream reader: translate upstream frames into the outbound queue
    * client writer: send the outbound queue to the client in order

    Whichever side ends first starts DRAINING; the other side gets
    ``drain_grace_s`` to flush what it already accepted and is then closed.
    """

    def __init__(
        self,
        ws: Any,
        *,
        broker: Any,
        translator: ProtocolTranslator,
        settings: RelaySettings,
        on_activity: Callable[[], None] | None = None,
        connection_id: str | None = None,
    ) -> None:
        self.connection_id = connection_id or uuid.uuid4().hex[:12]
        self._ws = ws
        self._broker = broker
        self._translator = translator
        self._grace_s = max(0.0, float(settings.drain_grace_s))
        self._on_activity = on_activity

        self._state = RelayState.CONNECTING
        self._inbound: asyncio.Queue[UpstreamFrame | None] = asyncio.Queue(
            maxsize=max(1, int(settings.connecting_buffer_max))
        )
        self._outbound = OutboundQueue(maxsize=settings.outbound_queue_max)
        self._session: UpstreamSession | None = None

        self._drain_requested = asyncio.Event()
        self._drain_reason: str | None = None
        self._end_queued = False
        self._close_code = WS_CLOSE_NORMAL_CODE
        self._close_reason = ""

        self._tasks: set[asyncio.Task] = set()
        self._torn_down = False
        self._done = asyncio.Event()

    @property
    def state(self) -> RelayState:
        return self._state

    @property
    def session(self) -> UpstreamSession | None:
        return self._session

    @property
    def outbound(self) -> OutboundQueue:
        return self._outbound

    def set_activity_hook(self, on_activity: Callable[[], None] | None) -> None:
        self._on_activity = on_activity

    def request_drain(self, reason: str = WS_DRAIN_SHUTDOWN) -> None:
        if self._state.terminal or self._drain_requested.is_set():
            return
        self._drain_reason = reason
        self._drain_requested.set()

    async def wait_closed(self) -> None:
        await self._done.wait()

    def _set_state(self, target: RelayState) -> None:
        if not can_transition(self._state, target):
            raise RuntimeError(f"invalid relay transition {self._state.value} -> {target.value}")
        logger.debug("relay %s: %s -> %s", self.connection_id, self._state.value, target.value)
        self._state = target

    def _spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=f"relay-{self.connection_id}-{name}")
        self._tasks.add(task)
        return task

    def _emit(self, envelope: Envelope) -> None:
        if envelope.get(WS_KEY_TYPE) == WS_TYPE_END:
            if self._end_queued:
                return
            self._end_queued = True
        self._outbound.push(envelope)

    async def _emit_client_error(self, code: str, message: str) -> None:
        # Blocks the client reader while the queue is full of critical envelopes.
        await self._outbound.wait_for_room()
        self._emit(build_error_envelope(code, message))

    def _deadline(self) -> float:
        return asyncio.get_running_loop().time() + self._grace_s

    async def _settle(self, task: asyncio.Task, deadline: float) -> bool:
        """Give ``task`` until ``deadline`` to finish on its own, then cancel it."""
        if task.done():
            return True
        remaining = max(0.0, deadline - asyncio.get_running_loop().time())
        done, _ = await asyncio.wait({task}, timeout=remaining)
        if task in done:
            return True
        task.cancel()
        return False

    async def _close_session(self, session: UpstreamSession | None, deadline: float) -> None:
        if session is None:
            return
        remaining = max(0.0, deadline - asyncio.get_running_loop().time())
        await session.close(timeout=remaining)

    async def _cancel(self, *tasks: asyncio.Task) -> None:
        for task in tasks:
            task.cancel()
        await asyncio.wait(set(tasks))

    # --- run ---------------------------------------------------------------

    async def run(self) -> RelayState:
        client_reader = self._spawn(self._client_reader(), "client-reader")
        client_writer = self._spawn(self._client_writer(), "client-writer")
        drain_wait = self._spawn(self._drain_requested.wait(), "drain-wait")
        try:
            session = await self._open_session(client_reader, client_writer, drain_wait)
            if session is None:
                return self._state

            self._session = session
            self._set_state(RelayState.ACTIVE)
            logger.info("relay %s: active session=%s", self.connection_id, session.name)

            upstream_writer = self._spawn(self._upstream_writer(session), "upstream-writer")
            upstream_reader = self._spawn(self._upstream_reader(session), "upstream-reader")
            done, _ = await asyncio.wait(
                {client_reader, client_writer, drain_wait, upstream_reader, upstream_writer},
                return_when=asyncio.FIRST_COMPLETED,
            )

            if client_reader in done or client_writer in done:
                self._log_task_error(client_reader)
                await self._drain_client_gone(client_reader, client_writer, upstream_reader, upstream_writer)
            elif upstream_reader in done or upstream_writer in done:
                failure = _task_error(upstream_reader) or _task_error(upstream_writer)
                await self._drain_upstream_gone(failure, client_reader, client_writer, upstream_reader, upstream_writer)
            else:
                await self._drain_on_request(client_reader, client_writer, upstream_reader, upstream_writer)
            return self._state
        finally:
            await self._teardown()

    async def _open_session(
        self,
        client_reader: asyncio.Task,
        client_writer: asyncio.Task,
        drain_wait: asyncio.Task,
    ) -> UpstreamSession | None:
        opener = self._spawn(self._broker.open(), "open")
        done, _ = await asyncio.wait(
            {opener, client_reader, client_writer, drain_wait},
            return_when=asyncio.FIRST_COMPLETED,
        )

        if opener not in done:
            opener.cancel()
            await asyncio.wait({opener})
            if not opener.cancelled() and opener.exception() is None:
                await self._close_session(opener.result(), self._deadline())
            self._set_state(RelayState.DRAINING)
            if client_reader in done or client_writer in done:
                logger.info("relay %s: client left before the upstream session was ready", self.connection_id)
                self._log_task_error(client_reader)
                await self._cancel(client_reader)
                self._outbound.close()
                await self._settle(client_writer, self._deadline())
            else:
                logger.info("relay %s: drain requested while connecting (%s)", self.connection_id, self._drain_reason)
                self._close_code, self._close_reason = _DRAIN_CLOSE.get(
                    self._drain_reason or WS_DRAIN_SHUTDOWN, (WS_CLOSE_GOING_AWAY_CODE, "")
                )
                await self._cancel(client_reader)
                self._emit(build_end())
                self._outbound.close()
                await self._settle(client_writer, self._deadline())
            self._set_state(RelayState.CLOSED)
            return None

        exc = opener.exception()
        if exc is None:
            return opener.result()

        if isinstance(exc, GatewayError):
            logger.warning("relay %s: upstream session open failed: %s", self.connection_id, exc)
            code = exc.code
        else:
            logger.error("relay %s: upstream session open crashed", self.connection_id, exc_info=exc)
            code = WS_ERROR_INTERNAL
        self._set_state(RelayState.DRAINING)
        await self._cancel(client_reader)
        self._emit(build_error_envelope(code, str(exc) or type(exc).__name__))
        self._outbound.close()
        self._close_code = WS_CLOSE_INTERNAL_ERROR_CODE
        await self._settle(client_writer, self._deadline())
        self._set_state(RelayState.FAILED)
        return None

    # --- draining ----------------------------------------------------------

    async def _flush_upstream(self, upstream_writer: asyncio.Task, deadline: float) -> None:
        """Let the upstream writer send what the client already got accepted, then stop it."""
        if upstream_writer.done():
            return

        async def _finish() -> None:
            await self._inbound.put(None)
            await asyncio.wait({upstream_writer})

        finisher = self._spawn(_finish(), "upstream-flush")
        if not await self._settle(finisher, deadline):
            upstream_writer.cancel()
            logger.info("relay %s: upstream flush timed out; %d frames dropped", self.connection_id, self._inbound.qsize())
        self._log_task_error(upstream_writer)

    async def _drain_client_gone(
        self,
        client_reader: asyncio.Task,
        client_writer: asyncio.Task,
        upstream_reader: asyncio.Task,
        upstream_writer: asyncio.Task,
    ) -> None:
        self._set_state(RelayState.DRAINING)
        logger.info("relay %s: client disconnected; draining", self.connection_id)
        deadline = self._deadline()
        await self._cancel(client_reader, upstream_reader)
        self._outbound.close()
        await self._flush_upstream(upstream_writer, deadline)
        await self._close_session(self._session, deadline)
        await self._settle(client_writer, deadline)
        self._set_state(RelayState.CLOSED)

    async def _drain_upstream_gone(
        self,
        failure: BaseException | None,
        client_reader: asyncio.Task,
        client_writer: asyncio.Task,
        upstream_reader: asyncio.Task,
        upstream_writer: asyncio.Task,
    ) -> None:
        self._set_state(RelayState.DRAINING)
        deadline = self._deadline()
        await self._cancel(client_reader, upstream_reader, upstream_writer)
        if not self._inbound.empty():
            logger.info(
                "relay %s: discarding %d frames the upstream never received",
                self.connection_id,
                self._inbound.qsize(),
            )

        if failure is not None:
            if isinstance(failure, GatewayError):
                logger.warning("relay %s: upstream failed: %s", self.connection_id, failure)
                code = failure.code
            else:
                logger.error("relay %s: upstream pump crashed", self.connection_id, exc_info=failure)
                code = WS_ERROR_INTERNAL
            self._emit(build_error_envelope(code, str(failure) or type(failure).__name__))
            self._close_code = WS_CLOSE_INTERNAL_ERROR_CODE
        else:
            logger.info("relay %s: upstream closed; draining", self.connection_id)

        self._emit(build_end())
        self._outbound.close()
        await self._settle(client_writer, deadline)
        await self._close_session(self._session, deadline)
        self._set_state(RelayState.FAILED if failure is not None else RelayState.CLOSED)

    async def _drain_on_request(
        self,
        client_reader: asyncio.Task,
        client_writer: asyncio.Task,
        upstream_reader: asyncio.Task,
        upstream_writer: asyncio.Task,
    ) -> None:
        self._set_state(RelayState.DRAINING)
        reason = self._drain_reason or WS_DRAIN_SHUTDOWN
        logger.info("relay %s: draining (%s)", self.connection_id, reason)
        self._close_code, self._close_reason = _DRAIN_CLOSE.get(reason, (WS_CLOSE_GOING_AWAY_CODE, ""))
        deadline = self._deadline()
        await self._cancel(client_reader)
        await self._flush_upstream(upstream_writer, deadline)
        await self._cancel(upstream_reader)
        self._emit(build_end())
        self._outbound.close()
        await self._settle(client_writer, deadline)
        await self._close_session(self._session, deadline)
        self._set_state(RelayState.CLOSED)

    async def _teardown(self) -> None:
        if self._torn_down:
            return
        self._torn_down = True
        self._outbound.close()

        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        await self._close_session(self._session, self._deadline())
        await safe_close(self._ws, code=self._close_code, reason=self._close_reason)

        if not self._state.terminal:
            # Cancelled from outside before a drain finished.
            if self._state is not RelayState.DRAINING:
                self._set_state(RelayState.DRAINING)
            self._set_state(RelayState.CLOSED)
        logger.info("relay %s: closed state=%s", self.connection_id, self._state.value)
        self._done.set()

    def _log_task_error(self, task: asyncio.Task) -> None:
        exc = _task_error(task)
        if exc is not None:
            logger.error("relay %s: task %s failed", self.connection_id, task.get_name(), exc_info=exc)

    # --- pumps -------------------------------------------------------------

    async def _client_reader(self) -> None:
        while True:
            try:
                message = await self._ws.receive()
            except WebSocketDisconnect:
                return
            if message.get("type") == "websocket.disconnect":
                return
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue
            if self._state not in (RelayState.CONNECTING, RelayState.ACTIVE):
                return
            if self._on_activity is not None:
                self._on_activity()
            await self._handle_client_message(raw)

    async def _handle_client_message(self, raw: str | bytes) -> None:
        try:
            envelope = parse_client_envelope(raw)
            if envelope[WS_KEY_TYPE] == WS_TYPE_PING:
                self._emit(build_pong())
                return
            frame = self._translator.to_upstream_frame(envelope)
        except (MalformedEnvelope, UnsupportedEnvelope) as exc:
            logger.debug("relay %s: rejected client message: %s", self.connection_id, exc)
            await self._emit_client_error(exc.code, str(exc))
            return

        if self._state is RelayState.CONNECTING:
            try:
                self._inbound.put_nowait(frame)
            except asyncio.QueueFull:
                await self._emit_client_error(
                    WS_ERROR_SESSION_NOT_READY,
                    "upstream session is still connecting; message not accepted, retry shortly",
                )
            return
        await self._inbound.put(frame)

    async def _upstream_writer(self, session: UpstreamSession) -> None:
        while True:
            frame = await self._inbound.get()
            if frame is None:
                return
            await session.channel.send(frame)

    async def _upstream_reader(self, session: UpstreamSession) -> None:
        async with contextlib.aclosing(session.channel.frames()) as frames:
            async for frame in frames:
                if self._state is not RelayState.ACTIVE:
                    return
                if self._on_activity is not None:
                    self._on_activity()
                for envelope in self._translator.from_upstream_frame(frame):
                    self._emit(envelope)

    async def _client_writer(self) -> None:
        while True:
            envelope = await self._outbound.get()
            if envelope is None:
                return
            if not await safe_send_envelope(self._ws, envelope):
                logger.debug("relay %s: client send failed", self.connection_id)
                return


__all__ = ["RelayLoop"]
