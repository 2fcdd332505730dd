from __future__ import annotations

import asyncio

import pytest

from live_relay.relay import OutboundQueue


def _chunk(n: int) -> dict:
    return {"type": "audio_chunk", "data": {"n": n}}


@pytest.mark.asyncio
async def test_fifo_order_and_close_drains() -> None:
    queue = OutboundQueue(maxsize=8)
    for n in range(3):
        queue.push(_chunk(n))
    queue.close()

    got = [await queue.get() for _ in range(4)]
    assert [g["data"]["n"] for g in got[:3]] == [0, 1, 2]
    assert got[3] is None
    assert queue.push(_chunk(9)) is False


def test_full_queue_evicts_oldest_non_critical() -> None:
    queue = OutboundQueue(maxsize=3)
    queue.push({"type": "error", "error": "x", "message": "y"})
    queue.push(_chunk(1))
    queue.push(_chunk(2))
    queue.push(_chunk(3))

    assert len(queue) == 3
    assert queue.dropped == 1
    assert [item["type"] for item in queue._items] == ["error", "audio_chunk", "audio_chunk"]
    assert [item["data"]["n"] for item in list(queue._items)[1:]] == [2, 3]


def test_critical_envelopes_are_never_dropped() -> None:
    queue = OutboundQueue(maxsize=1)
    assert queue.push({"type": "error", "error": "a", "message": "b"})
    assert queue.push({"type": "end"})
    assert queue.push(_chunk(1)) is False
    assert len(queue) == 2
    assert queue.dropped == 1


@pytest.mark.asyncio
async def test_get_waits_for_push() -> None:
    queue = OutboundQueue(maxsize=2)
    waiter = asyncio.create_task(queue.get())
    await asyncio.sleep(0)
    assert not waiter.done()

    queue.push({"type": "end"})
    assert await asyncio.wait_for(waiter, timeout=1.0) == {"type": "end"}


@pytest.mark.asyncio
async def test_wait_for_room_blocks_while_full_of_critical_envelopes() -> None:
    queue = OutboundQueue(maxsize=2)
    queue.push({"type": "error", "error": "a", "message": "b"})
    queue.push({"type": "error", "error": "c", "message": "d"})

    waiter = asyncio.create_task(queue.wait_for_room())
    await asyncio.sleep(0.01)
    assert not waiter.done()

    await queue.get()
    await asyncio.wait_for(waiter, timeout=1.0)


@pytest.mark.asyncio
async def test_wait_for_room_returns_when_something_can_be_evicted_or_closed() -> None:
    queue = OutboundQueue(maxsize=1)
    queue.push(_chunk(1))
    await asyncio.wait_for(queue.wait_for_room(), timeout=1.0)

    queue = OutboundQueue(maxsize=1)
    queue.push({"type": "end"})
    waiter = asyncio.create_task(queue.wait_for_room())
    await asyncio.sleep(0.01)
    queue.close()
    await asyncio.wait_for(waiter, timeout=1.0)
