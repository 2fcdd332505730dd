from __future__ import annotations

import gc
import time
import asyncio
import datetime
import threading

import pytest

from live_relay.errors import AuthFailure
from live_relay.state.token import TokenRecord
from live_relay.credentials import CredentialProvider
from live_relay.state.settings import CredentialSettings
from live_relay.credentials.google import _expiry_epoch, load_google_credentials


class _Clock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class _Exchange:
    def __init__(self, clock: _Clock, *, lifetime_s: float = 3600.0, delay_s: float = 0.0) -> None:
        self._clock = clock
        self._lifetime_s = lifetime_s
        self._delay_s = delay_s
        self._lock = threading.Lock()
        self.calls = 0
        self.fail_with: Exception | None = None
        self.token = "tok"

    def __call__(self) -> TokenRecord:
        with self._lock:
            self.calls += 1
            n = self.calls
        if self._delay_s:
            time.sleep(self._delay_s)
        if self.fail_with is not None:
            raise self.fail_with
        return TokenRecord(value=f"{self.token}-{n}" if self.token else "", expires_at=self._clock() + self._lifetime_s)


@pytest.mark.asyncio
async def test_token_is_cached_until_skew_window() -> None:
    clock = _Clock()
    exchange = _Exchange(clock, lifetime_s=600.0)
    provider = CredentialProvider(exchange, refresh_skew_s=60.0, now_fn=clock)

    assert await provider.token() == "tok-1"
    clock.now += 500.0
    assert await provider.token() == "tok-1"
    assert exchange.calls == 1

    clock.now += 50.0  # inside the 60s skew window
    assert await provider.token() == "tok-2"
    assert exchange.calls == 2


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_exchange() -> None:
    clock = _Clock()
    exchange = _Exchange(clock, delay_s=0.05)
    provider = CredentialProvider(exchange, now_fn=clock)

    tokens = await asyncio.gather(*(provider.token() for _ in range(10)))

    assert set(tokens) == {"tok-1"}
    assert exchange.calls == 1
    assert provider.exchange_count == 1


@pytest.mark.asyncio
async def test_failed_exchange_fails_all_waiters_then_retries() -> None:
    clock = _Clock()
    exchange = _Exchange(clock, delay_s=0.02)
    exchange.fail_with = RuntimeError("metadata server unreachable")
    provider = CredentialProvider(exchange, now_fn=clock)

    results = await asyncio.gather(*(provider.token() for _ in range(3)), return_exceptions=True)
    assert all(isinstance(r, AuthFailure) for r in results)
    assert exchange.calls == 1

    exchange.fail_with = None
    assert await provider.token() == "tok-2"


@pytest.mark.asyncio
async def test_empty_token_is_an_auth_failure() -> None:
    clock = _Clock()
    exchange = _Exchange(clock)
    exchange.token = ""
    provider = CredentialProvider(exchange, now_fn=clock)

    with pytest.raises(AuthFailure):
        await provider.token()


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_abort_shared_refresh() -> None:
    clock = _Clock()
    exchange = _Exchange(clock, delay_s=0.05)
    provider = CredentialProvider(exchange, now_fn=clock)

    first = asyncio.create_task(provider.token())
    second = asyncio.create_task(provider.token())
    await asyncio.sleep(0.01)
    first.cancel()

    assert await second == "tok-1"
    assert exchange.calls == 1


@pytest.mark.asyncio
async def test_failed_refresh_after_all_waiters_cancelled_is_not_reported() -> None:
    loop = asyncio.get_running_loop()
    reported: list[dict] = []
    previous = loop.get_exception_handler()
    loop.set_exception_handler(lambda _loop, context: reported.append(context))
    try:
        clock = _Clock()
        exchange = _Exchange(clock, delay_s=0.05)
        exchange.fail_with = RuntimeError("boom")
        provider = CredentialProvider(exchange, now_fn=clock)

        waiter = asyncio.create_task(provider.token())
        await asyncio.sleep(0.01)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter
        await asyncio.sleep(0.2)
        del waiter
        gc.collect()
    finally:
        loop.set_exception_handler(previous)

    assert exchange.calls == 1
    assert [c for c in reported if "never retrieved" in c.get("message", "")] == []

def test_token_record_freshness() -> None:
    record = TokenRecord(value="t", expires_at=100.0)
    assert record.is_fresh(39.0, skew_s=60.0)
    assert not record.is_fresh(40.0, skew_s=60.0)
    assert not TokenRecord(value="", expires_at=1e12).is_fresh(0.0)


def test_expiry_treats_naive_datetimes_as_utc() -> None:
    class _Creds:
        expiry = datetime.datetime(2030, 1, 1, 0, 0, 0)

    expected = datetime.datetime(2030, 1, 1, tzinfo=datetime.timezone.utc).timestamp()
    assert _expiry_epoch(_Creds()) == expected


def test_inline_credentials_must_be_json() -> None:
    settings = CredentialSettings(
        credentials_json="{not json",
        credentials_path="",
        scopes=("https://www.googleapis.com/auth/cloud-platform",),
        refresh_skew_s=60.0,
    )
    with pytest.raises(ValueError):
        load_google_credentials(settings)
