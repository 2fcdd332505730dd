"""Cached upstream bearer token with single-flight refresh."""

from __future__ import annotations

import time
import asyncio
import logging
from collections.abc import Callable

from live_relay.errors import AuthFailure
from live_relay.state.token import TokenRecord

logger = logging.getLogger(__name__)

ExchangeFn = Callable[[], TokenRecord]
TimeFn = Callable[[], float]


class CredentialProvider:
    """Hand out a cached bearer token, refreshing it when it is about to expire.

    The exchange is a blocking call (service-account JWT grant) and runs in a
    worker thread. Callers that arrive while a refresh is running await that
    same refresh and get its token or its ``AuthFailure``. A failed exchange is
    not retried here; the next ``token()`` call starts a new one.
    """

    def __init__(
        self,
        exchange: ExchangeFn,
        *,
        refresh_skew_s: float = 60.0,
        now_fn: TimeFn | None = None,
    ) -> None:
        self._exchange = exchange
        self._refresh_skew_s = max(0.0, float(refresh_skew_s))
        self._now = now_fn or time.time
        self._record: TokenRecord | None = None
        self._lock = asyncio.Lock()
        self._inflight: asyncio.Future[TokenRecord] | None = None
        self.exchange_count: int = 0

    def _cached(self) -> str | None:
        record = self._record
        if record is not None and record.is_fresh(self._now(), skew_s=self._refresh_skew_s):
            return record.value
        return None

    async def token(self) -> str:
        cached = self._cached()
        if cached is not None:
            return cached

        async with self._lock:
            cached = self._cached()
            if cached is not None:
                return cached
            if self._inflight is None:
                self._inflight = asyncio.ensure_future(self._refresh())
            inflight = self._inflight

        # Shielded so one cancelled caller does not abort the refresh for the rest.
        record = await asyncio.shield(inflight)
        return record.value

    async def _refresh(self) -> TokenRecord:
        self.exchange_count += 1
        try:
            record = await asyncio.to_thread(self._exchange)
        except AuthFailure:
            logger.warning("credentials: token exchange failed")
            raise
        except Exception as exc:
            logger.warning("credentials: token exchange failed: %s", exc)
            raise AuthFailure(f"credential exchange failed: {exc}") from exc
        finally:
            self._inflight = None

        if not record.value:
            raise AuthFailure("credential exchange returned an empty token")
        self._record = record
        logger.info("credentials: token refreshed (expires in %.0fs)", record.expires_at - self._now())
        return record


__all__ = ["CredentialProvider"]
