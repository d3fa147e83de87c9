from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional, Sequence, Set

from coindash.config import POLL_INTERVAL_SECONDS
from coindash.models.market import Coin
from coindash.providers.base import MarketDataProvider
from coindash.series.store import SeriesStore

log = logging.getLogger("price_poller")


class PricePoller:
    """
    Periodic spot-price polling for the tracked coins.

    - start(): arms the timer (optionally with one immediate round)
    - stop(): cancels the timer; in-flight requests run to completion
    - restart(): stop + start without an immediate round (tracked set changed)

    Every round issues one request per coin as its own task. Each request
    carries a per-coin sequence number; a completion is dropped if a
    later-issued request for the same coin was already applied.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        store: SeriesStore,
        coins: Callable[[], Sequence[Coin]],
        interval_s: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        self.provider = provider
        self.store = store
        self.coins = coins
        self.interval_s = interval_s

        self._timer: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()
        self._issued: Dict[str, int] = {}
        self._applied: Dict[str, int] = {}

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def start(self, immediate: bool = True) -> None:
        if self.running:
            return
        self._timer = asyncio.create_task(self._timer_loop(immediate))

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def restart(self) -> None:
        self.stop()
        self.start(immediate=False)

    async def wait_idle(self) -> None:
        """Wait for all in-flight price requests to finish."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def _timer_loop(self, immediate: bool) -> None:
        if immediate:
            self.poll_round()
        while True:
            await asyncio.sleep(self.interval_s)
            self.poll_round()

    def poll_round(self) -> None:
        """Fire one price request per tracked coin (does not wait for them)."""
        for coin in list(self.coins()):
            task = asyncio.create_task(self.fetch_one(coin))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def fetch_one(self, coin: Coin) -> None:
        seq = self._issued.get(coin.id, 0) + 1
        self._issued[coin.id] = seq

        try:
            price = await self.provider.fetch_spot_price(coin)
            value, error = price, False
        except Exception as e:
            # No retry here; the next tick is the recovery path.
            log.error("Price fetch failed coin=%s error=%s", coin.id, repr(e))
            value, error = None, True

        if seq <= self._applied.get(coin.id, 0):
            log.debug("Dropping stale price coin=%s seq=%d", coin.id, seq)
            return

        self._applied[coin.id] = seq
        self.store.append(coin.id, value, error=error)
