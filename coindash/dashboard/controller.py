from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional

from coindash.candles.history import HistoryLoader
from coindash.events import TOPIC_COINS, EventBus
from coindash.exceptions import UnknownCoinError
from coindash.jobs.price_poller import PricePoller
from coindash.models.market import DEFAULT_COINS, Coin
from coindash.providers.base import CoinSearchProvider, MarketDataProvider
from coindash.search.engine import SearchEngine
from coindash.series.store import SeriesStore

log = logging.getLogger("dashboard")


class Dashboard:
    """
    Owns all dashboard state and wires the fetchers together.

    coins: tracked coins, unique by id, append-only
    active_id: the displayed coin (always one of coins)
    series / history / search: per-concern stores, all publishing on bus
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        search_provider: CoinSearchProvider,
        bus: Optional[EventBus] = None,
        coins: Iterable[Coin] = DEFAULT_COINS,
        poll_interval_s: Optional[float] = None,
    ) -> None:
        self.provider = provider
        self.search_provider = search_provider
        self.bus = bus or EventBus()

        self.coins: List[Coin] = []
        for coin in coins:
            if self.find(coin.id) is None:
                self.coins.append(coin)
        if not self.coins:
            raise ValueError("dashboard needs at least one coin")
        self.active_id: str = self.coins[0].id

        self.series = SeriesStore(bus=self.bus)
        self.history = HistoryLoader(provider, bus=self.bus)
        self.search = SearchEngine(search_provider, bus=self.bus)

        poller_kwargs = {} if poll_interval_s is None else {"interval_s": poll_interval_s}
        self.poller = PricePoller(provider, self.series, lambda: self.coins, **poller_kwargs)

    # -------------------------
    # Lifecycle
    # -------------------------
    def start(self) -> None:
        """Arm polling (with an immediate first round) and load active history."""
        self.poller.start(immediate=True)
        self.history.schedule(self.active_coin)

    def stop(self) -> None:
        self.poller.stop()

    async def aclose(self, timeout_s: float = 10.0) -> None:
        """
        Stop polling, let in-flight requests finish (up to timeout_s), then
        close the HTTP clients. Requests still running at the deadline are
        cancelled.
        """
        self.stop()
        try:
            await asyncio.wait_for(self.wait_idle(), timeout=timeout_s)
        except asyncio.TimeoutError:
            log.warning("In-flight requests still running after %.1fs; cancelling", timeout_s)
        await self.provider.aclose()
        await self.search_provider.aclose()

    async def wait_idle(self) -> None:
        """Wait for every in-flight request started so far."""
        await self.poller.wait_idle()
        await self.history.wait_idle()
        await self.search.wait_idle()

    # -------------------------
    # Queries
    # -------------------------
    def find(self, coin_id: str) -> Optional[Coin]:
        for coin in self.coins:
            if coin.id == coin_id:
                return coin
        return None

    @property
    def active_coin(self) -> Coin:
        coin = self.find(self.active_id)
        if coin is None:
            raise UnknownCoinError(self.active_id)
        return coin

    # -------------------------
    # Actions
    # -------------------------
    def select(self, coin_id: str) -> Coin:
        """Change the displayed coin. Loads its history if the coin changed."""
        coin = self.find(coin_id)
        if coin is None:
            raise UnknownCoinError(coin_id)
        self._activate(coin)
        return coin

    def add(self, coin: Coin) -> Coin:
        """
        Track coin (if its id is new), make it active and reset the search box.
        Polling is re-armed when the tracked set grows.
        """
        if self.find(coin.id) is None:
            self.coins.append(coin)
            log.info("Tracking coin id=%s ticker=%s total=%d", coin.id, coin.ticker, len(self.coins))
            self.bus.publish(TOPIC_COINS, coin.id)
            if self.poller.running:
                self.poller.restart()
        else:
            coin = self.find(coin.id)

        self._activate(coin)
        self.search.clear()
        return coin

    def _activate(self, coin: Coin) -> None:
        if coin.id == self.active_id:
            return
        self.active_id = coin.id
        self.bus.publish(TOPIC_COINS, coin.id)
        self.history.schedule(coin)
