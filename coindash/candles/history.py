from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Set

from coindash.events import TOPIC_HISTORY, EventBus
from coindash.models.market import (
    HISTORY_AVAILABLE,
    HISTORY_LOADING,
    HISTORY_UNAVAILABLE,
    Coin,
    HistoryState,
)
from coindash.providers.base import MarketDataProvider

log = logging.getLogger("history")


class HistoryLoader:
    """
    One-shot daily candle fetch per coin selection.

    states[coin_id] -> HistoryState
      - "loading" while a request is in flight
      - "available" with candles sorted by timestamp
      - "unavailable" on empty result, bad payload or transport failure

    Only the latest request issued for a coin may write its state.
    """

    def __init__(self, provider: MarketDataProvider, bus: Optional[EventBus] = None) -> None:
        self.provider = provider
        self.bus = bus
        self.states: Dict[str, HistoryState] = {}
        self._tokens: Dict[str, int] = {}
        self._inflight: Set[asyncio.Task] = set()

    def get(self, coin_id: str) -> HistoryState:
        return self.states.get(coin_id) or HistoryState()

    def schedule(self, coin: Coin) -> asyncio.Task:
        """Start a background load for coin and return its task."""
        task = asyncio.create_task(self.load(coin))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def wait_idle(self) -> None:
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def load(self, coin: Coin) -> HistoryState:
        token = self._tokens.get(coin.id, 0) + 1
        self._tokens[coin.id] = token
        self._set(coin.id, HistoryState(status=HISTORY_LOADING))

        try:
            candles = await self.provider.fetch_daily_candles(coin)
        except Exception as e:
            log.error("History fetch failed coin=%s error=%s", coin.id, repr(e))
            candles = []

        if candles:
            ordered = sorted(candles, key=lambda c: c.timestamp)
            state = HistoryState(status=HISTORY_AVAILABLE, candles=ordered)
        else:
            state = HistoryState(status=HISTORY_UNAVAILABLE)

        if token != self._tokens.get(coin.id):
            log.debug("Dropping stale history coin=%s token=%d", coin.id, token)
            return state

        log.info("History loaded coin=%s status=%s candles=%d", coin.id, state.status, len(state.candles))
        self._set(coin.id, state)
        return state

    def _set(self, coin_id: str, state: HistoryState) -> None:
        self.states[coin_id] = state
        if self.bus is not None:
            self.bus.publish(TOPIC_HISTORY, coin_id)
