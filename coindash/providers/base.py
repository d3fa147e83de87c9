from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from coindash.models.market import Candle, Coin


class MarketDataProvider(ABC):
    """
    Provider contract (interface).

    Any provider must implement:
    - fetch_spot_price(): current USD price for one coin
    - fetch_daily_candles(): trailing window of daily candles, sorted ascending
    """

    @abstractmethod
    async def fetch_spot_price(self, coin: Coin) -> float:
        raise NotImplementedError

    @abstractmethod
    async def fetch_daily_candles(self, coin: Coin) -> List[Candle]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class CoinSearchProvider(ABC):
    """
    Search contract: free-text query -> matching coins, best match first.
    """

    @abstractmethod
    async def search_coins(self, query: str) -> List[Coin]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
