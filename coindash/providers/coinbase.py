from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import httpx

from coindash.config import (
    CANDLES_URL,
    HISTORY_GRANULARITY_SECONDS,
    HISTORY_WINDOW_DAYS,
    SPOT_PRICE_URL,
)
from coindash.exceptions import UnexpectedResponseError
from coindash.models.market import Candle, Coin
from coindash.providers.base import MarketDataProvider

log = logging.getLogger("coinbase_provider")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CoinbaseProvider(MarketDataProvider):
    """
    Coinbase provider (REST only, no API key).

    - spot price:   GET api.coinbase.com/v2/prices/{TICKER}-USD/spot
    - daily candles: GET api.exchange.coinbase.com/products/{TICKER}-USD/candles
    """

    def __init__(
        self,
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._client = httpx.AsyncClient(timeout=timeout_s, transport=transport)
        self._clock = clock

    async def aclose(self) -> None:
        await self._client.aclose()

    # -------------------------
    # Spot price
    # -------------------------
    async def fetch_spot_price(self, coin: Coin) -> float:
        """
        Returns the spot price in USD.

        Raises httpx.HTTPError on transport/status failure and
        UnexpectedResponseError when data.amount is missing or not a number.
        """
        url = SPOT_PRICE_URL.format(ticker=coin.ticker.upper())
        resp = await self._client.get(url)
        resp.raise_for_status()

        try:
            data = resp.json()
        except ValueError as e:
            raise UnexpectedResponseError(f"spot price body is not JSON for {coin.id}") from e

        amount = None
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            amount = data["data"].get("amount")
        if not amount:
            raise UnexpectedResponseError(f"spot price missing data.amount for {coin.id}")

        try:
            price = float(amount)
        except (TypeError, ValueError) as e:
            raise UnexpectedResponseError(
                f"spot price amount not numeric for {coin.id}: {amount!r}"
            ) from e

        # float() also accepts "NaN" and "Infinity"
        if not math.isfinite(price):
            raise UnexpectedResponseError(
                f"spot price amount not finite for {coin.id}: {amount!r}"
            )
        return price

    # -------------------------
    # Daily candles
    # -------------------------
    def history_window(self) -> tuple[str, str]:
        """[now - 10d, now] as ISO-8601 strings."""
        end = self._clock()
        start = end - timedelta(days=HISTORY_WINDOW_DAYS)
        return start.isoformat(), end.isoformat()

    async def fetch_daily_candles(self, coin: Coin) -> List[Candle]:
        """
        Returns daily candles for the trailing window, sorted by timestamp.

        Coinbase returns rows as [time, low, high, open, close, volume],
        newest-first; the order is not relied upon.
        An empty list means the exchange has no data for this product.
        """
        start, end = self.history_window()
        url = CANDLES_URL.format(ticker=coin.ticker.upper())
        params = {
            "start": start,
            "end": end,
            "granularity": HISTORY_GRANULARITY_SECONDS,
        }
        resp = await self._client.get(url, params=params)
        resp.raise_for_status()

        try:
            data = resp.json()
        except ValueError as e:
            raise UnexpectedResponseError(f"candles body is not JSON for {coin.id}") from e

        if not isinstance(data, list):
            raise UnexpectedResponseError(
                f"candles payload is {type(data).__name__}, expected list for {coin.id}"
            )

        candles: List[Candle] = []
        for row in data:
            if not isinstance(row, (list, tuple)) or len(row) < 6:
                log.warning("Skipping malformed candle row coin=%s row=%s", coin.id, row)
                continue
            try:
                candles.append(Candle.from_row(row))
            except (TypeError, ValueError, OverflowError):
                log.warning("Skipping non-numeric candle row coin=%s row=%s", coin.id, row)
                continue

        candles.sort(key=lambda c: c.timestamp)
        return candles
