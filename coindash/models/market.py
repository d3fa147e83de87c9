from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Coin:
    """
    Coin = one tracked asset.

    id: stable external identifier (e.g., bitcoin)
    name: display name (e.g., Bitcoin)
    ticker: trading symbol used to build request URLs (e.g., BTC)
    """
    id: str
    name: str
    ticker: str


DEFAULT_COINS: tuple[Coin, ...] = (
    Coin(id="bitcoin", name="Bitcoin", ticker="BTC"),
    Coin(id="ethereum", name="Ethereum", ticker="ETH"),
    Coin(id="solana", name="Solana", ticker="SOL"),
)


@dataclass(frozen=True)
class Candle:
    """
    Daily OHLCV candle.

    timestamp: bucket start in unix seconds
    low/high/open/close: prices during the bucket
    volume: traded volume during the bucket
    """
    timestamp: int
    low: float
    high: float
    open: float
    close: float
    volume: float

    @classmethod
    def from_row(cls, row: list) -> "Candle":
        """Build from the upstream tuple [time, low, high, open, close, volume]."""
        time_, low, high, open_, close, volume = row[:6]
        values = [float(v) for v in (time_, low, high, open_, close, volume)]
        if not all(math.isfinite(v) for v in values):
            raise ValueError(f"candle row has non-finite values: {row!r}")
        return cls(
            timestamp=int(values[0]),
            low=values[1],
            high=values[2],
            open=values[3],
            close=values[4],
            volume=values[5],
        )


@dataclass
class SeriesEntry:
    """
    Live price samples for one coin.

    labels and values are paired by index and always the same length.
    error reflects the most recent sample.
    """
    labels: List[str] = field(default_factory=list)
    values: List[Optional[float]] = field(default_factory=list)
    error: bool = False

    def latest(self) -> Optional[float]:
        return self.values[-1] if self.values else None


HISTORY_LOADING = "loading"
HISTORY_AVAILABLE = "available"
HISTORY_UNAVAILABLE = "unavailable"


@dataclass
class HistoryState:
    status: str = HISTORY_LOADING
    candles: List[Candle] = field(default_factory=list)


@dataclass(frozen=True)
class Suggestion:
    """
    One row of the search dropdown: a matched coin, or the not-found marker.
    """
    coin: Optional[Coin] = None
    not_found: bool = False


NOT_FOUND = Suggestion(not_found=True)
