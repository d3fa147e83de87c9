from __future__ import annotations

from datetime import datetime
from typing import List

from coindash.dashboard.controller import Dashboard
from coindash.models.market import (
    HISTORY_AVAILABLE,
    HISTORY_LOADING,
    Candle,
    Coin,
    HistoryState,
    SeriesEntry,
    Suggestion,
)
from coindash.models.view import (
    ChartBinding,
    CoinButton,
    CoinPanel,
    DashboardView,
    HistoryPanel,
    OhlcRow,
    SearchBox,
    SuggestionItem,
)

TITLE = "Crypto Dashboard"
PRICE_PENDING = "fetching price, please be patient"
HISTORY_LOADING_TEXT = "Loading historical data..."
HISTORY_UNAVAILABLE_TEXT = "Historical data not available"
NOT_FOUND_TEXT = "sorry, coin not found"


def format_price(entry: SeriesEntry | None) -> str:
    """Latest sample as $x.xx, or the pending text when there is none."""
    latest = entry.latest() if entry is not None else None
    if latest is None:
        return PRICE_PENDING
    return f"${latest:.2f}"


def format_date(ts: int) -> str:
    # Coinbase timestamps are in seconds
    return datetime.fromtimestamp(ts).strftime("%m/%d/%Y")


def render_suggestion(s: Suggestion) -> SuggestionItem:
    if s.not_found or s.coin is None:
        return SuggestionItem(label=NOT_FOUND_TEXT, not_found=True)
    return SuggestionItem(
        label=f"{s.coin.name} ({s.coin.ticker})",
        id=s.coin.id,
        name=s.coin.name,
        ticker=s.coin.ticker,
    )


def render_history(state: HistoryState) -> HistoryPanel:
    if state.status == HISTORY_LOADING:
        return HistoryPanel(status=state.status, message=HISTORY_LOADING_TEXT)
    if state.status != HISTORY_AVAILABLE:
        return HistoryPanel(status=state.status, message=HISTORY_UNAVAILABLE_TEXT)
    return HistoryPanel(status=state.status, rows=[render_candle(c) for c in state.candles])


def render_candle(c: Candle) -> OhlcRow:
    return OhlcRow(
        timestamp=c.timestamp,
        date=format_date(c.timestamp),
        open=f"{c.open:.2f}",
        close=f"{c.close:.2f}",
    )


def render_panel(coin: Coin, dashboard: Dashboard) -> CoinPanel:
    entry = dashboard.series.get(coin.id)
    return CoinPanel(
        id=coin.id,
        name=coin.name,
        ticker=coin.ticker,
        visible=coin.id == dashboard.active_id,
        price_text=format_price(entry),
        error=entry.error if entry is not None else False,
        chart=ChartBinding(
            label=f"{coin.name} Price",
            labels=list(entry.labels) if entry else [],
            values=list(entry.values) if entry else [],
        ),
        history=render_history(dashboard.history.get(coin.id)),
    )


def render_view(dashboard: Dashboard) -> DashboardView:
    """
    Pure function of current dashboard state.

    Called again after every published change; nothing is cached here.
    """
    buttons: List[CoinButton] = [
        CoinButton(id=c.id, name=c.name, active=c.id == dashboard.active_id)
        for c in dashboard.coins
    ]
    search = SearchBox(
        query=dashboard.search.query,
        suggestions=[render_suggestion(s) for s in dashboard.search.suggestions],
    )
    panels = [render_panel(c, dashboard) for c in dashboard.coins]
    return DashboardView(title=TITLE, buttons=buttons, search=search, panels=panels)
