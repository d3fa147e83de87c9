from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class CoinButton(BaseModel):
    id: str
    name: str
    active: bool


class SuggestionItem(BaseModel):
    """
    One dropdown row.

    not_found rows carry only the label; coin rows carry the descriptor that
    the page posts back to /coins when clicked.
    """

    label: str
    not_found: bool = False
    id: Optional[str] = None
    name: Optional[str] = None
    ticker: Optional[str] = None


class SearchBox(BaseModel):
    query: str
    suggestions: List[SuggestionItem] = []


class ChartBinding(BaseModel):
    """Data for the live line chart (drawn client-side)."""

    label: str
    labels: List[str] = []
    values: List[Optional[float]] = []


class OhlcRow(BaseModel):
    timestamp: int
    date: str
    open: str
    close: str


class HistoryPanel(BaseModel):
    status: str
    message: Optional[str] = None
    rows: List[OhlcRow] = []


class CoinPanel(BaseModel):
    id: str
    name: str
    ticker: str
    visible: bool
    price_text: str
    error: bool
    chart: ChartBinding
    history: HistoryPanel


class DashboardView(BaseModel):
    title: str
    buttons: List[CoinButton] = []
    search: SearchBox
    panels: List[CoinPanel] = []


class AddCoinRequest(BaseModel):
    id: str
    name: str
    ticker: str
