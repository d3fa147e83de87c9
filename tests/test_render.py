import unittest
from datetime import datetime

from coindash.dashboard.controller import Dashboard
from coindash.models.market import (
    HISTORY_AVAILABLE,
    HISTORY_UNAVAILABLE,
    NOT_FOUND,
    Coin,
    HistoryState,
    Suggestion,
)
from coindash.view.render import (
    HISTORY_LOADING_TEXT,
    HISTORY_UNAVAILABLE_TEXT,
    NOT_FOUND_TEXT,
    PRICE_PENDING,
    render_view,
)

from fakes import FakeMarketProvider, FakeSearchProvider, candle


class TestRenderView(unittest.TestCase):
    def setUp(self):
        self.dashboard = Dashboard(FakeMarketProvider(), FakeSearchProvider())

    def _panel(self, view, coin_id):
        return next(p for p in view.panels if p.id == coin_id)

    def test_buttons_follow_tracked_coins_and_selection(self):
        view = render_view(self.dashboard)

        self.assertEqual([b.name for b in view.buttons], ["Bitcoin", "Ethereum", "Solana"])
        self.assertEqual([b.active for b in view.buttons], [True, False, False])
        self.assertEqual([p.visible for p in view.panels], [True, False, False])

    def test_price_text_uses_latest_value(self):
        self.dashboard.series.append("bitcoin", 64000.123)

        panel = self._panel(render_view(self.dashboard), "bitcoin")

        self.assertEqual(panel.price_text, "$64000.12")
        self.assertEqual(panel.chart.values, [64000.123])
        self.assertEqual(panel.chart.label, "Bitcoin Price")
        self.assertEqual(len(panel.chart.labels), 1)

    def test_price_text_pending_when_latest_is_null(self):
        self.dashboard.series.append("bitcoin", 64000.0)
        self.dashboard.series.append("bitcoin", None, error=True)

        panel = self._panel(render_view(self.dashboard), "bitcoin")

        self.assertEqual(panel.price_text, PRICE_PENDING)
        self.assertTrue(panel.error)
        self.assertEqual(panel.chart.values, [64000.0, None])

    def test_price_text_pending_without_samples(self):
        panel = self._panel(render_view(self.dashboard), "ethereum")

        self.assertEqual(panel.price_text, PRICE_PENDING)
        self.assertEqual(panel.chart.labels, [])

    def test_history_messages(self):
        self.dashboard.history.states["ethereum"] = HistoryState(status=HISTORY_UNAVAILABLE)

        view = render_view(self.dashboard)

        self.assertEqual(self._panel(view, "bitcoin").history.message, HISTORY_LOADING_TEXT)
        self.assertEqual(self._panel(view, "ethereum").history.message, HISTORY_UNAVAILABLE_TEXT)

    def test_history_rows(self):
        ts = int(datetime(2024, 3, 1, 12, 0).timestamp())
        self.dashboard.history.states["bitcoin"] = HistoryState(
            status=HISTORY_AVAILABLE,
            candles=[candle(ts, open_=61000.5, close=62000.456)],
        )

        rows = self._panel(render_view(self.dashboard), "bitcoin").history.rows

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].date, "03/01/2024")
        self.assertEqual(rows[0].open, "61000.50")
        self.assertEqual(rows[0].close, "62000.46")

    def test_suggestions(self):
        doge = Coin(id="dogecoin", name="Dogecoin", ticker="DOGE")
        self.dashboard.search.query = "doge"
        self.dashboard.search.suggestions = [Suggestion(coin=doge)]

        items = render_view(self.dashboard).search.suggestions

        self.assertEqual(items[0].label, "Dogecoin (DOGE)")
        self.assertEqual((items[0].id, items[0].ticker), ("dogecoin", "DOGE"))
        self.assertFalse(items[0].not_found)

        self.dashboard.search.suggestions = [NOT_FOUND]
        items = render_view(self.dashboard).search.suggestions

        self.assertEqual(items[0].label, NOT_FOUND_TEXT)
        self.assertTrue(items[0].not_found)


if __name__ == "__main__":
    unittest.main()
