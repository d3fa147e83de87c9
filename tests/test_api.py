import asyncio
import unittest

import httpx
from fastapi.testclient import TestClient

from coindash.api.routes import _stop_task
from coindash.dashboard.controller import Dashboard
from coindash.main import create_app
from coindash.models.market import Coin
from coindash.providers.coinbase import CoinbaseProvider

from fakes import FakeMarketProvider, FakeSearchProvider, candle, make_coins


class TestApi(unittest.TestCase):
    def setUp(self):
        self.provider = FakeMarketProvider(
            prices={"bitcoin": 64000.0},
            candles={"bitcoin": [candle(200), candle(100)], "dogecoin": [candle(300)]},
        )
        self.search = FakeSearchProvider(
            results={
                "doge": [Coin(id="dogecoin", name="Dogecoin", ticker="DOGE")],
                "coin": make_coins(7),
            }
        )
        self.dashboard = Dashboard(self.provider, self.search, poll_interval_s=3600)
        self.client = TestClient(create_app(self.dashboard))
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def test_index_serves_page(self):
        resp = self.client.get("/")

        self.assertEqual(resp.status_code, 200)
        self.assertIn("text/html", resp.headers["content-type"])
        self.assertIn("Crypto Dashboard", resp.text)

    def test_health(self):
        body = self.client.get("/health").json()

        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["coins_tracked"], 3)
        self.assertTrue(body["poller_running"])

    def test_list_coins(self):
        body = self.client.get("/coins").json()

        self.assertEqual([c["id"] for c in body["coins"]], ["bitcoin", "ethereum", "solana"])
        self.assertEqual(body["active"], "bitcoin")

    def test_add_coin_then_duplicate(self):
        body = self.client.post("/coins", json={"id": "dogecoin", "name": "Dogecoin", "ticker": "doge"}).json()

        self.assertTrue(body["added"])
        self.assertEqual(body["active"], "dogecoin")
        self.assertEqual(body["coin"]["ticker"], "DOGE")

        self.client.post("/coins/bitcoin/select")
        body = self.client.post("/coins", json={"id": "dogecoin", "name": "Dogecoin", "ticker": "DOGE"}).json()

        self.assertFalse(body["added"])
        self.assertEqual(body["active"], "dogecoin")
        self.assertEqual(len(self.client.get("/coins").json()["coins"]), 4)

    def test_select_unknown_coin_is_404(self):
        resp = self.client.post("/coins/nope/select")

        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["coin"], "nope")

    def test_series_and_history_unknown_coin_is_404(self):
        self.assertEqual(self.client.get("/series/nope").status_code, 404)
        self.assertEqual(self.client.get("/history/nope").status_code, 404)

    def test_search_waits_for_results(self):
        body = self.client.post("/search", params={"query": "coin", "wait": True}).json()

        self.assertEqual(body["query"], "coin")
        self.assertEqual(len(body["suggestions"]), 5)

    def test_search_empty_query_clears_without_request(self):
        self.client.post("/search", params={"query": "doge", "wait": True})

        body = self.client.post("/search", params={"query": ""}).json()

        self.assertEqual(body["suggestions"], [])
        self.assertEqual(self.search.calls, ["doge"])

    def test_search_not_found(self):
        body = self.client.post("/search", params={"query": "zzz", "wait": True}).json()

        self.assertEqual(len(body["suggestions"]), 1)
        self.assertTrue(body["suggestions"][0]["not_found"])

    def test_view_payload_shape(self):
        body = self.client.get("/view").json()

        self.assertEqual(body["title"], "Crypto Dashboard")
        self.assertEqual(len(body["panels"]), 3)
        self.assertEqual(body["search"], {"query": "", "suggestions": []})

    def test_view_stream_pushes_current_view_and_updates(self):
        with self.client.websocket_connect("/ws") as ws:
            first = ws.receive_json()
            self.assertEqual([b["id"] for b in first["buttons"]], ["bitcoin", "ethereum", "solana"])

            self.client.post("/coins/solana/select")
            active = None
            for _ in range(10):
                view = ws.receive_json()
                active = next(b["id"] for b in view["buttons"] if b["active"])
                if active == "solana":
                    break

            self.assertEqual(active, "solana")


class TestNonFinitePrice(unittest.TestCase):
    def test_nan_quote_is_stored_as_error_and_series_stays_serializable(self):
        provider = CoinbaseProvider(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b'{"data": {"amount": "NaN"}}'))
        )
        dashboard = Dashboard(provider, FakeSearchProvider(), poll_interval_s=3600)

        with TestClient(create_app(dashboard)) as client:
            for _ in range(50):
                resp = client.get("/series/bitcoin")
                if resp.json()["values"]:
                    break

            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.json()["values"][:1], [None])
            self.assertTrue(resp.json()["error"])
            self.assertEqual(client.get("/view").status_code, 200)


class TestStopTask(unittest.IsolatedAsyncioTestCase):
    async def test_failed_task_outcome_is_collected(self):
        async def failing():
            raise RuntimeError("send failed")

        task = asyncio.create_task(failing())
        await asyncio.sleep(0)
        self.assertTrue(task.done())

        await _stop_task(task)

        self.assertIsInstance(task.exception(), RuntimeError)

    async def test_running_task_is_cancelled(self):
        task = asyncio.create_task(asyncio.sleep(3600))

        await _stop_task(task)

        self.assertTrue(task.cancelled())


class TestApiLifecycle(unittest.TestCase):
    def test_startup_polls_and_shutdown_closes_providers(self):
        provider = FakeMarketProvider(prices={"bitcoin": 64000.0}, candles={"bitcoin": [candle(200), candle(100)]})
        search = FakeSearchProvider()
        dashboard = Dashboard(provider, search, poll_interval_s=3600)

        with TestClient(create_app(dashboard)) as client:
            for _ in range(50):
                series = client.get("/series/bitcoin").json()
                history = client.get("/history/bitcoin").json()
                if series["values"] and history["history"]["status"] == "available":
                    break

            self.assertEqual(series["values"], [64000.0])
            self.assertFalse(series["error"])
            self.assertEqual([r["timestamp"] for r in history["history"]["rows"]], [100, 200])

        self.assertTrue(provider.closed)
        self.assertTrue(search.closed)


if __name__ == "__main__":
    unittest.main()
