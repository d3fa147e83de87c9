from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from coindash.config import SEARCH_URL
from coindash.exceptions import UnexpectedResponseError
from coindash.models.market import Coin
from coindash.providers.base import CoinSearchProvider

log = logging.getLogger("coingecko_provider")


class CoinGeckoSearch(CoinSearchProvider):
    """
    CoinGecko search (Coinbase has no public search endpoint).

      GET api.coingecko.com/api/v3/search?query=...
      -> {"coins": [{"id": ..., "name": ..., "symbol": ...}, ...], ...}
    """

    def __init__(
        self,
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(timeout=timeout_s, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search_coins(self, query: str) -> List[Coin]:
        resp = await self._client.get(SEARCH_URL, params={"query": query})
        resp.raise_for_status()

        try:
            data = resp.json()
        except ValueError as e:
            raise UnexpectedResponseError("search body is not JSON") from e

        if not isinstance(data, dict) or not isinstance(data.get("coins"), list):
            raise UnexpectedResponseError("search payload has no coins array")

        out: List[Coin] = []
        for row in data["coins"]:
            if not isinstance(row, dict):
                continue

            coin_id = row.get("id")
            name = row.get("name")
            symbol = row.get("symbol")
            if not coin_id or not name or not symbol:
                log.warning("Skipping incomplete search row=%s", row)
                continue

            out.append(Coin(id=str(coin_id), name=str(name), ticker=str(symbol).upper()))
        return out
