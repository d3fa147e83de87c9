from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Set

from coindash.config import MAX_SUGGESTIONS
from coindash.events import TOPIC_SEARCH, EventBus
from coindash.models.market import NOT_FOUND, Suggestion
from coindash.providers.base import CoinSearchProvider

log = logging.getLogger("search")


class SearchEngine:
    """
    Typeahead state: current query + suggestion list.

    set_query():
      - same query as before -> no-op
      - empty query -> suggestions cleared synchronously, no request
      - otherwise -> one background search; its result is applied only if
        the query is still current when it completes
    """

    def __init__(self, provider: CoinSearchProvider, bus: Optional[EventBus] = None) -> None:
        self.provider = provider
        self.bus = bus
        self.query: str = ""
        self.suggestions: List[Suggestion] = []
        self._inflight: Set[asyncio.Task] = set()

    def set_query(self, query: str) -> Optional[asyncio.Task]:
        if query == self.query:
            return None
        self.query = query

        if not query:
            self._set_suggestions([])
            return None

        task = asyncio.create_task(self.run_search(query))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    def clear(self) -> None:
        self.query = ""
        self._set_suggestions([])

    async def wait_idle(self) -> None:
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def run_search(self, query: str) -> List[Suggestion]:
        try:
            coins = await self.provider.search_coins(query)
        except Exception as e:
            log.error("Coin search failed query=%r error=%s", query, repr(e))
            coins = []

        if coins:
            results = [Suggestion(coin=c) for c in coins[:MAX_SUGGESTIONS]]
        else:
            results = [NOT_FOUND]

        if query != self.query:
            log.debug("Dropping stale search results query=%r current=%r", query, self.query)
            return results

        self._set_suggestions(results)
        return results

    def _set_suggestions(self, suggestions: List[Suggestion]) -> None:
        self.suggestions = suggestions
        if self.bus is not None:
            self.bus.publish(TOPIC_SEARCH, self.query)
