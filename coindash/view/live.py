from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Set

from coindash.dashboard.controller import Dashboard
from coindash.models.view import DashboardView
from coindash.view.render import render_view

log = logging.getLogger("live_view")


class LiveView:
    """
    Rendering surface bound to the dashboard's event bus.

    On every published change the view is recomputed with render_view() and
    offered to each connected client queue. Queues hold only the newest view;
    a slow client skips intermediate renders.
    """

    def __init__(self, dashboard: Dashboard) -> None:
        self.dashboard = dashboard
        self.current: DashboardView = render_view(dashboard)
        self.renders = 0
        self._clients: Set[asyncio.Queue] = set()
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.dashboard.bus.subscribe(self._on_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def connect(self) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue(maxsize=1)
        q.put_nowait(self.current)
        self._clients.add(q)
        return q

    def disconnect(self, q: asyncio.Queue) -> None:
        self._clients.discard(q)

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def _on_change(self, topic: str, payload: Any) -> None:
        self.current = render_view(self.dashboard)
        self.renders += 1
        log.debug("View re-rendered topic=%s payload=%s clients=%d", topic, payload, len(self._clients))

        for q in list(self._clients):
            if q.full():
                try:
                    q.get_nowait()
                except asyncio.QueueEmpty:
                    pass
            q.put_nowait(self.current)
