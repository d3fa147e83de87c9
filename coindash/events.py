from __future__ import annotations

import logging
from typing import Any, Callable, List

log = logging.getLogger("events")

Listener = Callable[[str, Any], None]

# Topics published by the stores.
TOPIC_SERIES = "series"
TOPIC_HISTORY = "history"
TOPIC_COINS = "coins"
TOPIC_SEARCH = "search"


class EventBus:
    """
    In-process publish/subscribe.

    Stores call publish(topic, payload) after every state change; the
    rendering surface subscribes and recomputes the view from current state.
    Listeners run synchronously on the event loop thread.
    """

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, topic: str, payload: Any = None) -> None:
        for listener in list(self._listeners):
            try:
                listener(topic, payload)
            except Exception as e:
                # One broken subscriber must not stop the others.
                log.error("Listener failed topic=%s error=%s", topic, repr(e))

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

