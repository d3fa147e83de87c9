from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Optional

from coindash.config import MAX_DATA_POINTS
from coindash.events import TOPIC_SERIES, EventBus
from coindash.models.market import SeriesEntry


def time_label() -> str:
    """Wall-clock label for a sample (local time, HH:MM:SS)."""
    return datetime.now().strftime("%H:%M:%S")


@dataclass
class SeriesStore:
    """
    In-memory live price series, one bounded window per coin.

    entries[coin_id] -> SeriesEntry(labels, values, error)
      - labels[i] and values[i] come from the same append
      - both lists hold at most max_points items, oldest evicted first
    """
    max_points: int = MAX_DATA_POINTS
    bus: Optional[EventBus] = None
    label_fn: Callable[[], str] = time_label
    entries: Dict[str, SeriesEntry] = field(default_factory=dict)

    def append(self, coin_id: str, value: Optional[float], error: bool = False) -> SeriesEntry:
        """
        Append one sample for coin_id and trim to the window.
        An errored sample is always stored as None.
        """
        prev = self.entries.get(coin_id) or SeriesEntry()
        label = self.label_fn()
        stored = None if error else value

        # New lists per append; readers may still hold the previous entry.
        labels = (prev.labels + [label])[-self.max_points:]
        values = (prev.values + [stored])[-self.max_points:]

        entry = SeriesEntry(labels=labels, values=values, error=error)
        self.entries[coin_id] = entry

        if self.bus is not None:
            self.bus.publish(TOPIC_SERIES, coin_id)
        return entry

    def get(self, coin_id: str) -> Optional[SeriesEntry]:
        return self.entries.get(coin_id)

