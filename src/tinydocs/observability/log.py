"""Event log — bounded, thread-safe store of build and preview events.

Watcher, build workers, and request handlers append from different
threads; every method takes the lock.
"""

import threading
from collections import Counter, deque
from typing import Any

from tinydocs.observability.events import StackEvent

# Attributes that identify the file an event is about, in lookup order.
_PATH_ATTRS = ("path", "source", "trigger_path")


def _event_path(event: object) -> str:
    for attr in _PATH_ATTRS:
        value = getattr(event, attr, None)
        if value:
            return str(value)
    return ""


class EventLog:
    """Ring buffer of events.  The oldest events fall off once full.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 5_000) -> None:
        self._max_events = max_events
        self._events: deque[StackEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: StackEvent) -> None:
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | tuple[type, ...] | None = None,
        path: str | None = None,
        limit: int = 100,
    ) -> list[StackEvent]:
        """Return matching events, newest first.

        Args:
            event_type: Only events of this type (or types).
            path: Only events whose file path contains this substring.
            limit: Maximum number of events returned.

        """
        with self._lock:
            snapshot = list(self._events)

        matches: list[StackEvent] = []
        for event in reversed(snapshot):
            if event_type is not None and not isinstance(event, event_type):
                continue
            if path is not None and path not in _event_path(event):
                continue
            matches.append(event)
            if len(matches) >= limit:
                break
        return matches

    def latest(self, event_type: type) -> StackEvent | None:
        """Most recent event of *event_type*, if any."""
        found = self.query(event_type=event_type, limit=1)
        return found[0] if found else None

    def recent(self, n: int = 20) -> list[StackEvent]:
        """The *n* most recent events, oldest first."""
        with self._lock:
            return list(self._events)[-n:]

    def clear(self) -> int:
        """Drop every event and return how many were dropped."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Counts of stored events by type."""
        with self._lock:
            by_type = Counter(type(e).__name__ for e in self._events)
            total = len(self._events)
        return {
            "total": total,
            "max_events": self._max_events,
            "by_type": dict(by_type),
        }
