"""Reload broadcaster — fans reload notifications out to preview tabs.

Every open preview tab holds one SSE connection.  Each connection gets its
own bounded queue; publishing puts one ``SSEEvent`` on every queue.

Thread Safety:
    The subscriber set is protected by a lock.  Queues are only touched
    from the server's event loop.

"""

from __future__ import annotations

import asyncio
import threading
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chirp import SSEEvent

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

RELOAD_EVENT = "reload"
ERROR_EVENT = "tinydocs:error"

# Pending events per client before further events are dropped for it.
CLIENT_QUEUE_SIZE = 16


def _client_queue() -> asyncio.Queue[SSEEvent]:
    return asyncio.Queue(maxsize=CLIENT_QUEUE_SIZE)


@dataclass(frozen=True, slots=True)
class ReloadSubscription:
    """A connected preview client.

    Attributes:
        client_id: Unique identifier for this connection.
        queue: Pending events for the client's SSE stream.

    """

    client_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    queue: asyncio.Queue[SSEEvent] = field(default_factory=_client_queue, compare=False, hash=False)


class ReloadBroadcaster:
    """Tracks preview clients and notifies all of them at once."""

    __slots__ = ("_lock", "_subscribers")

    def __init__(self) -> None:
        self._subscribers: set[ReloadSubscription] = set()
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> ReloadSubscription:
        """Register a new client and return its subscription."""
        sub = ReloadSubscription()
        with self._lock:
            self._subscribers.add(sub)
        return sub

    def unsubscribe(self, sub: ReloadSubscription) -> None:
        with self._lock:
            self._subscribers.discard(sub)

    def publish(self, event: str = RELOAD_EVENT, data: str = RELOAD_EVENT) -> int:
        """Send one event to every subscriber.

        A client whose queue is full misses this event.  With no
        subscribers this does nothing.

        Returns:
            Number of clients the event was queued for.

        """
        with self._lock:
            subscribers = tuple(self._subscribers)
        if not subscribers:
            return 0

        message = SSEEvent(data=data, event=event)
        count = 0
        for sub in subscribers:
            try:
                sub.queue.put_nowait(message)
                count += 1
            except asyncio.QueueFull:
                pass
        return count

    async def client_generator(self, sub: ReloadSubscription) -> AsyncIterator[SSEEvent]:
        """Yield events queued for *sub* until the client goes away.

        Swallows ``CancelledError`` and ``GeneratorExit`` raised by a client
        disconnect so they do not reach the event loop's exception handler.
        """
        try:
            while True:
                yield await sub.queue.get()
        except (asyncio.CancelledError, GeneratorExit):
            return
