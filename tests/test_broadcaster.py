"""Tests for tinydocs.reactive.broadcaster — reload fan-out."""

from __future__ import annotations

import asyncio

import pytest

from tinydocs.reactive.broadcaster import (
    CLIENT_QUEUE_SIZE,
    ERROR_EVENT,
    RELOAD_EVENT,
    ReloadBroadcaster,
    ReloadSubscription,
)


class TestReloadSubscription:
    """Verify ReloadSubscription dataclass."""

    def test_frozen(self) -> None:
        sub = ReloadSubscription()
        with pytest.raises(AttributeError):
            sub.client_id = "other"  # type: ignore[misc]

    def test_unique_ids(self) -> None:
        assert ReloadSubscription().client_id != ReloadSubscription().client_id

    def test_has_bounded_queue(self) -> None:
        sub = ReloadSubscription()
        assert isinstance(sub.queue, asyncio.Queue)
        assert sub.queue.maxsize == CLIENT_QUEUE_SIZE


class TestReloadBroadcaster:
    """subscribe / unsubscribe / publish."""

    def test_publish_without_subscribers_is_noop(self) -> None:
        assert ReloadBroadcaster().publish() == 0

    def test_subscribe_and_unsubscribe(self) -> None:
        b = ReloadBroadcaster()
        sub = b.subscribe()
        assert b.subscriber_count == 1
        b.unsubscribe(sub)
        assert b.subscriber_count == 0

    def test_unsubscribe_twice_is_safe(self) -> None:
        b = ReloadBroadcaster()
        sub = b.subscribe()
        b.unsubscribe(sub)
        b.unsubscribe(sub)
        assert b.subscriber_count == 0

    def test_publish_reaches_every_subscriber(self) -> None:
        b = ReloadBroadcaster()
        subs = [b.subscribe() for _ in range(3)]
        assert b.publish() == 3
        for sub in subs:
            event = sub.queue.get_nowait()
            assert event.event == RELOAD_EVENT
            assert event.data == "reload"

    def test_publish_error_event(self) -> None:
        b = ReloadBroadcaster()
        sub = b.subscribe()
        b.publish(ERROR_EVENT, '{"message": "boom"}')
        event = sub.queue.get_nowait()
        assert event.event == "tinydocs:error"
        assert "boom" in event.data

    def test_full_queue_skips_client(self) -> None:
        b = ReloadBroadcaster()
        slow = b.subscribe()
        for _ in range(CLIENT_QUEUE_SIZE):
            b.publish()
        fast = b.subscribe()
        assert b.publish() == 1
        assert slow.queue.qsize() == CLIENT_QUEUE_SIZE
        assert fast.queue.qsize() == 1


class TestClientGenerator:
    """Tests for the async generator used by EventStream."""

    @pytest.mark.asyncio
    async def test_yields_published_events(self) -> None:
        b = ReloadBroadcaster()
        sub = b.subscribe()
        b.publish()

        gen = b.client_generator(sub)
        event = await gen.__anext__()
        assert event.event == RELOAD_EVENT

    @pytest.mark.asyncio
    async def test_cancellation_stops_generator(self) -> None:
        b = ReloadBroadcaster()
        sub = b.subscribe()
        gen = b.client_generator(sub)

        task = asyncio.create_task(gen.__anext__())
        await asyncio.sleep(0.01)
        task.cancel()

        # Generator either raises CancelledError or StopAsyncIteration
        # depending on timing — both indicate correct shutdown.
        with pytest.raises((asyncio.CancelledError, StopAsyncIteration)):
            await task
