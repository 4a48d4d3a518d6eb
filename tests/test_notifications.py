"""
Tests for the realtime hub and the inbox unread counter.
"""

import asyncio
import pytest
import uuid

from townwrent.services.notifications import NotificationHub, InboxState


def _message(is_read=False, message_id=None):
    return {"id": message_id or str(uuid.uuid4()), "message": "Hello", "is_read": is_read}


class TestNotificationHub:

    async def test_publish_only_reaches_matching_receiver(self):
        hub = NotificationHub()
        alice, bob = uuid.uuid4(), uuid.uuid4()
        alice_feed = hub.subscribe(alice)
        bob_feed = hub.subscribe(bob)

        delivered = hub.publish(alice, _message(message_id="m1"))

        assert delivered == 1
        event = await alice_feed.get(timeout=1)
        assert event == {"event": "INSERT", "record": {"id": "m1", "message": "Hello", "is_read": False}}
        with pytest.raises(asyncio.TimeoutError):
            await bob_feed.get(timeout=0.05)

    async def test_events_arrive_in_publish_order(self):
        hub = NotificationHub()
        receiver = uuid.uuid4()
        feed = hub.subscribe(receiver)

        for i in range(3):
            hub.publish(receiver, _message(message_id=f"m{i}"))

        assert [(await feed.get(timeout=1))["record"]["id"] for _ in range(3)] == ["m0", "m1", "m2"]

    def test_unsubscribe(self):
        hub = NotificationHub()
        receiver = uuid.uuid4()
        first = hub.subscribe(receiver)
        second = hub.subscribe(receiver)
        assert hub.subscriber_count(receiver) == 2

        hub.unsubscribe(first)
        assert hub.publish(receiver, _message()) == 1

        hub.unsubscribe(second)
        hub.unsubscribe(second)
        assert hub.subscriber_count() == 0
        assert hub.publish(receiver, _message()) == 0


class TestInboxState:

    def test_load_counts_unread(self):
        state = InboxState()
        state.load([_message(), _message(is_read=True), _message()])

        assert state.unread_count == 2

    def test_insert_prepends_and_increments(self):
        state = InboxState()
        state.load([_message(message_id="old", is_read=True)])

        state.on_insert(_message(message_id="new"))

        assert [m["id"] for m in state.messages] == ["new", "old"]
        assert state.unread_count == 1

    def test_mark_read_decrements_exactly_once(self):
        state = InboxState()
        state.load([_message(message_id="a"), _message(message_id="b"), _message(message_id="c", is_read=True)])

        assert state.mark_read("a") is True
        assert state.unread_count == 1
        assert state.mark_read("a") is False
        assert state.mark_read("c") is False
        assert state.mark_read("missing") is False
        assert state.unread_count == 1
        assert state.snapshot()["unread_count"] == 1
