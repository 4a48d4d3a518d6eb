"""
In-process realtime feed for new messages.

The hub fans out message inserts to subscribers filtered by receiver. Each
subscription owns an unbounded queue; events arrive in publish order and
nothing is replayed to late subscribers.
"""

from typing import Any, Dict, List, Optional, Set
import asyncio
import logging
import uuid

logger = logging.getLogger(__name__)

INSERT = "INSERT"


class Subscription:
    def __init__(self, receiver_id: uuid.UUID):
        self.id = uuid.uuid4()
        self.receiver_id = receiver_id
        self.queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()

    async def get(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Wait for the next event.

        Raises:
            asyncio.TimeoutError: If a timeout is given and nothing arrives in time
        """
        if timeout is None:
            return await self.queue.get()
        return await asyncio.wait_for(self.queue.get(), timeout)

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, receiver_id={self.receiver_id})>"


class NotificationHub:
    """Publish/subscribe hub for message inserts."""

    def __init__(self):
        self._subscriptions: Dict[uuid.UUID, Set[Subscription]] = {}

    def subscribe(self, receiver_id: uuid.UUID) -> Subscription:
        subscription = Subscription(receiver_id)
        self._subscriptions.setdefault(receiver_id, set()).add(subscription)
        logger.debug(f"Subscribed {subscription}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get(subscription.receiver_id)
        if not subscribers:
            return
        subscribers.discard(subscription)
        if not subscribers:
            del self._subscriptions[subscription.receiver_id]
        logger.debug(f"Unsubscribed {subscription}")

    def subscriber_count(self, receiver_id: Optional[uuid.UUID] = None) -> int:
        if receiver_id is not None:
            return len(self._subscriptions.get(receiver_id, ()))
        return sum(len(s) for s in self._subscriptions.values())

    def publish(self, receiver_id: uuid.UUID, record: Dict[str, Any], event: str = INSERT) -> int:
        """
        Deliver an event to every subscription of the receiver.

        Returns:
            Number of subscriptions the event was queued for
        """
        subscribers = list(self._subscriptions.get(receiver_id, ()))
        for subscription in subscribers:
            subscription.queue.put_nowait({"event": event, "record": record})
        logger.debug(f"Published {event} for receiver {receiver_id} to {len(subscribers)} subscribers")
        return len(subscribers)


class InboxState:
    """
    Received messages plus the unread counter, kept in step with realtime inserts.
    Messages are dicts shaped like Message.to_dict().
    """

    def __init__(self):
        self.messages: List[Dict[str, Any]] = []
        self.unread_count = 0

    def load(self, messages: List[Dict[str, Any]]) -> None:
        """Replace the state with a freshly fetched inbox (newest first)."""
        self.messages = list(messages)
        self.unread_count = sum(1 for m in self.messages if not m.get("is_read"))

    def on_insert(self, message: Dict[str, Any]) -> None:
        self.messages.insert(0, message)
        if not message.get("is_read"):
            self.unread_count += 1

    def mark_read(self, message_id: str) -> bool:
        """
        Flag one message as read.

        Returns:
            True if the message was unread and the counter went down by one
        """
        for message in self.messages:
            if str(message.get("id")) == str(message_id):
                if message.get("is_read"):
                    return False
                message["is_read"] = True
                self.unread_count = max(self.unread_count - 1, 0)
                return True
        return False

    def snapshot(self) -> Dict[str, Any]:
        return {"messages": self.messages, "unread_count": self.unread_count}


# Shared by every request handled by this process
notification_hub = NotificationHub()
