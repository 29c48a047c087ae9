"""Per-recipient subscription management for notification changes."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import DefaultDict, Set

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from tourhub.domain.entities import NotificationChange
from tourhub.domain.errors import SubscriptionError

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 100


class NotificationSubscription:
    """Cancellable stream of changes addressed to a single recipient.

    Iterate it with ``async for`` to receive changes in commit order. Closing
    the subscription (directly or by leaving ``async with``) detaches it from
    the feed and ends the iteration.
    """

    def __init__(
        self, feed: NotificationChangeFeed, recipient_id: str, buffer_size: int
    ) -> None:
        self.recipient_id = recipient_id
        self._feed = feed
        self._closed = False
        send, receive = anyio.create_memory_object_stream(max_buffer_size=buffer_size)
        self._send: MemoryObjectSendStream[NotificationChange] = send
        self._receive: MemoryObjectReceiveStream[NotificationChange] = receive

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, change: NotificationChange) -> bool:
        """Queue ``change`` without waiting; return ``False`` when it was dropped."""

        if self._closed:
            return False
        try:
            self._send.send_nowait(change)
        except anyio.WouldBlock:
            logger.warning(
                "Dropping %s of notification %s for recipient %s: subscriber is not keeping up",
                change.kind.value,
                change.record.id,
                self.recipient_id,
            )
            return False
        except (anyio.BrokenResourceError, anyio.ClosedResourceError):
            self.close()
            return False
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed.unsubscribe(self)
        self._send.close()
        self._receive.close()

    unsubscribe = close

    def __aiter__(self) -> NotificationSubscription:
        return self

    async def __anext__(self) -> NotificationChange:
        try:
            return await self._receive.receive()
        except (anyio.EndOfStream, anyio.ClosedResourceError):
            raise StopAsyncIteration from None

    async def __aenter__(self) -> NotificationSubscription:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class NotificationChangeFeed:
    """Fan committed notification changes out to live subscribers.

    Delivery is at-most-once: recipients without a live subscription never see
    the change through the feed and must rehydrate from the store.
    """

    def __init__(self, *, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        self._buffer_size = buffer_size
        self._closed = False
        self._subscriptions: DefaultDict[str, Set[NotificationSubscription]] = defaultdict(set)

    def subscribe(
        self, recipient_id: str, *, buffer_size: int | None = None
    ) -> NotificationSubscription:
        """Register and return a new subscription scoped to ``recipient_id``.

        Raises :class:`SubscriptionError` once the feed has been closed.
        """

        if self._closed:
            raise SubscriptionError("Notification change feed is closed")
        subscription = NotificationSubscription(
            self, recipient_id, buffer_size or self._buffer_size
        )
        self._subscriptions[recipient_id].add(subscription)
        logger.debug("Recipient %s subscribed to notification changes", recipient_id)
        return subscription

    def unsubscribe(self, subscription: NotificationSubscription) -> None:
        """Remove ``subscription`` from the pool of its recipient."""

        subscriptions = self._subscriptions.get(subscription.recipient_id)
        if subscriptions is None:
            return
        subscriptions.discard(subscription)
        if not subscriptions:
            self._subscriptions.pop(subscription.recipient_id, None)

    def publish(self, change: NotificationChange) -> int:
        """Deliver ``change`` to every live subscriber of its recipient.

        Returns the number of subscribers that accepted the change.
        """

        subscriptions = list(self._subscriptions.get(change.recipient_id, set()))
        return sum(1 for subscription in subscriptions if subscription.deliver(change))

    def subscriber_count(self, recipient_id: str) -> int:
        return len(self._subscriptions.get(recipient_id, ()))

    def close(self) -> None:
        """End every live subscription and refuse new ones."""

        self._closed = True
        for subscriptions in list(self._subscriptions.values()):
            for subscription in list(subscriptions):
                subscription.close()


__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "NotificationChangeFeed",
    "NotificationSubscription",
]
