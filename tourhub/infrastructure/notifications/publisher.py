"""Utility helpers to push notification changes to realtime subscribers."""

from __future__ import annotations

import logging
from typing import Any

from tourhub.domain.entities import NotificationChange, NotificationRecord
from tourhub.utils import isoformat_or_none

from .manager import NotificationChangeFeed

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Hand committed changes to the change feed.

    Must be called on the event loop that owns the feed's subscriptions.
    """

    def __init__(self, feed: NotificationChangeFeed) -> None:
        self._feed = feed

    @property
    def feed(self) -> NotificationChangeFeed:
        return self._feed

    def dispatch(self, change: NotificationChange) -> int:
        """Publish ``change`` and return how many subscribers accepted it."""

        delivered = self._feed.publish(change)
        logger.debug(
            "Notification %s %s delivered to %d subscriber(s) of %s",
            change.record.id,
            change.kind.value,
            delivered,
            change.recipient_id,
        )
        return delivered


def serialize_notification(notification: NotificationRecord) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "recipient_id": notification.recipient_id,
        "sender_id": notification.sender_id,
        "title": notification.title,
        "message": notification.message,
        "status": notification.status.value,
        "related_type": notification.related_type,
        "related_id": notification.related_id,
        "action_url": notification.action_url,
        "created_at": isoformat_or_none(notification.created_at),
    }


__all__ = ["NotificationPublisher", "serialize_notification"]
