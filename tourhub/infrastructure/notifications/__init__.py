"""Realtime notification helpers for the infrastructure layer."""

from .manager import DEFAULT_BUFFER_SIZE, NotificationChangeFeed, NotificationSubscription
from .publisher import NotificationPublisher, serialize_notification

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "NotificationChangeFeed",
    "NotificationSubscription",
    "NotificationPublisher",
    "serialize_notification",
]
