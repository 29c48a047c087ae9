"""Aggregate application use cases."""

from .activity_logger import ActivityLogger
from .notifications import NotificationCache, NotificationEmitter, NotificationSession

__all__ = [
    "ActivityLogger",
    "NotificationCache",
    "NotificationEmitter",
    "NotificationSession",
]
