"""Public helpers for emitting and tracking notifications."""

from .cache import DEFAULT_CACHE_LIMIT, NotificationCache, NotificationSession
from .emitter import NotificationEmitter

__all__ = [
    "DEFAULT_CACHE_LIMIT",
    "NotificationCache",
    "NotificationSession",
    "NotificationEmitter",
]
