"""Repository implementations for infrastructure layer."""

from .activity_log_repository import ActivityLogRepository
from .notification_repository import NotificationRepository

__all__ = [
    "ActivityLogRepository",
    "NotificationRepository",
]
