"""ORM models used by the application infrastructure."""

from .activity_log import ActivityLogModel
from .notification import NotificationModel

__all__ = [
    "ActivityLogModel",
    "NotificationModel",
]
