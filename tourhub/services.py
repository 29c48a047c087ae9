"""Composition root for the activity and notification pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session, sessionmaker

from tourhub.application.use_cases import ActivityLogger, NotificationEmitter
from tourhub.infrastructure.notifications import NotificationChangeFeed, NotificationPublisher
from tourhub.infrastructure.stores import SqlActivityStore, SqlNotificationStore


@dataclass
class Services:
    """Process-wide service instances shared by every request."""

    activity_store: SqlActivityStore
    notification_store: SqlNotificationStore
    change_feed: NotificationChangeFeed
    activity_logger: ActivityLogger
    notification_emitter: NotificationEmitter
    notification_cache_limit: int = 50


def build_services(
    session_factory: sessionmaker[Session],
    *,
    realtime_buffer_size: int = 100,
    notification_cache_limit: int = 50,
) -> Services:
    """Wire stores, the change feed and the services that use them."""

    feed = NotificationChangeFeed(buffer_size=realtime_buffer_size)
    activity_store = SqlActivityStore(session_factory)
    notification_store = SqlNotificationStore(session_factory, NotificationPublisher(feed))
    return Services(
        activity_store=activity_store,
        notification_store=notification_store,
        change_feed=feed,
        activity_logger=ActivityLogger(activity_store),
        notification_emitter=NotificationEmitter(notification_store),
        notification_cache_limit=notification_cache_limit,
    )


__all__ = ["Services", "build_services"]
