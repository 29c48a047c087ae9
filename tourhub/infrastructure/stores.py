"""Asynchronous stores backed by the SQLAlchemy repositories.

Repository calls are blocking, so every operation runs in an anyio worker
thread with its own session. Notification writes are serialised so that each
one is published to the change feed before the next one commits.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

import anyio
from anyio import to_thread
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tourhub.domain.entities import (
    ActivityEntry,
    ActivityFilter,
    ActivityRecord,
    NewNotification,
    NotificationChange,
    NotificationRecord,
)
from tourhub.domain.errors import (
    NotificationNotFoundError,
    NotificationPermissionError,
    StoreReadError,
    StoreWriteError,
)
from tourhub.infrastructure.notifications import (
    NotificationPublisher,
    NotificationSubscription,
)
from tourhub.infrastructure.repositories import (
    ActivityLogRepository,
    NotificationRepository,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
SessionFactory = Callable[[], Session]


class _SessionRunner:
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def _read(self, operation: Callable[[Session], T]) -> T:
        try:
            return await to_thread.run_sync(self._run, operation)
        except SQLAlchemyError as exc:
            raise StoreReadError(str(exc)) from exc

    async def _write(self, operation: Callable[[Session], T]) -> T:
        try:
            return await to_thread.run_sync(self._run, operation)
        except SQLAlchemyError as exc:
            raise StoreWriteError(str(exc)) from exc

    def _run(self, operation: Callable[[Session], T]) -> T:
        session = self._session_factory()
        try:
            return operation(session)
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            session.close()


class SqlActivityStore(_SessionRunner):
    """Append-only store for :class:`ActivityRecord` entries."""

    async def insert(self, entry: ActivityEntry) -> ActivityRecord:
        return await self._write(lambda session: ActivityLogRepository(session).create(entry))

    async def select(self, filters: ActivityFilter | None = None) -> list[ActivityRecord]:
        return await self._read(lambda session: ActivityLogRepository(session).list(filters))


class SqlNotificationStore(_SessionRunner):
    """Notification store whose committed writes fan out through ``publisher``."""

    def __init__(
        self, session_factory: SessionFactory, publisher: NotificationPublisher
    ) -> None:
        super().__init__(session_factory)
        self._publisher = publisher
        self._write_lock = anyio.Lock()

    async def insert(self, notification: NewNotification) -> NotificationRecord:
        async with self._write_lock:
            saved = await self._write(
                lambda session: NotificationRepository(session).create(notification)
            )
            self._publisher.dispatch(NotificationChange.inserted(saved))
        return saved

    async def select(
        self, recipient_id: str, *, limit: int | None = 50
    ) -> Sequence[NotificationRecord]:
        return await self._read(
            lambda session: NotificationRepository(session).list_for_recipient(
                recipient_id, limit=limit
            )
        )

    async def count_unread(self, recipient_id: str) -> int:
        return await self._read(
            lambda session: NotificationRepository(session).count_unread(recipient_id)
        )

    async def mark_read(self, notification_id: int, *, recipient_id: str) -> NotificationRecord:
        """Mark a single notification as read on behalf of ``recipient_id``.

        Raises :class:`NotificationNotFoundError` or
        :class:`NotificationPermissionError` when the record is missing or owned
        by someone else. Marking an already read record returns it unchanged.
        """

        def operation(session: Session) -> tuple[NotificationRecord, list[NotificationRecord]]:
            repository = NotificationRepository(session)
            current = repository.get(notification_id)
            if current is None:
                raise NotificationNotFoundError(f"Notification {notification_id} not found")
            if current.recipient_id != recipient_id:
                raise NotificationPermissionError(
                    f"Notification {notification_id} does not belong to {recipient_id}"
                )
            changed = repository.mark_as_read([notification_id], recipient_id=recipient_id)
            return current.mark_read(), changed

        async with self._write_lock:
            record, changed = await self._write(operation)
            self._publish_updates(changed)
        return record

    async def mark_many_read(
        self, notification_ids: Sequence[int], *, recipient_id: str
    ) -> list[NotificationRecord]:
        """Mark the given ids read, silently skipping ones the recipient does not own."""

        async with self._write_lock:
            changed = await self._write(
                lambda session: NotificationRepository(session).mark_as_read(
                    notification_ids, recipient_id=recipient_id
                )
            )
            self._publish_updates(changed)
        return changed

    async def mark_all_read(self, recipient_id: str) -> list[NotificationRecord]:
        async with self._write_lock:
            changed = await self._write(
                lambda session: NotificationRepository(session).mark_all_as_read(recipient_id)
            )
            self._publish_updates(changed)
        return changed

    def subscribe(self, recipient_id: str) -> NotificationSubscription:
        return self._publisher.feed.subscribe(recipient_id)

    def _publish_updates(self, records: Sequence[NotificationRecord]) -> None:
        for record in records:
            self._publisher.dispatch(NotificationChange.updated(record))
        if records:
            logger.debug("Published %d notification status updates", len(records))


__all__ = ["SqlActivityStore", "SqlNotificationStore"]
