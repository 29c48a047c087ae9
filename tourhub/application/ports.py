"""Store interfaces the use cases depend on."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from tourhub.domain.entities import (
    ActivityEntry,
    ActivityFilter,
    ActivityRecord,
    NewNotification,
    NotificationChange,
    NotificationRecord,
)


class ActivityStore(Protocol):
    async def insert(self, entry: ActivityEntry) -> ActivityRecord: ...

    async def select(self, filters: ActivityFilter | None = None) -> list[ActivityRecord]: ...


class ChangeStream(Protocol):
    """Async iterator of changes that can be released explicitly."""

    def __aiter__(self) -> ChangeStream: ...

    async def __anext__(self) -> NotificationChange: ...

    def close(self) -> None: ...


class NotificationStore(Protocol):
    async def insert(self, notification: NewNotification) -> NotificationRecord: ...

    async def select(
        self, recipient_id: str, *, limit: int | None = 50
    ) -> Sequence[NotificationRecord]: ...

    async def mark_read(
        self, notification_id: int, *, recipient_id: str
    ) -> NotificationRecord: ...

    async def mark_all_read(self, recipient_id: str) -> list[NotificationRecord]: ...

    def subscribe(self, recipient_id: str) -> ChangeStream: ...


__all__ = ["ActivityStore", "ChangeStream", "NotificationStore"]
