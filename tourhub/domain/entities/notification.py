"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class NotificationStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"


@dataclass(frozen=True)
class NewNotification:
    """Notification content before the store assigns an id."""

    recipient_id: str
    title: str
    message: str
    sender_id: str | None = None
    related_type: str | None = None
    related_id: str | None = None
    action_url: str | None = None


@dataclass(frozen=True)
class NotificationRecord:
    """Message addressed to a single recipient.

    ``status`` is the only field that changes after creation and it only ever
    moves from unread to read.
    """

    id: int
    recipient_id: str
    title: str
    message: str
    status: NotificationStatus
    created_at: datetime
    sender_id: str | None = None
    related_type: str | None = None
    related_id: str | None = None
    action_url: str | None = None

    @property
    def is_unread(self) -> bool:
        return self.status is NotificationStatus.UNREAD

    def mark_read(self) -> NotificationRecord:
        """Return the read version of this record (``self`` when already read)."""

        if not self.is_unread:
            return self
        return replace(self, status=NotificationStatus.READ)


class ChangeKind(str, Enum):
    INSERT = "insert"
    UPDATE = "update"


@dataclass(frozen=True)
class NotificationChange:
    """A committed insert or update pushed to realtime subscribers."""

    kind: ChangeKind
    record: NotificationRecord

    @property
    def recipient_id(self) -> str:
        return self.record.recipient_id

    @classmethod
    def inserted(cls, record: NotificationRecord) -> NotificationChange:
        return cls(kind=ChangeKind.INSERT, record=record)

    @classmethod
    def updated(cls, record: NotificationRecord) -> NotificationChange:
        return cls(kind=ChangeKind.UPDATE, record=record)


__all__ = [
    "NotificationStatus",
    "NewNotification",
    "NotificationRecord",
    "ChangeKind",
    "NotificationChange",
]
