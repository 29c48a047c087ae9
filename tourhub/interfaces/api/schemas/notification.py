"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tourhub.domain.entities import NotificationStatus


class NotificationCreate(BaseModel):
    """Payload used by administrators to send a notification."""

    recipient_id: str = Field(..., min_length=1, description="User meant to see the notification")
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    related_type: str | None = Field(default=None, max_length=50)
    related_id: str | None = Field(default=None, max_length=64)
    action_url: str | None = Field(default=None, max_length=500)


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[int] = Field(..., min_length=1, description="Notification identifiers")

    def unique_ids(self) -> list[int]:
        """Return the list of identifiers without duplicates preserving order."""

        return list(dict.fromkeys(self.ids))


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient_id: str
    sender_id: str | None = None
    title: str
    message: str
    status: NotificationStatus
    related_type: str | None = None
    related_id: str | None = None
    action_url: str | None = None
    created_at: datetime


class UnreadCountRead(BaseModel):
    unread_count: int


class MarkReadResult(BaseModel):
    updated: list[NotificationRead] = Field(default_factory=list)


__all__ = [
    "NotificationCreate",
    "NotificationMarkReadRequest",
    "NotificationRead",
    "UnreadCountRead",
    "MarkReadResult",
]
