"""Create recipient-addressed notifications as a side effect of an action."""

from __future__ import annotations

import logging

from tourhub.application.ports import NotificationStore
from tourhub.domain.entities import NewNotification, NotificationRecord

logger = logging.getLogger(__name__)


class NotificationEmitter:
    """Insert unread notifications without letting failures reach the caller.

    There is no de-duplication: every call inserts a new record.
    """

    def __init__(self, store: NotificationStore) -> None:
        self._store = store

    async def send_notification(
        self,
        recipient_id: str | None,
        title: str,
        message: str,
        *,
        sender_id: str | None = None,
        related_type: str | None = None,
        related_id: str | None = None,
        action_url: str | None = None,
    ) -> NotificationRecord | None:
        """Insert a notification for ``recipient_id``.

        Returns the stored record, or ``None`` when the recipient is missing or
        the store rejected the insert.
        """

        if not recipient_id:
            logger.warning("Skipping notification '%s': no recipient given", title)
            return None

        notification = NewNotification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            title=title,
            message=message,
            related_type=related_type,
            related_id=related_id,
            action_url=action_url,
        )
        try:
            return await self._store.insert(notification)
        except Exception:
            logger.exception(
                "Failed to send notification '%s' to recipient %s", title, recipient_id
            )
            return None


__all__ = ["NotificationEmitter"]
