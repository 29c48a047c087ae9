"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from tourhub.domain.entities import NewNotification, NotificationRecord, NotificationStatus
from tourhub.infrastructure.models import NotificationModel
from tourhub.utils import ensure_app_timezone, now_in_app_timezone


class NotificationRepository:
    """Provide the insert, select and status update operations for notifications."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_recipient(
        self,
        recipient_id: str,
        *,
        limit: int | None = 50,
    ) -> Sequence[NotificationRecord]:
        query = self.session.query(NotificationModel)
        query = query.filter(NotificationModel.recipient_id == recipient_id)
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_unread(self, recipient_id: str) -> int:
        return (
            self.session.query(func.count(NotificationModel.id))
            .filter(NotificationModel.recipient_id == recipient_id)
            .filter(NotificationModel.status == NotificationStatus.UNREAD.value)
            .scalar()
            or 0
        )

    def get(self, notification_id: int) -> NotificationRecord | None:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return None
        return self._to_entity(model)

    def create(self, notification: NewNotification) -> NotificationRecord:
        model = NotificationModel(
            recipient_id=notification.recipient_id,
            sender_id=notification.sender_id,
            title=notification.title,
            message=notification.message,
            status=NotificationStatus.UNREAD.value,
            related_type=notification.related_type,
            related_id=notification.related_id,
            action_url=notification.action_url,
            created_at=now_in_app_timezone(),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_as_read(
        self, notification_ids: Iterable[int], *, recipient_id: str
    ) -> list[NotificationRecord]:
        """Flip the unread notifications among ``notification_ids`` to read.

        Only rows owned by ``recipient_id`` are touched. Returns the records
        that actually changed; already read rows are left alone.
        """

        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return []
        return self._mark_read(
            NotificationModel.id.in_(ids),
            NotificationModel.recipient_id == recipient_id,
        )

    def mark_all_as_read(self, recipient_id: str) -> list[NotificationRecord]:
        return self._mark_read(NotificationModel.recipient_id == recipient_id)

    def _mark_read(self, *criteria) -> list[NotificationRecord]:
        models = (
            self.session.query(NotificationModel)
            .filter(*criteria)
            .filter(NotificationModel.status == NotificationStatus.UNREAD.value)
            .order_by(NotificationModel.id)
            .all()
        )
        if not models:
            return []
        ids = [model.id for model in models]
        self.session.query(NotificationModel).filter(
            NotificationModel.id.in_(ids),
            NotificationModel.status == NotificationStatus.UNREAD.value,
        ).update(
            {NotificationModel.status: NotificationStatus.READ.value},
            synchronize_session=False,
        )
        self.session.commit()
        return [self._to_entity(model).mark_read() for model in models]

    @staticmethod
    def _to_entity(model: NotificationModel) -> NotificationRecord:
        return NotificationRecord(
            id=model.id,
            recipient_id=model.recipient_id,
            sender_id=model.sender_id,
            title=model.title,
            message=model.message,
            status=NotificationStatus(model.status),
            related_type=model.related_type,
            related_id=model.related_id,
            action_url=model.action_url,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
