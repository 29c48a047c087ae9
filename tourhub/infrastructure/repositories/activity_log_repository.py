"""Persistence layer for activity log records."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy.orm import Session

from tourhub.domain.entities import (
    ActivityEntry,
    ActivityFilter,
    ActivityRecord,
    ActivityType,
    build_activity_metadata,
)
from tourhub.infrastructure.models import ActivityLogModel
from tourhub.utils import ensure_app_timezone, now_in_app_timezone


class ActivityLogRepository:
    """Append and query :class:`ActivityRecord` entries.

    Records are never updated or deleted, so the repository exposes no
    mutation beyond :meth:`create`.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, entry: ActivityEntry) -> ActivityRecord:
        model = ActivityLogModel(
            user_id=entry.user_id,
            activity_type=entry.activity_type.value,
            description=entry.description,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            details=entry.metadata.to_dict(),
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            created_at=now_in_app_timezone(),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list(self, filters: ActivityFilter | None = None) -> list[ActivityRecord]:
        """Return records matching ``filters`` ordered newest first."""

        filters = filters or ActivityFilter()
        query = self.session.query(ActivityLogModel)
        if filters.user_id is not None:
            query = query.filter(ActivityLogModel.user_id == filters.user_id)
        if filters.activity_type is not None:
            query = query.filter(
                ActivityLogModel.activity_type == ActivityType(filters.activity_type).value
            )
        if filters.entity_type is not None:
            query = query.filter(ActivityLogModel.entity_type == filters.entity_type)
        if filters.entity_id is not None:
            query = query.filter(ActivityLogModel.entity_id == filters.entity_id)
        if filters.start_date is not None:
            query = query.filter(ActivityLogModel.created_at >= filters.start_date)
        if filters.end_date is not None:
            query = query.filter(ActivityLogModel.created_at <= filters.end_date)

        query = query.order_by(ActivityLogModel.created_at.desc(), ActivityLogModel.id.desc())
        if filters.limit is not None:
            query = query.limit(filters.limit)

        models: Iterable[ActivityLogModel] = query.all()
        return [self._to_entity(model) for model in models]

    @staticmethod
    def _to_entity(model: ActivityLogModel) -> ActivityRecord:
        activity_type = ActivityType(model.activity_type)
        return ActivityRecord(
            id=model.id,
            activity_type=activity_type,
            description=model.description,
            metadata=build_activity_metadata(activity_type, model.details or {}),
            created_at=ensure_app_timezone(model.created_at),
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            user_id=model.user_id,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
        )


__all__ = ["ActivityLogRepository"]
