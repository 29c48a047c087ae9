"""Routes for reporting and inspecting audited activity."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status

from tourhub.application.use_cases import ActivityLogger
from tourhub.domain.entities import (
    ROLE_SUPER_ADMIN,
    ActivityEntry,
    ActivityFilter,
    ActivityRecord,
    ActivityType,
    CurrentUser,
    build_activity_metadata,
)
from tourhub.domain.errors import InvalidActivityMetadataError
from tourhub.interfaces.api.dependencies import (
    get_activity_logger,
    get_current_user,
    require_role,
)
from tourhub.interfaces.api.schemas import ActivityCreate, ActivityRead, EventAccepted

router = APIRouter(prefix="/activity", tags=["activity"])


def _activity_to_read_model(record: ActivityRecord) -> ActivityRead:
    return ActivityRead(
        id=record.id,
        activity_type=record.activity_type,
        description=record.description,
        entity_type=record.entity_type,
        entity_id=record.entity_id,
        user_id=record.user_id,
        metadata=record.metadata.to_dict(),
        ip_address=record.ip_address,
        user_agent=record.user_agent,
        created_at=record.created_at,
    )


@router.post("/", response_model=EventAccepted, status_code=status.HTTP_202_ACCEPTED)
async def report_activity(
    payload: ActivityCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    activity_logger: ActivityLogger = Depends(get_activity_logger),
    current_user: CurrentUser = Depends(get_current_user),
) -> EventAccepted:
    """Record an activity performed by the caller."""

    try:
        metadata = build_activity_metadata(payload.activity_type, payload.metadata)
    except InvalidActivityMetadataError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc

    entry = ActivityEntry(
        description=payload.description,
        metadata=metadata,
        entity_type=payload.entity_type,
        entity_id=payload.entity_id,
    )
    background_tasks.add_task(
        activity_logger.log_with_context, entry, request, actor_id=current_user.id
    )
    return EventAccepted()


@router.get("/", response_model=list[ActivityRead])
async def list_activity(
    user_id: str | None = None,
    activity_type: ActivityType | None = None,
    entity_type: str | None = None,
    entity_id: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    activity_logger: ActivityLogger = Depends(get_activity_logger),
    _: CurrentUser = Depends(require_role(ROLE_SUPER_ADMIN)),
) -> list[ActivityRead]:
    """Return audit records newest first, optionally filtered."""

    records = await activity_logger.get_activity_logs(
        ActivityFilter(
            user_id=user_id,
            activity_type=activity_type,
            entity_type=entity_type,
            entity_id=entity_id,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
        )
    )
    return [_activity_to_read_model(record) for record in records]


@router.get("/{entity_type}/{entity_id}", response_model=list[ActivityRead])
async def read_entity_audit_trail(
    entity_type: str,
    entity_id: str,
    activity_logger: ActivityLogger = Depends(get_activity_logger),
    _: CurrentUser = Depends(require_role(ROLE_SUPER_ADMIN)),
) -> list[ActivityRead]:
    """Return every recorded activity touching one domain object."""

    records = await activity_logger.get_entity_audit_trail(entity_type, entity_id)
    return [_activity_to_read_model(record) for record in records]


__all__ = ["router"]
