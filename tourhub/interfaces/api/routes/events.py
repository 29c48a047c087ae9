"""Endpoints through which marketplace actions are reported.

Each endpoint answers 202 immediately and leaves the audit entry and the
notifications to a background task, so a slow or failing store never delays
the action that triggered it.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, status

from tourhub.application.use_cases import ActivityLogger, NotificationEmitter
from tourhub.application.use_cases.marketplace_events import (
    AgentDecision,
    BookingCreated,
    PackageDecision,
    record_agent_decision,
    record_booking_cancelled,
    record_booking_confirmed,
    record_booking_created,
    record_message_sent,
    record_package_decision,
)
from tourhub.domain.entities import (
    ROLE_AGENT,
    ROLE_CUSTOMER,
    ROLE_SUPER_ADMIN,
    CurrentUser,
)
from tourhub.interfaces.api.dependencies import (
    get_activity_logger,
    get_current_user,
    get_notification_emitter,
    require_role,
)
from tourhub.interfaces.api.schemas import (
    AgentDecisionRequest,
    BookingCancelledEvent,
    BookingConfirmedEvent,
    BookingCreatedEvent,
    EventAccepted,
    MessageSentEvent,
    PackageDecisionRequest,
)

router = APIRouter(prefix="/events", tags=["events"])


@router.post("/bookings", response_model=EventAccepted, status_code=status.HTTP_202_ACCEPTED)
async def booking_created(
    payload: BookingCreatedEvent,
    background_tasks: BackgroundTasks,
    activity_logger: ActivityLogger = Depends(get_activity_logger),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
    current_user: CurrentUser = Depends(require_role(ROLE_CUSTOMER)),
) -> EventAccepted:
    event = BookingCreated(
        booking_id=payload.booking_id,
        booking_reference=payload.booking_reference,
        package_id=payload.package_id,
        package_title=payload.package_title,
        customer_id=current_user.id,
        customer_name=payload.customer_name,
        agent_id=payload.agent_id,
        agent_user_id=payload.agent_user_id,
        amount=payload.amount,
    )
    background_tasks.add_task(record_booking_created, activity_logger, emitter, event)
    return EventAccepted()


@router.post(
    "/bookings/{booking_id}/confirmation",
    response_model=EventAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def booking_confirmed(
    booking_id: str,
    payload: BookingConfirmedEvent,
    background_tasks: BackgroundTasks,
    activity_logger: ActivityLogger = Depends(get_activity_logger),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
    current_user: CurrentUser = Depends(require_role(ROLE_AGENT, ROLE_SUPER_ADMIN)),
) -> EventAccepted:
    background_tasks.add_task(
        record_booking_confirmed,
        activity_logger,
        emitter,
        booking_id=booking_id,
        customer_id=payload.customer_id,
        confirmed_by=current_user.id,
    )
    return EventAccepted()


@router.post(
    "/bookings/{booking_id}/cancellation",
    response_model=EventAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def booking_cancelled(
    booking_id: str,
    payload: BookingCancelledEvent,
    background_tasks: BackgroundTasks,
    activity_logger: ActivityLogger = Depends(get_activity_logger),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
    current_user: CurrentUser = Depends(get_current_user),
) -> EventAccepted:
    background_tasks.add_task(
        record_booking_cancelled,
        activity_logger,
        emitter,
        booking_id=booking_id,
        customer_id=payload.customer_id,
        cancelled_by=current_user.id,
        reason=payload.reason,
    )
    return EventAccepted()


@router.post(
    "/agents/{agent_id}/decision",
    response_model=EventAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def agent_decision(
    agent_id: str,
    payload: AgentDecisionRequest,
    background_tasks: BackgroundTasks,
    activity_logger: ActivityLogger = Depends(get_activity_logger),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
    current_user: CurrentUser = Depends(require_role(ROLE_SUPER_ADMIN)),
) -> EventAccepted:
    decision = AgentDecision(
        agent_id=agent_id,
        agent_user_id=payload.agent_user_id,
        company_name=payload.company_name,
        action=payload.action,
        decided_by=current_user.id,
        rejection_reason=payload.rejection_reason,
    )
    background_tasks.add_task(record_agent_decision, activity_logger, emitter, decision)
    return EventAccepted()


@router.post(
    "/packages/{package_id}/decision",
    response_model=EventAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def package_decision(
    package_id: str,
    payload: PackageDecisionRequest,
    background_tasks: BackgroundTasks,
    activity_logger: ActivityLogger = Depends(get_activity_logger),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
    current_user: CurrentUser = Depends(require_role(ROLE_SUPER_ADMIN)),
) -> EventAccepted:
    decision = PackageDecision(
        package_id=package_id,
        package_title=payload.package_title,
        agent_user_id=payload.agent_user_id,
        action=payload.action,
        decided_by=current_user.id,
        rejection_reason=payload.rejection_reason,
    )
    background_tasks.add_task(record_package_decision, activity_logger, emitter, decision)
    return EventAccepted()


@router.post("/messages", response_model=EventAccepted, status_code=status.HTTP_202_ACCEPTED)
async def message_sent(
    payload: MessageSentEvent,
    background_tasks: BackgroundTasks,
    activity_logger: ActivityLogger = Depends(get_activity_logger),
    emitter: NotificationEmitter = Depends(get_notification_emitter),
    current_user: CurrentUser = Depends(get_current_user),
) -> EventAccepted:
    background_tasks.add_task(
        record_message_sent,
        activity_logger,
        emitter,
        message_id=payload.message_id,
        sender_id=current_user.id,
        recipient_id=payload.recipient_id,
        booking_id=payload.booking_id,
        preview=payload.preview,
    )
    return EventAccepted()


__all__ = ["router"]
