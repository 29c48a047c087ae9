"""Audit and notify for marketplace actions.

Each helper records the activity first and then sends the notifications the
action implies. The two writes are independent: a notification can fail after
its activity was recorded and nothing compensates for it.
"""

from __future__ import annotations

from dataclasses import dataclass

from tourhub.application.use_cases.activity_logger import ActivityLogger
from tourhub.application.use_cases.notifications import NotificationEmitter

ACTION_APPROVE = "approve"
ACTION_REJECT = "reject"


@dataclass(frozen=True)
class BookingCreated:
    booking_id: str
    booking_reference: str
    package_id: str
    package_title: str
    customer_id: str
    customer_name: str
    agent_id: str
    agent_user_id: str
    amount: float


@dataclass(frozen=True)
class AgentDecision:
    agent_id: str
    agent_user_id: str
    company_name: str
    action: str
    decided_by: str
    rejection_reason: str | None = None


@dataclass(frozen=True)
class PackageDecision:
    package_id: str
    package_title: str
    agent_user_id: str
    action: str
    decided_by: str
    rejection_reason: str | None = None


async def record_booking_created(
    logger: ActivityLogger, emitter: NotificationEmitter, event: BookingCreated
) -> None:
    await logger.log_booking_created(
        booking_id=event.booking_id,
        package_id=event.package_id,
        customer_id=event.customer_id,
        agent_id=event.agent_id,
        amount=event.amount,
    )
    await emitter.send_notification(
        event.agent_user_id,
        "New Booking Received",
        f'You have received a new booking for "{event.package_title}" '
        f"from {event.customer_name}.",
        sender_id=event.customer_id,
        related_type="booking",
        related_id=event.booking_id,
        action_url=f"/agent-dashboard/bookings/{event.booking_id}",
    )
    await emitter.send_notification(
        event.customer_id,
        "Booking Confirmation",
        f'Your booking for "{event.package_title}" has been submitted successfully. '
        f"Booking ID: {event.booking_reference}",
        sender_id=event.customer_id,
        related_type="booking",
        related_id=event.booking_id,
        action_url="/my-trips",
    )


async def record_booking_confirmed(
    logger: ActivityLogger,
    emitter: NotificationEmitter,
    *,
    booking_id: str,
    customer_id: str,
    confirmed_by: str,
) -> None:
    await logger.log_booking_confirmed(booking_id, confirmed_by)
    await emitter.send_notification(
        customer_id,
        "Booking Confirmed",
        "Your booking has been confirmed by the agent.",
        sender_id=confirmed_by,
        related_type="booking",
        related_id=booking_id,
        action_url="/my-trips",
    )


async def record_booking_cancelled(
    logger: ActivityLogger,
    emitter: NotificationEmitter,
    *,
    booking_id: str,
    customer_id: str,
    cancelled_by: str,
    reason: str | None = None,
) -> None:
    await logger.log_booking_cancelled(booking_id, cancelled_by, reason)
    message = "Your booking has been cancelled."
    if reason:
        message = f"{message} Reason: {reason}"
    await emitter.send_notification(
        customer_id,
        "Booking Cancelled",
        message,
        sender_id=cancelled_by,
        related_type="booking",
        related_id=booking_id,
        action_url="/my-trips",
    )


async def record_agent_decision(
    logger: ActivityLogger, emitter: NotificationEmitter, decision: AgentDecision
) -> None:
    approved = _is_approval(decision.action)
    if approved:
        await logger.log_agent_approved(
            decision.agent_id, decision.company_name, decision.decided_by
        )
        title = "Agent Registration Approved"
        message = (
            "Congratulations! Your agent registration has been approved. "
            "You can now start creating packages and managing bookings."
        )
    else:
        await logger.log_agent_rejected(
            decision.agent_id,
            decision.company_name,
            decision.decided_by,
            decision.rejection_reason or "",
        )
        title = "Agent Registration Rejected"
        message = (
            "Your agent registration has been rejected. "
            f"Reason: {decision.rejection_reason}"
        )

    await emitter.send_notification(
        decision.agent_user_id,
        title,
        message,
        sender_id=decision.decided_by,
        related_type="agent",
        related_id=decision.agent_id,
        action_url="/agent-dashboard",
    )


async def record_package_decision(
    logger: ActivityLogger, emitter: NotificationEmitter, decision: PackageDecision
) -> None:
    approved = _is_approval(decision.action)
    if approved:
        await logger.log_package_approved(
            decision.package_id, decision.package_title, decision.decided_by
        )
        title = "Package Approved"
        message = (
            f'Your package "{decision.package_title}" has been approved '
            "and is now live for bookings."
        )
    else:
        await logger.log_package_rejected(
            decision.package_id,
            decision.package_title,
            decision.decided_by,
            decision.rejection_reason or "",
        )
        title = "Package Rejected"
        message = (
            f'Your package "{decision.package_title}" has been rejected. '
            f"Reason: {decision.rejection_reason}"
        )

    await emitter.send_notification(
        decision.agent_user_id,
        title,
        message,
        sender_id=decision.decided_by,
        related_type="package",
        related_id=decision.package_id,
        action_url=f"/agent-dashboard/packages/{decision.package_id}",
    )


async def record_message_sent(
    logger: ActivityLogger,
    emitter: NotificationEmitter,
    *,
    message_id: str,
    sender_id: str,
    recipient_id: str,
    booking_id: str,
    preview: str,
) -> None:
    await logger.log_message_sent(message_id, sender_id, recipient_id, booking_id)
    await emitter.send_notification(
        recipient_id,
        "New Message",
        preview,
        sender_id=sender_id,
        related_type="booking",
        related_id=booking_id,
    )


def _is_approval(action: str) -> bool:
    if action == ACTION_APPROVE:
        return True
    if action == ACTION_REJECT:
        return False
    raise ValueError(f"Invalid action '{action}'")


__all__ = [
    "ACTION_APPROVE",
    "ACTION_REJECT",
    "BookingCreated",
    "AgentDecision",
    "PackageDecision",
    "record_booking_created",
    "record_booking_confirmed",
    "record_booking_cancelled",
    "record_agent_decision",
    "record_package_decision",
    "record_message_sent",
]
