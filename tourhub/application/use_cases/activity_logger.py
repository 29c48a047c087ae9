"""Best-effort audit logging for marketplace actions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from tourhub.application.ports import ActivityStore
from tourhub.domain.entities import (
    ActivityEntry,
    ActivityFilter,
    ActivityRecord,
    ActivityType,
    AgentApprovedMetadata,
    AgentRejectedMetadata,
    BookingCancelledMetadata,
    BookingConfirmedMetadata,
    BookingCreatedMetadata,
    LoginMetadata,
    MessageSentMetadata,
    PackageApprovedMetadata,
    PackageCreatedMetadata,
    PackageRejectedMetadata,
    RegistrationMetadata,
)

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


class ActivityLogger:
    """Write activity entries to the audit trail without ever failing the caller.

    One instance is built by the composition root and shared by every call
    site. Persistence errors are reported on the module logger and swallowed.
    """

    def __init__(self, store: ActivityStore) -> None:
        self._store = store

    async def log(self, entry: ActivityEntry) -> ActivityRecord | None:
        """Persist ``entry`` and return the stored record, or ``None`` on failure."""

        try:
            return await self._store.insert(entry)
        except Exception:
            logger.exception(
                "Failed to log %s activity for %s %s",
                entry.activity_type.value,
                entry.entity_type,
                entry.entity_id,
            )
            return None

    async def log_with_context(
        self,
        entry: ActivityEntry,
        request: Any | None = None,
        *,
        actor_id: str | None = None,
    ) -> ActivityRecord | None:
        """Log ``entry`` enriched with the actor and the request's client details."""

        if actor_id is not None and entry.user_id is None:
            entry = replace(entry, user_id=actor_id)
        if request is not None:
            ip_address, user_agent = request_client_details(request.headers)
            entry = replace(entry, ip_address=ip_address, user_agent=user_agent)
        return await self.log(entry)

    async def log_registration(
        self, user_id: str, user_type: str, metadata: Mapping[str, Any] | None = None
    ) -> ActivityRecord | None:
        return await self.log(
            ActivityEntry(
                description=f"New {user_type} registration",
                entity_type="user",
                entity_id=user_id,
                user_id=user_id,
                metadata=RegistrationMetadata(
                    user_type=user_type, attributes=dict(metadata or {})
                ),
            )
        )

    async def log_login(
        self, user_id: str, user_type: str, metadata: Mapping[str, Any] | None = None
    ) -> ActivityRecord | None:
        return await self.log(
            ActivityEntry(
                description=f"{user_type} logged in",
                entity_type="user",
                entity_id=user_id,
                user_id=user_id,
                metadata=LoginMetadata(user_type=user_type, attributes=dict(metadata or {})),
            )
        )

    async def log_package_created(
        self, package_id: str, agent_id: str, package_title: str
    ) -> ActivityRecord | None:
        return await self.log(
            ActivityEntry(
                description=f"New package created: {package_title}",
                entity_type="package",
                entity_id=package_id,
                metadata=PackageCreatedMetadata(agent_id=agent_id, package_title=package_title),
            )
        )

    async def log_package_approved(
        self, package_id: str, package_title: str, approved_by: str
    ) -> ActivityRecord | None:
        return await self.log(
            ActivityEntry(
                description=f"Package approved: {package_title}",
                entity_type="package",
                entity_id=package_id,
                user_id=approved_by,
                metadata=PackageApprovedMetadata(
                    package_title=package_title, approved_by=approved_by
                ),
            )
        )

    async def log_package_rejected(
        self, package_id: str, package_title: str, rejected_by: str, reason: str
    ) -> ActivityRecord | None:
        return await self.log(
            ActivityEntry(
                description=f"Package rejected: {package_title}",
                entity_type="package",
                entity_id=package_id,
                user_id=rejected_by,
                metadata=PackageRejectedMetadata(
                    package_title=package_title,
                    rejected_by=rejected_by,
                    rejection_reason=reason,
                ),
            )
        )

    async def log_booking_created(
        self,
        booking_id: str,
        package_id: str,
        customer_id: str,
        agent_id: str,
        amount: float,
    ) -> ActivityRecord | None:
        return await self.log(
            ActivityEntry(
                description="New booking created",
                entity_type="booking",
                entity_id=booking_id,
                user_id=customer_id,
                metadata=BookingCreatedMetadata(
                    package_id=package_id,
                    customer_id=customer_id,
                    agent_id=agent_id,
                    amount=amount,
                ),
            )
        )

    async def log_booking_confirmed(
        self, booking_id: str, confirmed_by: str
    ) -> ActivityRecord | None:
        return await self.log(
            ActivityEntry(
                description="Booking confirmed",
                entity_type="booking",
                entity_id=booking_id,
                user_id=confirmed_by,
                metadata=BookingConfirmedMetadata(confirmed_by=confirmed_by),
            )
        )

    async def log_booking_cancelled(
        self, booking_id: str, cancelled_by: str, reason: str | None = None
    ) -> ActivityRecord | None:
        return await self.log(
            ActivityEntry(
                description="Booking cancelled",
                entity_type="booking",
                entity_id=booking_id,
                user_id=cancelled_by,
                metadata=BookingCancelledMetadata(cancelled_by=cancelled_by, reason=reason),
            )
        )

    async def log_agent_approved(
        self, agent_id: str, company_name: str, approved_by: str
    ) -> ActivityRecord | None:
        return await self.log(
            ActivityEntry(
                description=f"Agent approved: {company_name}",
                entity_type="agent",
                entity_id=agent_id,
                user_id=approved_by,
                metadata=AgentApprovedMetadata(company_name=company_name, approved_by=approved_by),
            )
        )

    async def log_agent_rejected(
        self, agent_id: str, company_name: str, rejected_by: str, reason: str
    ) -> ActivityRecord | None:
        return await self.log(
            ActivityEntry(
                description=f"Agent rejected: {company_name}",
                entity_type="agent",
                entity_id=agent_id,
                user_id=rejected_by,
                metadata=AgentRejectedMetadata(
                    company_name=company_name,
                    rejected_by=rejected_by,
                    rejection_reason=reason,
                ),
            )
        )

    async def log_message_sent(
        self, message_id: str, sender_id: str, recipient_id: str, booking_id: str
    ) -> ActivityRecord | None:
        return await self.log(
            ActivityEntry(
                description="Message sent",
                entity_type="message",
                entity_id=message_id,
                user_id=sender_id,
                metadata=MessageSentMetadata(
                    sender_id=sender_id, recipient_id=recipient_id, booking_id=booking_id
                ),
            )
        )

    async def get_activity_logs(
        self, filters: ActivityFilter | None = None
    ) -> list[ActivityRecord]:
        """Return matching audit records, or an empty list when the store fails."""

        try:
            return await self._store.select(filters or ActivityFilter())
        except Exception:
            logger.exception("Failed to read activity logs")
            return []

    async def get_entity_audit_trail(
        self, entity_type: str, entity_id: str, *, limit: int | None = None
    ) -> list[ActivityRecord]:
        return await self.get_activity_logs(
            ActivityFilter(entity_type=entity_type, entity_id=entity_id, limit=limit)
        )

    async def get_activity_by_type(
        self, activity_type: ActivityType, *, limit: int | None = 100
    ) -> list[ActivityRecord]:
        return await self.get_activity_logs(
            ActivityFilter(activity_type=activity_type, limit=limit)
        )


def request_client_details(headers: Mapping[str, str]) -> tuple[str, str]:
    """Return ``(ip_address, user_agent)`` taken from proxy-aware request headers."""

    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip() or UNKNOWN
    else:
        ip_address = headers.get("x-real-ip") or UNKNOWN
    return ip_address, headers.get("user-agent") or UNKNOWN


__all__ = ["ActivityLogger", "request_client_details"]
