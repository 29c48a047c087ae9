"""Domain entities describing audited marketplace activity."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Mapping

from tourhub.domain.errors import InvalidActivityMetadataError


class ActivityType(str, Enum):
    """Kinds of actions recorded in the audit trail."""

    REGISTRATION = "registration"
    LOGIN = "login"
    PACKAGE_CREATED = "package_created"
    PACKAGE_APPROVED = "package_approved"
    PACKAGE_REJECTED = "package_rejected"
    BOOKING_CREATED = "booking_created"
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_CANCELLED = "booking_cancelled"
    AGENT_APPROVED = "agent_approved"
    AGENT_REJECTED = "agent_rejected"
    MESSAGE_SENT = "message_sent"


@dataclass(frozen=True)
class ActivityMetadata:
    """Base class for the per-type metadata variants.

    Each subclass is bound to exactly one :class:`ActivityType`. New fields may
    be added to a variant but existing ones are never renamed or removed, so
    records written by older versions keep parsing.
    """

    activity_type: ClassVar[ActivityType]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RegistrationMetadata(ActivityMetadata):
    activity_type: ClassVar[ActivityType] = ActivityType.REGISTRATION

    user_type: str
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LoginMetadata(ActivityMetadata):
    activity_type: ClassVar[ActivityType] = ActivityType.LOGIN

    user_type: str
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PackageCreatedMetadata(ActivityMetadata):
    activity_type: ClassVar[ActivityType] = ActivityType.PACKAGE_CREATED

    agent_id: str
    package_title: str


@dataclass(frozen=True)
class PackageApprovedMetadata(ActivityMetadata):
    activity_type: ClassVar[ActivityType] = ActivityType.PACKAGE_APPROVED

    package_title: str
    approved_by: str


@dataclass(frozen=True)
class PackageRejectedMetadata(ActivityMetadata):
    activity_type: ClassVar[ActivityType] = ActivityType.PACKAGE_REJECTED

    package_title: str
    rejected_by: str
    rejection_reason: str


@dataclass(frozen=True)
class BookingCreatedMetadata(ActivityMetadata):
    activity_type: ClassVar[ActivityType] = ActivityType.BOOKING_CREATED

    package_id: str
    customer_id: str
    agent_id: str
    amount: float


@dataclass(frozen=True)
class BookingConfirmedMetadata(ActivityMetadata):
    activity_type: ClassVar[ActivityType] = ActivityType.BOOKING_CONFIRMED

    confirmed_by: str


@dataclass(frozen=True)
class BookingCancelledMetadata(ActivityMetadata):
    activity_type: ClassVar[ActivityType] = ActivityType.BOOKING_CANCELLED

    cancelled_by: str
    reason: str | None = None


@dataclass(frozen=True)
class AgentApprovedMetadata(ActivityMetadata):
    activity_type: ClassVar[ActivityType] = ActivityType.AGENT_APPROVED

    company_name: str
    approved_by: str


@dataclass(frozen=True)
class AgentRejectedMetadata(ActivityMetadata):
    activity_type: ClassVar[ActivityType] = ActivityType.AGENT_REJECTED

    company_name: str
    rejected_by: str
    rejection_reason: str


@dataclass(frozen=True)
class MessageSentMetadata(ActivityMetadata):
    activity_type: ClassVar[ActivityType] = ActivityType.MESSAGE_SENT

    sender_id: str
    recipient_id: str
    booking_id: str


METADATA_TYPES: dict[ActivityType, type[ActivityMetadata]] = {
    variant.activity_type: variant
    for variant in (
        RegistrationMetadata,
        LoginMetadata,
        PackageCreatedMetadata,
        PackageApprovedMetadata,
        PackageRejectedMetadata,
        BookingCreatedMetadata,
        BookingConfirmedMetadata,
        BookingCancelledMetadata,
        AgentApprovedMetadata,
        AgentRejectedMetadata,
        MessageSentMetadata,
    )
}


def build_activity_metadata(
    activity_type: ActivityType | str, data: Mapping[str, Any] | None
) -> ActivityMetadata:
    """Return the metadata variant for ``activity_type`` populated from ``data``.

    Keys unknown to the variant are ignored. Missing required keys raise
    :class:`InvalidActivityMetadataError`.
    """

    try:
        kind = ActivityType(activity_type)
    except ValueError as exc:
        raise InvalidActivityMetadataError(
            f"Unknown activity type '{activity_type}'"
        ) from exc

    variant = METADATA_TYPES[kind]
    known = {item.name for item in fields(variant)}
    values = {key: value for key, value in (data or {}).items() if key in known}
    try:
        return variant(**values)
    except TypeError as exc:
        raise InvalidActivityMetadataError(
            f"Invalid metadata for activity type '{kind.value}': {exc}"
        ) from exc


@dataclass(frozen=True)
class ActivityEntry:
    """An activity as submitted by a call site, before it is stored."""

    description: str
    metadata: ActivityMetadata
    entity_type: str | None = None
    entity_id: str | None = None
    user_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    @property
    def activity_type(self) -> ActivityType:
        return self.metadata.activity_type


@dataclass(frozen=True)
class ActivityRecord:
    """Immutable audit entry for something that happened in the marketplace."""

    id: int
    activity_type: ActivityType
    description: str
    metadata: ActivityMetadata
    created_at: datetime
    entity_type: str | None = None
    entity_id: str | None = None
    user_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class ActivityFilter:
    """Criteria used to query the audit trail."""

    user_id: str | None = None
    activity_type: ActivityType | None = None
    entity_type: str | None = None
    entity_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int | None = 100


__all__ = [
    "ActivityType",
    "ActivityMetadata",
    "RegistrationMetadata",
    "LoginMetadata",
    "PackageCreatedMetadata",
    "PackageApprovedMetadata",
    "PackageRejectedMetadata",
    "BookingCreatedMetadata",
    "BookingConfirmedMetadata",
    "BookingCancelledMetadata",
    "AgentApprovedMetadata",
    "AgentRejectedMetadata",
    "MessageSentMetadata",
    "METADATA_TYPES",
    "build_activity_metadata",
    "ActivityEntry",
    "ActivityRecord",
    "ActivityFilter",
]
