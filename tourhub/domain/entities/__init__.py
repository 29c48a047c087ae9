"""Domain entities exposed by the application."""

from .activity import (
    METADATA_TYPES,
    ActivityEntry,
    ActivityFilter,
    ActivityMetadata,
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
    build_activity_metadata,
)
from .notification import (
    ChangeKind,
    NewNotification,
    NotificationChange,
    NotificationRecord,
    NotificationStatus,
)
from .user import ROLE_AGENT, ROLE_CUSTOMER, ROLE_SUPER_ADMIN, CurrentUser

__all__ = [
    "METADATA_TYPES",
    "ActivityEntry",
    "ActivityFilter",
    "ActivityMetadata",
    "ActivityRecord",
    "ActivityType",
    "AgentApprovedMetadata",
    "AgentRejectedMetadata",
    "BookingCancelledMetadata",
    "BookingConfirmedMetadata",
    "BookingCreatedMetadata",
    "LoginMetadata",
    "MessageSentMetadata",
    "PackageApprovedMetadata",
    "PackageCreatedMetadata",
    "PackageRejectedMetadata",
    "RegistrationMetadata",
    "build_activity_metadata",
    "ChangeKind",
    "NewNotification",
    "NotificationChange",
    "NotificationRecord",
    "NotificationStatus",
    "CurrentUser",
    "ROLE_AGENT",
    "ROLE_CUSTOMER",
    "ROLE_SUPER_ADMIN",
]
