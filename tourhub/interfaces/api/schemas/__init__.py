from .activity import ActivityCreate, ActivityRead
from .events import (
    AgentDecisionRequest,
    BookingCancelledEvent,
    BookingConfirmedEvent,
    BookingCreatedEvent,
    EventAccepted,
    MessageSentEvent,
    PackageDecisionRequest,
)
from .notification import (
    MarkReadResult,
    NotificationCreate,
    NotificationMarkReadRequest,
    NotificationRead,
    UnreadCountRead,
)

__all__ = [
    "ActivityCreate",
    "ActivityRead",
    "AgentDecisionRequest",
    "BookingCancelledEvent",
    "BookingConfirmedEvent",
    "BookingCreatedEvent",
    "EventAccepted",
    "MessageSentEvent",
    "PackageDecisionRequest",
    "MarkReadResult",
    "NotificationCreate",
    "NotificationMarkReadRequest",
    "NotificationRead",
    "UnreadCountRead",
]
