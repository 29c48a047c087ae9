"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from tourhub.domain.entities import NotificationStatus
from tourhub.infrastructure.database import Base
from tourhub.utils import now_in_app_timezone


class NotificationModel(Base):
    """Database representation for recipient-addressed notifications."""

    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_recipient_status", "recipient_id", "status"),)

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(String(64), nullable=False, index=True)
    sender_id = Column(String(64), nullable=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(10), nullable=False, default=NotificationStatus.UNREAD.value)
    related_type = Column(String(50), nullable=True)
    related_id = Column(String(64), nullable=True)
    action_url = Column(String(500), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["NotificationModel"]
