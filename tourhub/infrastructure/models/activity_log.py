"""SQLAlchemy model for the append-only activity log."""

from sqlalchemy import Column, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON

from tourhub.infrastructure.database import Base
from tourhub.utils import now_in_app_timezone

_metadata_json_type = JSONB().with_variant(JSON(), "sqlite")


class ActivityLogModel(Base):
    """Database representation of audited activity."""

    __tablename__ = "activity_logs"
    __table_args__ = (Index("ix_activity_logs_entity", "entity_type", "entity_id"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=True, index=True)
    activity_type = Column(String(50), nullable=False, index=True)
    description = Column(Text, nullable=False)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(String(64), nullable=True)
    # ``metadata`` is reserved by the declarative base.
    details = Column("metadata", _metadata_json_type, nullable=False, default=dict)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone, index=True
    )


__all__ = ["ActivityLogModel"]
