"""Pydantic schemas for activity log endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from tourhub.domain.entities import ActivityType


class ActivityCreate(BaseModel):
    """Activity reported by a client; ``metadata`` must match ``activity_type``."""

    activity_type: ActivityType
    description: str = Field(..., min_length=1, description="Human readable summary")
    entity_type: str | None = Field(default=None, max_length=50)
    entity_id: str | None = Field(default=None, max_length=64)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ActivityRead(BaseModel):
    id: int
    activity_type: ActivityType
    description: str
    entity_type: str | None = None
    entity_id: str | None = None
    user_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime


__all__ = ["ActivityCreate", "ActivityRead"]
