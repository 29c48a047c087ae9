"""Schemas for marketplace actions reported to the pipeline."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator


class BookingCreatedEvent(BaseModel):
    booking_id: str = Field(..., min_length=1)
    booking_reference: str = Field(..., min_length=1, description="Booking code shown to the customer")
    package_id: str = Field(..., min_length=1)
    package_title: str = Field(..., min_length=1)
    customer_name: str = Field(..., min_length=1)
    agent_id: str = Field(..., min_length=1)
    agent_user_id: str = Field(..., min_length=1, description="User account of the package's agent")
    amount: float = Field(..., ge=0)


class BookingConfirmedEvent(BaseModel):
    customer_id: str = Field(..., min_length=1)


class BookingCancelledEvent(BaseModel):
    customer_id: str = Field(..., min_length=1)
    reason: str | None = None


class DecisionRequest(BaseModel):
    """Approval or rejection issued by a super administrator."""

    action: Literal["approve", "reject"]
    agent_user_id: str = Field(..., min_length=1)
    rejection_reason: str | None = None

    @model_validator(mode="after")
    def _require_reason_on_reject(self) -> "DecisionRequest":
        if self.action == "reject" and not (self.rejection_reason or "").strip():
            raise ValueError("rejection_reason is required when rejecting")
        return self


class AgentDecisionRequest(DecisionRequest):
    company_name: str = Field(..., min_length=1)


class PackageDecisionRequest(DecisionRequest):
    package_title: str = Field(..., min_length=1)


class MessageSentEvent(BaseModel):
    message_id: str = Field(..., min_length=1)
    recipient_id: str = Field(..., min_length=1)
    booking_id: str = Field(..., min_length=1)
    preview: str = Field(..., min_length=1, max_length=500)


class EventAccepted(BaseModel):
    status: str = "accepted"


__all__ = [
    "BookingCreatedEvent",
    "BookingConfirmedEvent",
    "BookingCancelledEvent",
    "DecisionRequest",
    "AgentDecisionRequest",
    "PackageDecisionRequest",
    "MessageSentEvent",
    "EventAccepted",
]
