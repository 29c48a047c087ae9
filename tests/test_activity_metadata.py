"""Tests for the per-type activity metadata variants."""

import pytest

from tourhub.domain.entities import (
    METADATA_TYPES,
    ActivityEntry,
    ActivityType,
    AgentRejectedMetadata,
    BookingCancelledMetadata,
    BookingCreatedMetadata,
    build_activity_metadata,
)
from tourhub.domain.errors import InvalidActivityMetadataError


def test_every_activity_type_has_a_metadata_variant():
    assert set(METADATA_TYPES) == set(ActivityType)
    for activity_type, variant in METADATA_TYPES.items():
        assert variant.activity_type is activity_type


def test_build_ignores_unknown_keys():
    metadata = build_activity_metadata(
        "booking_created",
        {
            "package_id": "P1",
            "customer_id": "C1",
            "agent_id": "A1",
            "amount": 50000,
            "coupon": "SUMMER",
        },
    )

    assert metadata == BookingCreatedMetadata(
        package_id="P1", customer_id="C1", agent_id="A1", amount=50000
    )


def test_build_applies_variant_defaults():
    metadata = build_activity_metadata(ActivityType.BOOKING_CANCELLED, {"cancelled_by": "C1"})

    assert metadata == BookingCancelledMetadata(cancelled_by="C1", reason=None)


def test_build_rejects_missing_fields():
    with pytest.raises(InvalidActivityMetadataError, match="agent_rejected"):
        build_activity_metadata("agent_rejected", {"company_name": "Sunrise Tours"})


def test_build_rejects_unknown_activity_type():
    with pytest.raises(InvalidActivityMetadataError, match="Unknown activity type"):
        build_activity_metadata("payment_refunded", {})


def test_entry_takes_its_type_from_the_metadata():
    entry = ActivityEntry(
        description="Agent rejected: Sunrise Tours",
        metadata=AgentRejectedMetadata(
            company_name="Sunrise Tours", rejected_by="ADMIN", rejection_reason="Expired licence"
        ),
    )

    assert entry.activity_type is ActivityType.AGENT_REJECTED
