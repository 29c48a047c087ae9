"""Tests for the marketplace event and activity endpoints."""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from tourhub.application.use_cases import ActivityLogger, NotificationEmitter
from tourhub.services import Services

BOOKING = {
    "booking_id": "BK1",
    "booking_reference": "TH-2024-0001",
    "package_id": "P1",
    "package_title": "Bali Escape",
    "customer_name": "Dana",
    "agent_id": "AG1",
    "agent_user_id": "AGENT-USER",
    "amount": 50000,
}


@pytest.fixture
def admin(auth_headers):
    return auth_headers("ADMIN", "super_admin")


def test_booking_notifies_agent_and_customer_and_is_audited(client, auth_headers, admin):
    response = client.post("/events/bookings", json=BOOKING, headers=auth_headers("C1"))

    assert response.status_code == 202
    assert response.json() == {"status": "accepted"}

    agent_inbox = client.get("/notifications/", headers=auth_headers("AGENT-USER", "agent")).json()
    customer_inbox = client.get("/notifications/", headers=auth_headers("C1")).json()
    assert [item["title"] for item in agent_inbox] == ["New Booking Received"]
    assert agent_inbox[0]["action_url"] == "/agent-dashboard/bookings/BK1"
    assert agent_inbox[0]["sender_id"] == "C1"
    assert [item["title"] for item in customer_inbox] == ["Booking Confirmation"]
    assert "TH-2024-0001" in customer_inbox[0]["message"]

    trail = client.get("/activity/booking/BK1", headers=admin).json()
    assert len(trail) == 1
    assert trail[0]["activity_type"] == "booking_created"
    assert trail[0]["user_id"] == "C1"
    assert trail[0]["metadata"] == {
        "package_id": "P1",
        "customer_id": "C1",
        "agent_id": "AG1",
        "amount": 50000,
    }


def test_only_customers_report_bookings(client, auth_headers):
    response = client.post("/events/bookings", json=BOOKING, headers=auth_headers("AG1", "agent"))

    assert response.status_code == 403


def test_booking_lifecycle_notifies_customer(client, auth_headers, admin):
    agent = auth_headers("AGENT-USER", "agent")
    confirm = client.post(
        "/events/bookings/BK1/confirmation", json={"customer_id": "C1"}, headers=agent
    )
    cancel = client.post(
        "/events/bookings/BK1/cancellation",
        json={"customer_id": "C1", "reason": "Storm warning"},
        headers=agent,
    )

    assert confirm.status_code == 202
    assert cancel.status_code == 202
    inbox = client.get("/notifications/", headers=auth_headers("C1")).json()
    assert [item["title"] for item in inbox] == ["Booking Cancelled", "Booking Confirmed"]
    assert inbox[0]["message"].endswith("Reason: Storm warning")
    trail = client.get("/activity/booking/BK1", headers=admin).json()
    assert [item["activity_type"] for item in trail] == ["booking_cancelled", "booking_confirmed"]


def test_rejection_requires_a_reason(client, admin):
    response = client.post(
        "/events/agents/AG1/decision",
        json={"action": "reject", "agent_user_id": "AGENT-USER", "company_name": "Sunrise Tours"},
        headers=admin,
    )

    assert response.status_code == 422


def test_agent_rejection_is_audited_and_notified(client, auth_headers, admin):
    response = client.post(
        "/events/agents/AG1/decision",
        json={
            "action": "reject",
            "agent_user_id": "AGENT-USER",
            "company_name": "Sunrise Tours",
            "rejection_reason": "Expired licence",
        },
        headers=admin,
    )

    assert response.status_code == 202
    inbox = client.get("/notifications/", headers=auth_headers("AGENT-USER", "agent")).json()
    assert inbox[0]["title"] == "Agent Registration Rejected"
    assert inbox[0]["message"].endswith("Reason: Expired licence")
    trail = client.get("/activity/agent/AG1", headers=admin).json()
    assert trail[0]["metadata"]["rejection_reason"] == "Expired licence"


def test_package_approval(client, auth_headers, admin):
    response = client.post(
        "/events/packages/P1/decision",
        json={"action": "approve", "agent_user_id": "AGENT-USER", "package_title": "Bali Escape"},
        headers=admin,
    )

    assert response.status_code == 202
    inbox = client.get("/notifications/", headers=auth_headers("AGENT-USER", "agent")).json()
    assert inbox[0]["title"] == "Package Approved"
    assert inbox[0]["action_url"] == "/agent-dashboard/packages/P1"
    trail = client.get("/activity/", params={"activity_type": "package_approved"}, headers=admin)
    assert [item["entity_id"] for item in trail.json()] == ["P1"]


def test_package_decision_requires_super_admin(client, auth_headers):
    response = client.post(
        "/events/packages/P1/decision",
        json={"action": "approve", "agent_user_id": "AGENT-USER", "package_title": "Bali Escape"},
        headers=auth_headers("AG1", "agent"),
    )

    assert response.status_code == 403


def test_message_sent_notifies_recipient(client, auth_headers):
    response = client.post(
        "/events/messages",
        json={"message_id": "M1", "recipient_id": "C1", "booking_id": "BK1", "preview": "See you soon"},
        headers=auth_headers("AGENT-USER", "agent"),
    )

    assert response.status_code == 202
    inbox = client.get("/notifications/", headers=auth_headers("C1")).json()
    assert inbox[0]["title"] == "New Message"
    assert inbox[0]["message"] == "See you soon"


def test_reported_activity_captures_client_details(client, auth_headers, admin):
    response = client.post(
        "/activity/",
        json={
            "activity_type": "login",
            "description": "customer logged in",
            "entity_type": "user",
            "entity_id": "C1",
            "metadata": {"user_type": "customer"},
        },
        headers={
            **auth_headers("C1"),
            "X-Forwarded-For": "203.0.113.5, 10.0.0.1",
            "User-Agent": "tourhub-mobile/2.1",
        },
    )

    assert response.status_code == 202
    records = client.get("/activity/", params={"user_id": "C1"}, headers=admin).json()
    assert len(records) == 1
    assert records[0]["ip_address"] == "203.0.113.5"
    assert records[0]["user_agent"] == "tourhub-mobile/2.1"
    assert records[0]["metadata"] == {"user_type": "customer", "attributes": {}}


def test_reported_activity_with_invalid_metadata_is_rejected(client, auth_headers):
    response = client.post(
        "/activity/",
        json={"activity_type": "booking_created", "description": "bad", "metadata": {}},
        headers=auth_headers("C1"),
    )

    assert response.status_code == 422


def test_activity_listing_requires_super_admin(client, auth_headers):
    assert client.get("/activity/", headers=auth_headers("C1")).status_code == 403


def test_actions_are_accepted_when_stores_are_down(
    services, failing_activity_store, failing_notification_store, auth_headers
):
    degraded = Services(
        activity_store=failing_activity_store,
        notification_store=failing_notification_store,
        change_feed=failing_notification_store.feed,
        activity_logger=ActivityLogger(failing_activity_store),
        notification_emitter=NotificationEmitter(failing_notification_store),
    )

    with TestClient(create_app(degraded)) as client:
        booking = client.post("/events/bookings", json=BOOKING, headers=auth_headers("C1"))
        message = client.post(
            "/events/messages",
            json={"message_id": "M1", "recipient_id": "C1", "booking_id": "BK1", "preview": "Hi"},
            headers=auth_headers("AGENT-USER", "agent"),
        )

    assert booking.status_code == 202
    assert message.status_code == 202
