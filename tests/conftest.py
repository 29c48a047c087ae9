"""Shared fixtures for the pipeline tests."""

from __future__ import annotations

import itertools
import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{Path(tempfile.gettempdir()) / 'tourhub-unused.db'}"
)

from tourhub.domain.entities import (  # noqa: E402
    NewNotification,
    NotificationChange,
    NotificationRecord,
    NotificationStatus,
)
from tourhub.domain.errors import StoreReadError, StoreWriteError  # noqa: E402
from tourhub.infrastructure.database import (  # noqa: E402
    build_engine,
    build_session_factory,
    initialize_database,
)
from tourhub.infrastructure.notifications import NotificationChangeFeed  # noqa: E402
from tourhub.infrastructure.security import create_access_token  # noqa: E402
from tourhub.services import build_services  # noqa: E402


class InMemoryNotificationStore:
    """Notification store kept in a dict that records every call it receives."""

    def __init__(self, feed: NotificationChangeFeed | None = None) -> None:
        self.feed = feed or NotificationChangeFeed()
        self.records: dict[int, NotificationRecord] = {}
        self.calls: list[tuple] = []
        self._ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def seed(
        self,
        recipient_id: str,
        *,
        title: str = "Seeded",
        status: NotificationStatus = NotificationStatus.UNREAD,
    ) -> NotificationRecord:
        record = self._build(
            NewNotification(recipient_id=recipient_id, title=title, message=title), status
        )
        self.records[record.id] = record
        return record

    async def insert(self, notification: NewNotification) -> NotificationRecord:
        self.calls.append(("insert", notification.recipient_id))
        record = self._build(notification, NotificationStatus.UNREAD)
        self.records[record.id] = record
        self.feed.publish(NotificationChange.inserted(record))
        return record

    async def select(self, recipient_id: str, *, limit: int | None = 50):
        self.calls.append(("select", recipient_id))
        owned = [item for item in self.records.values() if item.recipient_id == recipient_id]
        owned.sort(key=lambda item: (item.created_at, item.id), reverse=True)
        return owned[:limit] if limit is not None else owned

    async def mark_read(self, notification_id: int, *, recipient_id: str) -> NotificationRecord:
        self.calls.append(("mark_read", notification_id, recipient_id))
        record = self.records[notification_id]
        updated = record.mark_read()
        if updated is not record:
            self.records[notification_id] = updated
            self.feed.publish(NotificationChange.updated(updated))
        return updated

    async def mark_all_read(self, recipient_id: str) -> list[NotificationRecord]:
        self.calls.append(("mark_all_read", recipient_id))
        changed = []
        for record in list(self.records.values()):
            if record.recipient_id == recipient_id and record.is_unread:
                updated = record.mark_read()
                self.records[record.id] = updated
                changed.append(updated)
                self.feed.publish(NotificationChange.updated(updated))
        return changed

    def subscribe(self, recipient_id: str):
        return self.feed.subscribe(recipient_id)

    def _build(self, notification: NewNotification, status: NotificationStatus) -> NotificationRecord:
        self._clock += timedelta(seconds=1)
        return NotificationRecord(
            id=next(self._ids),
            recipient_id=notification.recipient_id,
            sender_id=notification.sender_id,
            title=notification.title,
            message=notification.message,
            status=status,
            related_type=notification.related_type,
            related_id=notification.related_id,
            action_url=notification.action_url,
            created_at=self._clock,
        )


class FailingActivityStore:
    async def insert(self, entry):
        raise StoreWriteError("activity store is down")

    async def select(self, filters=None):
        raise StoreReadError("activity store is down")


class FailingNotificationStore:
    def __init__(self) -> None:
        self.feed = NotificationChangeFeed()

    async def insert(self, notification):
        raise StoreWriteError("notification store is down")

    async def select(self, recipient_id, *, limit=50):
        raise StoreReadError("notification store is down")

    async def count_unread(self, recipient_id):
        raise StoreReadError("notification store is down")

    async def mark_read(self, notification_id, *, recipient_id):
        raise StoreWriteError("notification store is down")

    async def mark_many_read(self, notification_ids, *, recipient_id):
        raise StoreWriteError("notification store is down")

    async def mark_all_read(self, recipient_id):
        raise StoreWriteError("notification store is down")

    def subscribe(self, recipient_id):
        return self.feed.subscribe(recipient_id)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite file."""

    engine = build_engine(f"sqlite:///{tmp_path / 'pipeline.db'}")
    initialize_database(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def services(session_factory):
    return build_services(session_factory)


@pytest.fixture
def memory_store():
    return InMemoryNotificationStore()


@pytest.fixture
def failing_activity_store():
    return FailingActivityStore()


@pytest.fixture
def failing_notification_store():
    return FailingNotificationStore()


@pytest.fixture
def client(services):
    """Return a test client bound to an application using ``services``."""

    from fastapi.testclient import TestClient

    from main import create_app

    app = create_app(services)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    def build(user_id: str, role: str = "customer") -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}

    return build
