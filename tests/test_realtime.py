"""Tests for the notification change feed and the SQL notification store."""

from __future__ import annotations

import time
from datetime import datetime, timezone

import anyio
import pytest

from tourhub.application.use_cases import NotificationSession
from tourhub.domain.entities import (
    ChangeKind,
    NewNotification,
    NotificationChange,
    NotificationRecord,
    NotificationStatus,
)
from tourhub.domain.errors import (
    NotificationNotFoundError,
    NotificationPermissionError,
    SubscriptionError,
)
from tourhub.infrastructure.notifications import (
    NotificationChangeFeed,
    NotificationPublisher,
    serialize_notification,
)
from tourhub.services import build_services

pytestmark = pytest.mark.anyio


def _record(record_id: int, recipient_id: str = "U1") -> NotificationRecord:
    return NotificationRecord(
        id=record_id,
        recipient_id=recipient_id,
        title=f"Notification {record_id}",
        message="body",
        status=NotificationStatus.UNREAD,
        created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )


async def test_feed_delivers_only_to_matching_recipient():
    feed = NotificationChangeFeed()
    mine = feed.subscribe("U1")
    theirs = feed.subscribe("U2")

    delivered = feed.publish(NotificationChange.inserted(_record(1, "U1")))

    assert delivered == 1
    with anyio.fail_after(1):
        change = await mine.__anext__()
    assert change.record.id == 1
    theirs.close()
    with pytest.raises(StopAsyncIteration):
        await theirs.__anext__()


async def test_changes_for_offline_recipients_are_not_replayed():
    feed = NotificationChangeFeed()

    assert feed.publish(NotificationChange.inserted(_record(1))) == 0

    subscription = feed.subscribe("U1")
    feed.publish(NotificationChange.inserted(_record(2)))
    with anyio.fail_after(1):
        change = await subscription.__anext__()
    assert change.record.id == 2


async def test_slow_subscriber_drops_overflow(caplog):
    feed = NotificationChangeFeed(buffer_size=1)
    subscription = feed.subscribe("U1")

    assert feed.publish(NotificationChange.inserted(_record(1))) == 1
    assert feed.publish(NotificationChange.inserted(_record(2))) == 0

    with anyio.fail_after(1):
        change = await subscription.__anext__()
    assert change.record.id == 1
    assert "not keeping up" in caplog.text


async def test_closing_subscription_detaches_and_ends_iteration():
    feed = NotificationChangeFeed()
    async with feed.subscribe("U1") as subscription:
        assert feed.subscriber_count("U1") == 1

    assert subscription.closed
    assert feed.subscriber_count("U1") == 0
    assert feed.publish(NotificationChange.inserted(_record(1))) == 0
    received = [change async for change in subscription]
    assert received == []


async def test_store_publishes_inserts_and_updates(services):
    store = services.notification_store
    subscription = store.subscribe("U1")

    created = await store.insert(NewNotification(recipient_id="U1", title="Hi", message="There"))
    read = await store.mark_read(created.id, recipient_id="U1")

    with anyio.fail_after(1):
        inserted = await subscription.__anext__()
        updated = await subscription.__anext__()
    assert inserted.kind is ChangeKind.INSERT
    assert inserted.record == created
    assert updated.kind is ChangeKind.UPDATE
    assert updated.record.status is NotificationStatus.READ
    assert read.status is NotificationStatus.READ
    subscription.close()


async def test_marking_read_twice_publishes_one_update(services):
    store = services.notification_store
    created = await store.insert(NewNotification(recipient_id="U1", title="Hi", message="There"))
    subscription = store.subscribe("U1")

    await store.mark_read(created.id, recipient_id="U1")
    again = await store.mark_read(created.id, recipient_id="U1")
    await store.insert(NewNotification(recipient_id="U1", title="Marker", message="end"))

    with anyio.fail_after(1):
        first = await subscription.__anext__()
        second = await subscription.__anext__()
    assert again.status is NotificationStatus.READ
    assert first.kind is ChangeKind.UPDATE
    assert second.kind is ChangeKind.INSERT
    assert second.record.title == "Marker"
    subscription.close()


async def test_mark_read_checks_ownership(services):
    store = services.notification_store
    created = await store.insert(NewNotification(recipient_id="U1", title="Hi", message="There"))

    with pytest.raises(NotificationPermissionError):
        await store.mark_read(created.id, recipient_id="U2")
    with pytest.raises(NotificationNotFoundError):
        await store.mark_read(created.id + 100, recipient_id="U1")

    assert await store.count_unread("U1") == 1


async def test_mark_many_and_mark_all_only_touch_own_unread(services):
    store = services.notification_store
    first = await store.insert(NewNotification(recipient_id="U1", title="a", message="a"))
    second = await store.insert(NewNotification(recipient_id="U1", title="b", message="b"))
    foreign = await store.insert(NewNotification(recipient_id="U2", title="c", message="c"))

    changed = await store.mark_many_read([first.id, foreign.id], recipient_id="U1")
    assert [record.id for record in changed] == [first.id]

    remaining = await store.mark_all_read("U1")
    assert [record.id for record in remaining] == [second.id]
    assert await store.count_unread("U1") == 0
    assert await store.count_unread("U2") == 1


def test_serialize_notification_uses_wire_values():
    payload = serialize_notification(_record(7))

    assert payload["id"] == 7
    assert payload["status"] == "unread"
    assert payload["created_at"].startswith("2024-05-01T12:00:00")


async def test_closed_feed_ends_subscriptions_and_refuses_new_ones():
    feed = NotificationChangeFeed()
    subscription = feed.subscribe("U1")

    feed.close()

    assert subscription.closed
    assert [change async for change in subscription] == []
    with pytest.raises(SubscriptionError):
        feed.subscribe("U1")


async def test_session_degrades_to_fetch_only_when_subscribe_fails(memory_store):
    memory_store.seed("U1")
    memory_store.feed.close()

    async with NotificationSession(memory_store, "U1") as cache:
        assert len(cache.notifications) == 1
        assert cache.unread_count == 1


class _SlowClosingSessions:
    """Session factory whose next session, once armed, lingers on close."""

    def __init__(self, session_factory, delay: float) -> None:
        self._session_factory = session_factory
        self._delay = delay
        self._armed = False

    def arm(self) -> None:
        self._armed = True

    def __call__(self):
        session = self._session_factory()
        if self._armed:
            self._armed = False
            close = session.close
            delay = self._delay

            def slow_close() -> None:
                close()
                time.sleep(delay)

            session.close = slow_close
        return session


async def test_status_update_is_never_published_before_its_insert(session_factory):
    sessions = _SlowClosingSessions(session_factory, delay=0.3)
    store = build_services(sessions).notification_store
    kinds: list[ChangeKind] = []
    settled = anyio.Event()

    async def on_change(change: NotificationChange) -> None:
        kinds.append(change.kind)
        if len(kinds) == 2:
            settled.set()

    async with NotificationSession(store, "U1", on_change=on_change) as cache:
        sessions.arm()
        async with anyio.create_task_group() as tg:
            tg.start_soon(
                store.insert, NewNotification(recipient_id="U1", title="Hi", message="There")
            )
            # The insert has committed and its worker is still closing the session.
            await anyio.sleep(0.1)
            tg.start_soon(store.mark_all_read, "U1")
        with anyio.fail_after(1):
            await settled.wait()

        assert kinds == [ChangeKind.INSERT, ChangeKind.UPDATE]
        assert cache.unread_count == await store.count_unread("U1") == 0


async def test_concurrent_writes_leave_cache_matching_store(services):
    store = services.notification_store

    async with NotificationSession(store, "U1") as cache:
        async with anyio.create_task_group() as tg:
            for index in range(4):
                tg.start_soon(
                    store.insert,
                    NewNotification(recipient_id="U1", title=f"n{index}", message="body"),
                )
                tg.start_soon(store.mark_all_read, "U1")
        await store.insert(NewNotification(recipient_id="U1", title="last", message="body"))
        with anyio.fail_after(1):
            while len(cache.notifications) < 5:
                await anyio.sleep(0.01)

        assert cache.unread_count == await store.count_unread("U1")


async def test_publisher_reports_delivery_count():
    feed = NotificationChangeFeed()
    publisher = NotificationPublisher(feed)
    subscription = feed.subscribe("U1")

    assert publisher.dispatch(NotificationChange.inserted(_record(1))) == 1
    assert publisher.dispatch(NotificationChange.inserted(_record(2, "U2"))) == 0
    with anyio.fail_after(1):
        change = await subscription.__anext__()
    assert change.record.id == 1
