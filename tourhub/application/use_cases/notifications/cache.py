"""Per-session view of a recipient's notifications."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from tourhub.application.ports import ChangeStream, NotificationStore
from tourhub.domain.entities import ChangeKind, NotificationChange, NotificationRecord

logger = logging.getLogger(__name__)

DEFAULT_CACHE_LIMIT = 50

ChangeCallback = Callable[[NotificationChange], Awaitable[None]]


class NotificationCache:
    """Newest-first list of a recipient's most recent notifications.

    ``unread_count`` is always derived from the list. Local read marks are
    applied before the store is told about them and are not rolled back when
    the store call fails; the next :meth:`fetch` reconciles.
    """

    def __init__(
        self,
        store: NotificationStore,
        recipient_id: str,
        *,
        limit: int = DEFAULT_CACHE_LIMIT,
    ) -> None:
        self._store = store
        self.recipient_id = recipient_id
        self.limit = limit
        self._items: list[NotificationRecord] = []

    @property
    def notifications(self) -> list[NotificationRecord]:
        return list(self._items)

    @property
    def unread_count(self) -> int:
        return sum(1 for item in self._items if item.is_unread)

    async def fetch(self) -> list[NotificationRecord]:
        """Replace the cache with the most recent records from the store.

        A read failure leaves the cache empty.
        """

        try:
            records = await self._store.select(self.recipient_id, limit=self.limit)
        except Exception:
            logger.exception("Failed to fetch notifications for %s", self.recipient_id)
            records = []
        self._items = list(records)[: self.limit]
        return self.notifications

    refresh = fetch

    async def mark_as_read(self, notification_id: int) -> None:
        index = self._index_of(notification_id)
        if index is None or not self._items[index].is_unread:
            return

        self._items[index] = self._items[index].mark_read()
        try:
            await self._store.mark_read(notification_id, recipient_id=self.recipient_id)
        except Exception:
            logger.exception(
                "Failed to persist read mark for notification %s", notification_id
            )

    async def mark_all_as_read(self) -> None:
        self._items = [item.mark_read() for item in self._items]
        try:
            await self._store.mark_all_read(self.recipient_id)
        except Exception:
            logger.exception(
                "Failed to persist read marks for recipient %s", self.recipient_id
            )

    def apply(self, change: NotificationChange) -> None:
        """Fold a realtime change into the cache."""

        record = change.record
        if record.recipient_id != self.recipient_id:
            return

        index = self._index_of(record.id)
        if change.kind is ChangeKind.INSERT:
            if index is not None:
                # Already hydrated by a fetch that raced the push.
                return
            self._items.insert(0, record)
            del self._items[self.limit :]
        elif index is not None:
            self._items[index] = record

    async def listen(
        self, stream: ChangeStream, on_change: ChangeCallback | None = None
    ) -> None:
        """Apply changes from ``stream`` until it ends or fails."""

        try:
            async for change in stream:
                self.apply(change)
                if on_change is not None:
                    await on_change(change)
        except Exception:
            logger.warning(
                "Realtime delivery stopped for recipient %s", self.recipient_id, exc_info=True
            )

    def _index_of(self, notification_id: int) -> int | None:
        for index, item in enumerate(self._items):
            if item.id == notification_id:
                return index
        return None


class NotificationSession:
    """Bind a :class:`NotificationCache` to one realtime subscription.

    Entering subscribes, hydrates the cache, runs ``on_hydrated`` and then
    starts listening. Leaving stops the listener and releases the subscription.
    """

    def __init__(
        self,
        store: NotificationStore,
        recipient_id: str,
        *,
        limit: int = DEFAULT_CACHE_LIMIT,
        on_change: ChangeCallback | None = None,
        on_hydrated: Callable[[NotificationCache], Awaitable[None]] | None = None,
    ) -> None:
        self.cache = NotificationCache(store, recipient_id, limit=limit)
        self._store = store
        self._on_change = on_change
        self._on_hydrated = on_hydrated
        self._stream: ChangeStream | None = None
        self._listener: asyncio.Task[None] | None = None

    async def __aenter__(self) -> NotificationCache:
        # Subscribe before hydrating so changes committed during the fetch are
        # buffered rather than lost.
        try:
            self._stream = self._store.subscribe(self.cache.recipient_id)
        except Exception:
            logger.exception(
                "Realtime subscription failed for recipient %s", self.cache.recipient_id
            )
        try:
            await self.cache.fetch()
            if self._on_hydrated is not None:
                await self._on_hydrated(self.cache)
        except BaseException:
            # __aexit__ does not run when entering fails.
            self._release_stream()
            raise
        if self._stream is not None:
            self._listener = asyncio.get_running_loop().create_task(
                self.cache.listen(self._stream, self._on_change)
            )
        return self.cache

    async def __aexit__(self, *exc_info) -> None:
        if self._listener is not None:
            self._listener.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._listener
            self._listener = None
        self._release_stream()

    def _release_stream(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None


__all__ = ["DEFAULT_CACHE_LIMIT", "NotificationCache", "NotificationSession"]
