"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import logging

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from tourhub.application.use_cases import (
    NotificationCache,
    NotificationEmitter,
    NotificationSession,
)
from tourhub.domain.entities import (
    ROLE_SUPER_ADMIN,
    ChangeKind,
    CurrentUser,
    NotificationChange,
    NotificationRecord,
)
from tourhub.domain.errors import (
    NotificationNotFoundError,
    NotificationPermissionError,
    StoreError,
)
from tourhub.infrastructure.notifications import serialize_notification
from tourhub.infrastructure.stores import SqlNotificationStore
from tourhub.interfaces.api.dependencies import (
    get_current_user,
    get_notification_emitter,
    get_notification_store,
    require_role,
    resolve_current_user,
)
from tourhub.interfaces.api.schemas import (
    MarkReadResult,
    NotificationCreate,
    NotificationMarkReadRequest,
    NotificationRead,
    UnreadCountRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])

logger = logging.getLogger(__name__)

_CHANGE_MESSAGE_TYPES = {
    ChangeKind.INSERT: "notification.created",
    ChangeKind.UPDATE: "notification.updated",
}


def _notification_to_schema(notification: NotificationRecord) -> NotificationRead:
    return NotificationRead.model_validate(notification)


def _store_unavailable(exc: StoreError) -> HTTPException:
    logger.warning("Notification store unavailable: %s", exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Notification store unavailable",
    )


@router.get("/", response_model=list[NotificationRead])
async def list_notifications(
    limit: int = Query(default=50, ge=1, le=200),
    store: SqlNotificationStore = Depends(get_notification_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> list[NotificationRead]:
    """Return the most recent notifications for the authenticated user."""

    try:
        notifications = await store.select(current_user.id, limit=limit)
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return [_notification_to_schema(notification) for notification in notifications]


@router.get("/unread-count", response_model=UnreadCountRead)
async def unread_count(
    store: SqlNotificationStore = Depends(get_notification_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> UnreadCountRead:
    try:
        count = await store.count_unread(current_user.id)
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return UnreadCountRead(unread_count=count)


@router.post("/", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
async def send_notification(
    payload: NotificationCreate,
    emitter: NotificationEmitter = Depends(get_notification_emitter),
    current_user: CurrentUser = Depends(require_role(ROLE_SUPER_ADMIN)),
) -> NotificationRead:
    """Send a notification to ``payload.recipient_id`` on behalf of an administrator."""

    notification = await emitter.send_notification(
        payload.recipient_id,
        payload.title,
        payload.message,
        sender_id=current_user.id,
        related_type=payload.related_type,
        related_id=payload.related_id,
        action_url=payload.action_url,
    )
    if notification is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification could not be stored",
        )
    return _notification_to_schema(notification)


@router.post("/read-all", response_model=MarkReadResult)
async def mark_all_notifications_read(
    store: SqlNotificationStore = Depends(get_notification_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> MarkReadResult:
    try:
        updated = await store.mark_all_read(current_user.id)
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return MarkReadResult(updated=[_notification_to_schema(item) for item in updated])


@router.post("/read", response_model=MarkReadResult)
async def mark_notifications_read(
    payload: NotificationMarkReadRequest,
    store: SqlNotificationStore = Depends(get_notification_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> MarkReadResult:
    """Mark a batch of the caller's notifications as read; foreign ids are ignored."""

    try:
        updated = await store.mark_many_read(payload.unique_ids(), recipient_id=current_user.id)
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return MarkReadResult(updated=[_notification_to_schema(item) for item in updated])


@router.post("/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_read(
    notification_id: int,
    store: SqlNotificationStore = Depends(get_notification_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationRead:
    try:
        notification = await store.mark_read(notification_id, recipient_id=current_user.id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except NotificationPermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized") from exc
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return _notification_to_schema(notification)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    try:
        user = resolve_current_user(websocket.query_params.get("token"))
    except HTTPException:
        await websocket.close(code=1008)
        return

    services = websocket.app.state.services

    await websocket.accept()

    async def send_snapshot(cache: NotificationCache) -> None:
        await websocket.send_json(
            {
                "type": "init",
                "data": [serialize_notification(item) for item in cache.notifications],
                "unread_count": cache.unread_count,
            }
        )

    async def forward(change: NotificationChange) -> None:
        await websocket.send_json(
            {
                "type": _CHANGE_MESSAGE_TYPES[change.kind],
                "data": serialize_notification(change.record),
                "unread_count": session.cache.unread_count,
            }
        )

    session = NotificationSession(
        services.notification_store,
        user.id,
        limit=services.notification_cache_limit,
        on_change=forward,
        on_hydrated=send_snapshot,
    )
    async with session as cache:
        try:
            while True:
                try:
                    message = await websocket.receive_json()
                except WebSocketDisconnect:
                    raise
                except ValueError:
                    continue

                if not isinstance(message, dict):
                    continue

                message_type = message.get("type")
                if message_type == "ping":
                    await websocket.send_json({"type": "pong"})
                    continue

                if message_type == "ack":
                    ids = message.get("ids", [])
                    if isinstance(ids, list):
                        for notification_id in ids:
                            if isinstance(notification_id, int):
                                await cache.mark_as_read(notification_id)
                    continue

                if message_type == "ack_all":
                    await cache.mark_all_as_read()
                    continue

                if message_type == "refresh":
                    await cache.refresh()
                    await send_snapshot(cache)
        except WebSocketDisconnect:
            logger.debug("Notification websocket closed for %s", user.id)
