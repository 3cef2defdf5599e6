"""Endpoints and websocket handler for in-app notifications."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from tracker.application.errors import NotFoundError
from tracker.application.use_cases.notifications import send_test_notification
from tracker.domain.entities import Notification, User
from tracker.infrastructure.database import SessionLocal, get_db
from tracker.infrastructure.notifications import notification_manager, serialize_notification
from tracker.infrastructure.repositories import NotificationRepository
from tracker.interfaces.api.dependencies import get_current_active_user, resolve_current_user
from tracker.interfaces.api.schemas import (
    DispatchSummaryRead,
    NotificationMarkReadRequest,
    NotificationPage,
    NotificationRead,
    TestNotificationRequest,
    UnreadCount,
    UpdatedCount,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
test_router = APIRouter(tags=["notifications"])

@router.get("/", response_model=NotificationPage)
def list_notifications(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    unread_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationPage:
    """Return the most recent notifications for the authenticated user."""

    repository = NotificationRepository(db)
    notifications = repository.list_for_user(
        current_user.id, limit=limit, offset=offset, unread_only=unread_only
    )
    total = repository.count_for_user(current_user.id, unread_only=unread_only)
    return NotificationPage(
        notifications=[NotificationRead.model_validate(n) for n in notifications],
        has_more=total > offset + limit,
    )


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> UnreadCount:
    return UnreadCount(count=NotificationRepository(db).count_unread(current_user.id))


@router.post("/read", response_model=UpdatedCount)
def mark_notifications_read(
    payload: NotificationMarkReadRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> UpdatedCount:
    """Mark notifications as read. Already read notifications stay read."""

    updated = NotificationRepository(db).mark_as_read(
        payload.unique_ids(), user_id=current_user.id
    )
    return UpdatedCount(updated=updated)


@router.post("/read-all", response_model=UpdatedCount)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> UpdatedCount:
    return UpdatedCount(updated=NotificationRepository(db).mark_all_as_read(current_user.id))


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Response:
    if not NotificationRepository(db).delete(notification_id, user_id=current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _open_session_for(token: str | None) -> tuple[User, list[Notification]] | None:
    """Authenticate a websocket token and load the user's unread backlog."""

    if not token:
        return None
    with SessionLocal() as session:
        try:
            user = resolve_current_user(token, session)
        except HTTPException:
            return None
        if not user.is_active:
            return None
        backlog = list(NotificationRepository(session).list_for_user(user.id, unread_only=True))
    return user, backlog


def _acknowledge(user_id: int, ids: object) -> None:
    if not isinstance(ids, list) or not ids:
        return
    valid_ids = [value for value in ids if isinstance(value, int)]
    with SessionLocal() as session:
        NotificationRepository(session).mark_as_read(valid_ids, user_id=user_id)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Stream new notifications to the user and accept ``ping``/``ack`` messages.

    The unread backlog is sent once as an ``init`` message after the socket
    is accepted. Invalid or missing tokens close the socket with 1008.
    """

    opened = await run_in_threadpool(_open_session_for, websocket.query_params.get("token"))
    if opened is None:
        await websocket.close(code=1008)
        return
    user, backlog = opened

    await notification_manager.connect(user.id, websocket)
    try:
        if backlog:
            await websocket.send_json(
                {"type": "init", "data": [serialize_notification(n) for n in backlog]}
            )
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                continue
            if not isinstance(message, dict):
                continue

            if message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
            elif message.get("type") == "ack":
                await run_in_threadpool(_acknowledge, user.id, message.get("ids"))
    except WebSocketDisconnect:
        pass
    finally:
        notification_manager.disconnect(user.id, websocket)


@test_router.post("/test-notification", response_model=DispatchSummaryRead)
def create_test_notification(
    payload: TestNotificationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> DispatchSummaryRead:
    """Fan out a test notification and report what each channel did."""

    target_id = payload.user_id or current_user.id
    try:
        summary = send_test_notification(db, user_id=target_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return DispatchSummaryRead.model_validate(summary)
