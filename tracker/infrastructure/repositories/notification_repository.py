"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta
from typing import Iterable

from sqlalchemy.orm import Session

from tracker.domain.entities import Notification
from tracker.infrastructure.models import NotificationModel
from tracker.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, notification: Notification) -> Notification:
        model = self._build_model(notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def add(self, notification: Notification) -> Notification:
        """Insert ``notification`` and flush it without committing.

        The caller owns the surrounding transaction.
        """

        model = self._build_model(notification)
        self.session.add(model)
        self.session.flush()
        return self._to_entity(model)

    def mark_chat_sent(self, notification_ids: Iterable[int]) -> int:
        """Flag notifications as delivered to chat. Flushes without committing."""

        ids = list(notification_ids)
        if not ids:
            return 0
        updated = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id.in_(ids))
            .update({NotificationModel.chat_sent: True})
        )
        self.session.flush()
        return updated

    @staticmethod
    def _build_model(notification: Notification) -> NotificationModel:
        return NotificationModel(
            user_id=notification.user_id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            link=notification.link,
            priority=notification.priority,
            subject_ref=notification.subject_ref,
            read=notification.read,
            chat_sent=notification.chat_sent,
            created_at=ensure_app_naive_datetime(
                notification.created_at or now_in_app_timezone()
            ),
        )

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_for_user(
        self,
        user_id: int,
        *,
        limit: int = 20,
        offset: int = 0,
        unread_only: bool = False,
    ) -> Sequence[Notification]:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )
        if unread_only:
            query = query.filter(NotificationModel.read.is_(False))
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        return [
            self._to_entity(model)
            for model in query.offset(offset).limit(limit).all()
        ]

    def count_for_user(self, user_id: int, *, unread_only: bool = False) -> int:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )
        if unread_only:
            query = query.filter(NotificationModel.read.is_(False))
        return query.count()

    def count_unread(self, user_id: int) -> int:
        return self.count_for_user(user_id, unread_only=True)

    def mark_as_read(self, notification_ids: Iterable[int], *, user_id: int) -> int:
        """Flag the given notifications as read. Read is never toggled back."""

        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return 0
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id.in_(ids),
                NotificationModel.user_id == user_id,
                NotificationModel.read.is_(False),
            )
            .update({NotificationModel.read: True}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    def mark_all_as_read(self, user_id: int) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.user_id == user_id,
                NotificationModel.read.is_(False),
            )
            .update({NotificationModel.read: True}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    def delete(self, notification_id: int, *, user_id: int) -> bool:
        """Delete a notification owned by ``user_id``.

        Returns ``True`` when a record was removed and ``False`` when the
        requested notification was not found for that user.
        """

        model = self.session.get(NotificationModel, notification_id)
        if model is None or model.user_id != user_id:
            return False
        self.session.delete(model)
        self.session.commit()
        return True

    def delete_old_read(self, user_id: int, *, days_old: int = 30) -> int:
        cutoff = ensure_app_naive_datetime(now_in_app_timezone() - timedelta(days=days_old))
        deleted = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.user_id == user_id,
                NotificationModel.read.is_(True),
                NotificationModel.created_at < cutoff,
            )
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=model.type,
            title=model.title,
            message=model.message,
            link=model.link,
            priority=model.priority,
            subject_ref=model.subject_ref,
            read=bool(model.read),
            chat_sent=bool(model.chat_sent),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
