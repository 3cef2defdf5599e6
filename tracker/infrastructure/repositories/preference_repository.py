"""Persistence layer for notification preferences."""

from __future__ import annotations

from sqlalchemy.orm import Session

from tracker.domain.entities import NotificationPreferences
from tracker.infrastructure.models import NotificationPreferenceModel
from tracker.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class PreferenceRepository:
    """Read and upsert :class:`NotificationPreferences` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> NotificationPreferences | None:
        model = self.session.get(NotificationPreferenceModel, user_id)
        return self._to_entity(model) if model else None

    def upsert(
        self,
        user_id: int,
        *,
        mail: dict[str, bool] | None = None,
        chat: dict[str, bool] | None = None,
    ) -> NotificationPreferences:
        """Merge ``mail`` and ``chat`` onto the stored row, creating it if needed."""

        model = self.session.get(NotificationPreferenceModel, user_id)
        if model is None:
            model = NotificationPreferenceModel(user_id=user_id, mail={}, chat={})
        # Reassign so SQLAlchemy notices the JSON change.
        if mail:
            model.mail = {**(model.mail or {}), **mail}
        if chat:
            model.chat = {**(model.chat or {}), **chat}
        model.updated_at = ensure_app_naive_datetime(now_in_app_timezone())
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: NotificationPreferenceModel) -> NotificationPreferences:
        return NotificationPreferences(
            user_id=model.user_id,
            mail=dict(model.mail or {}),
            chat=dict(model.chat or {}),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["PreferenceRepository"]
