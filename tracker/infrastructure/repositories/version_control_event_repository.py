"""Persistence layer for version-control audit records."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from tracker.domain.entities import VersionControlEvent
from tracker.infrastructure.models import VersionControlEventModel
from tracker.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_timezone


class VersionControlEventRepository:
    """Append-only store for :class:`VersionControlEvent` records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, event: VersionControlEvent) -> VersionControlEvent:
        model = VersionControlEventModel(
            event_type=event.event_type,
            repo_name=event.repo_name,
            branch_name=event.branch_name,
            author=event.author,
            comment=event.comment,
            changeset_number=event.changeset_number,
            merge_source=event.merge_source,
            merge_destination=event.merge_destination,
            has_conflicts=event.has_conflicts,
            raw_payload=event.raw_payload or {},
            created_at=ensure_app_naive_datetime(event.created_at or now_in_app_timezone()),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_recent(self, *, limit: int = 50) -> Sequence[VersionControlEvent]:
        query = (
            self.session.query(VersionControlEventModel)
            .order_by(
                VersionControlEventModel.created_at.desc(),
                VersionControlEventModel.id.desc(),
            )
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def count(self) -> int:
        return self.session.query(VersionControlEventModel).count()

    @staticmethod
    def _to_entity(model: VersionControlEventModel) -> VersionControlEvent:
        return VersionControlEvent(
            id=model.id,
            event_type=model.event_type,
            repo_name=model.repo_name,
            branch_name=model.branch_name,
            author=model.author,
            comment=model.comment or "",
            changeset_number=model.changeset_number,
            merge_source=model.merge_source,
            merge_destination=model.merge_destination,
            has_conflicts=model.has_conflicts,
            raw_payload=dict(model.raw_payload or {}),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["VersionControlEventRepository"]
