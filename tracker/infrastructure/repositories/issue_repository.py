"""Persistence layer for issues and tasks."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from tracker.domain.entities import Issue, Task
from tracker.infrastructure.models import IssueModel, TaskModel, UserModel


class IssueRepository:
    """Provide the issue queries needed by notification producers."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, issue_id: int) -> Issue | None:
        model = self.session.get(IssueModel, issue_id)
        return self._to_entity(model) if model else None

    def create(self, issue: Issue) -> Issue:
        model = IssueModel(
            issue_number=issue.issue_number,
            title=issue.title,
            priority=issue.priority,
            deadline=issue.deadline,
            status=issue.status,
        )
        self.session.add(model)
        self._apply_assignees(model, issue.assignee_ids)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def add_assignees(self, issue_id: int, user_ids: Iterable[int]) -> Issue:
        model = self.session.get(IssueModel, issue_id)
        if model is None:
            msg = f"Issue with id {issue_id} not found"
            raise ValueError(msg)
        current = {assignee.id for assignee in model.assignees}
        self._apply_assignees(model, [*current, *user_ids])
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_due_on(self, deadline: str) -> Sequence[Issue]:
        """Return issues whose deadline string equals ``deadline``."""

        query = (
            self.session.query(IssueModel)
            .filter(IssueModel.deadline == deadline)
            .order_by(IssueModel.issue_number)
        )
        return [self._to_entity(model) for model in query.all()]

    def _apply_assignees(self, model: IssueModel, user_ids: Iterable[int]) -> None:
        unique_ids = sorted({int(user_id) for user_id in user_ids})
        if not unique_ids:
            model.assignees = []
            return
        model.assignees = (
            self.session.query(UserModel).filter(UserModel.id.in_(unique_ids)).all()
        )

    @staticmethod
    def _to_entity(model: IssueModel) -> Issue:
        return Issue(
            id=model.id,
            issue_number=model.issue_number,
            title=model.title,
            priority=model.priority,
            deadline=model.deadline,
            status=model.status,
            assignee_ids=sorted(assignee.id for assignee in model.assignees),
        )


class TaskRepository:
    """Provide basic persistence for :class:`Task` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, task_id: int) -> Task | None:
        model = self.session.get(TaskModel, task_id)
        return self._to_entity(model) if model else None

    def create(self, task: Task) -> Task:
        model = TaskModel(
            title=task.title,
            priority=task.priority,
            deadline=task.deadline,
            assigned_to=[int(user_id) for user_id in task.assigned_to],
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: TaskModel) -> Task:
        return Task(
            id=model.id,
            title=model.title,
            priority=model.priority,
            deadline=model.deadline,
            assigned_to=list(model.assigned_to or []),
        )


__all__ = ["IssueRepository", "TaskRepository"]
