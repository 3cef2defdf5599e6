"""Build notification events for issue and task lifecycle actions.

The ``notify_*`` helpers run inside the producer's session and leave the
commit to the producer, so the notifications land together with the change
that caused them.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from tracker.application.errors import NotFoundError
from tracker.domain.entities import (
    PRIORITY_HIGH,
    Actor,
    DispatchSummary,
    Issue,
    NotificationEvent,
    Task,
    priority_from_domain,
)
from tracker.infrastructure.repositories import UserRepository

from .dispatcher import NotificationDispatcher, build_dispatcher

_COMMENT_PREVIEW_LENGTH = 100


def _issue_link(issue: Issue) -> str:
    return f"/issues/{issue.issue_number}"


def _dispatch(
    session: Session,
    event: NotificationEvent,
    recipient_ids: Iterable[int],
    dispatcher: NotificationDispatcher | None,
) -> DispatchSummary:
    dispatcher = dispatcher or build_dispatcher(session)
    return dispatcher.fan_out(event, set(recipient_ids))


def notify_issue_created(
    session: Session,
    *,
    issue: Issue,
    actor: Actor,
    dispatcher: NotificationDispatcher | None = None,
) -> DispatchSummary:
    """Tell the assignees of a new issue about it."""

    event = NotificationEvent(
        type="issue_created",
        title=f"Issue #{issue.issue_number} created",
        message=issue.title,
        link=_issue_link(issue),
        priority=priority_from_domain(issue.priority),
        subject_ref=issue.id,
        subject=issue.summary(),
        actor=actor,
    )
    return _dispatch(session, event, issue.assignee_ids, dispatcher)


def notify_issue_closed(
    session: Session,
    *,
    issue: Issue,
    actor: Actor,
    closing_message: str | None = None,
    dispatcher: NotificationDispatcher | None = None,
) -> DispatchSummary:
    """Tell the assignees that ``issue`` was closed."""

    event = NotificationEvent(
        type="issue_closed",
        title=f"Issue #{issue.issue_number} closed",
        message=closing_message or issue.title,
        link=_issue_link(issue),
        priority=priority_from_domain(issue.priority),
        subject_ref=issue.id,
        subject=issue.summary(),
        actor=actor,
        context={"closing_message": closing_message} if closing_message else {},
    )
    return _dispatch(session, event, issue.assignee_ids, dispatcher)


def notify_issue_assigned(
    session: Session,
    *,
    issue: Issue,
    user_ids: Iterable[int],
    actor: Actor,
    dispatcher: NotificationDispatcher | None = None,
) -> DispatchSummary:
    """Tell newly assigned users about ``issue``."""

    event = NotificationEvent(
        type="assigned",
        title=f"You were assigned to issue #{issue.issue_number}",
        message=issue.title,
        link=_issue_link(issue),
        priority=priority_from_domain(issue.priority),
        subject_ref=issue.id,
        subject=issue.summary(),
        actor=actor,
    )
    return _dispatch(session, event, user_ids, dispatcher)


def notify_collaborators_added(
    session: Session,
    *,
    issue: Issue,
    user_ids: Iterable[int],
    actor: Actor,
    dispatcher: NotificationDispatcher | None = None,
) -> DispatchSummary:
    event = NotificationEvent(
        type="collaborator_add",
        title=f"You were added to issue #{issue.issue_number}",
        message=issue.title,
        link=_issue_link(issue),
        priority=priority_from_domain(issue.priority),
        subject_ref=issue.id,
        subject=issue.summary(),
        actor=actor,
    )
    return _dispatch(session, event, user_ids, dispatcher)


def comment_preview(text: str) -> str:
    """Trim ``text`` to the preview length used in notifications."""

    if len(text) > _COMMENT_PREVIEW_LENGTH:
        return text[:_COMMENT_PREVIEW_LENGTH] + "..."
    return text


def notify_comment(
    session: Session,
    *,
    issue: Issue,
    comment_text: str,
    actor: Actor,
    actor_user_id: int | None = None,
    dispatcher: NotificationDispatcher | None = None,
) -> DispatchSummary:
    """Tell the assignees, except the commenter, about a new comment."""

    preview = comment_preview(comment_text)
    recipients = [user_id for user_id in issue.assignee_ids if user_id != actor_user_id]
    event = NotificationEvent(
        type="comment",
        title=f"New comment on issue #{issue.issue_number}",
        message=preview,
        link=_issue_link(issue),
        priority=priority_from_domain(issue.priority),
        subject_ref=issue.id,
        subject=issue.summary(),
        actor=actor,
        context={"comment": preview},
    )
    return _dispatch(session, event, recipients, dispatcher)


def notify_task_assigned(
    session: Session,
    *,
    task: Task,
    user_ids: Iterable[int],
    actor: Actor,
    dispatcher: NotificationDispatcher | None = None,
) -> DispatchSummary:
    event = NotificationEvent(
        type="task_assigned",
        title="You were assigned a task",
        message=task.title,
        link="/boards",
        priority=priority_from_domain(task.priority),
        subject_ref=task.id,
        subject=task.summary(),
        actor=actor,
    )
    return _dispatch(session, event, user_ids, dispatcher)


def send_test_notification(
    session: Session,
    *,
    user_id: int,
    dispatcher: NotificationDispatcher | None = None,
) -> DispatchSummary:
    """Send a high priority test notification to ``user_id`` in-app and to chat."""

    if UserRepository(session).get(user_id) is None:
        raise NotFoundError("User not found")

    event = NotificationEvent(
        type="assigned",
        title="Test Notification",
        message="This is a test notification from the API",
        link="/issues",
        priority=PRIORITY_HIGH,
        subject={"issue_number": None, "title": "Test Notification"},
        actor=Actor(id="system", name="System"),
        send_mail=False,
    )
    summary = _dispatch(session, event, [user_id], dispatcher)
    session.commit()
    return summary


__all__ = [
    "comment_preview",
    "notify_collaborators_added",
    "notify_comment",
    "notify_issue_assigned",
    "notify_issue_closed",
    "notify_issue_created",
    "notify_task_assigned",
    "send_test_notification",
]
