"""Scheduled scan that reminds assignees of issues due tomorrow."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from sqlalchemy.orm import Session

from tracker.domain.entities import SYSTEM_ACTOR, Issue, NotificationEvent, priority_from_domain
from tracker.infrastructure.repositories import IssueRepository
from tracker.utils import today_in_app_timezone

from .dispatcher import NotificationDispatcher, build_dispatcher

logger = logging.getLogger(__name__)


def tomorrow_of(today: date) -> str:
    """Return the ISO date string of the calendar day after ``today``."""

    return (today + timedelta(days=1)).isoformat()


def build_deadline_event(issue: Issue) -> NotificationEvent:
    return NotificationEvent(
        type="reminder",
        title=f"Issue #{issue.issue_number} is due tomorrow",
        message=issue.title,
        link=f"/issues/{issue.issue_number}",
        priority=priority_from_domain(issue.priority),
        subject_ref=issue.id,
        subject=issue.summary(),
        actor=SYSTEM_ACTOR,
    )


def scan_due_tomorrow(
    session: Session,
    *,
    today: date | None = None,
    dispatcher: NotificationDispatcher | None = None,
) -> int:
    """Fan out one reminder per issue due tomorrow and return how many were due.

    Running the scan twice on the same day sends the reminders twice; the
    scheduler is expected to trigger it once a day.
    """

    target = tomorrow_of(today or today_in_app_timezone())
    issues = IssueRepository(session).list_due_on(target)
    dispatcher = dispatcher or build_dispatcher(session)

    for issue in issues:
        if not issue.assignee_ids:
            logger.info("Issue #%s is due %s but has no assignees", issue.issue_number, target)
            continue
        dispatcher.fan_out(build_deadline_event(issue), set(issue.assignee_ids))

    session.commit()
    logger.info("Deadline scan for %s found %d due issue(s)", target, len(issues))
    return len(issues)


__all__ = ["build_deadline_event", "scan_due_tomorrow", "tomorrow_of"]
