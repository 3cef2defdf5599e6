"""Public helpers for emitting domain notifications."""

from .deadlines import scan_due_tomorrow
from .dispatcher import NotificationDispatcher, build_dispatcher
from .events import (
    notify_collaborators_added,
    notify_comment,
    notify_issue_assigned,
    notify_issue_closed,
    notify_issue_created,
    notify_task_assigned,
    send_test_notification,
)
from .preferences import (
    CATEGORIES,
    PreferenceFilter,
    category_for,
    get_preferences,
    update_preferences,
)

__all__ = [
    "scan_due_tomorrow",
    "NotificationDispatcher",
    "build_dispatcher",
    "notify_collaborators_added",
    "notify_comment",
    "notify_issue_assigned",
    "notify_issue_closed",
    "notify_issue_created",
    "notify_task_assigned",
    "send_test_notification",
    "CATEGORIES",
    "PreferenceFilter",
    "category_for",
    "get_preferences",
    "update_preferences",
]
