"""ORM models used by the application infrastructure."""

from .user import UserModel
from .issue import IssueModel, TaskModel, issue_assignee_table
from .notification import NotificationModel
from .preference import NotificationPreferenceModel
from .version_control_event import VersionControlEventModel

__all__ = [
    "UserModel",
    "IssueModel",
    "TaskModel",
    "issue_assignee_table",
    "NotificationModel",
    "NotificationPreferenceModel",
    "VersionControlEventModel",
]
