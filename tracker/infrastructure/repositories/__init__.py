"""Repository implementations for infrastructure layer."""

from .issue_repository import IssueRepository, TaskRepository
from .notification_repository import NotificationRepository
from .preference_repository import PreferenceRepository
from .user_repository import PrivilegedUserRepository, UserRepository
from .version_control_event_repository import VersionControlEventRepository

__all__ = [
    "IssueRepository",
    "TaskRepository",
    "NotificationRepository",
    "PreferenceRepository",
    "PrivilegedUserRepository",
    "UserRepository",
    "VersionControlEventRepository",
]
