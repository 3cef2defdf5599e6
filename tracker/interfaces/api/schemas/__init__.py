from .auth import Token
from .notification import (
    DeliveryAttemptRead,
    DispatchSummaryRead,
    NotificationMarkReadRequest,
    NotificationPage,
    NotificationRead,
    TestNotificationRequest,
    UnreadCount,
    UpdatedCount,
)
from .preferences import PreferencesRead, PreferencesUpdate
from .user import UserCreate, UserRead
from .version_control import VersionControlEventRead

__all__ = [
    "Token",
    "DeliveryAttemptRead",
    "DispatchSummaryRead",
    "NotificationMarkReadRequest",
    "NotificationPage",
    "NotificationRead",
    "TestNotificationRequest",
    "UnreadCount",
    "UpdatedCount",
    "PreferencesRead",
    "PreferencesUpdate",
    "UserCreate",
    "UserRead",
    "VersionControlEventRead",
]
