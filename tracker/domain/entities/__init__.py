"""Domain entities exposed by the application."""

from .issue import Issue, Task
from .notification import (
    CHANNEL_CHAT,
    CHANNEL_IN_APP,
    CHANNEL_MAIL,
    EVENT_TYPES,
    PRIORITY_HIGH,
    PRIORITY_NORMAL,
    SYSTEM_ACTOR,
    Actor,
    ChatDeliveryRequest,
    ChatRecipient,
    DeliveryAttempt,
    DispatchSummary,
    MailDeliveryRequest,
    MailRecipient,
    Notification,
    NotificationEvent,
    Recipient,
    priority_from_domain,
)
from .preferences import NotificationPreferences
from .user import ROLE_ADMIN, ROLE_MEMBER, User
from .version_control_event import EVENT_CHECKIN, EVENT_MERGE, VersionControlEvent

__all__ = [
    "Issue",
    "Task",
    "CHANNEL_CHAT",
    "CHANNEL_IN_APP",
    "CHANNEL_MAIL",
    "EVENT_TYPES",
    "PRIORITY_HIGH",
    "PRIORITY_NORMAL",
    "SYSTEM_ACTOR",
    "Actor",
    "ChatDeliveryRequest",
    "ChatRecipient",
    "DeliveryAttempt",
    "DispatchSummary",
    "MailDeliveryRequest",
    "MailRecipient",
    "Notification",
    "NotificationEvent",
    "Recipient",
    "priority_from_domain",
    "NotificationPreferences",
    "ROLE_ADMIN",
    "ROLE_MEMBER",
    "User",
    "EVENT_CHECKIN",
    "EVENT_MERGE",
    "VersionControlEvent",
]
