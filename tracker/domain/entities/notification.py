"""Domain entities describing notifications and their delivery."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

EVENT_TYPES: tuple[str, ...] = (
    "issue_created",
    "issue_closed",
    "comment",
    "collaborator_add",
    "assigned",
    "deadline",
    "reminder",
    "task_assigned",
    "merge",
    "checkin",
)

PRIORITY_NORMAL = "normal"
PRIORITY_HIGH = "high"

CHANNEL_IN_APP = "in_app"
CHANNEL_CHAT = "chat"
CHANNEL_MAIL = "mail"


def priority_from_domain(priority: str | None) -> str:
    """Collapse an issue or task priority into a notification priority."""

    if priority and priority.lower() in {"urgent", "high"}:
        return PRIORITY_HIGH
    return PRIORITY_NORMAL


@dataclass(frozen=True)
class Actor:
    """User (or the system) responsible for the triggering action."""

    id: str
    name: str
    email: str = ""


SYSTEM_ACTOR = Actor(id="system", name="System", email="")


@dataclass(frozen=True)
class NotificationEvent:
    """Something that happened and should be fanned out to recipients."""

    type: str
    title: str
    message: str
    link: str | None = None
    priority: str = PRIORITY_NORMAL
    subject_ref: int | None = None
    subject: Mapping[str, Any] = field(default_factory=dict)
    actor: Actor | None = None
    context: Mapping[str, Any] = field(default_factory=dict)
    send_mail: bool = True

    def __post_init__(self) -> None:
        if self.type not in EVENT_TYPES:
            msg = f"Unknown notification type '{self.type}'"
            raise ValueError(msg)
        if self.priority not in (PRIORITY_NORMAL, PRIORITY_HIGH):
            msg = f"Unknown notification priority '{self.priority}'"
            raise ValueError(msg)


@dataclass(frozen=True)
class Recipient:
    """Contact details of a user targeted by a notification."""

    user_id: int
    display_name: str
    email: str | None = None
    chat_handle: str | None = None


@dataclass
class Notification:
    """In-app notification persisted for a specific user."""

    id: int | None
    user_id: int
    type: str
    title: str
    message: str
    link: str | None = None
    priority: str = PRIORITY_NORMAL
    subject_ref: int | None = None
    read: bool = False
    created_at: datetime | None = None
    chat_sent: bool = False


@dataclass(frozen=True)
class DeliveryAttempt:
    """Outcome of a single channel delivery, kept for logging only."""

    channel: str
    recipient_ids: tuple[int, ...]
    succeeded: bool
    error: str | None = None


@dataclass
class DispatchSummary:
    """Result of fanning out one event."""

    created: list[Notification] = field(default_factory=list)
    chat_attempted: bool = False
    chat_succeeded: bool = False
    mail_attempted: bool = False
    mail_succeeded: bool = False
    attempts: list[DeliveryAttempt] = field(default_factory=list)


@dataclass(frozen=True)
class ChatRecipient:
    handle: str
    display_name: str


@dataclass(frozen=True)
class ChatDeliveryRequest:
    """Batched chat delivery for one event."""

    notification_id: int
    type: str
    title: str
    message: str
    link: str | None
    priority: str
    recipients: tuple[ChatRecipient, ...]


@dataclass(frozen=True)
class MailRecipient:
    id: int
    email: str
    name: str


@dataclass(frozen=True)
class MailDeliveryRequest:
    """Batched mail delivery for one event."""

    type: str
    subject_entity: Mapping[str, Any]
    actor: Actor
    recipients: tuple[MailRecipient, ...]
    context: Mapping[str, Any] = field(default_factory=dict)


__all__ = [
    "EVENT_TYPES",
    "PRIORITY_NORMAL",
    "PRIORITY_HIGH",
    "CHANNEL_IN_APP",
    "CHANNEL_CHAT",
    "CHANNEL_MAIL",
    "priority_from_domain",
    "Actor",
    "SYSTEM_ACTOR",
    "NotificationEvent",
    "Recipient",
    "Notification",
    "DeliveryAttempt",
    "DispatchSummary",
    "ChatRecipient",
    "ChatDeliveryRequest",
    "MailRecipient",
    "MailDeliveryRequest",
]
