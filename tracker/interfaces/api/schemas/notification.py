"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[int] = Field(..., min_length=1, description="Notification identifiers")

    def unique_ids(self) -> list[int]:
        """Return the list of identifiers without duplicates preserving order."""

        return list(dict.fromkeys(self.ids))


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: str
    title: str
    message: str
    link: str | None = None
    priority: str
    subject_ref: int | None = None
    read: bool
    created_at: datetime
    chat_sent: bool = False


class NotificationPage(BaseModel):
    notifications: list[NotificationRead]
    has_more: bool


class UnreadCount(BaseModel):
    count: int


class UpdatedCount(BaseModel):
    updated: int


class DeliveryAttemptRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    channel: str
    recipient_ids: list[int]
    succeeded: bool
    error: str | None = None


class DispatchSummaryRead(BaseModel):
    """Outcome of a fan-out, reported back to the caller."""

    model_config = ConfigDict(from_attributes=True)

    created: list[NotificationRead]
    chat_attempted: bool
    chat_succeeded: bool
    mail_attempted: bool
    mail_succeeded: bool
    attempts: list[DeliveryAttemptRead] = Field(default_factory=list)


class TestNotificationRequest(BaseModel):
    """Target of a test notification; defaults to the caller."""

    __test__ = False

    user_id: int | None = None


__all__ = [
    "DeliveryAttemptRead",
    "DispatchSummaryRead",
    "NotificationMarkReadRequest",
    "NotificationPage",
    "NotificationRead",
    "TestNotificationRequest",
    "UnreadCount",
    "UpdatedCount",
]
