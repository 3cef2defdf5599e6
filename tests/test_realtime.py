"""Tests for the websocket publisher used by the in-app channel."""

from __future__ import annotations

from datetime import datetime, timezone

from tracker.domain.entities import Notification
from tracker.infrastructure.notifications import NotificationPublisher, serialize_notification


class FakeManager:
    def __init__(self, connected: bool) -> None:
        self.connected = connected
        self.sent: list = []

    def is_connected(self, user_id: int) -> bool:
        return self.connected

    async def send_to_user(self, user_id, message) -> None:
        self.sent.append((user_id, message))


NOTIFICATION = Notification(
    id=3,
    user_id=9,
    type="deadline",
    title="Issue #4 is due tomorrow",
    message="Ship it",
    link="/issues/4",
    priority="high",
    subject_ref=4,
    read=False,
    created_at=datetime(2024, 5, 10, 9, 30, tzinfo=timezone.utc),
)


def test_serialize_notification() -> None:
    payload = serialize_notification(NOTIFICATION)

    assert payload["id"] == 3
    assert payload["priority"] == "high"
    assert payload["created_at"] == "2024-05-10T09:30:00+00:00"


def test_publisher_skips_users_without_sockets() -> None:
    manager = FakeManager(connected=False)

    NotificationPublisher(manager).dispatch(NOTIFICATION)

    assert manager.sent == []


def test_publisher_outside_event_loop_does_not_raise() -> None:
    manager = FakeManager(connected=True)

    NotificationPublisher(manager).dispatch(NOTIFICATION)

    assert manager.sent == []
