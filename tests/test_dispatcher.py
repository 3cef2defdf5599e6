"""Tests for the notification fan-out across in-app, chat and mail."""

from __future__ import annotations

from datetime import timedelta

import pytest

from tracker.application.use_cases.notifications import (
    NotificationDispatcher,
    PreferenceFilter,
    scan_due_tomorrow,
    update_preferences,
)
from tracker.domain.entities import CHANNEL_CHAT, CHANNEL_IN_APP, CHANNEL_MAIL, NotificationEvent
from tracker.infrastructure.models import IssueModel, NotificationModel
from tracker.infrastructure.repositories import (
    NotificationRepository,
    PreferenceRepository,
    UserRepository,
)
from tracker.utils import today_in_app_timezone


def _event(**overrides) -> NotificationEvent:
    values = {
        "type": "assigned",
        "title": "You were assigned to issue #7",
        "message": "Fix login bug",
        "link": "/issues/7",
        "subject": {"issue_number": 7, "title": "Fix login bug"},
    }
    values.update(overrides)
    return NotificationEvent(**values)


def test_empty_recipients_is_a_noop(dispatcher, session, chat_sender, mail_sender) -> None:
    summary = dispatcher.fan_out(_event(), set())

    assert summary.created == []
    assert summary.attempts == []
    assert chat_sender.requests == []
    assert mail_sender.requests == []
    assert session.query(NotificationModel).count() == 0


def test_in_app_record_created_without_contact_details(make_user, dispatcher, chat_sender, mail_sender) -> None:
    user = make_user(email=None, chat_handle=None)

    summary = dispatcher.fan_out(_event(), {user.id})

    assert [record.user_id for record in summary.created] == [user.id]
    assert summary.chat_attempted is False
    assert summary.mail_attempted is False
    assert chat_sender.requests == []
    assert mail_sender.requests == []


def test_in_app_ignores_disabled_preferences(make_user, session, dispatcher, chat_sender, mail_sender) -> None:
    user = make_user(chat_handle="1111")
    update_preferences(
        session,
        user.id,
        {"mail": {"assigned": False}, "chat": {"assigned": False}},
    )

    summary = dispatcher.fan_out(_event(), {user.id})

    assert len(summary.created) == 1
    assert NotificationRepository(session).count_unread(user.id) == 1
    assert chat_sender.requests == []
    assert mail_sender.requests == []


def test_chat_failure_does_not_block_mail(make_user, dispatcher, chat_sender, mail_sender) -> None:
    first = make_user(chat_handle="1111")
    second = make_user(chat_handle="2222")
    chat_sender.error = RuntimeError("webhook down")

    summary = dispatcher.fan_out(_event(), {first.id, second.id})

    assert sorted(record.user_id for record in summary.created) == [first.id, second.id]
    assert summary.chat_attempted is True
    assert summary.chat_succeeded is False
    assert summary.mail_attempted is True
    assert summary.mail_succeeded is True
    assert len(mail_sender.requests) == 1
    failed_chat = [a for a in summary.attempts if a.channel == CHANNEL_CHAT]
    assert failed_chat[0].succeeded is False
    assert failed_chat[0].error == "webhook down"


def test_mail_sender_failure_is_reported(make_user, dispatcher, mail_sender) -> None:
    user = make_user()
    mail_sender.result = False

    summary = dispatcher.fan_out(_event(), {user.id})

    assert summary.mail_attempted is True
    assert summary.mail_succeeded is False
    assert len(summary.created) == 1


def test_chat_is_batched_with_first_record_as_correlation_id(make_user, dispatcher, chat_sender) -> None:
    with_handle = make_user(chat_handle="1111")
    no_handle = make_user(chat_handle=None)
    other_handle = make_user(chat_handle="3333")

    summary = dispatcher.fan_out(_event(), {with_handle.id, no_handle.id, other_handle.id})

    assert len(chat_sender.requests) == 1
    request = chat_sender.requests[0]
    assert [recipient.handle for recipient in request.recipients] == ["1111", "3333"]
    assert request.notification_id == summary.created[0].id
    assert summary.chat_succeeded is True


def test_unresolvable_recipients_are_skipped(make_user, dispatcher, caplog) -> None:
    user = make_user()
    inactive = make_user(is_active=False)

    with caplog.at_level("WARNING"):
        summary = dispatcher.fan_out(_event(), {user.id, inactive.id, 9999})

    assert [record.user_id for record in summary.created] == [user.id]
    assert "9999" in caplog.text


def test_recipient_lookup_failure_returns_empty_summary(session, chat_sender, mail_sender, caplog) -> None:
    class BrokenUsers(UserRepository):
        def get_map_by_ids(self, user_ids, *, include_inactive=False):
            raise RuntimeError("database unavailable")

    dispatcher = NotificationDispatcher(
        users=BrokenUsers(session),
        notifications=NotificationRepository(session),
        preferences=PreferenceFilter(PreferenceRepository(session)),
        chat_sender=chat_sender,
        mail_sender=mail_sender,
    )

    with caplog.at_level("ERROR"):
        summary = dispatcher.fan_out(_event(), {1, 2})

    assert summary.created == []
    assert chat_sender.requests == []
    assert mail_sender.requests == []
    assert "Could not resolve recipients" in caplog.text


def test_in_app_failure_is_isolated_per_recipient(make_user, session, chat_sender, mail_sender) -> None:
    failing = make_user(chat_handle="1111")
    healthy = make_user(chat_handle="2222")

    class FlakyNotifications(NotificationRepository):
        def add(self, notification):
            if notification.user_id == failing.id:
                raise RuntimeError("insert failed")
            return super().add(notification)

    dispatcher = NotificationDispatcher(
        users=UserRepository(session),
        notifications=FlakyNotifications(session),
        preferences=PreferenceFilter(PreferenceRepository(session)),
        chat_sender=chat_sender,
        mail_sender=mail_sender,
    )

    summary = dispatcher.fan_out(_event(), {failing.id, healthy.id})

    assert [record.user_id for record in summary.created] == [healthy.id]
    in_app = {a.recipient_ids: a.succeeded for a in summary.attempts if a.channel == CHANNEL_IN_APP}
    assert in_app == {(failing.id,): False, (healthy.id,): True}
    assert len(chat_sender.requests) == 1
    assert summary.mail_attempted is True


def test_publisher_failure_does_not_affect_summary(make_user, session, chat_sender, mail_sender) -> None:
    user = make_user()

    def explode(_notification):
        raise RuntimeError("socket closed")

    dispatcher = NotificationDispatcher(
        users=UserRepository(session),
        notifications=NotificationRepository(session),
        preferences=PreferenceFilter(PreferenceRepository(session)),
        chat_sender=chat_sender,
        mail_sender=mail_sender,
        publish=explode,
    )

    summary = dispatcher.fan_out(_event(), {user.id})

    assert len(summary.created) == 1
    assert summary.mail_succeeded is True


def test_due_tomorrow_scenario_end_to_end(make_user, make_issue, session, dispatcher, chat_sender, mail_sender) -> None:
    alice = make_user(name="Alice", chat_handle="1111")
    bob = make_user(name="Bob", chat_handle=None)
    update_preferences(session, bob.id, {"mail": {"deadline": False}})
    tomorrow = (today_in_app_timezone() + timedelta(days=1)).isoformat()
    issue = make_issue(
        title="Fix login bug",
        priority="high",
        deadline=tomorrow,
        assignee_ids=[alice.id, bob.id],
    )

    processed = scan_due_tomorrow(session, dispatcher=dispatcher)

    assert processed == 1
    records = NotificationRepository(session)
    assert records.count_for_user(alice.id) == 1
    assert records.count_for_user(bob.id) == 1
    stored = records.list_for_user(alice.id)[0]
    assert stored.type == "reminder"
    assert stored.priority == "high"
    assert stored.link == f"/issues/{issue.issue_number}"

    assert len(chat_sender.requests) == 1
    assert [r.handle for r in chat_sender.requests[0].recipients] == ["1111"]
    assert len(mail_sender.requests) == 1
    assert [r.id for r in mail_sender.requests[0].recipients] == [alice.id]


@pytest.mark.parametrize("channel", [CHANNEL_CHAT, CHANNEL_MAIL])
def test_uncategorised_event_types_are_delivered(make_user, dispatcher, chat_sender, mail_sender, channel) -> None:
    user = make_user(chat_handle="1111")

    dispatcher.fan_out(_event(type="merge"), {user.id})

    sender = chat_sender if channel == CHANNEL_CHAT else mail_sender
    assert len(sender.requests) == 1


def _dispatcher_with(session, notifications, chat_sender, mail_sender) -> NotificationDispatcher:
    return NotificationDispatcher(
        users=UserRepository(session),
        notifications=notifications,
        preferences=PreferenceFilter(PreferenceRepository(session)),
        chat_sender=chat_sender,
        mail_sender=mail_sender,
    )


def test_failed_insert_keeps_callers_pending_work(make_user, session, chat_sender, mail_sender) -> None:
    failing = make_user()
    healthy = make_user()

    class FlakyNotifications(NotificationRepository):
        def add(self, notification):
            if notification.user_id == failing.id:
                self.session.add(
                    NotificationModel(user_id=failing.id, type="assigned", title="partial", message="")
                )
                self.session.flush()
                raise RuntimeError("insert failed")
            return super().add(notification)

    session.add(IssueModel(issue_number=555, title="Pending change", priority="normal"))
    dispatcher = _dispatcher_with(session, FlakyNotifications(session), chat_sender, mail_sender)

    summary = dispatcher.fan_out(_event(), {failing.id, healthy.id})
    session.commit()

    assert [record.user_id for record in summary.created] == [healthy.id]
    assert session.query(IssueModel).filter_by(issue_number=555).count() == 1
    assert session.query(NotificationModel).count() == 1


def test_fan_out_does_not_commit(make_user, session, dispatcher) -> None:
    user = make_user()
    session.add(IssueModel(issue_number=556, title="Pending change", priority="normal"))

    summary = dispatcher.fan_out(_event(), {user.id})
    assert len(summary.created) == 1

    session.rollback()

    assert session.query(IssueModel).filter_by(issue_number=556).count() == 0
    assert session.query(NotificationModel).count() == 0


def test_chat_delivery_is_recorded_on_the_records(make_user, session, dispatcher, chat_sender) -> None:
    with_handle = make_user(chat_handle="1111")
    without_handle = make_user(chat_handle=None)

    summary = dispatcher.fan_out(_event(), {with_handle.id, without_handle.id})
    session.commit()

    flags = {record.user_id: record.chat_sent for record in summary.created}
    assert flags == {with_handle.id: True, without_handle.id: False}
    stored = {
        model.user_id: model.chat_sent for model in session.query(NotificationModel).all()
    }
    assert stored == flags


def test_failed_chat_delivery_is_not_recorded(make_user, session, dispatcher, chat_sender) -> None:
    user = make_user(chat_handle="1111")
    chat_sender.result = False

    summary = dispatcher.fan_out(_event(), {user.id})

    assert summary.chat_succeeded is False
    assert session.query(NotificationModel).one().chat_sent is False


def test_chat_needs_an_in_app_record_but_mail_still_runs(make_user, session, chat_sender, mail_sender) -> None:
    user = make_user(chat_handle="1111")

    class BrokenNotifications(NotificationRepository):
        def add(self, notification):
            raise RuntimeError("notification table unavailable")

    dispatcher = _dispatcher_with(session, BrokenNotifications(session), chat_sender, mail_sender)

    summary = dispatcher.fan_out(_event(), {user.id})

    assert summary.created == []
    assert summary.chat_attempted is False
    assert chat_sender.requests == []
    assert summary.mail_attempted is True
    assert [r.id for r in mail_sender.requests[0].recipients] == [user.id]


def test_malformed_recipient_ids_do_not_raise(dispatcher, chat_sender, mail_sender, caplog) -> None:
    with caplog.at_level("ERROR"):
        summary = dispatcher.fan_out(_event(), ["not-a-number"])

    assert summary.created == []
    assert chat_sender.requests == []
    assert mail_sender.requests == []
    assert "Could not resolve recipients" in caplog.text


def test_events_can_opt_out_of_mail(make_user, dispatcher, mail_sender) -> None:
    user = make_user()

    summary = dispatcher.fan_out(_event(send_mail=False), {user.id})

    assert len(summary.created) == 1
    assert summary.mail_attempted is False
    assert mail_sender.requests == []
