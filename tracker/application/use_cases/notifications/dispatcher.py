"""Fan a notification event out to the in-app, chat and mail channels.

Each channel runs independently: its outcome is captured in the returned
:class:`DispatchSummary` and logged, and a failure never stops the remaining
channels. In-app records are written first because chat messages reference the
identifier of a created record.

The dispatcher works inside the caller's session but never commits or rolls
it back. Every in-app insert runs in its own savepoint, so a failed insert
only discards itself; committing is left to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Callable

from sqlalchemy.orm import Session

from tracker.domain.entities import (
    CHANNEL_CHAT,
    CHANNEL_IN_APP,
    CHANNEL_MAIL,
    SYSTEM_ACTOR,
    ChatDeliveryRequest,
    ChatRecipient,
    DeliveryAttempt,
    DispatchSummary,
    MailDeliveryRequest,
    MailRecipient,
    Notification,
    NotificationEvent,
    NotificationPreferences,
    Recipient,
)
from tracker.infrastructure.chat import chat_sender as default_chat_sender
from tracker.infrastructure.email import mail_sender as default_mail_sender
from tracker.infrastructure.notifications import dispatch_notification
from tracker.infrastructure.repositories import (
    NotificationRepository,
    PreferenceRepository,
    UserRepository,
)
from tracker.utils import now_in_app_timezone

from .preferences import PreferenceFilter, category_for, is_enabled

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Deliver one :class:`NotificationEvent` to a set of users."""

    def __init__(
        self,
        *,
        users: UserRepository,
        notifications: NotificationRepository,
        preferences: PreferenceFilter,
        chat_sender: Any,
        mail_sender: Any,
        publish: Callable[[Notification], None] | None = None,
    ) -> None:
        self._users = users
        self._notifications = notifications
        self._preferences = preferences
        self._chat_sender = chat_sender
        self._mail_sender = mail_sender
        self._publish = publish

    def fan_out(
        self, event: NotificationEvent, recipient_ids: Iterable[int | None]
    ) -> DispatchSummary:
        """Deliver ``event`` and report per-channel outcomes. Never raises."""

        summary = DispatchSummary()
        requested = [user_id for user_id in recipient_ids if user_id is not None]
        if not requested:
            return summary

        try:
            recipients = self._resolve_recipients({int(user_id) for user_id in requested})
        except Exception:
            logger.exception(
                "Could not resolve recipients for %s notification (users=%s)",
                event.type,
                requested,
            )
            return summary
        if not recipients:
            return summary

        category = category_for(event.type)
        preference_cache: dict[int, NotificationPreferences | None] = {}

        self._deliver_in_app(event, recipients, summary)
        self._deliver_chat(event, recipients, category, preference_cache, summary)
        self._deliver_mail(event, recipients, category, preference_cache, summary)

        logger.info(
            "Dispatched %s notification: in_app=%d/%d chat=%s mail=%s",
            event.type,
            len(summary.created),
            len(recipients),
            _outcome(summary.chat_attempted, summary.chat_succeeded),
            _outcome(summary.mail_attempted, summary.mail_succeeded),
        )
        return summary

    def _resolve_recipients(self, user_ids: set[int]) -> list[Recipient]:
        # Contact details are read fresh on every dispatch.
        users = self._users.get_map_by_ids(sorted(user_ids))
        missing = user_ids.difference(users)
        if missing:
            logger.warning("Skipping unknown or inactive recipients: %s", sorted(missing))
        return [
            Recipient(
                user_id=user.id,
                display_name=user.name or user.email or str(user.id),
                email=user.email or None,
                chat_handle=user.chat_handle or None,
            )
            for user_id, user in sorted(users.items())
        ]

    def _deliver_in_app(
        self,
        event: NotificationEvent,
        recipients: list[Recipient],
        summary: DispatchSummary,
    ) -> None:
        for recipient in recipients:
            record = Notification(
                id=None,
                user_id=recipient.user_id,
                type=event.type,
                title=event.title,
                message=event.message,
                link=event.link,
                priority=event.priority,
                subject_ref=event.subject_ref,
                read=False,
                created_at=now_in_app_timezone(),
            )
            try:
                with self._notifications.session.begin_nested():
                    saved = self._notifications.add(record)
            except Exception as exc:
                logger.exception(
                    "In-app notification failed for user %s (type=%s)",
                    recipient.user_id,
                    event.type,
                )
                summary.attempts.append(
                    DeliveryAttempt(CHANNEL_IN_APP, (recipient.user_id,), False, str(exc))
                )
                continue

            summary.created.append(saved)
            summary.attempts.append(DeliveryAttempt(CHANNEL_IN_APP, (recipient.user_id,), True))
            if self._publish is not None:
                try:
                    self._publish(saved)
                except Exception:
                    logger.warning(
                        "Realtime push failed for notification %s", saved.id, exc_info=True
                    )

    def _deliver_chat(
        self,
        event: NotificationEvent,
        recipients: list[Recipient],
        category: str | None,
        cache: dict[int, NotificationPreferences | None],
        summary: DispatchSummary,
    ) -> None:
        batch: tuple[int, ...] = ()
        try:
            eligible = [
                recipient
                for recipient in recipients
                if recipient.chat_handle
                and self._enabled(recipient.user_id, category, CHANNEL_CHAT, cache)
            ]
            batch = tuple(recipient.user_id for recipient in eligible)
            if not eligible:
                return
            if not summary.created:
                logger.warning(
                    "Skipping chat delivery for %s: no in-app record to reference", event.type
                )
                return

            summary.chat_attempted = True
            request = ChatDeliveryRequest(
                notification_id=summary.created[0].id,
                type=event.type,
                title=event.title,
                message=event.message,
                link=event.link,
                priority=event.priority,
                recipients=tuple(
                    ChatRecipient(handle=recipient.chat_handle, display_name=recipient.display_name)
                    for recipient in eligible
                ),
            )
            summary.chat_succeeded = bool(self._chat_sender.send(request))
        except Exception as exc:
            summary.chat_succeeded = False
            logger.exception(
                "Chat delivery failed for %s notification (recipients=%s)", event.type, list(batch)
            )
            summary.attempts.append(DeliveryAttempt(CHANNEL_CHAT, batch, False, str(exc)))
            return

        summary.attempts.append(DeliveryAttempt(CHANNEL_CHAT, batch, summary.chat_succeeded))
        if not summary.chat_succeeded:
            logger.error(
                "Chat sender reported failure for %s notification (recipients=%s)",
                event.type,
                list(batch),
            )
        else:
            self._mark_chat_sent(summary, batch)

    def _deliver_mail(
        self,
        event: NotificationEvent,
        recipients: list[Recipient],
        category: str | None,
        cache: dict[int, NotificationPreferences | None],
        summary: DispatchSummary,
    ) -> None:
        if not event.send_mail:
            return

        batch: tuple[int, ...] = ()
        try:
            eligible = [
                recipient
                for recipient in recipients
                if recipient.email
                and self._enabled(recipient.user_id, category, CHANNEL_MAIL, cache)
            ]
            batch = tuple(recipient.user_id for recipient in eligible)
            if not eligible:
                return

            summary.mail_attempted = True
            request = MailDeliveryRequest(
                type=event.type,
                subject_entity=event.subject,
                actor=event.actor or SYSTEM_ACTOR,
                recipients=tuple(
                    MailRecipient(
                        id=recipient.user_id,
                        email=recipient.email,
                        name=recipient.display_name,
                    )
                    for recipient in eligible
                ),
                context=event.context,
            )
            summary.mail_succeeded = bool(self._mail_sender.send(request))
        except Exception as exc:
            summary.mail_succeeded = False
            logger.exception(
                "Mail delivery failed for %s notification (recipients=%s)", event.type, list(batch)
            )
            summary.attempts.append(DeliveryAttempt(CHANNEL_MAIL, batch, False, str(exc)))
            return

        summary.attempts.append(DeliveryAttempt(CHANNEL_MAIL, batch, summary.mail_succeeded))
        if not summary.mail_succeeded:
            logger.error(
                "Mail sender reported failure for %s notification (recipients=%s)",
                event.type,
                list(batch),
            )

    def _mark_chat_sent(self, summary: DispatchSummary, batch: tuple[int, ...]) -> None:
        """Record chat delivery on the in-app records of the chat recipients."""

        notification_ids = [record.id for record in summary.created if record.user_id in batch]
        try:
            with self._notifications.session.begin_nested():
                self._notifications.mark_chat_sent(notification_ids)
        except Exception:
            logger.warning(
                "Could not flag notifications %s as sent to chat", notification_ids, exc_info=True
            )
            return
        for record in summary.created:
            if record.id in notification_ids:
                record.chat_sent = True

    def _enabled(
        self,
        user_id: int,
        category: str | None,
        channel: str,
        cache: dict[int, NotificationPreferences | None],
    ) -> bool:
        if user_id not in cache:
            cache[user_id] = self._preferences.get(user_id)
        return is_enabled(cache[user_id], category, channel)


def _outcome(attempted: bool, succeeded: bool) -> str:
    if not attempted:
        return "skipped"
    return "ok" if succeeded else "failed"


def build_dispatcher(
    session: Session,
    *,
    chat_sender: Any = None,
    mail_sender: Any = None,
    publish: Callable[[Notification], None] | None = dispatch_notification,
) -> NotificationDispatcher:
    """Wire a dispatcher with the default repositories and senders."""

    return NotificationDispatcher(
        users=UserRepository(session),
        notifications=NotificationRepository(session),
        preferences=PreferenceFilter(PreferenceRepository(session)),
        chat_sender=chat_sender or default_chat_sender,
        mail_sender=mail_sender or default_mail_sender,
        publish=publish,
    )


__all__ = ["NotificationDispatcher", "build_dispatcher"]
