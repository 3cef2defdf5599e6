"""Chat notifications delivered through a Discord incoming webhook."""

from __future__ import annotations

import logging
from typing import Any, Callable

import requests

from tracker.config import get_settings
from tracker.domain.entities import PRIORITY_HIGH, ChatDeliveryRequest

logger = logging.getLogger(__name__)

_REQUEST_TIMEOUT_SECONDS = 10

_EMOJI_BY_TYPE: dict[str, str] = {
    "issue_created": "\U0001F41B",
    "issue_closed": "✅",
    "comment": "\U0001F4AC",
    "collaborator_add": "\U0001F91D",
    "assigned": "\U0001F41B",
    "deadline": "⏰",
    "reminder": "\U0001F514",
    "task_assigned": "\U0001F4CB",
    "merge": "\U0001F500",
    "checkin": "⬆️",
}
_DEFAULT_EMOJI = "\U0001F4CC"


def format_chat_message(request: ChatDeliveryRequest, *, app_url: str) -> str:
    """Render the message body posted to the chat channel."""

    emoji = _EMOJI_BY_TYPE.get(request.type, _DEFAULT_EMOJI)
    lines = [f"{emoji} **{request.title}**"]
    if request.priority == PRIORITY_HIGH:
        lines.append("\U0001F534 **HIGH PRIORITY**")
    lines.append(request.message)
    mentions = " ".join(f"<@{recipient.handle}>" for recipient in request.recipients)
    lines.append(f"\U0001F464 {mentions}")
    if request.link:
        link = request.link
        if not link.startswith("http"):
            link = f"{app_url.rstrip('/')}{link}"
        lines.append(f"\U0001F517 {link}")
    return "\n".join(lines)


class DiscordChatSender:
    """Post batched notifications to the configured Discord webhook."""

    def __init__(self, post: Callable[..., Any] | None = None) -> None:
        self._post = post or requests.post

    def send(self, request: ChatDeliveryRequest) -> bool:
        settings = get_settings()
        if not settings.discord_webhook_url:
            logger.warning("Discord webhook URL not configured; skipping chat notification")
            return False

        recipients = tuple(recipient for recipient in request.recipients if recipient.handle)
        if not recipients:
            logger.info("No chat handles for notification %s; nothing to send", request.notification_id)
            return True

        content = format_chat_message(request, app_url=settings.app_url)
        try:
            response = self._post(
                settings.discord_webhook_url,
                json={"content": content},
                timeout=_REQUEST_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            logger.error(
                "Discord webhook request failed for notification %s: %s",
                request.notification_id,
                exc,
            )
            return False

        if not response.ok:
            logger.error(
                "Discord webhook responded with status %s: %s",
                response.status_code,
                response.text,
            )
            return False

        logger.info("Discord notification sent for: %s", request.title)
        return True


chat_sender = DiscordChatSender()


__all__ = ["DiscordChatSender", "chat_sender", "format_chat_message"]
