"""Utility helpers for sending transactional email notifications via SendGrid."""

from __future__ import annotations

import json
import logging
from html import escape
from typing import Any, Callable, Mapping

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from tracker.config import get_settings
from tracker.domain.entities import MailDeliveryRequest

logger = logging.getLogger(__name__)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _log_sendgrid_exception(exc: Exception) -> None:
    """Log a SendGrid API error with helpful troubleshooting details."""

    status_code = getattr(exc, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(exc, "body", None))

    if status_code and details:
        logger.error(
            "SendGrid API request failed with status %s: %s", status_code, details
        )
    elif status_code:
        logger.error("SendGrid API request failed with status %s", status_code)
    elif details:
        logger.error("SendGrid API request failed: %s", details)
    else:
        logger.exception("Error sending email via SendGrid: %s", exc)


def _log_unsuccessful_response(response: Any) -> None:
    status_code = getattr(response, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(response, "body", None))

    if details:
        logger.error(
            "SendGrid API responded with status %s: %s", status_code, details
        )
    else:
        logger.error("SendGrid API responded with status %s", status_code)


def send_email(subject: str, html_content: str, recipient: str) -> bool:
    """Send an email using the configured SendGrid credentials."""

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        response = client.send(message)
    except Exception as exc:  # pragma: no cover - network failures depend on environment
        _log_sendgrid_exception(exc)
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_unsuccessful_response(response)
        return False

    return True


def send_new_user_credentials_email(email: str, password: str) -> bool:
    """Send a welcome email containing the credentials for the new user."""

    subject = "Welcome to the tracker"
    html_content = (
        "<p>Hi,</p>"
        "<p>Your account has been created.</p>"
        f"<p><strong>Email:</strong> {escape(email)}<br>"
        f"<strong>Password:</strong> {escape(password)}</p>"
        "<p>Please sign in and change your password as soon as possible.</p>"
    )
    return send_email(subject, html_content, email)


# ---------------------------------------------------------------------------
# Notification templates
# ---------------------------------------------------------------------------


def _absolute_url(path: str) -> str:
    if path.startswith("http"):
        return path
    return f"{get_settings().app_url.rstrip('/')}{path}"


def _issue_url(issue: Mapping[str, Any]) -> str:
    number = issue.get("issue_number")
    return _absolute_url(f"/issues/{number}" if number else "/issues")


def _issue_label(issue: Mapping[str, Any], fallback: str = "Issue") -> str:
    return f"#{issue.get('issue_number') or fallback}"


def _layout(heading: str, intro: str, title: str, url: str, extra: str = "") -> str:
    return (
        '<div style="font-family:sans-serif;padding:20px;background-color:#f9fafb">'
        '<div style="max-width:600px;margin:0 auto;background-color:white;padding:32px">'
        f"<h2>{escape(heading)}</h2>"
        f"<p>{intro}</p>"
        f'<p style="font-size:18px;font-weight:600">{escape(title)}</p>'
        f"{extra}"
        f'<p><a href="{escape(url, quote=True)}">Open in tracker</a></p>'
        "</div></div>"
    )


def _render_issue_created(request: MailDeliveryRequest) -> tuple[str, str]:
    issue = request.subject_entity
    subject = f"Issue {_issue_label(issue, 'New')}: Issue Created"
    intro = f"{escape(request.actor.name)} created a new issue assigned to you."
    return subject, _layout("New issue", intro, issue.get("title", ""), _issue_url(issue))


def _render_issue_closed(request: MailDeliveryRequest) -> tuple[str, str]:
    issue = request.subject_entity
    subject = f"Issue {_issue_label(issue)}: Closed"
    intro = f"{escape(request.actor.name)} closed this issue."
    closing = request.context.get("closing_message")
    extra = f"<blockquote>{escape(closing)}</blockquote>" if closing else ""
    return subject, _layout("Issue closed", intro, issue.get("title", ""), _issue_url(issue), extra)


def _render_comment(request: MailDeliveryRequest) -> tuple[str, str]:
    issue = request.subject_entity
    subject = f"Issue {_issue_label(issue)}: New Comment"
    intro = f"{escape(request.actor.name)} commented on an issue you are assigned to."
    preview = request.context.get("comment", "")
    extra = f"<blockquote>{escape(preview)}</blockquote>" if preview else ""
    return subject, _layout("New comment", intro, issue.get("title", ""), _issue_url(issue), extra)


def _render_collaborator_add(request: MailDeliveryRequest) -> tuple[str, str]:
    issue = request.subject_entity
    subject = f"Issue {_issue_label(issue)}: Added as Collaborator"
    intro = f"{escape(request.actor.name)} added you as a collaborator."
    return subject, _layout("Added as collaborator", intro, issue.get("title", ""), _issue_url(issue))


def _render_assigned(request: MailDeliveryRequest) -> tuple[str, str]:
    issue = request.subject_entity
    subject = f"Issue {_issue_label(issue, 'New')}: Assigned to You"
    intro = f"{escape(request.actor.name)} assigned you to an issue."
    return subject, _layout("Issue assigned", intro, issue.get("title", ""), _issue_url(issue))


def _render_task_assigned(request: MailDeliveryRequest) -> tuple[str, str]:
    task = request.subject_entity
    title = task.get("title", "")
    subject = f"Task: {title} - Assigned to You"
    intro = f"{escape(request.actor.name)} assigned you to a task."
    return subject, _layout("Task assigned", intro, title, _absolute_url("/boards"))


def _render_deadline(request: MailDeliveryRequest) -> tuple[str, str]:
    issue = request.subject_entity
    subject = f"Issue {_issue_label(issue)}: Deadline Tomorrow"
    intro = f"Issue {escape(_issue_label(issue))} is due <strong>tomorrow</strong>."
    extra = ""
    if issue.get("deadline"):
        extra += f"<p>Deadline: {escape(str(issue['deadline']))}</p>"
    if issue.get("priority"):
        extra += f"<p>Priority: {escape(str(issue['priority']))}</p>"
    return subject, _layout("Deadline approaching", intro, issue.get("title", ""), _issue_url(issue), extra)


TEMPLATES: dict[str, Callable[[MailDeliveryRequest], tuple[str, str]]] = {
    "issue_created": _render_issue_created,
    "issue_closed": _render_issue_closed,
    "comment": _render_comment,
    "collaborator_add": _render_collaborator_add,
    "assigned": _render_assigned,
    "task_assigned": _render_task_assigned,
    "deadline": _render_deadline,
    "reminder": _render_deadline,
}


def render_notification_email(request: MailDeliveryRequest) -> tuple[str, str]:
    """Return ``(subject, html)`` for ``request`` using the template of its type."""

    renderer = TEMPLATES.get(request.type)
    if renderer is None:
        raise ValueError(f"No email template for notification type '{request.type}'")
    return renderer(request)


class SendGridMailSender:
    """Deliver notification emails, one message per recipient."""

    def __init__(self, send: Callable[[str, str, str], bool] | None = None) -> None:
        self._send = send or send_email

    def send(self, request: MailDeliveryRequest) -> bool:
        """Return ``True`` when every recipient's message was accepted."""

        if not request.recipients:
            return True

        try:
            subject, html_content = render_notification_email(request)
        except ValueError:
            logger.warning("Skipping email for unsupported type %s", request.type)
            return False

        delivered = 0
        for recipient in request.recipients:
            if self._send(subject, html_content, recipient.email):
                delivered += 1
            else:
                logger.warning(
                    "Email for %s notification was not delivered to user %s",
                    request.type,
                    recipient.id,
                )
        return delivered == len(request.recipients)


mail_sender = SendGridMailSender()


__all__ = [
    "SendGridMailSender",
    "TEMPLATES",
    "mail_sender",
    "render_notification_email",
    "send_email",
    "send_new_user_credentials_email",
]
