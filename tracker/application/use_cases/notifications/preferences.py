"""Per-user delivery preferences for the chat and mail channels."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.orm import Session

from tracker.application.errors import ValidationError
from tracker.domain.entities import CHANNEL_CHAT, CHANNEL_MAIL, NotificationPreferences
from tracker.infrastructure.repositories import PreferenceRepository

logger = logging.getLogger(__name__)

CATEGORIES: tuple[str, ...] = (
    "issue_created",
    "issue_closed",
    "comment",
    "collaborator_add",
    "assigned",
    "deadline",
)
CHANNELS: tuple[str, ...] = (CHANNEL_MAIL, CHANNEL_CHAT)

_CATEGORY_ALIASES = {
    "task_assigned": "assigned",
    "reminder": "deadline",
}


def category_for(event_type: str) -> str | None:
    """Return the preference category covering ``event_type``, if any."""

    if event_type in CATEGORIES:
        return event_type
    return _CATEGORY_ALIASES.get(event_type)


def default_preferences() -> dict[str, dict[str, bool]]:
    return {channel: {category: True for category in CATEGORIES} for channel in CHANNELS}


def is_enabled(
    preferences: NotificationPreferences | None, category: str | None, channel: str
) -> bool:
    """Fail-open check: a missing row, channel or category counts as enabled."""

    if preferences is None or category is None:
        return True
    value = preferences.for_channel(channel).get(category)
    return True if value is None else bool(value)


class PreferenceFilter:
    """Answer ``is_enabled`` questions against the preference store."""

    def __init__(self, repository: PreferenceRepository) -> None:
        self._repository = repository

    def get(self, user_id: int) -> NotificationPreferences | None:
        return self._repository.get(user_id)

    def is_enabled(self, user_id: int, category: str | None, channel: str) -> bool:
        return is_enabled(self._repository.get(user_id), category, channel)


def get_preferences(session: Session, user_id: int) -> dict[str, dict[str, bool]]:
    """Return the stored preferences of ``user_id`` merged over the defaults."""

    merged = default_preferences()
    stored = PreferenceRepository(session).get(user_id)
    if stored is None:
        return merged
    for channel in CHANNELS:
        for category, enabled in stored.for_channel(channel).items():
            if category in merged[channel]:
                merged[channel][category] = bool(enabled)
    return merged


def update_preferences(
    session: Session, user_id: int, prefs: Mapping[str, Any]
) -> dict[str, dict[str, bool]]:
    """Upsert the preferences of ``user_id`` and return the merged result."""

    if not isinstance(prefs, Mapping) or not prefs:
        raise ValidationError("Preferences must be a non-empty object")

    changes: dict[str, dict[str, bool]] = {}
    for channel, values in prefs.items():
        if channel not in CHANNELS:
            raise ValidationError(f"Unknown notification channel '{channel}'")
        if not isinstance(values, Mapping):
            raise ValidationError(f"Preferences for '{channel}' must be an object")
        for category, enabled in values.items():
            if category not in CATEGORIES:
                raise ValidationError(f"Unknown notification category '{category}'")
            if not isinstance(enabled, bool):
                raise ValidationError(f"Preference '{channel}.{category}' must be a boolean")
        changes[channel] = dict(values)

    PreferenceRepository(session).upsert(
        user_id, mail=changes.get(CHANNEL_MAIL), chat=changes.get(CHANNEL_CHAT)
    )
    logger.info("Notification preferences updated for user %s", user_id)
    return get_preferences(session, user_id)


__all__ = [
    "CATEGORIES",
    "CHANNELS",
    "PreferenceFilter",
    "category_for",
    "default_preferences",
    "get_preferences",
    "is_enabled",
    "update_preferences",
]
