"""Domain entity holding per-user notification delivery preferences."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class NotificationPreferences:
    """Opt-in flags per channel and category.

    Missing categories are treated as enabled.
    """

    user_id: int
    mail: dict[str, bool] = field(default_factory=dict)
    chat: dict[str, bool] = field(default_factory=dict)
    updated_at: datetime | None = None

    def for_channel(self, channel: str) -> dict[str, bool]:
        if channel == "mail":
            return self.mail
        if channel == "chat":
            return self.chat
        return {}


__all__ = ["NotificationPreferences"]
