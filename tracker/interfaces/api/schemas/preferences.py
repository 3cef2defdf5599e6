"""Pydantic models for notification preferences."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class PreferencesRead(BaseModel):
    """Effective preferences per channel, every category present."""

    mail: dict[str, bool]
    chat: dict[str, bool]


class PreferencesUpdate(BaseModel):
    """Partial update: ``{"prefs": {"mail": {...}, "chat": {...}}}``."""

    prefs: dict[str, Any] = Field(..., description="Channel to category flags")


__all__ = ["PreferencesRead", "PreferencesUpdate"]
