"""Pydantic models for user management."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=120, pattern=r"^[^@\s]+@[^@\s]+$")
    chat_handle: str | None = Field(default=None, max_length=64)
    role: str = "member"


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str | None
    chat_handle: str | None
    role: str
    is_active: bool
    created_at: datetime | None = None


__all__ = ["UserCreate", "UserRead"]
