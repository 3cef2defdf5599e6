"""Pydantic models for version-control audit records."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class VersionControlEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_type: str
    repo_name: str | None
    branch_name: str | None
    author: str | None
    comment: str
    changeset_number: str | None
    merge_source: str | None = None
    merge_destination: str | None = None
    has_conflicts: bool | None = None
    created_at: datetime


__all__ = ["VersionControlEventRead"]
