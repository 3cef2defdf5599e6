"""Domain entity describing a normalized version-control webhook event."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

EVENT_MERGE = "merge"
EVENT_CHECKIN = "checkin"


@dataclass
class VersionControlEvent:
    """Audit record of a check-in or merge reported by the version-control server."""

    id: int | None
    event_type: str
    repo_name: str | None
    branch_name: str | None
    author: str | None
    comment: str
    changeset_number: str | None
    merge_source: str | None = None
    merge_destination: str | None = None
    has_conflicts: bool | None = None
    raw_payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


__all__ = ["EVENT_CHECKIN", "EVENT_MERGE", "VersionControlEvent"]
