"""Domain entities for tracked work items."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Issue:
    """Tracked issue with its assignees."""

    id: int | None
    issue_number: int
    title: str
    priority: str
    deadline: str | None
    status: str = "open"
    assignee_ids: list[int] = field(default_factory=list)

    def summary(self) -> dict[str, Any]:
        """Return the fields rendered by notification templates."""

        return {
            "id": self.id,
            "issue_number": self.issue_number,
            "title": self.title,
            "priority": self.priority,
            "deadline": self.deadline,
            "status": self.status,
        }


@dataclass
class Task:
    """Board task assigned to one or more users."""

    id: int | None
    title: str
    priority: str = "normal"
    deadline: str | None = None
    assigned_to: list[int] = field(default_factory=list)

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "priority": self.priority,
            "deadline": self.deadline,
        }


__all__ = ["Issue", "Task"]
