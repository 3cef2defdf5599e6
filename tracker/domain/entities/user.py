"""Domain entity representing a user."""

from dataclasses import dataclass
from datetime import datetime

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


@dataclass
class User:
    """Core attributes describing an application user."""

    id: int | None
    name: str
    email: str | None
    password: str
    chat_handle: str | None
    role: str
    is_active: bool
    created_at: datetime | None

    def has_role(self, role: str) -> bool:
        """Return ``True`` when the user's role matches ``role``."""

        return self.role.lower() == role.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.has_role(ROLE_ADMIN)
