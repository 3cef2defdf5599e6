"""Use case for creating users."""

from tracker.application.errors import ValidationError
from tracker.domain.entities import ROLE_ADMIN, ROLE_MEMBER, User
from tracker.infrastructure.repositories import PrivilegedUserRepository
from tracker.infrastructure.security import get_password_hash
from tracker.utils import now_in_app_naive_datetime


def create_user(
    accounts: PrivilegedUserRepository,
    *,
    name: str,
    email: str,
    password: str,
    chat_handle: str | None = None,
    role: str = ROLE_MEMBER,
) -> User:
    """Create a new user ensuring unique email addresses.

    ``accounts`` is the elevated repository; callers must already have
    checked that the acting user is an administrator.
    """

    if role not in (ROLE_ADMIN, ROLE_MEMBER):
        raise ValidationError("Role not allowed")

    if accounts.get_by_email(email):
        raise ValidationError("Email address is already registered")

    user = User(
        id=None,
        name=name,
        email=email,
        password=get_password_hash(password),
        chat_handle=chat_handle or None,
        role=role,
        is_active=True,
        created_at=now_in_app_naive_datetime(),
    )
    return accounts.create(user)
