"""Use case for authenticating a user."""

from enum import Enum, auto

from sqlalchemy.orm import Session

from tracker.application.errors import AuthenticationError
from tracker.domain.entities import User
from tracker.infrastructure.repositories import UserRepository
from tracker.infrastructure.security import decode_access_token, verify_password


class AuthenticationStatus(Enum):
    """Possible outcomes when attempting to authenticate a user."""

    SUCCESS = auto()
    INVALID_CREDENTIALS = auto()
    INACTIVE = auto()


def authenticate_user(session: Session, email: str, password: str):
    """Return the authentication result along with the user when possible."""

    user = UserRepository(session).get_by_email(email)

    if not user or not verify_password(password, user.password):
        return None, AuthenticationStatus.INVALID_CREDENTIALS

    if not user.is_active:
        return user, AuthenticationStatus.INACTIVE

    return user, AuthenticationStatus.SUCCESS


def resolve_token_user(session: Session, token: str) -> User:
    """Return the user a bearer token was issued to.

    Raises :class:`AuthenticationError` when the token is invalid, expired or
    names an unknown user.
    """

    try:
        claims = decode_access_token(token)
    except ValueError as exc:
        raise AuthenticationError("Invalid credentials") from exc

    email = claims.get("sub")
    if not isinstance(email, str) or not email:
        raise AuthenticationError("Invalid credentials")

    user = UserRepository(session).get_by_email(email)
    if user is None:
        raise AuthenticationError("User not found")
    return user
