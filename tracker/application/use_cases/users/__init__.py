"""Use cases for managing users."""

from .authenticate_user import AuthenticationStatus, authenticate_user, resolve_token_user
from .create_user import create_user

__all__ = [
    "AuthenticationStatus",
    "authenticate_user",
    "resolve_token_user",
    "create_user",
]
