"""Exceptions raised by use cases and translated at the API boundary."""


class AuthenticationError(Exception):
    """The caller could not be identified."""


class ValidationError(ValueError):
    """Input is malformed or a required value is missing."""


class NotFoundError(ValueError):
    """A referenced entity does not exist."""


class DependencyFailure(RuntimeError):
    """An external store or sender is unavailable."""


__all__ = [
    "AuthenticationError",
    "DependencyFailure",
    "NotFoundError",
    "ValidationError",
]
