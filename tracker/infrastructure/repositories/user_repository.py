"""Persistence layer for user data."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from tracker.domain.entities import User
from tracker.infrastructure.models import UserModel


class UserRepository:
    """Read access to users and their contact details."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = (
            self.session.query(UserModel).filter(UserModel.email == email).first()
        )
        return self._to_entity(model) if model else None

    def get_map_by_ids(
        self, user_ids: Sequence[int], *, include_inactive: bool = False
    ) -> dict[int, User]:
        if not user_ids:
            return {}

        unique_ids = {int(user_id) for user_id in user_ids}
        query = self.session.query(UserModel).filter(UserModel.id.in_(unique_ids))
        if not include_inactive:
            query = query.filter(UserModel.is_active.is_(True))
        return {model.id: self._to_entity(model) for model in query.all()}

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            password=model.password,
            chat_handle=model.chat_handle,
            role=model.role,
            is_active=model.is_active,
            created_at=model.created_at,
        )


class PrivilegedUserRepository(UserRepository):
    """User repository allowed to create accounts.

    Only handed to administrator-gated operations.
    """

    def create(self, user: User) -> User:
        model = UserModel(
            name=user.name,
            email=user.email,
            password=user.password,
            chat_handle=user.chat_handle,
            role=user.role,
            is_active=user.is_active,
        )
        if user.created_at is not None:
            model.created_at = user.created_at
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)


__all__ = ["PrivilegedUserRepository", "UserRepository"]
