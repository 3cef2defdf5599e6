"""Administrator-only account management."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from tracker.application.errors import ValidationError
from tracker.application.use_cases.users import create_user
from tracker.infrastructure.email import send_new_user_credentials_email
from tracker.infrastructure.repositories import PrivilegedUserRepository
from tracker.infrastructure.security import generate_secure_password
from tracker.interfaces.api.dependencies import get_privileged_user_repository
from tracker.interfaces.api.schemas import UserCreate, UserRead

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@router.post("/users", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register_user(
    user_in: UserCreate,
    accounts: PrivilegedUserRepository = Depends(get_privileged_user_repository),
):
    """Create a user with a generated password and email the credentials."""

    generated_password = generate_secure_password()
    try:
        user = create_user(
            accounts,
            name=user_in.name,
            email=user_in.email,
            password=generated_password,
            chat_handle=user_in.chat_handle,
            role=user_in.role,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    if not send_new_user_credentials_email(user.email, generated_password):
        logger.warning("Could not send the credentials email to user %s", user.id)

    return UserRead.model_validate(user)
