"""Endpoints to read and update notification delivery preferences."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tracker.application.errors import ValidationError
from tracker.application.use_cases.notifications import get_preferences, update_preferences
from tracker.domain.entities import User
from tracker.infrastructure.database import get_db
from tracker.interfaces.api.dependencies import get_current_active_user
from tracker.interfaces.api.schemas import PreferencesRead, PreferencesUpdate

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("/", response_model=PreferencesRead)
def read_preferences(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PreferencesRead:
    """Return the caller's preferences, all enabled when none are stored."""

    return PreferencesRead(**get_preferences(db, current_user.id))


@router.post("/", response_model=PreferencesRead)
def write_preferences(
    payload: PreferencesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PreferencesRead:
    try:
        merged = update_preferences(db, current_user.id, payload.prefs)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return PreferencesRead(**merged)
