"""Read access to the version-control audit trail."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tracker.application.use_cases.version_control import list_version_history
from tracker.domain.entities import User
from tracker.infrastructure.database import get_db
from tracker.interfaces.api.dependencies import get_current_active_user
from tracker.interfaces.api.schemas import VersionControlEventRead

router = APIRouter(prefix="/version-history", tags=["version-history"])


@router.get("/", response_model=list[VersionControlEventRead])
def version_history(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_active_user),
) -> list[VersionControlEventRead]:
    return [
        VersionControlEventRead.model_validate(event)
        for event in list_version_history(db, limit=limit)
    ]
