"""Endpoint invoked by the external scheduler."""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session

from tracker.application.use_cases.notifications import scan_due_tomorrow
from tracker.config import get_settings
from tracker.infrastructure.database import get_db

router = APIRouter(prefix="/cron", tags=["cron"])
logger = logging.getLogger(__name__)


def _provided_secret(token: str | None, authorization: str | None) -> str | None:
    if token:
        return token
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


@router.get("/deadline-reminder")
def deadline_reminder(
    token: str | None = Query(default=None),
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> dict[str, object]:
    """Remind assignees of issues due tomorrow. Trigger at most once a day."""

    secret = get_settings().cron_secret
    if not secret:
        logger.warning("CRON_SECRET is not set; running deadline scan without authentication")
    elif _provided_secret(token, authorization) != secret:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    processed = scan_due_tomorrow(db)
    return {"ok": True, "processed": processed}
