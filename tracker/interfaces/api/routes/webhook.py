"""Receiver for version-control server webhooks."""

import json
import logging

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from tracker.application.errors import DependencyFailure, ValidationError
from tracker.application.use_cases.version_control import ingest_webhook, token_matches
from tracker.config import get_settings
from tracker.infrastructure.database import get_db

router = APIRouter(prefix="/webhook", tags=["webhook"])
logger = logging.getLogger(__name__)


@router.get("", response_class=PlainTextResponse)
def webhook_alive() -> str:
    return "version-control webhook is alive"


@router.post("", response_class=PlainTextResponse)
async def receive_webhook(
    request: Request,
    token: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> PlainTextResponse:
    """Store a check-in or merge event. Does not notify anyone."""

    if not token_matches(get_settings().vcs_webhook_token, token):
        return PlainTextResponse("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)

    try:
        payload = json.loads(await request.body())
    except (UnicodeDecodeError, json.JSONDecodeError):
        return PlainTextResponse("Invalid JSON", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        await run_in_threadpool(ingest_webhook, db, payload)
    except ValidationError:
        return PlainTextResponse("Invalid JSON", status_code=status.HTTP_400_BAD_REQUEST)
    except DependencyFailure:
        logger.exception("Version-control webhook insert error")
        return PlainTextResponse("DB error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return PlainTextResponse("ok")
