"""Ingest check-in and merge events posted by the version-control server."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tracker.application.errors import DependencyFailure, ValidationError
from tracker.domain.entities import EVENT_CHECKIN, EVENT_MERGE, VersionControlEvent
from tracker.infrastructure.repositories import VersionControlEventRepository

logger = logging.getLogger(__name__)

_CHANGESET_PATTERN = re.compile(r"cs:(\d+)")
_MERGE_MARKERS = ("merge", "mergeSource", "merge_source")
_EVENT_TYPE_KEYS = ("event", "eventType", "type")


def extract_changeset_number(value: Any) -> str | None:
    """Return the digits following ``cs:`` in ``value``, or ``None``."""

    if not isinstance(value, str):
        return None
    match = _CHANGESET_PATTERN.search(value)
    return match.group(1) if match else None


def _get(payload: Mapping[str, Any], *path: str) -> Any:
    current: Any = payload
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _first_text(*values: Any) -> str | None:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _is_merge(payload: Mapping[str, Any]) -> bool:
    if any(marker in payload for marker in _MERGE_MARKERS):
        return True
    declared = _first_text(*(payload.get(key) for key in _EVENT_TYPE_KEYS))
    return declared is not None and declared.lower() == EVENT_MERGE


def _has_conflicts(payload: Mapping[str, Any]) -> bool | None:
    for value in (
        _get(payload, "merge", "hasConflicts"),
        _get(payload, "merge", "conflicts"),
        payload.get("hasConflicts"),
        payload.get("has_conflicts"),
    ):
        if value is None:
            continue
        if isinstance(value, Sequence) and not isinstance(value, str):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"true", "yes", "1"}
        return bool(value)
    return None


def normalize_payload(payload: Mapping[str, Any]) -> VersionControlEvent:
    """Map a vendor webhook body onto a :class:`VersionControlEvent`."""

    changeset = payload.get("changeset")
    changeset_text = _first_text(
        changeset if isinstance(changeset, str) else None,
        _get(payload, "changeset", "spec"),
        _get(payload, "changeset", "name"),
        payload.get("changesetSpec"),
    )
    merge = _is_merge(payload)

    return VersionControlEvent(
        id=None,
        event_type=EVENT_MERGE if merge else EVENT_CHECKIN,
        repo_name=_first_text(
            _get(payload, "repository", "name"),
            payload.get("repoName"),
            payload.get("repository"),
        ),
        branch_name=_first_text(
            _get(payload, "branch", "name"),
            _get(payload, "changeset", "branch"),
            payload.get("branchName"),
            payload.get("branch"),
        ),
        author=_first_text(
            _get(payload, "user", "name"),
            _get(payload, "owner", "name"),
            payload.get("author"),
        ),
        comment=_first_text(payload.get("comment"), _get(payload, "changeset", "comment")) or "",
        changeset_number=extract_changeset_number(changeset_text),
        merge_source=_first_text(
            _get(payload, "merge", "source"),
            payload.get("mergeSource"),
            payload.get("merge_source"),
        )
        if merge
        else None,
        merge_destination=_first_text(
            _get(payload, "merge", "destination"),
            payload.get("mergeDestination"),
            payload.get("merge_destination"),
        )
        if merge
        else None,
        has_conflicts=_has_conflicts(payload) if merge else None,
        raw_payload=dict(payload),
    )


def token_matches(configured: str | None, provided: str | None) -> bool:
    """Check the shared secret; an unset secret accepts everything."""

    if not configured:
        logger.warning(
            "VCS_WEBHOOK_TOKEN is not set; accepting webhook without authentication"
        )
        return True
    return provided == configured


def ingest_webhook(session: Session, payload: Any) -> VersionControlEvent:
    """Normalize ``payload`` and store it as an audit record."""

    if not isinstance(payload, Mapping):
        raise ValidationError("Webhook body must be a JSON object")

    event = normalize_payload(payload)
    try:
        saved = VersionControlEventRepository(session).create(event)
    except SQLAlchemyError as exc:
        session.rollback()
        raise DependencyFailure("Could not store version-control event") from exc

    logger.info(
        "Stored %s event for %s/%s (cs:%s)",
        saved.event_type,
        saved.repo_name,
        saved.branch_name,
        saved.changeset_number,
    )
    return saved


def list_version_history(session: Session, *, limit: int = 50) -> Sequence[VersionControlEvent]:
    return VersionControlEventRepository(session).list_recent(limit=limit)


__all__ = [
    "extract_changeset_number",
    "ingest_webhook",
    "list_version_history",
    "normalize_payload",
    "token_matches",
]
