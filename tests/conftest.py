"""Shared fixtures: a throwaway SQLite database, users and fake channel senders."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

TEST_DB_PATH = Path(tempfile.gettempdir()) / "tracker_notifications_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["APP_TIMEZONE"] = "UTC+00:00"
for _name in (
    "SENDGRID_API_KEY",
    "SENDGRID_SENDER",
    "DISCORD_WEBHOOK_URL",
    "VCS_WEBHOOK_TOKEN",
    "CRON_SECRET",
):
    os.environ.pop(_name, None)

from tracker.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from fastapi.testclient import TestClient  # noqa: E402

from tracker.application.use_cases.notifications import build_dispatcher  # noqa: E402
from tracker.domain.entities import ROLE_MEMBER, Issue, User  # noqa: E402
from tracker.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from tracker.infrastructure.repositories import (  # noqa: E402
    IssueRepository,
    PrivilegedUserRepository,
)
from tracker.infrastructure.security import create_access_token, get_password_hash  # noqa: E402
from main import create_app  # noqa: E402


class RecordingSender:
    """Stand-in for a chat or mail sender that records every request."""

    def __init__(self, result: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.requests: list = []

    def send(self, request) -> bool:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture(autouse=True)
def reset_database():
    """Start every test from an empty schema."""

    Base.metadata.drop_all(bind=engine)
    initialize_database()
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def configure(monkeypatch: pytest.MonkeyPatch):
    """Override settings through the environment for a single test."""

    def _configure(**values: str) -> None:
        for key, value in values.items():
            monkeypatch.setenv(key.upper(), value)
        reset_settings_cache()

    yield _configure
    reset_settings_cache()


@pytest.fixture
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def make_user(session):
    counter = {"value": 0}

    def _make_user(
        *,
        name: str | None = None,
        email: str | None = "",
        chat_handle: str | None = None,
        role: str = ROLE_MEMBER,
        password: str = "StrongPass123",
        is_active: bool = True,
    ) -> User:
        counter["value"] += 1
        index = counter["value"]
        return PrivilegedUserRepository(session).create(
            User(
                id=None,
                name=name or f"User {index}",
                email=f"user{index}@example.com" if email == "" else email,
                password=get_password_hash(password),
                chat_handle=chat_handle,
                role=role,
                is_active=is_active,
                created_at=None,
            )
        )

    return _make_user


@pytest.fixture
def make_issue(session):
    counter = {"value": 100}

    def _make_issue(
        *,
        title: str = "Broken build",
        priority: str = "normal",
        deadline: str | None = None,
        assignee_ids: list[int] | None = None,
    ) -> Issue:
        counter["value"] += 1
        return IssueRepository(session).create(
            Issue(
                id=None,
                issue_number=counter["value"],
                title=title,
                priority=priority,
                deadline=deadline,
                assignee_ids=list(assignee_ids or []),
            )
        )

    return _make_issue


def auth_headers_for(user: User) -> dict[str, str]:
    token = create_access_token(user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return auth_headers_for


@pytest.fixture
def chat_sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def mail_sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def dispatcher(session, chat_sender, mail_sender):
    return build_dispatcher(
        session, chat_sender=chat_sender, mail_sender=mail_sender, publish=None
    )
