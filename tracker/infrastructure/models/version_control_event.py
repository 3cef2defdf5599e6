"""SQLAlchemy model for version-control webhook audit records."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text

from tracker.infrastructure.database import Base
from tracker.utils import now_in_app_naive_datetime


class VersionControlEventModel(Base):
    """Database representation of a normalized check-in or merge event."""

    __tablename__ = "version_control_event"

    id = Column(Integer, primary_key=True, index=True)
    event_type = Column(String(20), nullable=False)
    repo_name = Column(String(255), nullable=True)
    branch_name = Column(String(255), nullable=True)
    author = Column(String(255), nullable=True)
    comment = Column(Text, nullable=False, default="")
    changeset_number = Column(String(20), nullable=True)
    merge_source = Column(String(255), nullable=True)
    merge_destination = Column(String(255), nullable=True)
    has_conflicts = Column(Boolean, nullable=True)
    raw_payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["VersionControlEventModel"]
