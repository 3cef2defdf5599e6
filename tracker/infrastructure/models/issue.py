"""SQLAlchemy models for issues and tasks."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from tracker.infrastructure.database import Base

issue_assignee_table = Table(
    "issue_assignee",
    Base.metadata,
    Column("issue_id", Integer, ForeignKey("issue.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
)


class IssueModel(Base):
    """Database representation of a tracked issue."""

    __tablename__ = "issue"

    id = Column(Integer, primary_key=True, index=True)
    issue_number = Column(Integer, nullable=False, unique=True, index=True)
    title = Column(String(200), nullable=False)
    priority = Column(String(10), nullable=False, default="normal")
    # ISO ``YYYY-MM-DD``; compared as a string by the deadline scan.
    deadline = Column(String(10), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="open")

    assignees = relationship("UserModel", secondary=issue_assignee_table, lazy="selectin")


class TaskModel(Base):
    """Database representation of a board task."""

    __tablename__ = "task"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    priority = Column(String(10), nullable=False, default="normal")
    deadline = Column(String(10), nullable=True)
    assigned_to = Column(JSON, nullable=False, default=list)


__all__ = ["IssueModel", "TaskModel", "issue_assignee_table"]
