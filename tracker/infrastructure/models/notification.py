"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from tracker.infrastructure.database import Base
from tracker.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation for in-app notifications."""

    __tablename__ = "notification"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    type = Column(String(30), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String(255), nullable=True)
    priority = Column(String(10), nullable=False, default="normal")
    subject_ref = Column(Integer, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    chat_sent = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["NotificationModel"]
