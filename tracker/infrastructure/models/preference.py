"""SQLAlchemy model for notification delivery preferences."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer

from tracker.infrastructure.database import Base


class NotificationPreferenceModel(Base):
    """One row per user holding opt-in flags for the mail and chat channels."""

    __tablename__ = "notification_preference"

    user_id = Column(Integer, ForeignKey("user.id"), primary_key=True)
    mail = Column(JSON, nullable=False, default=dict)
    chat = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationPreferenceModel"]
