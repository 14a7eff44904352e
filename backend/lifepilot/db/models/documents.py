"""Per-user JSON document tables."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, String, func

from lifepilot.db.base import Base
from lifepilot.db.types import JSONBCompat


class _UserDocument:
    """One JSON document per user, replaced wholesale on save."""

    user_id = Column(String(128), primary_key=True)
    document = Column(JSONBCompat, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class UserProfileDocument(_UserDocument, Base):
    __tablename__ = "user_profiles"


class AnalysisDocument(_UserDocument, Base):
    __tablename__ = "personalized_analyses"


class ScheduleDocument(_UserDocument, Base):
    __tablename__ = "weekly_schedules"
