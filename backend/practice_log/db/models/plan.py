"""Practice plan ORM model (one row per user)."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, Text, func
from sqlalchemy.dialects.postgresql import UUID

from practice_log.db.base import Base


class Plan(Base):
    __tablename__ = "plan"

    user_id = Column(UUID(as_uuid=True), primary_key=True)
    daily_goal = Column(Integer, nullable=False, default=180)
    scales_minutes = Column(Integer, nullable=False, default=45)
    scales_note = Column(Text, nullable=True)
    review_minutes = Column(Integer, nullable=False, default=45)
    review_note = Column(Text, nullable=True)
    new_minutes = Column(Integer, nullable=False, default=45)
    new_note = Column(Text, nullable=True)
    technique_minutes = Column(Integer, nullable=False, default=45)
    technique_note = Column(Text, nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
