"""Practice session ORM model: minutes logged for one (user, day, category)."""
from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Date, Index, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from practice_log.db.base import Base


class PracticeSession(Base):
    __tablename__ = "sessions"
    __table_args__ = (
        UniqueConstraint("user_id", "session_date", "category", name="uq_sessions_user_date_category"),
        CheckConstraint("minutes >= 0", name="ck_sessions_minutes_non_negative"),
        CheckConstraint("category IN ('scales', 'review', 'new', 'technique')", name="ck_sessions_category"),
        Index("ix_sessions_user_id_session_date", "user_id", "session_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(UUID(as_uuid=True), nullable=False)
    session_date = Column(Date, nullable=False)
    category = Column(String(length=20), nullable=False)
    minutes = Column(Integer, nullable=False, default=0)
