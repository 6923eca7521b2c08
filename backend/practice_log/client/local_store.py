"""Durable on-device cache of session entries and plans.

Two keyed collections live in a local SQLite file:

* ``sessions`` keyed by entry key (remote id, or a ``local-`` placeholder before
  the remote store assigns one), indexed by user and by user + date.
* ``weekly_plans`` keyed by ``<user>:<week_start>``, indexed by user + week.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import Boolean, Column, Index, Integer, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import JSON

from practice_log.client.dates import local_iso, today_local, week_start
from practice_log.client.models import PlanItem, SessionEntry, WeeklyPlan
from practice_log.core.constants import CATEGORIES

logger = logging.getLogger(__name__)

LocalBase = declarative_base()


class LocalSessionRow(LocalBase):
    __tablename__ = "sessions"
    __table_args__ = (
        Index("ix_local_sessions_user_id", "user_id"),
        Index("ix_local_sessions_user_date", "user_id", "session_date"),
    )

    key = Column(String, primary_key=True)
    user_id = Column(String, nullable=False)
    session_date = Column(String(10), nullable=False)
    category = Column(String(20), nullable=False)
    minutes = Column(Integer, nullable=False, default=0)
    remote_id = Column(Integer, nullable=True)
    synced = Column(Boolean, nullable=False, default=False)


class LocalPlanRow(LocalBase):
    __tablename__ = "weekly_plans"
    __table_args__ = (Index("ix_local_weekly_plans_user_week", "user_id", "week_start"),)

    key = Column(String, primary_key=True)
    user_id = Column(String, nullable=False)
    week_start = Column(String(10), nullable=False)
    daily_goal = Column(Integer, nullable=False)
    items = Column(JSON, nullable=False, default=dict)
    updated_at = Column(Text, nullable=True)
    synced = Column(Boolean, nullable=False, default=False)


class LocalStore:
    """Synchronous key-value store over SQLite; every call is a short local transaction."""

    def __init__(self, url: str = "sqlite:///practice-log.db") -> None:
        if url in ("sqlite://", "sqlite:///:memory:"):
            self._engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                future=True,
            )
        else:
            self._engine = create_engine(url, future=True)

        LocalBase.metadata.create_all(bind=self._engine)
        self._session_factory = sessionmaker(bind=self._engine, autoflush=False, expire_on_commit=False, future=True)

    def close(self) -> None:
        self._engine.dispose()

    # sessions

    def put_sessions(self, user_id: str, entries: Iterable[SessionEntry]) -> None:
        with self._session_factory() as db:
            for entry in entries:
                db.merge(_session_row(user_id, entry))
            db.commit()

    def get_session(self, key: str) -> Optional[SessionEntry]:
        with self._session_factory() as db:
            row = db.get(LocalSessionRow, key)
            return _session_entry(row) if row else None

    def sessions_for_user(
        self,
        user_id: str,
        *,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[SessionEntry]:
        with self._session_factory() as db:
            query = db.query(LocalSessionRow).filter(LocalSessionRow.user_id == user_id)
            if start:
                query = query.filter(LocalSessionRow.session_date >= start)
            if end:
                query = query.filter(LocalSessionRow.session_date <= end)
            rows = query.order_by(LocalSessionRow.session_date, LocalSessionRow.key).all()
            return [_session_entry(row) for row in rows]

    def sessions_for_date(self, user_id: str, session_date: str) -> List[SessionEntry]:
        entries = self.sessions_for_user(user_id, start=session_date, end=session_date)
        return sorted(entries, key=lambda entry: CATEGORIES.index(entry.category))

    def delete_session(self, key: str) -> bool:
        with self._session_factory() as db:
            row = db.get(LocalSessionRow, key)
            if not row:
                return False
            db.delete(row)
            db.commit()
            return True

    def replace_placeholder(self, user_id: str, placeholder_key: str, entry: SessionEntry) -> None:
        """Swap a placeholder for the persisted entry in one transaction."""
        with self._session_factory() as db:
            row = db.get(LocalSessionRow, placeholder_key)
            if row:
                db.delete(row)
            db.merge(_session_row(user_id, entry))
            db.commit()

    def replace_synced_sessions(
        self,
        user_id: str,
        entries: Iterable[SessionEntry],
        *,
        start: Optional[str] = None,
    ) -> None:
        """Replace every synced row from ``start`` onward with a fresh remote snapshot.

        Unsynced placeholders are kept; they still represent pending local writes.
        """
        with self._session_factory() as db:
            query = db.query(LocalSessionRow).filter(
                LocalSessionRow.user_id == user_id,
                LocalSessionRow.synced.is_(True),
            )
            if start:
                query = query.filter(LocalSessionRow.session_date >= start)
            query.delete(synchronize_session=False)
            for entry in entries:
                db.merge(_session_row(user_id, entry))
            db.commit()

    # plans

    def put_plan(self, user_id: str, plan: WeeklyPlan, *, synced: bool = True, on: Optional[date] = None) -> None:
        week = local_iso(week_start(on or today_local()))
        with self._session_factory() as db:
            db.merge(
                LocalPlanRow(
                    key=f"{user_id}:{week}",
                    user_id=user_id,
                    week_start=week,
                    daily_goal=plan.daily_goal,
                    items={
                        category: {"minutes": item.minutes, "note": item.note}
                        for category, item in plan.items.items()
                    },
                    updated_at=plan.updated_at,
                    synced=synced,
                )
            )
            db.commit()

    def plan_for_week(self, user_id: str, week: str) -> Optional[WeeklyPlan]:
        with self._session_factory() as db:
            row = (
                db.query(LocalPlanRow)
                .filter(LocalPlanRow.user_id == user_id, LocalPlanRow.week_start == week)
                .first()
            )
            return _plan(row) if row else None

    def plan_for_user(self, user_id: str) -> Optional[WeeklyPlan]:
        """Most recently stored plan for the user."""
        with self._session_factory() as db:
            row = (
                db.query(LocalPlanRow)
                .filter(LocalPlanRow.user_id == user_id)
                .order_by(LocalPlanRow.week_start.desc())
                .first()
            )
            return _plan(row) if row else None

    def clear_user(self, user_id: str) -> None:
        with self._session_factory() as db:
            db.query(LocalSessionRow).filter(LocalSessionRow.user_id == user_id).delete(synchronize_session=False)
            db.query(LocalPlanRow).filter(LocalPlanRow.user_id == user_id).delete(synchronize_session=False)
            db.commit()
        logger.debug("Cleared local store for user %s", user_id)


def _session_row(user_id: str, entry: SessionEntry) -> LocalSessionRow:
    return LocalSessionRow(
        key=entry.key,
        user_id=user_id,
        session_date=entry.date,
        category=entry.category,
        minutes=entry.minutes,
        remote_id=entry.id,
        synced=entry.persisted,
    )


def _session_entry(row: LocalSessionRow) -> SessionEntry:
    if row.remote_id is not None:
        return SessionEntry(date=row.session_date, category=row.category, minutes=row.minutes, id=row.remote_id)
    return SessionEntry(date=row.session_date, category=row.category, minutes=row.minutes, local_key=row.key)


def _plan(row: LocalPlanRow) -> WeeklyPlan:
    items = {
        category: PlanItem(minutes=int(value.get("minutes", 0)), note=value.get("note") or "")
        for category, value in (row.items or {}).items()
    }
    return WeeklyPlan(daily_goal=row.daily_goal, items=items, updated_at=row.updated_at)
