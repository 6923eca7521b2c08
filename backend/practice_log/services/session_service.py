"""Persistence helpers for practice session rows."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import asc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from practice_log.api.schemas.sessions import SessionRowIn
from practice_log.db.models.practice_session import PracticeSession

logger = logging.getLogger(__name__)


class SessionNotFoundError(LookupError):
    pass


class SessionOwnershipError(PermissionError):
    pass


class SessionConflictError(ValueError):
    pass


@dataclass
class InsertResult:
    created: List[PracticeSession] = field(default_factory=list)
    skipped: int = 0


def list_sessions(
    db: Session,
    user_id: UUID,
    *,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[PracticeSession]:
    query = db.query(PracticeSession).filter(PracticeSession.user_id == user_id)
    if start:
        query = query.filter(PracticeSession.session_date >= start)
    if end:
        query = query.filter(PracticeSession.session_date <= end)
    return query.order_by(asc(PracticeSession.session_date), asc(PracticeSession.id)).all()


def insert_sessions(db: Session, rows: Iterable[SessionRowIn]) -> InsertResult:
    """Insert a batch, skipping rows whose (user, date, category) already exists.

    Only rows that were actually written are reported back, so callers can merge
    exactly what the store persisted.
    """
    result = InsertResult()
    pending: List[PracticeSession] = []
    seen: set[tuple[UUID, date, str]] = set()
    for row in rows:
        key = (row.user_id, row.session_date, row.category)
        if key in seen or _exists(db, *key):
            result.skipped += 1
            continue
        seen.add(key)
        pending.append(
            PracticeSession(
                user_id=row.user_id,
                session_date=row.session_date,
                category=row.category,
                minutes=row.minutes,
            )
        )

    if not pending:
        return result

    db.add_all(pending)
    try:
        db.commit()
    except IntegrityError:
        # Another writer created some of these rows between the check and the insert.
        db.rollback()
        logger.info("Batch insert collided with concurrent writes; retrying row by row")
        return _insert_one_by_one(db, pending, skipped=result.skipped)

    for entry in pending:
        db.refresh(entry)
    result.created = pending
    return result


def update_session(
    db: Session,
    session_id: int,
    *,
    user_id: UUID,
    category: Optional[str] = None,
    minutes: Optional[int] = None,
) -> PracticeSession:
    entry = _owned_session(db, session_id, user_id)
    if category is not None:
        entry.category = category
    if minutes is not None:
        entry.minutes = minutes
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise SessionConflictError("Category already logged for that day") from exc
    db.refresh(entry)
    return entry


def delete_session(db: Session, session_id: int, *, user_id: UUID) -> None:
    entry = _owned_session(db, session_id, user_id)
    db.delete(entry)
    db.commit()


def _owned_session(db: Session, session_id: int, user_id: UUID) -> PracticeSession:
    entry = db.get(PracticeSession, session_id)
    if not entry:
        raise SessionNotFoundError(session_id)
    if entry.user_id != user_id:
        raise SessionOwnershipError(session_id)
    return entry


def _exists(db: Session, user_id: UUID, session_date: date, category: str) -> bool:
    return (
        db.query(PracticeSession.id)
        .filter(
            PracticeSession.user_id == user_id,
            PracticeSession.session_date == session_date,
            PracticeSession.category == category,
        )
        .first()
        is not None
    )


def _insert_one_by_one(db: Session, pending: List[PracticeSession], *, skipped: int) -> InsertResult:
    result = InsertResult(skipped=skipped)
    for entry in pending:
        fresh = PracticeSession(
            user_id=entry.user_id,
            session_date=entry.session_date,
            category=entry.category,
            minutes=entry.minutes,
        )
        db.add(fresh)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            result.skipped += 1
            continue
        db.refresh(fresh)
        result.created.append(fresh)
    return result
