"""Helpers for the per-user practice plan row."""
from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from practice_log.api.schemas.plan import PlanPayload
from practice_log.db.models.plan import Plan


class PlanExistsError(ValueError):
    pass


def get_plan(db: Session, user_id: UUID) -> Plan | None:
    return db.get(Plan, user_id)


def insert_plan(db: Session, payload: PlanPayload) -> Plan:
    """Create the user's plan; fails if one already exists."""
    plan = Plan(**payload.model_dump())
    db.add(plan)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise PlanExistsError(str(payload.user_id)) from exc
    db.refresh(plan)
    return plan


def upsert_plan(db: Session, payload: PlanPayload) -> Plan:
    plan = db.get(Plan, payload.user_id)
    values = payload.model_dump()
    if plan is None:
        plan = Plan(**values)
        db.add(plan)
    else:
        for key, value in values.items():
            setattr(plan, key, value)
    plan.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(plan)
    return plan
