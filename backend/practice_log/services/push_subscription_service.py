"""Helpers for registering web push subscriptions."""
from __future__ import annotations

from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from practice_log.api.schemas.push import PushSubscriptionRequest
from practice_log.db.models.push_subscription import PushSubscription


def register_subscription(db: Session, payload: PushSubscriptionRequest) -> tuple[PushSubscription, bool]:
    """Create or refresh a subscription keyed by its endpoint. Returns (row, created)."""
    existing = db.query(PushSubscription).filter(PushSubscription.endpoint == payload.endpoint).first()
    if existing:
        existing.user_id = payload.user_id
        existing.p256dh = payload.p256dh
        existing.auth = payload.auth
        db.commit()
        db.refresh(existing)
        return existing, False

    subscription = PushSubscription(
        user_id=payload.user_id,
        endpoint=payload.endpoint,
        p256dh=payload.p256dh,
        auth=payload.auth,
    )
    db.add(subscription)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = db.query(PushSubscription).filter(PushSubscription.endpoint == payload.endpoint).first()
        if existing:
            return existing, False
        raise
    db.refresh(subscription)
    return subscription, True


def remove_subscription(db: Session, endpoint: str) -> bool:
    subscription = db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).first()
    if not subscription:
        return False
    db.delete(subscription)
    db.commit()
    return True


def list_subscriptions(db: Session) -> List[PushSubscription]:
    return db.query(PushSubscription).all()
