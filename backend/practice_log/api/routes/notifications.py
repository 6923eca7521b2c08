"""Reminder notification settings exposed to the web client."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from practice_log.core.config import settings
from practice_log.core.constants import REMINDER_PAYLOAD
from practice_log.db.deps import get_db
from practice_log.observability.tracing import trace
from practice_log.services.push_subscription_service import list_subscriptions

router = APIRouter()


@router.get("/notifications/config", tags=["notifications"])
def get_notifications_config(request: Request, db: Session = Depends(get_db)) -> dict:
    """Everything the client needs to subscribe: provider, VAPID public key and the reminder slot."""
    request_id = getattr(request.state, "request_id", None)
    with trace("notifications.config", metadata={"provider": settings.notifications_provider}, request_id=request_id):
        subscriptions = len(list_subscriptions(db))
    return {
        "enabled": settings.notifications_enabled,
        "provider": settings.notifications_provider,
        "vapid_public_key": settings.vapid_public_key,
        "reminder": {
            "day": settings.reminder_job_day,
            "time": f"{settings.reminder_job_hour:02d}:{settings.reminder_job_minute:02d}",
            "timezone": settings.scheduler_timezone,
            "title": REMINDER_PAYLOAD["title"],
        },
        "subscriptions": subscriptions,
        "request_id": request_id or "",
    }
