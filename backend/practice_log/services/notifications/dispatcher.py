"""Out-of-band reminder dispatch to every stored push subscription."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from practice_log.core.config import settings
from practice_log.core.constants import REMINDER_PAYLOAD
from practice_log.observability.metrics import log_metric
from practice_log.observability.tracing import trace
from practice_log.services.notifications.base import NotificationService, PushTarget
from practice_log.services.notifications.factory import get_notification_service
from practice_log.services.push_subscription_service import list_subscriptions


logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    sent: int = 0
    failed: int = 0


def dispatch_reminders(
    db: Session,
    *,
    service: Optional[NotificationService] = None,
    payload: Optional[Dict[str, Any]] = None,
    request_id: str | None = None,
) -> DispatchResult:
    """Send the reminder payload to every subscription and count outcomes.

    A failing subscription is logged and counted; it is neither retried nor removed.
    """
    result = DispatchResult()
    if not settings.notifications_enabled:
        logger.info("Reminder dispatch skipped: notifications disabled")
        log_metric("notifications.skipped", 1, metadata={"job": "reminders"})
        return result

    service = service or get_notification_service()
    body = dict(payload or REMINDER_PAYLOAD)
    subscriptions = list_subscriptions(db)
    start = perf_counter()
    with trace(
        "notifications.reminders",
        metadata={"provider": settings.notifications_provider, "subscriptions": len(subscriptions)},
        request_id=request_id,
    ):
        for subscription in subscriptions:
            target = PushTarget(endpoint=subscription.endpoint, p256dh=subscription.p256dh, auth=subscription.auth)
            try:
                service.send(target, body)
            except Exception as exc:
                result.failed += 1
                logger.warning("Reminder push failed for subscription %s: %s", subscription.id, exc)
                continue
            result.sent += 1

    duration_ms = (perf_counter() - start) * 1000
    log_metric("notifications.sent", result.sent, metadata={"job": "reminders", "provider": settings.notifications_provider})
    log_metric("notifications.failed", result.failed, metadata={"job": "reminders"})
    log_metric("notifications.duration_ms", duration_ms, metadata={"job": "reminders"})
    logger.info("Reminder dispatch complete: sent=%s failed=%s", result.sent, result.failed)
    return result
