"""Notification service factory."""
from __future__ import annotations

import logging
from functools import lru_cache

from practice_log.core.config import settings
from practice_log.services.notifications.base import NotificationService
from practice_log.services.notifications.noop import NoopNotificationService
from practice_log.services.notifications.webpush import WebPushNotificationService

logger = logging.getLogger(__name__)


@lru_cache
def get_notification_service() -> NotificationService:
    provider = settings.notifications_provider.lower()
    if provider == "webpush":
        if not settings.vapid_private_key:
            logger.warning("webpush provider selected but VAPID_PRIVATE_KEY is missing; using noop")
            return NoopNotificationService()
        return WebPushNotificationService(
            vapid_private_key=settings.vapid_private_key,
            vapid_subject=settings.vapid_subject,
        )
    return NoopNotificationService()
