"""No-op notification provider (logs only)."""
from __future__ import annotations

import logging
from typing import Any, Dict

from practice_log.services.notifications.base import NotificationResult, NotificationService, PushTarget


logger = logging.getLogger(__name__)


class NoopNotificationService(NotificationService):
    def send(self, target: PushTarget, payload: Dict[str, Any]) -> NotificationResult:
        logger.info("Notification queued (noop) endpoint=%s title=%s", target.endpoint[:60], payload.get("title"))
        return NotificationResult(status="noop", reason="notification provider is noop")
