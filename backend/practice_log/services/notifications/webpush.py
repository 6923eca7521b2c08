"""Web Push provider backed by pywebpush and VAPID keys."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict

from pywebpush import webpush

from practice_log.services.notifications.base import NotificationResult, NotificationService, PushTarget


logger = logging.getLogger(__name__)


class WebPushNotificationService(NotificationService):
    def __init__(self, *, vapid_private_key: str, vapid_subject: str) -> None:
        self._vapid_private_key = vapid_private_key
        self._vapid_claims = {"sub": vapid_subject}

    def send(self, target: PushTarget, payload: Dict[str, Any]) -> NotificationResult:
        response = webpush(
            subscription_info=target.subscription_info(),
            data=json.dumps(payload),
            vapid_private_key=self._vapid_private_key,
            vapid_claims=dict(self._vapid_claims),
        )
        status_code = getattr(response, "status_code", None)
        logger.debug("Web push delivered endpoint=%s status=%s", target.endpoint[:60], status_code)
        return NotificationResult(status="sent", reason=f"push service responded {status_code}")
