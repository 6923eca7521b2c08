"""Notification service interface."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class NotificationResult:
    status: str
    reason: str


@dataclass
class PushTarget:
    endpoint: str
    p256dh: str
    auth: str

    def subscription_info(self) -> Dict[str, Any]:
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}


class NotificationService:
    """Base interface for push providers.

    Implementations raise on delivery failure; the dispatcher counts and swallows.
    """

    def send(self, target: PushTarget, payload: Dict[str, Any]) -> NotificationResult:
        raise NotImplementedError
