"""Schemas for push subscriptions."""
from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class PushSubscriptionRequest(BaseModel):
    user_id: UUID
    endpoint: str
    p256dh: str
    auth: str


class PushSubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    endpoint: str
    created: bool = False
