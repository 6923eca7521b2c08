"""Schemas for the per-user practice plan."""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PlanPayload(BaseModel):
    user_id: UUID
    daily_goal: int = Field(180, ge=0)
    scales_minutes: int = Field(45, ge=0)
    scales_note: Optional[str] = None
    review_minutes: int = Field(45, ge=0)
    review_note: Optional[str] = None
    new_minutes: int = Field(45, ge=0)
    new_note: Optional[str] = None
    technique_minutes: int = Field(45, ge=0)
    technique_note: Optional[str] = None


class PlanRow(PlanPayload):
    model_config = ConfigDict(from_attributes=True)

    updated_at: Optional[datetime] = None
