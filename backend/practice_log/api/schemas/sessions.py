"""Schemas for practice session rows."""
from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

CategoryKey = Literal["scales", "review", "new", "technique"]


class SessionRowIn(BaseModel):
    user_id: UUID
    session_date: date
    category: CategoryKey
    minutes: int = Field(0, ge=0)


class SessionRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: UUID
    session_date: date
    category: CategoryKey
    minutes: int


class SessionInsertRequest(BaseModel):
    rows: List[SessionRowIn] = Field(..., min_length=1)


class SessionInsertResponse(BaseModel):
    created: List[SessionRow]
    skipped: int
    request_id: str


class SessionUpdateRequest(BaseModel):
    user_id: UUID
    category: Optional[CategoryKey] = None
    minutes: Optional[int] = Field(default=None, ge=0)

