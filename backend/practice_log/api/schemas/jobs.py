"""Schemas for job operations."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class JobRunRequest(BaseModel):
    job: Literal["reminders"] = "reminders"


class JobRunResponse(BaseModel):
    job: str
    sent: int
    failed: int
    request_id: str
