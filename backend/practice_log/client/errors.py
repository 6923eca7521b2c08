"""Errors raised by the local-first client."""
from __future__ import annotations

from typing import Optional


class PracticeLogError(Exception):
    """Base class for client errors."""


class RemoteStoreError(PracticeLogError):
    """A call to the remote store failed or was rejected."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_conflict(self) -> bool:
        return self.status_code == 409


class SaveError(PracticeLogError):
    """A user-initiated write did not persist; callers surface this to the user."""
