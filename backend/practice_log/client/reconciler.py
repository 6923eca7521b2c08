"""Daily entry reconciliation.

For every day the user looks at there must be exactly one entry per category.
Local state is an eventually-consistent cache, so the reconciler checks it
first (no network in the steady state), then re-checks the remote store before
creating anything, since another tab or device may already have written the
rows.

Only one pass runs at a time across all dates. A call that arrives while a pass
is running returns immediately instead of waiting; the next trigger retries.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Sequence

from practice_log.client.dates import last_n_dates
from practice_log.client.errors import RemoteStoreError
from practice_log.client.models import SessionEntry
from practice_log.client.repository import SessionRepository
from practice_log.core.constants import CATEGORIES
from practice_log.observability.metrics import log_metric

logger = logging.getLogger(__name__)


class ReconcilerStatus(str, Enum):
    IDLE = "idle"
    RECONCILING = "reconciling"


class ReconcileResult(str, Enum):
    ALREADY_COMPLETE = "already_complete"
    SKIPPED_BUSY = "skipped_busy"
    CREATED = "created"
    FAILED = "failed"


@dataclass
class ReconcileOutcome:
    date: str
    result: ReconcileResult
    created: List[str] = field(default_factory=list)
    still_missing: List[str] = field(default_factory=list)


class Reconciler:
    def __init__(
        self,
        sessions: SessionRepository,
        *,
        categories: Sequence[str] = CATEGORIES,
        window_days: int = 14,
    ) -> None:
        self._sessions = sessions
        self._categories = tuple(categories)
        self._window_days = window_days
        self._status = ReconcilerStatus.IDLE
        self._ensured_dates: set[str] = set()
        self._window_ensured = False

    @property
    def status(self) -> ReconcilerStatus:
        return self._status

    @property
    def busy(self) -> bool:
        return self._status is ReconcilerStatus.RECONCILING

    def missing_locally(self, session_date: str) -> List[str]:
        present = self._sessions.categories_for_date(session_date)
        return [category for category in self._categories if category not in present]

    async def ensure_daily_entries(self, session_date: str) -> ReconcileOutcome:
        """Make sure ``session_date`` has one entry per category.

        Never raises for remote failures: they are logged and reported in the
        outcome, and the day is left for the next pass.
        """
        if self.busy:
            logger.debug("Skipping %s: reconciliation already running", session_date)
            return ReconcileOutcome(session_date, ReconcileResult.SKIPPED_BUSY)

        missing = self.missing_locally(session_date)
        if not missing:
            return ReconcileOutcome(session_date, ReconcileResult.ALREADY_COMPLETE)

        self._status = ReconcilerStatus.RECONCILING
        try:
            return await self._reconcile(session_date, missing)
        finally:
            self._status = ReconcilerStatus.IDLE

    async def ensure_all_days_have_entries(
        self,
        days: Optional[int] = None,
        *,
        today: Optional[date] = None,
    ) -> List[ReconcileOutcome]:
        """Reconcile each day of the trailing window that is short on entries.

        Days run one after another so passes never contend for the guard.
        """
        if self.busy:
            return []

        window = last_n_dates(days or self._window_days, today)
        needing = [
            day for day in window if len(self._sessions.categories_for_date(day)) < len(self._categories)
        ]
        outcomes = []
        for day in needing:
            outcomes.append(await self.ensure_daily_entries(day))
        return outcomes

    async def ensure_daily_entries_once(self, session_date: str) -> Optional[ReconcileOutcome]:
        """Run the per-day pass at most once per date for this reconciler's lifetime."""
        if session_date in self._ensured_dates:
            return None
        self._ensured_dates.add(session_date)
        return await self.ensure_daily_entries(session_date)

    async def ensure_all_days_once(self, *, today: Optional[date] = None) -> Optional[List[ReconcileOutcome]]:
        if self._window_ensured:
            return None
        self._window_ensured = True
        return await self.ensure_all_days_have_entries(today=today)

    async def _reconcile(self, session_date: str, missing: List[str]) -> ReconcileOutcome:
        try:
            remote_entries = await self._sessions.fetch_remote_for_date(session_date)
        except RemoteStoreError as exc:
            logger.error("Reconcile %s: remote check failed: %s", session_date, exc)
            log_metric("reconcile.failed", 1, metadata={"stage": "fetch"})
            return ReconcileOutcome(session_date, ReconcileResult.FAILED, still_missing=missing)

        known_remote = [entry for entry in remote_entries if entry.category in missing]
        if known_remote:
            # Written elsewhere; adopt those rows instead of creating duplicates.
            self._sessions.merge(_first_per_category(known_remote))

        remote_categories = {entry.category for entry in remote_entries}
        truly_missing = [category for category in missing if category not in remote_categories]
        if not truly_missing:
            logger.debug("Reconcile %s: all categories already exist remotely", session_date)
            return ReconcileOutcome(session_date, ReconcileResult.ALREADY_COMPLETE)

        logger.info("Reconcile %s: creating %s", session_date, ", ".join(truly_missing))
        try:
            created = await self._sessions.insert(
                [SessionEntry(date=session_date, category=category, minutes=0) for category in truly_missing]
            )
        except RemoteStoreError as exc:
            logger.error("Reconcile %s: creating entries failed: %s", session_date, exc)
            log_metric("reconcile.failed", 1, metadata={"stage": "insert"})
            return ReconcileOutcome(session_date, ReconcileResult.FAILED, still_missing=truly_missing)

        created_categories = [entry.category for entry in created]
        still_missing = [category for category in truly_missing if category not in created_categories]
        if still_missing:
            logger.warning("Reconcile %s: store did not create %s", session_date, ", ".join(still_missing))
        log_metric("reconcile.created", len(created))
        return ReconcileOutcome(
            session_date,
            ReconcileResult.CREATED,
            created=created_categories,
            still_missing=still_missing,
        )


def _first_per_category(entries: List[SessionEntry]) -> List[SessionEntry]:
    seen: set[str] = set()
    chosen = []
    for entry in sorted(entries, key=lambda e: e.id or 0):
        if entry.category not in seen:
            seen.add(entry.category)
            chosen.append(entry)
    return chosen
