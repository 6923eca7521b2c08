"""Signed-in client state: plan, sessions, reconciliation and auto-save for one user."""
from __future__ import annotations

import logging
from datetime import date
from typing import Awaitable, Callable, Optional

from practice_log.client.aggregator import DayProgress, RangeSummary, daily_progress, summarize_history
from practice_log.client.autosave import TodayAutoSaver
from practice_log.client.local_store import LocalStore
from practice_log.client.models import WeeklyPlan
from practice_log.client.reconciler import Reconciler
from practice_log.client.remote import HttpRemoteStore, RemoteStore
from practice_log.client.repository import PlanRepository, SessionRepository
from practice_log.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

SignOut = Callable[[], Awaitable[None]]


class PracticeClient:
    """Wires the repositories, reconciler and auto-saver for an authenticated user.

    Authentication itself is external: callers pass the stable user id it
    produced and, optionally, its sign-out action.
    """

    def __init__(
        self,
        user_id: str,
        *,
        remote: RemoteStore,
        local: LocalStore,
        sign_out: Optional[SignOut] = None,
        settings: Optional[Settings] = None,
        owns_local: bool = False,
    ) -> None:
        self.settings = settings or get_settings()
        self.user_id = user_id
        self._remote = remote
        self._local = local
        self._sign_out = sign_out
        self._owns_local = owns_local
        self.sessions = SessionRepository(user_id, remote, local)
        self.plans = PlanRepository(user_id, remote, local)
        self.reconciler = Reconciler(self.sessions, window_days=self.settings.reconcile_window_days)
        self.autosaver = TodayAutoSaver(self.sessions, delay=self.settings.autosave_delay_seconds)

    @classmethod
    def from_settings(
        cls,
        user_id: str,
        *,
        settings: Optional[Settings] = None,
        sign_out: Optional[SignOut] = None,
    ) -> "PracticeClient":
        settings = settings or get_settings()
        remote = HttpRemoteStore(settings.api_base_url, timeout=settings.remote_timeout_seconds)
        local = LocalStore(settings.local_store_url)
        return cls(user_id, remote=remote, local=local, sign_out=sign_out, settings=settings, owns_local=True)

    @property
    def plan(self) -> WeeklyPlan:
        return self.plans.plan

    async def sign_in(self, *, today: Optional[date] = None) -> None:
        """Load (or seed) the plan, then the trailing year of sessions."""
        await self.plans.load_or_seed()
        await self.sessions.load(since_days=self.settings.history_load_days, today=today)
        logger.info(
            "Signed in %s: goal=%s, %s session rows",
            self.user_id,
            self.plan.daily_goal,
            len(self.sessions.entries),
        )

    async def sign_out(self) -> None:
        await self.autosaver.close()
        self._local.clear_user(self.user_id)
        if self._sign_out is not None:
            await self._sign_out()
        await self._remote.aclose()
        if self._owns_local:
            self._local.close()
        logger.info("Signed out %s", self.user_id)

    def history(self, range_name: str = "week", *, today: Optional[date] = None) -> RangeSummary:
        return summarize_history(self.sessions.entries, goal=self.plan.daily_goal, range_name=range_name, today=today)

    def progress(self, session_date: str) -> DayProgress:
        return daily_progress(self.sessions.entries, session_date, self.plan.daily_goal, plan=self.plan)
