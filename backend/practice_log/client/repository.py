"""Two-tier repositories: in-memory working state over the local store, synced to the remote.

Callers never touch either tier directly. Every completed remote write is folded
back through :meth:`SessionRepository.merge`, which appends or patches by key, so
interleaved writes on different entries cannot clobber each other. Two writes on
the same entry resolve last-completed-wins.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from practice_log.client.dates import local_iso, today_local
from practice_log.client.errors import RemoteStoreError, SaveError
from practice_log.client.local_store import LocalStore
from practice_log.client.models import SessionEntry, WeeklyPlan
from practice_log.client.remote import RemoteStore
from practice_log.core.constants import CATEGORIES

logger = logging.getLogger(__name__)


class SessionRepository:
    def __init__(self, user_id: str, remote: RemoteStore, local: LocalStore) -> None:
        self.user_id = user_id
        self._remote = remote
        self._local = local
        self._entries: List[SessionEntry] = local.sessions_for_user(user_id)

    @property
    def entries(self) -> Tuple[SessionEntry, ...]:
        """Immutable snapshot of the working state."""
        return tuple(self._entries)

    def entries_for_date(self, session_date: str) -> List[SessionEntry]:
        found = [entry for entry in self._entries if entry.date == session_date]
        return sorted(found, key=lambda entry: CATEGORIES.index(entry.category))

    def find(self, session_date: str, category: str) -> Optional[SessionEntry]:
        for entry in self._entries:
            if entry.date == session_date and entry.category == category:
                return entry
        return None

    def categories_for_date(self, session_date: str) -> set[str]:
        return {entry.category for entry in self._entries if entry.date == session_date}

    def merge(self, incoming: Iterable[SessionEntry]) -> List[SessionEntry]:
        """Fold entries into working state and the local store.

        An entry with a known key patches it. A persisted entry that matches an
        unsynced placeholder for the same (date, category) replaces the
        placeholder. Anything else is appended.
        """
        merged: List[SessionEntry] = []
        for entry in incoming:
            index = self._index_of(entry.key)
            if index is not None:
                self._entries[index] = entry
                self._local.put_sessions(self.user_id, [entry])
            else:
                placeholder = self._placeholder_for(entry) if entry.persisted else None
                if placeholder is not None:
                    self._entries[self._entries.index(placeholder)] = entry
                    self._local.replace_placeholder(self.user_id, placeholder.key, entry)
                else:
                    self._entries.append(entry)
                    self._local.put_sessions(self.user_id, [entry])
            merged.append(entry)
        return merged

    def discard(self, keys: Iterable[str]) -> None:
        doomed = set(keys)
        self._entries = [entry for entry in self._entries if entry.key not in doomed]
        for key in doomed:
            self._local.delete_session(key)

    async def load(self, *, since_days: int = 365, today: Optional[date] = None) -> bool:
        """Refresh working state from the remote store.

        Returns False when the remote is unreachable; the local copy is kept so
        reads keep working offline.
        """
        start = local_iso((today or today_local()) - timedelta(days=since_days))
        try:
            rows = await self._remote.fetch_sessions(self.user_id, start=start)
        except RemoteStoreError as exc:
            logger.warning("Session load failed, serving local copy: %s", exc)
            self._entries = self._local.sessions_for_user(self.user_id)
            return False

        fresh = [SessionEntry.from_row(row) for row in rows]
        self._local.replace_synced_sessions(self.user_id, fresh, start=start)
        self._entries = self._local.sessions_for_user(self.user_id)
        logger.debug("Loaded %s session rows since %s", len(fresh), start)
        return True

    async def fetch_remote_for_date(self, session_date: str) -> List[SessionEntry]:
        rows = await self._remote.fetch_sessions(self.user_id, start=session_date, end=session_date)
        return [SessionEntry.from_row(row) for row in rows]

    async def insert(self, entries: Sequence[SessionEntry]) -> List[SessionEntry]:
        """Insert entries in one request and merge only what the store created."""
        rows = [entry.to_row(self.user_id) for entry in entries]
        created = await self._remote.insert_sessions(rows)
        return self.merge(SessionEntry.from_row(row) for row in created)

    async def save_entries(self, rows: Iterable[Tuple[str, str, int]]) -> List[SessionEntry]:
        """Explicit save of ``(date, category, minutes)`` rows.

        A category that already has a persisted entry for the day is patched in
        place. The rest are written as optimistic placeholders and swapped for the
        persisted rows. A row the store skipped because it already held one for
        that day and category is re-read and patched. On failure the placeholders
        are rolled back and :class:`SaveError` is raised.
        """
        saved: List[SessionEntry] = []
        placeholders: List[SessionEntry] = []
        for session_date, category, minutes in rows:
            existing = self.find(session_date, category)
            if existing is not None and existing.persisted:
                saved.append(await self.update_entry(existing.id, minutes=minutes))
            else:
                placeholders.append(SessionEntry(date=session_date, category=category, minutes=minutes))
        if not placeholders:
            return saved

        self.merge(placeholders)
        try:
            saved.extend(await self.insert(placeholders))
        except RemoteStoreError as exc:
            self.discard(p.key for p in placeholders)
            logger.error("Saving %s entries failed: %s", len(placeholders), exc)
            raise SaveError("Could not save practice entries") from exc

        leftovers = [p for p in placeholders if self._index_of(p.key) is not None]
        if leftovers:
            saved.extend(await self._save_over_existing(leftovers))
        return saved

    async def _save_over_existing(self, leftovers: List[SessionEntry]) -> List[SessionEntry]:
        """Patch rows that another tab or device created before our insert."""
        logger.info("%s entries already existed remotely; updating them instead", len(leftovers))
        self.discard(p.key for p in leftovers)
        remote: Dict[str, List[SessionEntry]] = {}
        try:
            for session_date in sorted({p.date for p in leftovers}):
                remote[session_date] = await self.fetch_remote_for_date(session_date)
        except RemoteStoreError as exc:
            logger.error("Re-reading existing entries failed: %s", exc)
            raise SaveError("Could not save practice entries") from exc

        saved: List[SessionEntry] = []
        for placeholder in leftovers:
            matches = sorted(
                (entry for entry in remote[placeholder.date] if entry.category == placeholder.category),
                key=lambda entry: entry.id or 0,
            )
            if not matches:
                raise SaveError(f"Could not save {placeholder.category} on {placeholder.date}")
            self.merge(matches[:1])
            saved.append(await self.update_entry(matches[0].id, minutes=placeholder.minutes))
        return saved

    async def update_entry(
        self,
        entry_id: int,
        *,
        category: Optional[str] = None,
        minutes: Optional[int] = None,
    ) -> SessionEntry:
        patch: Dict[str, object] = {}
        if category is not None:
            patch["category"] = category
        if minutes is not None:
            patch["minutes"] = minutes
        try:
            row = await self._remote.update_session(entry_id, self.user_id, patch)
        except RemoteStoreError as exc:
            logger.error("Updating entry %s failed: %s", entry_id, exc)
            raise SaveError(f"Could not update entry {entry_id}") from exc

        index = self._index_of(str(entry_id))
        if index is None:
            logger.debug("Updated entry %s was not loaded; adopting the stored row", entry_id)
            (updated,) = self.merge([SessionEntry.from_row(row)])
        else:
            (updated,) = self.merge([self._entries[index].patched(**patch)])
        return updated

    async def clear_entry(self, entry_id: int) -> SessionEntry:
        """Clearing sets minutes to zero; entries are never hard-deleted."""
        return await self.update_entry(entry_id, minutes=0)

    async def clear_day(self, session_date: str) -> List[SessionEntry]:
        cleared = []
        for entry in self.entries_for_date(session_date):
            if entry.persisted:
                cleared.append(await self.clear_entry(entry.id))
        return cleared

    def _index_of(self, key: str) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.key == key:
                return index
        return None

    def _placeholder_for(self, entry: SessionEntry) -> Optional[SessionEntry]:
        for candidate in self._entries:
            if not candidate.persisted and candidate.date == entry.date and candidate.category == entry.category:
                return candidate
        return None


class PlanRepository:
    def __init__(self, user_id: str, remote: RemoteStore, local: LocalStore) -> None:
        self.user_id = user_id
        self._remote = remote
        self._local = local
        self._plan: WeeklyPlan = local.plan_for_user(user_id) or WeeklyPlan()

    @property
    def plan(self) -> WeeklyPlan:
        return self._plan

    @property
    def goal(self) -> int:
        return self._plan.daily_goal

    async def load_or_seed(self) -> WeeklyPlan:
        """Fetch the user's plan, seeding the defaults on first sign-in.

        The seeded row is fetched back and applied exactly as the store holds it.
        """
        try:
            row = await self._remote.fetch_plan(self.user_id)
            if row is None:
                row = await self._seed()
        except RemoteStoreError as exc:
            logger.warning("Plan load failed, serving local copy: %s", exc)
            return self._plan

        if row is not None:
            self._apply(WeeklyPlan.from_row(row))
        return self._plan

    async def save(self, plan: WeeklyPlan) -> WeeklyPlan:
        row = plan.to_row(self.user_id)
        try:
            saved = await self._remote.upsert_plan(row)
        except RemoteStoreError as exc:
            logger.error("Saving plan failed: %s", exc)
            raise SaveError("Could not save plan") from exc
        self._apply(WeeklyPlan.from_row(saved))
        return self._plan

    async def _seed(self) -> Optional[dict]:
        logger.info("No plan for user %s; seeding defaults", self.user_id)
        try:
            await self._remote.insert_plan(WeeklyPlan().to_row(self.user_id))
        except RemoteStoreError as exc:
            if not exc.is_conflict:
                raise
            logger.info("Plan was seeded concurrently for user %s", self.user_id)
        return await self._remote.fetch_plan(self.user_id)

    def _apply(self, plan: WeeklyPlan) -> None:
        self._plan = plan
        self._local.put_plan(self.user_id, plan)
