"""Coalescing auto-save.

Each key holds at most one pending value and one scheduled flush. Submitting a
new value for a key cancels that key's scheduled flush and starts the delay
again, so only the last value inside the window is written.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable, Dict, Generic, Hashable, Optional, Set, TypeVar

from practice_log.client.dates import local_iso, today_local
from practice_log.client.errors import PracticeLogError
from practice_log.client.repository import SessionRepository

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class CoalescingWriteQueue(Generic[K, V]):
    def __init__(self, writer: Callable[[K, V], Awaitable[None]], *, delay: float = 1.0) -> None:
        self._writer = writer
        self._delay = delay
        self._pending: Dict[K, V] = {}
        self._timers: Dict[K, asyncio.TimerHandle] = {}
        self._inflight: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending(self) -> Dict[K, V]:
        return dict(self._pending)

    def submit(self, key: K, value: V) -> None:
        if self._closed:
            raise RuntimeError("write queue is closed")
        self._pending[key] = value
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        loop = asyncio.get_running_loop()
        self._timers[key] = loop.call_later(self._delay, self._start_write, key)

    async def flush(self) -> None:
        """Write every pending value now and wait for in-flight writes."""
        for key in list(self._pending):
            timer = self._timers.pop(key, None)
            if timer is not None:
                timer.cancel()
            await self._write(key)
        await self.wait_idle()

    async def wait_idle(self) -> None:
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    async def close(self, *, flush: bool = True) -> None:
        """Stop the queue. With ``flush``, values submitted during the final writes are written too."""
        if flush:
            await self.flush()
            while self._pending:
                await self.flush()
        self._closed = True
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._pending.clear()

    def _start_write(self, key: K) -> None:
        self._timers.pop(key, None)
        task = asyncio.ensure_future(self._write(key))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _write(self, key: K) -> None:
        if key not in self._pending:
            return
        value = self._pending.pop(key)
        try:
            await self._writer(key, value)
        except Exception:
            logger.exception("Auto-save for %s failed", key)


class TodayAutoSaver:
    """Debounced minute updates for today's entries, one queue slot per category."""

    def __init__(
        self,
        sessions: SessionRepository,
        *,
        delay: float = 1.0,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self._sessions = sessions
        self._today = today or today_local
        self.queue: CoalescingWriteQueue[str, int] = CoalescingWriteQueue(self._save, delay=delay)

    def record(self, category: str, minutes: int) -> None:
        self.queue.submit(category, minutes)

    async def close(self) -> None:
        await self.queue.close()

    async def _save(self, category: str, minutes: int) -> None:
        if minutes == 0:
            return
        session_date = local_iso(self._today())
        entry = self._sessions.find(session_date, category)
        if entry is None or not entry.persisted:
            logger.warning("No entry found for category %s on %s; skipping auto-save", category, session_date)
            return
        try:
            await self._sessions.update_entry(entry.id, minutes=minutes)
        except PracticeLogError as exc:
            logger.error("Auto-save of %s on %s failed: %s", category, session_date, exc)
