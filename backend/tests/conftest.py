from __future__ import annotations

import asyncio
from collections import Counter
from typing import Any, Dict, List, Optional
from uuid import uuid4

import httpx
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from practice_log.client.errors import RemoteStoreError
from practice_log.client.local_store import LocalStore
from practice_log.client.remote import HttpRemoteStore, RemoteStore
from practice_log.db.deps import get_db
from practice_log.db.models.plan import Plan
from practice_log.db.models.practice_session import PracticeSession
from practice_log.db.models.push_subscription import PushSubscription
import practice_log.main as main_module


class FakeRemoteStore(RemoteStore):
    """In-memory remote with call counting, failure injection and an optional gate."""

    def __init__(self) -> None:
        self.rows: List[Dict[str, Any]] = []
        self.plans: Dict[str, Dict[str, Any]] = {}
        self.calls: Counter = Counter()
        self.fail: set[str] = set()
        self.create_limit: Optional[int] = None
        self.gate: Optional[asyncio.Event] = None
        self._next_id = 1

    def add_row(self, user_id: str, session_date: str, category: str, minutes: int = 0) -> Dict[str, Any]:
        row = {
            "id": self._next_id,
            "user_id": user_id,
            "session_date": session_date,
            "category": category,
            "minutes": minutes,
        }
        self._next_id += 1
        self.rows.append(row)
        return dict(row)

    async def _enter(self, name: str) -> None:
        self.calls[name] += 1
        if self.gate is not None:
            await self.gate.wait()
        if name in self.fail:
            raise RemoteStoreError(f"{name} unavailable", status_code=503)

    async def fetch_sessions(self, user_id, *, start=None, end=None):
        await self._enter("fetch_sessions")
        return [
            dict(row)
            for row in self.rows
            if row["user_id"] == user_id
            and (start is None or row["session_date"] >= start)
            and (end is None or row["session_date"] <= end)
        ]

    async def insert_sessions(self, rows):
        await self._enter("insert_sessions")
        created = []
        for row in rows:
            if self.create_limit is not None and len(created) >= self.create_limit:
                break
            exists = any(
                r["user_id"] == row["user_id"]
                and r["session_date"] == row["session_date"]
                and r["category"] == row["category"]
                for r in self.rows
            )
            if exists:
                continue
            created.append(self.add_row(row["user_id"], row["session_date"], row["category"], row["minutes"]))
        return created

    async def update_session(self, session_id, user_id, patch):
        await self._enter("update_session")
        for row in self.rows:
            if row["id"] == session_id and row["user_id"] == user_id:
                row.update(patch)
                return dict(row)
        raise RemoteStoreError("Session not found", status_code=404)

    async def delete_session(self, session_id, user_id):
        await self._enter("delete_session")
        self.rows = [row for row in self.rows if row["id"] != session_id]

    async def fetch_plan(self, user_id):
        await self._enter("fetch_plan")
        plan = self.plans.get(user_id)
        return dict(plan) if plan else None

    async def insert_plan(self, row):
        await self._enter("insert_plan")
        if row["user_id"] in self.plans:
            raise RemoteStoreError("Plan already exists", status_code=409)
        self.plans[row["user_id"]] = dict(row, updated_at="2026-10-18T09:00:00+00:00")
        return dict(self.plans[row["user_id"]])

    async def upsert_plan(self, row):
        await self._enter("upsert_plan")
        self.plans[row["user_id"]] = dict(row, updated_at="2026-10-18T10:00:00+00:00")
        return dict(self.plans[row["user_id"]])


@pytest.fixture()
def user_id() -> str:
    return str(uuid4())


@pytest.fixture()
def fake_remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture()
def local_store():
    store = LocalStore("sqlite://")
    yield store
    store.close()


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Plan.__table__.create(bind=engine)
    PracticeSession.__table__.create(bind=engine)
    PushSubscription.__table__.create(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app = main_module.app
    app.dependency_overrides[get_db] = override_get_db
    yield TestingSessionLocal
    app.dependency_overrides.clear()


@pytest.fixture()
def api_remote(session_factory) -> HttpRemoteStore:
    """HttpRemoteStore talking to the real FastAPI app in-process."""
    return HttpRemoteStore("http://testserver", transport=httpx.ASGITransport(app=main_module.app))
