from __future__ import annotations

import asyncio
from datetime import date

import pytest

from practice_log.client.local_store import LocalStore
from practice_log.client.models import SessionEntry
from practice_log.client.reconciler import Reconciler, ReconcileResult, ReconcilerStatus
from practice_log.client.repository import SessionRepository
from practice_log.core.constants import CATEGORIES
from practice_log.db.models.practice_session import PracticeSession

TODAY = date(2026, 10, 18)
DAY = "2026-10-18"


def _reconciler(remote, local, user_id) -> tuple[SessionRepository, Reconciler]:
    sessions = SessionRepository(user_id, remote, local)
    return sessions, Reconciler(sessions)


@pytest.mark.asyncio
async def test_empty_day_gets_one_entry_per_category(fake_remote, local_store, user_id):
    sessions, reconciler = _reconciler(fake_remote, local_store, user_id)

    outcome = await reconciler.ensure_daily_entries(DAY)

    assert outcome.result is ReconcileResult.CREATED
    assert outcome.created == list(CATEGORIES)
    entries = sessions.entries_for_date(DAY)
    assert [entry.category for entry in entries] == list(CATEGORIES)
    assert all(entry.persisted and entry.minutes == 0 for entry in entries)
    assert fake_remote.calls["insert_sessions"] == 1
    assert len(local_store.sessions_for_date(user_id, DAY)) == 4


@pytest.mark.asyncio
async def test_second_pass_is_a_local_noop(fake_remote, local_store, user_id):
    sessions, reconciler = _reconciler(fake_remote, local_store, user_id)

    await reconciler.ensure_daily_entries(DAY)
    again = await reconciler.ensure_daily_entries(DAY)

    assert again.result is ReconcileResult.ALREADY_COMPLETE
    assert len(sessions.entries_for_date(DAY)) == 4
    assert len(fake_remote.rows) == 4
    assert fake_remote.calls["fetch_sessions"] == 1


@pytest.mark.asyncio
async def test_only_the_missing_category_is_created(fake_remote, local_store, user_id):
    sessions, reconciler = _reconciler(fake_remote, local_store, user_id)
    existing = [
        fake_remote.add_row(user_id, DAY, "scales", 20),
        fake_remote.add_row(user_id, DAY, "review", 10),
        fake_remote.add_row(user_id, DAY, "new", 5),
    ]
    sessions.merge(SessionEntry.from_row(row) for row in existing)

    outcome = await reconciler.ensure_daily_entries(DAY)

    assert outcome.created == ["technique"]
    minutes = {entry.category: entry.minutes for entry in sessions.entries_for_date(DAY)}
    assert minutes == {"scales": 20, "review": 10, "new": 5, "technique": 0}
    assert len(fake_remote.rows) == 4


@pytest.mark.asyncio
async def test_rows_written_elsewhere_are_adopted(fake_remote, local_store, user_id):
    sessions, reconciler = _reconciler(fake_remote, local_store, user_id)
    for category in CATEGORIES:
        fake_remote.add_row(user_id, DAY, category, 15)

    outcome = await reconciler.ensure_daily_entries(DAY)

    assert outcome.result is ReconcileResult.ALREADY_COMPLETE
    assert fake_remote.calls["insert_sessions"] == 0
    assert {entry.id for entry in sessions.entries_for_date(DAY)} == {row["id"] for row in fake_remote.rows}


@pytest.mark.asyncio
async def test_overlapping_call_is_skipped(fake_remote, local_store, user_id):
    sessions, reconciler = _reconciler(fake_remote, local_store, user_id)
    fake_remote.gate = asyncio.Event()

    first = asyncio.create_task(reconciler.ensure_daily_entries(DAY))
    await asyncio.sleep(0)
    assert reconciler.status is ReconcilerStatus.RECONCILING

    second = await reconciler.ensure_daily_entries(DAY)
    assert second.result is ReconcileResult.SKIPPED_BUSY
    assert await reconciler.ensure_all_days_have_entries(today=TODAY) == []

    fake_remote.gate.set()
    outcome = await first

    assert outcome.result is ReconcileResult.CREATED
    assert reconciler.status is ReconcilerStatus.IDLE
    assert fake_remote.calls["insert_sessions"] == 1
    assert len(sessions.entries_for_date(DAY)) == 4


@pytest.mark.asyncio
async def test_remote_check_failure_leaves_state_unchanged(fake_remote, local_store, user_id):
    sessions, reconciler = _reconciler(fake_remote, local_store, user_id)
    fake_remote.fail.add("fetch_sessions")

    outcome = await reconciler.ensure_daily_entries(DAY)

    assert outcome.result is ReconcileResult.FAILED
    assert outcome.still_missing == list(CATEGORIES)
    assert sessions.entries == ()
    assert reconciler.status is ReconcilerStatus.IDLE


@pytest.mark.asyncio
async def test_insert_failure_is_retried_on_next_pass(fake_remote, local_store, user_id):
    sessions, reconciler = _reconciler(fake_remote, local_store, user_id)
    fake_remote.fail.add("insert_sessions")

    failed = await reconciler.ensure_daily_entries(DAY)
    assert failed.result is ReconcileResult.FAILED
    assert sessions.entries == ()
    assert local_store.sessions_for_user(user_id) == []

    fake_remote.fail.clear()
    retried = await reconciler.ensure_daily_entries(DAY)
    assert retried.result is ReconcileResult.CREATED
    assert len(sessions.entries_for_date(DAY)) == 4


@pytest.mark.asyncio
async def test_partial_batch_merges_only_created_rows(fake_remote, local_store, user_id):
    sessions, reconciler = _reconciler(fake_remote, local_store, user_id)
    fake_remote.create_limit = 2

    outcome = await reconciler.ensure_daily_entries(DAY)

    assert outcome.result is ReconcileResult.CREATED
    assert outcome.created == ["scales", "review"]
    assert outcome.still_missing == ["new", "technique"]
    assert {entry.category for entry in sessions.entries_for_date(DAY)} == {"scales", "review"}

    fake_remote.create_limit = None
    await reconciler.ensure_daily_entries(DAY)
    assert len(sessions.entries_for_date(DAY)) == 4
    assert len(fake_remote.rows) == 4


@pytest.mark.asyncio
async def test_window_pass_fills_every_day_once(fake_remote, local_store, user_id):
    sessions, reconciler = _reconciler(fake_remote, local_store, user_id)

    outcomes = await reconciler.ensure_all_days_have_entries(today=TODAY)

    assert len(outcomes) == 14
    assert len(sessions.entries) == 14 * 4
    assert fake_remote.calls["insert_sessions"] == 14

    assert await reconciler.ensure_all_days_have_entries(today=TODAY) == []
    assert fake_remote.calls["insert_sessions"] == 14
    assert len(fake_remote.rows) == 14 * 4


@pytest.mark.asyncio
async def test_once_guards_run_a_single_pass(fake_remote, local_store, user_id):
    _, reconciler = _reconciler(fake_remote, local_store, user_id)

    first = await reconciler.ensure_daily_entries_once(DAY)
    second = await reconciler.ensure_daily_entries_once(DAY)
    window = await reconciler.ensure_all_days_once(today=TODAY)
    window_again = await reconciler.ensure_all_days_once(today=TODAY)

    assert first.result is ReconcileResult.CREATED
    assert second is None
    assert len(window) == 13
    assert window_again is None


@pytest.mark.asyncio
async def test_two_devices_converge_on_the_backend(api_remote, session_factory, user_id):
    laptop_store, phone_store = LocalStore("sqlite://"), LocalStore("sqlite://")
    try:
        laptop, laptop_reconciler = _reconciler(api_remote, laptop_store, user_id)
        phone, phone_reconciler = _reconciler(api_remote, phone_store, user_id)

        created = await laptop_reconciler.ensure_daily_entries(DAY)
        adopted = await phone_reconciler.ensure_daily_entries(DAY)
    finally:
        laptop_store.close()
        phone_store.close()
        await api_remote.aclose()

    assert created.result is ReconcileResult.CREATED
    assert adopted.result is ReconcileResult.ALREADY_COMPLETE
    assert {e.id for e in laptop.entries_for_date(DAY)} == {e.id for e in phone.entries_for_date(DAY)}

    session = session_factory()
    try:
        assert session.query(PracticeSession).count() == 4
    finally:
        session.close()
