from __future__ import annotations

from datetime import date

from practice_log.client.local_store import LocalStore
from practice_log.client.models import SessionEntry, WeeklyPlan


def test_sessions_round_trip_by_key(local_store, user_id):
    persisted = SessionEntry(date="2026-10-18", category="scales", minutes=20, id=7)
    placeholder = SessionEntry(date="2026-10-18", category="review")

    local_store.put_sessions(user_id, [persisted, placeholder])

    stored = local_store.get_session("7")
    assert (stored.id, stored.date, stored.category, stored.minutes) == (7, "2026-10-18", "scales", 20)
    stored_placeholder = local_store.get_session(placeholder.key)
    assert stored_placeholder.local_key == placeholder.local_key
    assert not stored_placeholder.persisted


def test_sessions_for_date_are_in_category_order(local_store, user_id):
    local_store.put_sessions(
        user_id,
        [
            SessionEntry(date="2026-10-18", category="technique", id=1),
            SessionEntry(date="2026-10-18", category="scales", id=2),
            SessionEntry(date="2026-10-17", category="new", id=3),
        ],
    )

    assert [e.category for e in local_store.sessions_for_date(user_id, "2026-10-18")] == ["scales", "technique"]
    assert len(local_store.sessions_for_user(user_id, start="2026-10-18")) == 2


def test_replace_placeholder(local_store, user_id):
    placeholder = SessionEntry(date="2026-10-18", category="new", minutes=10)
    local_store.put_sessions(user_id, [placeholder])

    persisted = SessionEntry(date="2026-10-18", category="new", minutes=10, id=42)
    local_store.replace_placeholder(user_id, placeholder.key, persisted)

    entries = local_store.sessions_for_user(user_id)
    assert [entry.id for entry in entries] == [42]


def test_replace_synced_sessions_keeps_placeholders(local_store, user_id):
    placeholder = SessionEntry(date="2026-10-18", category="new")
    local_store.put_sessions(user_id, [SessionEntry(date="2026-10-18", category="scales", id=1), placeholder])

    local_store.replace_synced_sessions(user_id, [SessionEntry(date="2026-10-18", category="review", id=2)])

    keys = {entry.key for entry in local_store.sessions_for_user(user_id)}
    assert keys == {"2", placeholder.key}


def test_plans_are_keyed_by_week(local_store, user_id):
    plan = WeeklyPlan().with_goal(150)

    local_store.put_plan(user_id, plan, on=date(2026, 10, 18))

    # 2026-10-18 is a Sunday; its week starts Monday 2026-10-12
    assert local_store.plan_for_week(user_id, "2026-10-12").daily_goal == 150
    assert local_store.plan_for_week(user_id, "2026-10-19") is None
    assert local_store.plan_for_user(user_id).items["scales"].minutes == 45


def test_clear_user_only_touches_that_user(local_store, user_id):
    other = "someone-else"
    local_store.put_sessions(user_id, [SessionEntry(date="2026-10-18", category="scales", id=1)])
    local_store.put_sessions(other, [SessionEntry(date="2026-10-18", category="scales", id=2)])
    local_store.put_plan(user_id, WeeklyPlan())

    local_store.clear_user(user_id)

    assert local_store.sessions_for_user(user_id) == []
    assert local_store.plan_for_user(user_id) is None
    assert len(local_store.sessions_for_user(other)) == 1


def test_file_store_survives_reopen(tmp_path, user_id):
    url = f"sqlite:///{tmp_path / 'practice.db'}"
    first = LocalStore(url)
    first.put_sessions(user_id, [SessionEntry(date="2026-10-18", category="scales", minutes=30, id=5)])
    first.close()

    reopened = LocalStore(url)
    try:
        assert reopened.get_session("5").minutes == 30
    finally:
        reopened.close()
