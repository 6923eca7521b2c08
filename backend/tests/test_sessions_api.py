from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from practice_log.db.models.practice_session import PracticeSession


@pytest.fixture()
def client(session_factory):
    from practice_log.main import app

    with TestClient(app) as test_client:
        yield test_client, session_factory


def _rows(user_id, session_date, *categories, minutes=0):
    return [
        {"user_id": str(user_id), "session_date": session_date, "category": category, "minutes": minutes}
        for category in categories
    ]


def _count(session_factory, user_id) -> int:
    session = session_factory()
    try:
        return session.query(PracticeSession).filter(PracticeSession.user_id == user_id).count()
    finally:
        session.close()


def test_insert_and_list_sessions(client):
    test_client, _ = client
    user_id = uuid4()

    resp = test_client.post(
        "/sessions",
        json={"rows": _rows(user_id, "2026-10-18", "scales", "review", "new", "technique")},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["skipped"] == 0
    assert len(body["created"]) == 4
    assert all(row["id"] for row in body["created"])
    assert body["request_id"]

    listed = test_client.get("/sessions", params={"user_id": str(user_id)})
    assert listed.status_code == 200
    assert {row["category"] for row in listed.json()} == {"scales", "review", "new", "technique"}
    assert all(row["session_date"] == "2026-10-18" for row in listed.json())


def test_insert_skips_rows_that_already_exist(client):
    test_client, session_factory = client
    user_id = uuid4()
    test_client.post("/sessions", json={"rows": _rows(user_id, "2026-10-18", "scales", "review", "new")})

    resp = test_client.post(
        "/sessions",
        json={"rows": _rows(user_id, "2026-10-18", "scales", "review", "new", "technique")},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert [row["category"] for row in body["created"]] == ["technique"]
    assert body["skipped"] == 3
    assert _count(session_factory, user_id) == 4


def test_insert_skips_duplicates_within_one_batch(client):
    test_client, session_factory = client
    user_id = uuid4()

    resp = test_client.post("/sessions", json={"rows": _rows(user_id, "2026-10-18", "scales", "scales")})

    assert len(resp.json()["created"]) == 1
    assert resp.json()["skipped"] == 1
    assert _count(session_factory, user_id) == 1


def test_insert_rejects_negative_minutes_and_unknown_category(client):
    test_client, _ = client
    user_id = uuid4()

    negative = test_client.post("/sessions", json={"rows": _rows(user_id, "2026-10-18", "scales", minutes=-5)})
    unknown = test_client.post("/sessions", json={"rows": _rows(user_id, "2026-10-18", "sightreading")})
    empty = test_client.post("/sessions", json={"rows": []})

    assert negative.status_code == 422
    assert unknown.status_code == 422
    assert empty.status_code == 422


def test_list_filters_by_date_range(client):
    test_client, _ = client
    user_id = uuid4()
    for day in ("2026-10-10", "2026-10-15", "2026-10-18"):
        test_client.post("/sessions", json={"rows": _rows(user_id, day, "scales", minutes=20)})

    resp = test_client.get(
        "/sessions",
        params={"user_id": str(user_id), "start": "2026-10-12", "end": "2026-10-17"},
    )

    assert [row["session_date"] for row in resp.json()] == ["2026-10-15"]


def test_list_only_returns_own_rows(client):
    test_client, _ = client
    mine, theirs = uuid4(), uuid4()
    test_client.post("/sessions", json={"rows": _rows(mine, "2026-10-18", "scales")})
    test_client.post("/sessions", json={"rows": _rows(theirs, "2026-10-18", "review")})

    resp = test_client.get("/sessions", params={"user_id": str(mine)})

    assert [row["category"] for row in resp.json()] == ["scales"]


def test_patch_updates_minutes(client):
    test_client, _ = client
    user_id = uuid4()
    created = test_client.post("/sessions", json={"rows": _rows(user_id, "2026-10-18", "scales")}).json()["created"]
    session_id = created[0]["id"]

    resp = test_client.patch(f"/sessions/{session_id}", json={"user_id": str(user_id), "minutes": 35})

    assert resp.status_code == 200
    assert resp.json()["minutes"] == 35
    assert resp.json()["category"] == "scales"


def test_patch_other_users_row_is_forbidden(client):
    test_client, _ = client
    owner = uuid4()
    created = test_client.post("/sessions", json={"rows": _rows(owner, "2026-10-18", "scales")}).json()["created"]

    resp = test_client.patch(f"/sessions/{created[0]['id']}", json={"user_id": str(uuid4()), "minutes": 10})

    assert resp.status_code == 403


def test_patch_missing_row_returns_404(client):
    test_client, _ = client

    resp = test_client.patch("/sessions/9999", json={"user_id": str(uuid4()), "minutes": 10})

    assert resp.status_code == 404


def test_patch_into_existing_category_conflicts(client):
    test_client, _ = client
    user_id = uuid4()
    created = test_client.post(
        "/sessions", json={"rows": _rows(user_id, "2026-10-18", "scales", "review")}
    ).json()["created"]
    review = next(row for row in created if row["category"] == "review")

    resp = test_client.patch(f"/sessions/{review['id']}", json={"user_id": str(user_id), "category": "scales"})

    assert resp.status_code == 409


def test_delete_session(client):
    test_client, session_factory = client
    user_id = uuid4()
    created = test_client.post("/sessions", json={"rows": _rows(user_id, "2026-10-18", "scales")}).json()["created"]

    resp = test_client.delete(f"/sessions/{created[0]['id']}", params={"user_id": str(user_id)})

    assert resp.status_code == 204
    assert _count(session_factory, user_id) == 0
    again = test_client.delete(f"/sessions/{created[0]['id']}", params={"user_id": str(user_id)})
    assert again.status_code == 404
