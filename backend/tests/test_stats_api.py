from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studypal.db.deps import get_db
from studypal.db.models.task import Task
from studypal.db.models.task_status_history import TaskStatusHistory
from studypal.db.models.user import User
from studypal.main import app

AS_OF = "2026-03-11T15:00:00Z"
NOW = datetime(2026, 3, 11, 15, 0, tzinfo=timezone.utc)


def _sqlite_engine():
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

    return engine


@pytest.fixture()
def client():
    engine = _sqlite_engine()
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    User.__table__.create(bind=engine)
    Task.__table__.create(bind=engine)
    TaskStatusHistory.__table__.create(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _seed_user(session_factory):
    session = session_factory()
    try:
        user_id = uuid4()
        session.add(User(id=user_id, name="Ada", email=f"{user_id.hex}@example.com"))
        session.commit()
        return user_id
    finally:
        session.close()


def _add_task(session_factory, user_id, *, history=(), **fields):
    session = session_factory()
    try:
        task = Task(user_id=user_id, created_at=fields.pop("created_at", NOW - timedelta(days=20)), **fields)
        session.add(task)
        session.flush()
        for to_status, changed_at in history:
            session.add(
                TaskStatusHistory(
                    task_id=task.id,
                    user_id=user_id,
                    to_status=to_status,
                    changed_at=changed_at,
                )
            )
        session.commit()
        return task.id
    finally:
        session.close()


def test_overview_for_user_without_tasks(client):
    test_client, session_factory = client
    user_id = _seed_user(session_factory)

    resp = test_client.get("/stats/overview", params={"user_id": str(user_id), "as_of": AS_OF})

    assert resp.status_code == 200
    data = resp.json()
    assert data["totals"] == {
        "totalTasks": 0,
        "completedTasks": 0,
        "pendingTasks": 0,
        "overdueTasks": 0,
        "focusHours": 0.0,
    }
    assert data["completionRate"] == 0
    assert data["weeklyCompletionRate"] == 0
    assert data["weeklyFocusMinutes"] == 0
    assert len(data["weeklyProgress"]) == 7
    assert data["weeklyProgress"][-1]["date"].startswith("2026-03-11")
    assert data["weeklyProgress"][-1]["label"] == "Wed"
    assert data["streakDays"] == 0
    assert data["streak"]["current"] == 0
    assert data["upcomingTasks"] == []
    assert data["gamification"] == {
        "xp": 0,
        "level": 1,
        "xpPerCompletion": 60,
        "xpPerLevel": 600,
        "xpIntoLevel": 0,
        "xpToNextLevel": 600,
        "progressPercent": 0,
        "achievements": ["Keep the momentum going!"],
    }
    assert data["requestId"] == resp.headers["X-Request-Id"]


def test_overview_reads_tasks_and_history(client):
    test_client, session_factory = client
    user_id = _seed_user(session_factory)
    other_user = _seed_user(session_factory)

    first_completion = NOW - timedelta(days=5)
    second_completion = NOW - timedelta(hours=2)
    essay_id = _add_task(
        session_factory,
        user_id,
        title="Essay draft",
        course="History",
        status="completed",
        estimated_hours="2",
        updated_at=NOW - timedelta(days=30),
        history=[
            ("completed", first_completion),
            ("pending", first_completion + timedelta(hours=1)),
            ("completed", second_completion),
        ],
    )
    _add_task(
        session_factory,
        user_id,
        title="Flashcards",
        status="completed",
        estimated_hours="not sure",
        updated_at=NOW - timedelta(days=1),
    )
    overdue_id = _add_task(
        session_factory,
        user_id,
        title="Lab report",
        course="Chemistry",
        priority="high",
        status="pending",
        estimated_hours="1.5",
        due_date=NOW - timedelta(days=1),
    )
    _add_task(
        session_factory,
        user_id,
        title="Problem set",
        status="in_progress",
        due_date=NOW + timedelta(days=1),
    )
    _add_task(session_factory, user_id, title="Someday", status="pending")
    _add_task(session_factory, other_user, title="Not mine", status="completed", updated_at=NOW)

    resp = test_client.get("/stats/overview", params={"user_id": str(user_id), "as_of": AS_OF})

    assert resp.status_code == 200
    data = resp.json()
    assert data["totals"] == {
        "totalTasks": 5,
        "completedTasks": 2,
        "pendingTasks": 3,
        "overdueTasks": 1,
        "focusHours": 3.5,
    }
    assert data["completionRate"] == 40.0

    completed_by_day = [bucket["completed"] for bucket in data["weeklyProgress"]]
    assert completed_by_day == [0, 0, 0, 0, 0, 1, 1]
    assert data["weeklyProgress"][-1]["studyMinutes"] == 120
    assert data["weeklyProgress"][-2]["studyMinutes"] == 0
    assert data["weeklyProgress"][-2]["planned"] == 1
    assert data["weeklyFocusMinutes"] == 120
    assert data["weeklyCompletionRate"] == 100.0
    assert data["streakDays"] == 2
    assert data["streak"]["longest"] == 2
    assert data["streak"]["lastMissedDay"].startswith("2026-03-09")

    upcoming = data["upcomingTasks"]
    assert [task["title"] for task in upcoming] == ["Lab report", "Problem set"]
    assert upcoming[0]["id"] == str(overdue_id)
    assert upcoming[0]["overdue"] is True
    assert upcoming[0]["priority"] == "high"
    assert upcoming[0]["course"] == "Chemistry"
    assert upcoming[0]["estimatedHours"] == 1.5
    assert upcoming[1]["overdue"] is False
    assert str(essay_id) not in {task["id"] for task in upcoming}

    assert data["gamification"]["xp"] == 120
    assert data["gamification"]["progressPercent"] == 20


def test_overview_is_stable_across_calls(client):
    test_client, session_factory = client
    user_id = _seed_user(session_factory)
    _add_task(session_factory, user_id, title="Read", status="completed", updated_at=NOW - timedelta(days=2))

    params = {"user_id": str(user_id), "as_of": AS_OF}
    first = test_client.get("/stats/overview", params=params, headers={"X-Request-Id": "same"})
    second = test_client.get("/stats/overview", params=params, headers={"X-Request-Id": "same"})

    assert first.content == second.content


def test_overview_defaults_as_of_to_now(client):
    test_client, session_factory = client
    user_id = _seed_user(session_factory)

    resp = test_client.get("/stats/overview", params={"user_id": str(user_id)})

    assert resp.status_code == 200
    today = datetime.now(timezone.utc).date().isoformat()
    assert resp.json()["weeklyProgress"][-1]["date"].startswith(today)


def test_overview_invalid_params(client):
    test_client, _ = client

    assert test_client.get("/stats/overview", params={"user_id": "not-a-uuid"}).status_code == 422
    assert (
        test_client.get("/stats/overview", params={"user_id": str(uuid4()), "as_of": "yesterday"}).status_code
        == 422
    )
    assert test_client.get("/stats/overview").status_code == 422


def test_overview_returns_503_when_task_store_fails():
    # No tables created, so every query fails.
    engine = _sqlite_engine()
    BrokenSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    def override_get_db():
        db = BrokenSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            resp = test_client.get("/stats/overview", params={"user_id": str(uuid4()), "as_of": AS_OF})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 503
    assert resp.json() == {"detail": "Task data is temporarily unavailable"}
