from __future__ import annotations

import inspect
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.clock import get_clock
from app.db.deps import get_db
from app.db.models.commitment import Commitment
from app.db.models.goal import Goal
from app.db.models.goal_schedule import GoalSchedule
from app.db.models.milestone import Milestone
from app.db.models.user_profile import UserProfile
from app.main import app

START = datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc)


class _Clock:
    def __init__(self) -> None:
        self.now = START

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def client():
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
    Goal.__table__.create(bind=engine)
    Milestone.__table__.create(bind=engine)
    GoalSchedule.__table__.create(bind=engine)
    Commitment.__table__.create(bind=engine)
    UserProfile.__table__.create(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    clock = _Clock()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal, clock
    app.dependency_overrides.clear()


def _create_goal(client: TestClient, **overrides) -> UUID:
    payload = {
        "title": "Learn Spanish",
        "category": "education",
        "target_date": (START.date() + timedelta(days=90)).isoformat(),
    }
    payload.update(overrides)
    response = client.post("/goals", json=payload)
    assert response.status_code == 201
    return UUID(response.json()["id"])


def _save_profile(client: TestClient, hours: float = 10) -> None:
    response = client.put("/profile", json={"name": "Ana", "weekly_available_hours": hours, "interests": ["music"]})
    assert response.status_code == 200


def _plan(client: TestClient, goal_id: UUID) -> dict:
    response = client.post(f"/goals/{goal_id}/plan")
    assert response.status_code == 200
    return response.json()


def test_goal_crud(client):
    test_client, _, _ = client
    goal_id = _create_goal(
        test_client,
        milestones=[{"title": "Order a meal in Spanish", "target_date": "2025-02-15"}],
    )

    fetched = test_client.get(f"/goals/{goal_id}")
    assert fetched.status_code == 200
    body = fetched.json()
    assert body["title"] == "Learn Spanish"
    assert body["category"] == "education"
    assert body["has_schedule"] is False
    assert body["progress_percentage"] == 0
    assert body["milestones"][0]["title"] == "Order a meal in Spanish"
    assert body["milestones"][0]["is_generated"] is False
    assert body["request_id"]

    listed = test_client.get("/goals", params={"active_only": True})
    assert [item["id"] for item in listed.json()] == [str(goal_id)]

    deleted = test_client.delete(f"/goals/{goal_id}")
    assert deleted.status_code == 200
    assert deleted.json()["deleted"] is True

    missing = test_client.get(f"/goals/{goal_id}")
    assert missing.status_code == 404
    assert missing.json()["error"] == "GoalNotFoundError"
    assert missing.json()["request_id"] == missing.headers["X-Request-Id"]


def test_goal_validation(client):
    test_client, _, _ = client
    assert test_client.post("/goals", json={"title": ""}).status_code == 422
    assert test_client.post("/goals", json={"title": "x", "category": "hobbies"}).status_code == 422


def test_plan_requires_profile(client):
    test_client, _, _ = client
    goal_id = _create_goal(test_client)

    response = test_client.post(f"/goals/{goal_id}/plan")

    assert response.status_code == 422
    assert response.json()["error"] == "NoUserProfileError"
    assert test_client.get(f"/goals/{goal_id}/schedule").status_code == 409
    assert test_client.post(f"/goals/{uuid4()}/plan").status_code == 422


def test_generate_and_read_schedule(client):
    test_client, _, _ = client
    _save_profile(test_client)
    goal_id = _create_goal(test_client)

    body = _plan(test_client, goal_id)

    assert len(body["schedule"]["phases"]) == 4
    assert body["total_tasks"] > 0
    assert body["completed_tasks"] == 0
    assert body["is_on_track"] is True
    assert body["days_remaining"] == 90
    assert [task["scheduled_date"] for task in body["tasks_for_today"]] == ["2025-01-06"]
    assert body["next_task"]["id"] == body["schedule"]["phases"][0]["tasks"][0]["id"]

    again = test_client.get(f"/goals/{goal_id}/schedule")
    assert again.status_code == 200
    assert again.json()["schedule"] == body["schedule"]

    goal = test_client.get(f"/goals/{goal_id}").json()
    assert goal["has_schedule"] is True
    assert len(goal["milestones"]) == 4
    assert all(m["is_generated"] for m in goal["milestones"])
    assert goal["last_plan_update_at"] is not None


def test_task_completion_round_trip(client):
    test_client, _, _ = client
    _save_profile(test_client)
    goal_id = _create_goal(test_client)
    body = _plan(test_client, goal_id)
    task_id = body["schedule"]["phases"][0]["tasks"][0]["id"]

    done = test_client.patch(f"/goals/{goal_id}/tasks/{task_id}", json={"completed": True})
    assert done.status_code == 200
    assert done.json()["completed"] is True
    assert done.json()["changed"] is True
    assert done.json()["goal_progress"] > 0

    repeat = test_client.patch(f"/goals/{goal_id}/tasks/{task_id}", json={"completed": True})
    assert repeat.json()["changed"] is False

    schedule = test_client.get(f"/goals/{goal_id}/schedule").json()
    assert schedule["completed_tasks"] == 1

    undone = test_client.patch(f"/goals/{goal_id}/tasks/{task_id}", json={"completed": False})
    assert undone.json()["completed"] is False
    assert undone.json()["completed_at"] is None

    unknown = test_client.patch(f"/goals/{goal_id}/tasks/{uuid4()}", json={"completed": True})
    assert unknown.status_code == 404
    assert unknown.json()["error"] == "TaskNotFoundError"


def test_adjust_progress_and_suggestions(client):
    test_client, _, clock = client
    _save_profile(test_client)
    goal_id = _create_goal(test_client)
    _plan(test_client, goal_id)
    clock.now = START + timedelta(days=3)

    behind = test_client.get(f"/goals/{goal_id}/progress")
    assert behind.status_code == 200
    assert behind.json()["on_track"] is False
    assert "3 task(s) are overdue" in behind.json()["areas_for_improvement"]

    suggestions = test_client.get(f"/goals/{goal_id}/suggestions").json()["suggestions"]
    assert suggestions[0] == "You have 3 overdue task(s). Try to complete them today."

    adjusted = test_client.post(f"/goals/{goal_id}/adjust")
    assert adjusted.status_code == 200
    data = adjusted.json()
    assert data["overdue_tasks"] == []
    assert [entry["reason"] for entry in data["applied"]] == ["missed_tasks"]
    assert data["schedule"]["adjustment_history"] == data["applied"]


def test_milestone_toggle_endpoint(client):
    test_client, _, _ = client
    goal_id = _create_goal(
        test_client,
        milestones=[{"title": "First conversation", "target_date": "2025-02-01"}],
    )
    milestone_id = test_client.get(f"/goals/{goal_id}").json()["milestones"][0]["id"]

    response = test_client.post(f"/goals/{goal_id}/milestones/{milestone_id}", json={"completed": True})

    assert response.status_code == 200
    assert response.json()["milestones"][0]["is_completed"] is True
    assert response.json()["progress_percentage"] == 100.0
    missing = test_client.post(f"/goals/{goal_id}/milestones/{uuid4()}", json={"completed": True})
    assert missing.status_code == 404


def test_delete_removes_schedule_and_milestones(client):
    test_client, session_factory, _ = client
    _save_profile(test_client)
    goal_id = _create_goal(test_client)
    _plan(test_client, goal_id)

    assert test_client.delete(f"/goals/{goal_id}").status_code == 200
    assert test_client.delete(f"/goals/{goal_id}").status_code == 404

    session = session_factory()
    try:
        assert session.query(GoalSchedule).count() == 0
        assert session.query(Milestone).count() == 0
    finally:
        session.close()


def test_database_routes_run_in_threadpool():
    goal_routes = [route for route in app.routes if isinstance(route, APIRoute) and route.path.startswith("/goals")]
    assert any(route.path.endswith("/plan") for route in goal_routes)
    for route in goal_routes:
        assert not inspect.iscoroutinefunction(route.endpoint), route.path
