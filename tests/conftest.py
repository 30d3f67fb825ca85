"""
Pytest fixtures for Coaching Insights tests.
"""
import sys
import json
import sqlite3
import pytest
from pathlib import Path
from datetime import datetime, timedelta, timezone
from dotenv import load_dotenv

# Ensure src/ is on sys.path so tests can import insights_engine.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Load environment variables
load_dotenv()

from server.coaching_api.schema import create_schema, insert_rows  # noqa: E402


# ============================================================================
# Database Fixtures
# ============================================================================

SEED_CLIENT = "client-seeded"


def _iso_days_ago(now: datetime, days: float) -> str:
    return (now - timedelta(days=days, hours=1)).isoformat()


def seed_client_rows(client_id: str, now: datetime) -> dict:
    """
    Rows for a client with six sessions in the last two weeks,
    a couple of PRs and ten days of nutrition logs.

    Values are stored as TEXT the way the mobile app exports them,
    including float strings and a malformed velocity payload.
    """
    sessions, sets = [], []
    for i, day in enumerate([1, 3, 5, 7, 9, 11]):
        session_id = f"{client_id}-sess-{i}"
        sessions.append({
            "id": session_id,
            "user_id": client_id,
            "started_at": _iso_days_ago(now, day),
            "completed_at": _iso_days_ago(now, day - 0.04),
            "status": "completed",
            "routine_id": "routine-a",
            "duration_minutes": "55.0",
        })
        for s in range(2):
            sets.append({
                "id": f"{session_id}-set-{s}",
                "session_id": session_id,
                "exercise_id": "ex-squat" if s == 0 else "ex-bench",
                "weight_kg": "100.0",
                "reps": "5.0",
                "rpe": "8",
                "velocity_metrics": json.dumps({"peak_velocity": 0.7, "velocity_drop": 12}),
                "created_at": None,
            })
    sets[0]["velocity_metrics"] = "{not json"

    # A paused session that must not count as a workout
    sessions.append({
        "id": f"{client_id}-sess-paused",
        "user_id": client_id,
        "started_at": _iso_days_ago(now, 2),
        "status": "paused",
    })

    prs = [
        {
            "id": f"{client_id}-pr-{i}",
            "user_id": client_id,
            "exercise_id": exercise_id,
            "weight_kg": weight,
            "reps": reps,
            "achieved_at": _iso_days_ago(now, day),
        }
        for i, (exercise_id, weight, reps, day) in enumerate(
            [("ex-squat", "140", "3", 2), ("ex-bench", "100", "1", 20)]
        )
    ]

    stats = [
        {
            "id": f"{client_id}-stat-squat",
            "user_id": client_id,
            "exercise_id": "ex-squat",
            "pr_weight_kg": "140",
            "pr_weight_reps": "3",
            "pr_weight_date": _iso_days_ago(now, 2),
            "estimated_1rm_kg": "",
        },
        {
            "id": f"{client_id}-stat-bench",
            "user_id": client_id,
            "exercise_id": "ex-bench",
            "pr_weight_kg": "100",
            "pr_weight_reps": "1",
            "pr_weight_date": _iso_days_ago(now, 20),
            "estimated_1rm_kg": None,
        },
    ]

    logs, meals, items = [], [], []
    for d in range(10):
        log_id = f"{client_id}-log-{d}"
        meal_id = f"{client_id}-meal-{d}"
        logs.append({
            "id": log_id,
            "user_id": client_id,
            "date": (now.date() - timedelta(days=d)).isoformat(),
            "target_calories": "2400",
        })
        meals.append({"id": meal_id, "nutrition_log_id": log_id, "name": "dinner"})
        items.append({"id": f"{meal_id}-item", "meal_id": meal_id, "calories": "700", "protein": "80.0"})

    return {
        "workout_sessions": sessions,
        "workout_sets": sets,
        "pr_history": prs,
        "exercise_statistics": stats,
        "nutrition_logs": logs,
        "meals": meals,
        "meal_items": items,
    }


def add_malformed_rows(db_path):
    """Add rows whose key timestamps are NULL, blank or not ISO 8601."""
    conn = sqlite3.connect(db_path)
    try:
        insert_rows(conn, "workout_sessions", [
            {"id": "sess-bad", "user_id": SEED_CLIENT, "started_at": "yesterday", "status": "completed"},
        ])
        insert_rows(conn, "pr_history", [
            {"id": "pr-null", "user_id": SEED_CLIENT, "exercise_id": "ex-squat",
             "weight_kg": "200", "reps": "1", "achieved_at": None},
            {"id": "pr-blank", "user_id": SEED_CLIENT, "exercise_id": "ex-squat",
             "weight_kg": "200", "reps": "1", "achieved_at": ""},
            {"id": "pr-junk", "user_id": SEED_CLIENT, "exercise_id": "ex-bench",
             "weight_kg": "150", "reps": "1", "achieved_at": "last tuesday"},
        ])
        insert_rows(conn, "nutrition_logs", [
            {"id": "log-bad", "user_id": SEED_CLIENT, "date": "garbage"},
        ])
    finally:
        conn.close()


@pytest.fixture
def reference_now():
    """Wall-clock reference used when seeding the test database."""
    return datetime.now(timezone.utc)


@pytest.fixture
def coaching_db(tmp_path, reference_now):
    """Create a populated SQLite coaching database and return its path."""
    db_path = tmp_path / "coaching.db"
    conn = sqlite3.connect(db_path)
    try:
        create_schema(conn)
        insert_rows(conn, "exercises", [
            {"id": "ex-squat", "name": "Back Squat", "main_muscle_group": "Legs"},
            {"id": "ex-bench", "name": "Bench Press", "main_muscle_group": "Chest"},
        ])
        for table, rows in seed_client_rows(SEED_CLIENT, reference_now).items():
            insert_rows(conn, table, rows)
    finally:
        conn.close()
    return db_path


@pytest.fixture
def use_coaching_db(coaching_db, monkeypatch):
    """Point the API's database manager at the test database and start with an empty cache."""
    from server.coaching_api.database import db_manager
    from server.coaching_api.services.insights_cache import insights_cache

    monkeypatch.setattr(db_manager, "database_path", str(coaching_db))
    insights_cache.invalidate()
    yield coaching_db
    insights_cache.invalidate()


@pytest.fixture
def client(use_coaching_db):
    """FastAPI test client bound to the test database."""
    from fastapi.testclient import TestClient
    from server.coaching_api.main import app

    with TestClient(app) as test_client:
        yield test_client
