#!/usr/bin/env python3
"""
Populate a demo SQLite coaching database with synthetic clients.

Creates the schema the Coaching Insights API reads from and fills it with
eight weeks of sessions, sets, PRs and nutrition logs for a few client
profiles, so every insight rule has something to react to.

Usage:
    python scripts/populate_database.py
    python scripts/populate_database.py --seed 7 --output /tmp/coaching.db
"""
import argparse
import json
import os
import random
import sqlite3
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from dotenv import load_dotenv

# Base directory (project root)
BASE_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BASE_DIR))

from server.coaching_api.schema import TABLES, create_schema, insert_rows  # noqa: E402

load_dotenv()

EXERCISES = [
    {"id": "ex-squat", "name": "Back Squat", "main_muscle_group": "Legs"},
    {"id": "ex-bench", "name": "Bench Press", "main_muscle_group": "Chest"},
    {"id": "ex-deadlift", "name": "Deadlift", "main_muscle_group": "Back"},
    {"id": "ex-ohp", "name": "Overhead Press", "main_muscle_group": "Shoulders"},
    {"id": "ex-row", "name": "Barbell Row", "main_muscle_group": "Back"},
]

# Sessions per week for each of the 8 weeks (oldest first) and nutrition logging rate
CLIENT_PROFILES = {
    "client-consistent": {"weekly_sessions": [3, 3, 4, 4, 4, 4, 4, 4], "log_rate": 0.9, "protein": 45},
    "client-dropping": {"weekly_sessions": [4, 4, 4, 4, 3, 3, 1, 0], "log_rate": 0.3, "protein": 20},
    "client-new": {"weekly_sessions": [0, 0, 0, 0, 0, 1, 2, 3], "log_rate": 0.0, "protein": 0},
}


def _iso(moment: datetime) -> str:
    return moment.isoformat()


def build_client_rows(client_id: str, profile: dict, now: datetime, rng: random.Random) -> dict:
    """Generate rows for every table for one client."""
    rows = {table: [] for table in TABLES}

    for week, count in enumerate(profile["weekly_sessions"]):
        week_start = now - timedelta(days=(8 - week) * 7)
        days = sorted(rng.sample(range(7), count))
        for day in days:
            started = week_start + timedelta(days=day, hours=rng.randint(6, 19))
            duration = rng.randint(40, 80)
            session_id = f"sess-{uuid.uuid4().hex[:10]}"
            rows["workout_sessions"].append({
                "id": session_id,
                "user_id": client_id,
                "started_at": _iso(started),
                "completed_at": _iso(started + timedelta(minutes=duration)),
                "status": "completed",
                "routine_id": "routine-full-body",
                "duration_minutes": str(duration),
            })
            for exercise in rng.sample(EXERCISES, 3):
                base = {"ex-squat": 100, "ex-bench": 80, "ex-deadlift": 130}.get(exercise["id"], 50)
                for set_no in range(3):
                    velocity = {
                        "peak_velocity": round(rng.uniform(0.5, 0.9), 2),
                        "velocity_drop": round(rng.uniform(5, 30), 1),
                    }
                    rows["workout_sets"].append({
                        "id": f"set-{uuid.uuid4().hex[:10]}",
                        "session_id": session_id,
                        "exercise_id": exercise["id"],
                        "weight_kg": str(base + week * 2.5),
                        "reps": str(rng.randint(4, 8)),
                        "rpe": str(rng.choice([6, 7, 7.5, 8, 8.5, 9])),
                        "velocity_metrics": json.dumps(velocity),
                        "created_at": _iso(started + timedelta(minutes=5 * (set_no + 1))),
                    })

        if count >= 3:
            exercise = rng.choice(EXERCISES)
            rows["pr_history"].append({
                "id": f"pr-{uuid.uuid4().hex[:10]}",
                "user_id": client_id,
                "exercise_id": exercise["id"],
                "weight_kg": str(100 + week * 2.5),
                "reps": "5",
                "achieved_at": _iso(week_start + timedelta(days=6)),
            })

    for exercise in EXERCISES:
        weight = 90 + rng.randint(0, 40)
        rows["exercise_statistics"].append({
            "id": f"stat-{uuid.uuid4().hex[:10]}",
            "user_id": client_id,
            "exercise_id": exercise["id"],
            "pr_weight_kg": str(weight),
            "pr_weight_reps": "5",
            "pr_weight_date": _iso(now - timedelta(days=rng.randint(1, 50))),
            "estimated_1rm_kg": str(round(weight * (1 + 5 / 30))),
        })

    for day in range(28):
        if rng.random() >= profile["log_rate"]:
            continue
        log_id = f"log-{uuid.uuid4().hex[:10]}"
        rows["nutrition_logs"].append({
            "id": log_id,
            "user_id": client_id,
            "date": (now - timedelta(days=day)).date().isoformat(),
            "target_calories": "2400",
            "target_protein": "160",
        })
        for meal_name in ("breakfast", "lunch", "dinner"):
            meal_id = f"meal-{uuid.uuid4().hex[:10]}"
            rows["meals"].append({"id": meal_id, "nutrition_log_id": log_id, "name": meal_name})
            rows["meal_items"].append({
                "id": f"item-{uuid.uuid4().hex[:10]}",
                "meal_id": meal_id,
                "calories": str(rng.randint(400, 900)),
                "protein": str(profile["protein"] + rng.randint(-5, 5)),
                "carbs": str(rng.randint(40, 90)),
                "fat": str(rng.randint(10, 30)),
            })

    return rows


def populate_database(db_path: Path, seed: int) -> int:
    """
    Create the schema and insert demo data.

    Returns:
        Number of rows inserted
    """
    if db_path.exists():
        os.remove(db_path)
        print(f"  Removed existing: {db_path.name}")

    rng = random.Random(seed)
    now = datetime.now(timezone.utc)

    conn = sqlite3.connect(db_path)
    try:
        create_schema(conn)
        total = insert_rows(conn, "exercises", EXERCISES)
        for client_id, profile in CLIENT_PROFILES.items():
            client_rows = build_client_rows(client_id, profile, now, rng)
            for table, rows in client_rows.items():
                total += insert_rows(conn, table, rows)
            print(f"  {client_id}: {len(client_rows['workout_sessions'])} sessions")
    finally:
        conn.close()

    return total


def main():
    """Populate the coaching database."""
    parser = argparse.ArgumentParser(description="Populate the demo coaching database")
    parser.add_argument(
        "--output",
        default=os.getenv("COACHING_DATA_PATH", str(BASE_DIR)) + "/coaching.db",
        help="Path of the SQLite file to create (default: ./coaching.db)",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    print("=" * 60)
    print("Coaching Database Population Script")
    print("=" * 60)

    db_path = Path(args.output)
    total_rows = populate_database(db_path, args.seed)

    print("=" * 60)
    print(f"Complete! Total rows: {total_rows}")
    print(f"  {db_path} ({db_path.stat().st_size / 1024:.1f} KB)")


if __name__ == "__main__":
    main()
