"""Data fetchers that load a client's activity snapshot from SQLite.

Each fetcher returns a possibly-empty list; an empty id list skips the
query entirely. Rows whose key timestamp is missing or malformed are
skipped. Database errors propagate to the caller.
"""
import json
import logging
import sqlite3
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from insights_engine.models import (
    ClientActivity,
    Exercise,
    ExerciseStat,
    Meal,
    MealItem,
    NutritionLog,
    PersonalRecord,
    SessionStatus,
    SetRecord,
    WorkoutSession,
)
from insights_engine.windows import TimeWindows

from ..database import DatabaseManager, db_manager

logger = logging.getLogger(__name__)


# ============================================================================
# Value coercion (rows are TEXT and may hold '80.0', '' or NULL)
# ============================================================================


def to_int(val) -> int:
    return int(float(val)) if val not in (None, "") else 0


def to_float(val) -> float:
    return float(val) if val not in (None, "") else 0.0


def to_optional_float(val) -> Optional[float]:
    return float(val) if val not in (None, "") else None


def to_datetime(val) -> Optional[datetime]:
    """Parse an ISO timestamp; naive values are taken as UTC, junk as missing."""
    if not val:
        return None
    try:
        parsed = datetime.fromisoformat(str(val).replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"[DB] Ignoring malformed timestamp: {val!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_date(val) -> Optional[date]:
    if not val:
        return None
    try:
        return date.fromisoformat(str(val)[:10])
    except ValueError:
        logger.warning(f"[DB] Ignoring malformed date: {val!r}")
        return None


def parse_velocity_metrics(raw) -> dict:
    """Decode the velocity_metrics JSON column, tolerating junk."""
    if not raw:
        return {}
    if isinstance(raw, dict):
        return raw
    try:
        metrics = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"[DB] Ignoring malformed velocity_metrics: {raw!r}")
        return {}
    return metrics if isinstance(metrics, dict) else {}


def _placeholders(ids: list) -> str:
    return ", ".join("?" * len(ids))


def _unique(ids: Iterable[str]) -> list:
    return list(dict.fromkeys(i for i in ids if i))


# ============================================================================
# Row converters
# ============================================================================


def _session_status(row) -> SessionStatus:
    """Status column, inferred from completed_at when blank."""
    raw = row["status"]
    if not raw:
        return SessionStatus.COMPLETED if row["completed_at"] else SessionStatus.IN_PROGRESS
    try:
        return SessionStatus(raw)
    except ValueError:
        logger.warning(f"[DB] Unknown session status {raw!r} for session {row['id']}")
        return SessionStatus.IN_PROGRESS


def _row_to_session(row) -> WorkoutSession:
    return WorkoutSession(
        id=row["id"],
        client_id=row["user_id"],
        started_at=to_datetime(row["started_at"]),
        completed_at=to_datetime(row["completed_at"]),
        status=_session_status(row),
        routine_id=row["routine_id"] or None,
        duration_minutes=to_optional_float(row["duration_minutes"]),
        notes=row["notes"],
    )


def _row_to_set(row) -> SetRecord:
    velocity = parse_velocity_metrics(row["velocity_metrics"])
    return SetRecord(
        id=row["id"],
        session_id=row["session_id"],
        exercise_id=row["exercise_id"],
        weight_kg=to_float(row["weight_kg"]),
        reps=to_int(row["reps"]),
        rpe=to_optional_float(row["rpe"]),
        peak_velocity=to_optional_float(velocity.get("peak_velocity")),
        velocity_drop=to_optional_float(velocity.get("velocity_drop")),
        completed_at=to_datetime(row["created_at"]),
    )


def _row_to_personal_record(row) -> PersonalRecord:
    return PersonalRecord(
        id=row["id"],
        client_id=row["user_id"],
        exercise_id=row["exercise_id"],
        weight_kg=to_float(row["weight_kg"]),
        reps=to_int(row["reps"]),
        achieved_at=to_datetime(row["achieved_at"]),
    )


def _row_to_exercise_stat(row) -> ExerciseStat:
    return ExerciseStat(
        exercise_id=row["exercise_id"],
        pr_weight_kg=to_optional_float(row["pr_weight_kg"]),
        pr_weight_reps=to_int(row["pr_weight_reps"]) or None,
        pr_weight_date=to_datetime(row["pr_weight_date"] or row["updated_at"]),
        estimated_1rm_kg=to_optional_float(row["estimated_1rm_kg"]),
    )


def _row_to_nutrition_log(row) -> NutritionLog:
    return NutritionLog(
        id=row["id"],
        client_id=row["user_id"],
        date=to_date(row["date"]),
        target_calories=to_optional_float(row["target_calories"]),
        target_protein=to_optional_float(row["target_protein"]),
        target_carbs=to_optional_float(row["target_carbs"]),
        target_fat=to_optional_float(row["target_fat"]),
        notes=row["notes"],
    )


def _row_to_meal_item(row) -> MealItem:
    return MealItem(
        id=row["id"],
        meal_id=row["meal_id"],
        calories=to_float(row["calories"]),
        protein=to_float(row["protein"]),
        carbs=to_float(row["carbs"]),
        fat=to_float(row["fat"]),
    )


# ============================================================================
# Fetchers
# ============================================================================


def fetch_sessions(conn: sqlite3.Connection, client_id: str, since: datetime) -> list[WorkoutSession]:
    """Sessions started at or after ``since``, oldest first."""
    cursor = conn.execute(
        """
        SELECT * FROM workout_sessions
        WHERE user_id = ? AND started_at >= ?
        ORDER BY started_at ASC
        """,
        (client_id, since.isoformat()),
    )
    sessions = [_row_to_session(row) for row in cursor.fetchall()]
    return [s for s in sessions if s.started_at is not None]


def fetch_sets(conn: sqlite3.Connection, session_ids: list[str]) -> list[SetRecord]:
    session_ids = _unique(session_ids)
    if not session_ids:
        return []
    cursor = conn.execute(
        f"SELECT * FROM workout_sets WHERE session_id IN ({_placeholders(session_ids)})",
        session_ids,
    )
    return [_row_to_set(row) for row in cursor.fetchall()]


def fetch_exercise_stats(conn: sqlite3.Connection, client_id: str) -> list[ExerciseStat]:
    cursor = conn.execute(
        """
        SELECT * FROM exercise_statistics
        WHERE user_id = ?
        ORDER BY CAST(estimated_1rm_kg AS REAL) DESC
        """,
        (client_id,),
    )
    return [_row_to_exercise_stat(row) for row in cursor.fetchall()]


def fetch_pr_history(
    conn: sqlite3.Connection, client_id: str, since: Optional[datetime] = None
) -> list[PersonalRecord]:
    """PR history, newest first; ``since`` limits it to a window."""
    if since is None:
        cursor = conn.execute(
            """
            SELECT * FROM pr_history
            WHERE user_id = ? AND achieved_at IS NOT NULL
            ORDER BY achieved_at DESC
            """,
            (client_id,),
        )
    else:
        cursor = conn.execute(
            """
            SELECT * FROM pr_history
            WHERE user_id = ? AND achieved_at >= ?
            ORDER BY achieved_at DESC
            """,
            (client_id, since.isoformat()),
        )
    records = [_row_to_personal_record(row) for row in cursor.fetchall()]
    return [r for r in records if r.achieved_at is not None]


def fetch_nutrition_logs(conn: sqlite3.Connection, client_id: str, since: date) -> list[NutritionLog]:
    cursor = conn.execute(
        "SELECT * FROM nutrition_logs WHERE user_id = ? AND date >= ? ORDER BY date ASC",
        (client_id, since.isoformat()),
    )
    logs = [_row_to_nutrition_log(row) for row in cursor.fetchall()]
    return [log for log in logs if log.date is not None]


def fetch_meals(conn: sqlite3.Connection, log_ids: list[str]) -> list[Meal]:
    log_ids = _unique(log_ids)
    if not log_ids:
        return []
    cursor = conn.execute(
        f"SELECT * FROM meals WHERE nutrition_log_id IN ({_placeholders(log_ids)})",
        log_ids,
    )
    return [
        Meal(id=row["id"], nutrition_log_id=row["nutrition_log_id"], name=row["name"])
        for row in cursor.fetchall()
    ]


def fetch_meal_items(conn: sqlite3.Connection, meal_ids: list[str]) -> list[MealItem]:
    meal_ids = _unique(meal_ids)
    if not meal_ids:
        return []
    cursor = conn.execute(
        f"SELECT * FROM meal_items WHERE meal_id IN ({_placeholders(meal_ids)})",
        meal_ids,
    )
    return [_row_to_meal_item(row) for row in cursor.fetchall()]


def fetch_exercises(conn: sqlite3.Connection, exercise_ids: list[str]) -> list[Exercise]:
    exercise_ids = _unique(exercise_ids)
    if not exercise_ids:
        return []
    cursor = conn.execute(
        f"SELECT * FROM exercises WHERE id IN ({_placeholders(exercise_ids)})",
        exercise_ids,
    )
    return [
        Exercise(id=row["id"], name=row["name"], muscle_group=row["main_muscle_group"] or None)
        for row in cursor.fetchall()
    ]


def load_client_activity(
    client_id: str,
    now: datetime,
    manager: DatabaseManager = db_manager,
) -> ClientActivity:
    """
    Load everything the insights engine needs for one client.

    Covers the trailing 8 weeks before ``now``.

    Args:
        client_id: Client whose activity to load
        now: Reference instant of the insights run
        manager: Database manager to read from

    Returns:
        ClientActivity snapshot (collections may be empty)
    """
    windows = TimeWindows.at(now)
    since = windows.eight_weeks_ago

    with manager.get_conn() as conn:
        sessions = fetch_sessions(conn, client_id, since)
        sets = fetch_sets(conn, [s.id for s in sessions])
        stats = fetch_exercise_stats(conn, client_id)
        prs = fetch_pr_history(conn, client_id, since)
        logs = fetch_nutrition_logs(conn, client_id, since.date())
        meals = fetch_meals(conn, [log.id for log in logs])
        items = fetch_meal_items(conn, [m.id for m in meals])
        exercises = fetch_exercises(
            conn,
            [s.exercise_id for s in sets]
            + [p.exercise_id for p in prs]
            + [s.exercise_id for s in stats],
        )

    logger.info(
        f"[DB] Loaded activity for {client_id}: sessions={len(sessions)}, "
        f"sets={len(sets)}, prs={len(prs)}, nutrition_logs={len(logs)}"
    )

    return ClientActivity(
        client_id=client_id,
        sessions=[s for s in sessions if s.started_at < windows.now],
        sets=sets,
        personal_records=prs,
        exercise_stats=stats,
        nutrition_logs=logs,
        meals=meals,
        meal_items=items,
        exercises=exercises,
    )
