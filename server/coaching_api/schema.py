"""SQLite schema for the coaching database.

Columns are stored as TEXT, matching what the mobile app exports; the
row converters in ``services.client_data`` do the type coercion.
"""
import sqlite3

TABLES = {
    "workout_sessions": [
        "id", "user_id", "started_at", "completed_at", "status",
        "routine_id", "duration_minutes", "notes",
    ],
    "workout_sets": [
        "id", "session_id", "exercise_id", "weight_kg", "reps", "rpe",
        "velocity_metrics", "created_at",
    ],
    "exercise_statistics": [
        "id", "user_id", "exercise_id", "pr_weight_kg", "pr_weight_reps",
        "pr_weight_date", "estimated_1rm_kg", "updated_at",
    ],
    "pr_history": [
        "id", "user_id", "exercise_id", "weight_kg", "reps", "achieved_at",
    ],
    "nutrition_logs": [
        "id", "user_id", "date", "target_calories", "target_protein",
        "target_carbs", "target_fat", "notes",
    ],
    "meals": ["id", "nutrition_log_id", "name"],
    "meal_items": ["id", "meal_id", "calories", "protein", "carbs", "fat"],
    "exercises": ["id", "name", "main_muscle_group"],
}


def create_schema(conn: sqlite3.Connection) -> None:
    """Create every coaching table (all TEXT columns)."""
    cursor = conn.cursor()
    for table, columns in TABLES.items():
        cursor.execute(f"DROP TABLE IF EXISTS {table}")
        cursor.execute(f"CREATE TABLE {table} ({', '.join(f'{col} TEXT' for col in columns)})")
    conn.commit()


def insert_rows(conn: sqlite3.Connection, table: str, rows: list[dict]) -> int:
    """Insert dict rows into a table; missing columns become NULL."""
    columns = TABLES[table]
    placeholders = ", ".join("?" * len(columns))
    conn.executemany(
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
        [[row.get(col) for col in columns] for row in rows],
    )
    conn.commit()
    return len(rows)
