"""
Unit tests for the coaching data fetchers.

Tests the value coercion and row conversion that turn TEXT SQLite rows
into engine snapshots, and the loader against a seeded database.
"""
import sqlite3
from datetime import date, datetime, timedelta, timezone

import pytest

from insights_engine.models import SessionStatus

from conftest import SEED_CLIENT, add_malformed_rows


class TestValueCoercion:
    """Test helpers that coerce TEXT columns."""

    def test_float_strings(self):
        """
        Counts exported from the app can arrive as float strings like '5.0'.

        Bug reproduction: ValueError: invalid literal for int() with base 10: '5.0'
        """
        from server.coaching_api.services.client_data import to_float, to_int

        assert to_int("5.0") == 5
        assert to_int("12") == 12
        assert to_float("82.5") == 82.5

    def test_blank_and_null(self):
        from server.coaching_api.services.client_data import to_float, to_int, to_optional_float

        assert to_int(None) == 0
        assert to_int("") == 0
        assert to_float("") == 0.0
        assert to_optional_float("") is None
        assert to_optional_float(None) is None
        assert to_optional_float("7.5") == 7.5

    def test_timestamps(self):
        from server.coaching_api.services.client_data import to_date, to_datetime

        utc = datetime(2026, 10, 1, 8, 30, tzinfo=timezone.utc)
        assert to_datetime("2026-10-01T08:30:00Z") == utc
        assert to_datetime("2026-10-01T08:30:00") == utc
        assert to_datetime("2026-10-01T10:30:00+02:00") == utc
        assert to_datetime("") is None
        assert to_date("2026-10-01T08:30:00") == date(2026, 10, 1)
        assert to_date(None) is None

    def test_malformed_timestamps_are_missing(self):
        """A hand-edited timestamp must not fail the whole load."""
        from server.coaching_api.services.client_data import to_date, to_datetime

        assert to_datetime("yesterday") is None
        assert to_datetime("2026-13-45T00:00:00") is None
        assert to_date("not-a-date") is None

    def test_malformed_velocity_metrics(self):
        """A junk velocity payload is ignored instead of failing the load."""
        from server.coaching_api.services.client_data import parse_velocity_metrics

        assert parse_velocity_metrics("{not json") == {}
        assert parse_velocity_metrics("[1, 2]") == {}
        assert parse_velocity_metrics(None) == {}
        assert parse_velocity_metrics('{"peak_velocity": 0.7}') == {"peak_velocity": 0.7}


class TestRowConversion:
    """Test row converters with mock rows."""

    def _session_row(self, **overrides):
        row = {
            "id": "sess-1",
            "user_id": "client-1",
            "started_at": "2026-10-10T09:00:00+00:00",
            "completed_at": "2026-10-10T10:00:00+00:00",
            "status": "completed",
            "routine_id": "",
            "duration_minutes": "60.0",
            "notes": None,
        }
        row.update(overrides)
        return row

    def test_row_to_session(self):
        from server.coaching_api.services.client_data import _row_to_session

        session = _row_to_session(self._session_row())

        assert session.status == SessionStatus.COMPLETED
        assert session.duration_minutes == 60.0
        assert session.routine_id is None
        assert session.started_at.tzinfo is not None

    def test_blank_status_is_inferred(self):
        from server.coaching_api.services.client_data import _row_to_session

        finished = _row_to_session(self._session_row(status=""))
        running = _row_to_session(self._session_row(status=None, completed_at=None))

        assert finished.status == SessionStatus.COMPLETED
        assert running.status == SessionStatus.IN_PROGRESS

    def test_unknown_status_is_not_completed(self):
        from server.coaching_api.services.client_data import _row_to_session

        session = _row_to_session(self._session_row(status="abandoned"))
        assert not session.is_completed

    def test_row_to_set_reads_velocity(self):
        from server.coaching_api.services.client_data import _row_to_set

        record = _row_to_set({
            "id": "set-1",
            "session_id": "sess-1",
            "exercise_id": "ex-squat",
            "weight_kg": "100.0",
            "reps": "5.0",
            "rpe": "",
            "velocity_metrics": '{"peak_velocity": 0.72, "velocity_drop": "18.5"}',
            "created_at": None,
        })

        assert record.reps == 5
        assert record.volume == 500
        assert record.rpe is None
        assert record.peak_velocity == 0.72
        assert record.velocity_drop == 18.5
        assert record.completed_at is None


class TestLoadClientActivity:
    """Test loading a snapshot from a seeded database."""

    def test_loads_seeded_client(self, coaching_db, reference_now):
        from server.coaching_api.database import DatabaseManager
        from server.coaching_api.services.client_data import load_client_activity

        manager = DatabaseManager(database_path=str(coaching_db))
        activity = load_client_activity(SEED_CLIENT, reference_now, manager)

        assert len(activity.sessions) == 7
        assert sum(1 for s in activity.sessions if s.is_completed) == 6
        assert len(activity.sets) == 12
        assert sum(1 for s in activity.sets if s.has_velocity) == 11
        assert len(activity.personal_records) == 2
        assert len(activity.nutrition_logs) == 10
        assert len(activity.meal_items) == 10
        assert {e.name for e in activity.exercises} == {"Back Squat", "Bench Press"}

    def test_rows_with_malformed_timestamps_are_skipped(self, coaching_db, reference_now):
        from server.coaching_api.database import DatabaseManager
        from server.coaching_api.services.client_data import load_client_activity

        add_malformed_rows(coaching_db)
        manager = DatabaseManager(database_path=str(coaching_db))
        activity = load_client_activity(SEED_CLIENT, reference_now, manager)

        assert len(activity.sessions) == 7
        assert len(activity.personal_records) == 2
        assert len(activity.nutrition_logs) == 10

    def test_pr_history_skips_undated_records(self, coaching_db):
        from server.coaching_api.database import DatabaseManager
        from server.coaching_api.services.client_data import fetch_pr_history

        add_malformed_rows(coaching_db)
        manager = DatabaseManager(database_path=str(coaching_db))
        with manager.get_conn() as conn:
            history = fetch_pr_history(conn, SEED_CLIENT)

        assert len(history) == 2
        assert all(p.achieved_at is not None for p in history)

    def test_unknown_client_is_empty(self, coaching_db, reference_now):
        from server.coaching_api.database import DatabaseManager
        from server.coaching_api.services.client_data import load_client_activity

        manager = DatabaseManager(database_path=str(coaching_db))
        activity = load_client_activity("nobody", reference_now, manager)

        assert activity.sessions == []
        assert activity.sets == []
        assert activity.exercises == []

    def test_sessions_after_now_are_excluded(self, coaching_db, reference_now):
        from server.coaching_api.database import DatabaseManager
        from server.coaching_api.services.client_data import load_client_activity

        manager = DatabaseManager(database_path=str(coaching_db))
        activity = load_client_activity(SEED_CLIENT, reference_now - timedelta(days=4), manager)

        assert all(s.started_at < reference_now - timedelta(days=4) for s in activity.sessions)
        assert len(activity.sessions) == 4

    def test_connection_is_read_only(self, coaching_db):
        from server.coaching_api.database import DatabaseManager

        manager = DatabaseManager(database_path=str(coaching_db))
        with manager.get_conn() as conn:
            with pytest.raises(sqlite3.OperationalError):
                conn.execute("DELETE FROM workout_sessions")

    def test_missing_database_raises(self, tmp_path, reference_now):
        from server.coaching_api.database import DatabaseManager
        from server.coaching_api.services.client_data import load_client_activity

        manager = DatabaseManager(database_path=str(tmp_path / "missing.db"))
        with pytest.raises(sqlite3.Error):
            load_client_activity(SEED_CLIENT, reference_now, manager)
