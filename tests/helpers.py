"""
Builders for insights engine test data.

All timestamps are relative to a fixed NOW so window math is exact.
Sessions are placed one hour before the day boundary so that a session
"0 days ago" still falls inside the half-open window ending at NOW.
"""
import itertools
from datetime import datetime, timedelta, timezone

from insights_engine.models import (
    ClientActivity,
    Exercise,
    Meal,
    MealItem,
    NutritionLog,
    PersonalRecord,
    SessionStatus,
    SetRecord,
    WorkoutSession,
)

# A Saturday
NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
CLIENT_ID = "client-1"

_ids = itertools.count(1)


def days_ago(days: float, now: datetime = NOW) -> datetime:
    return now - timedelta(days=days, hours=1)


def make_session(days: float, status=SessionStatus.COMPLETED, duration=60, now=NOW) -> WorkoutSession:
    started = days_ago(days, now)
    return WorkoutSession(
        id=f"sess-{next(_ids)}",
        client_id=CLIENT_ID,
        started_at=started,
        completed_at=started + timedelta(minutes=duration),
        status=status,
        duration_minutes=duration,
    )


def make_sessions(day_offsets, **kwargs) -> list:
    return [make_session(d, **kwargs) for d in day_offsets]


def make_set(
    session: WorkoutSession,
    weight=100.0,
    reps=5,
    rpe=None,
    peak_velocity=None,
    velocity_drop=None,
    exercise_id="ex-squat",
) -> SetRecord:
    return SetRecord(
        id=f"set-{next(_ids)}",
        session_id=session.id,
        exercise_id=exercise_id,
        weight_kg=weight,
        reps=reps,
        rpe=rpe,
        peak_velocity=peak_velocity,
        velocity_drop=velocity_drop,
    )


def make_pr(days: float, exercise_id="ex-squat", weight=120.0, reps=3, now=NOW) -> PersonalRecord:
    return PersonalRecord(
        id=f"pr-{next(_ids)}",
        client_id=CLIENT_ID,
        exercise_id=exercise_id,
        weight_kg=weight,
        reps=reps,
        achieved_at=days_ago(days, now),
    )


def make_nutrition(days_logged: int, protein_per_day: float = 0.0, now=NOW):
    """Logs for the most recent ``days_logged`` days, one meal item each."""
    logs, meals, items = [], [], []
    for d in range(days_logged):
        log = NutritionLog(
            id=f"log-{next(_ids)}",
            client_id=CLIENT_ID,
            date=now.date() - timedelta(days=d),
        )
        meal = Meal(id=f"meal-{next(_ids)}", nutrition_log_id=log.id, name="lunch")
        logs.append(log)
        meals.append(meal)
        if protein_per_day:
            items.append(
                MealItem(id=f"item-{next(_ids)}", meal_id=meal.id, calories=600, protein=protein_per_day)
            )
    return logs, meals, items


def make_activity(
    sessions=(),
    sets=(),
    prs=(),
    nutrition=None,
    exercises=(),
    exercise_stats=(),
) -> ClientActivity:
    logs, meals, items = nutrition or ([], [], [])
    return ClientActivity(
        client_id=CLIENT_ID,
        sessions=list(sessions),
        sets=list(sets),
        personal_records=list(prs),
        exercise_stats=list(exercise_stats),
        nutrition_logs=list(logs),
        meals=list(meals),
        meal_items=list(items),
        exercises=list(exercises)
        or [
            Exercise(id="ex-squat", name="Back Squat", muscle_group="Legs"),
            Exercise(id="ex-bench", name="Bench Press", muscle_group="Chest"),
        ],
    )


def insight_ids(report_or_insights) -> list:
    insights = getattr(report_or_insights, "insights", report_or_insights)
    return [i.id for i in insights]
