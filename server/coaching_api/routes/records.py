"""Personal record API routes."""
import logging
import sqlite3

from fastapi import APIRouter, HTTPException

from insights_engine.models import Exercise, ExerciseStat, PersonalRecord
from insights_engine.records import best_estimated_1rm, estimate_one_rep_max, most_recent_record

from ..models.activity import PersonalRecordEntry, PersonalRecordsSummary
from ..database import db_manager
from ..services.client_data import fetch_exercise_stats, fetch_exercises, fetch_pr_history

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["Personal Records"])


def _stat_to_entry(stat: ExerciseStat, exercise: Exercise | None) -> PersonalRecordEntry:
    return PersonalRecordEntry(
        exercise_id=stat.exercise_id,
        exercise_name=exercise.name if exercise else stat.exercise_id,
        muscle_group=exercise.muscle_group if exercise else None,
        weight_kg=stat.pr_weight_kg or 0,
        reps=stat.pr_weight_reps or 0,
        achieved_at=stat.pr_weight_date.isoformat() if stat.pr_weight_date else None,
        estimated_1rm=best_estimated_1rm(stat),
    )


def _record_to_entry(record: PersonalRecord, exercise: Exercise | None) -> PersonalRecordEntry:
    return PersonalRecordEntry(
        exercise_id=record.exercise_id,
        exercise_name=exercise.name if exercise else record.exercise_id,
        muscle_group=exercise.muscle_group if exercise else None,
        weight_kg=record.weight_kg,
        reps=record.reps,
        achieved_at=record.achieved_at.isoformat(),
        estimated_1rm=estimate_one_rep_max(record.weight_kg, record.reps),
    )


@router.get(
    "/{client_id}/personal-records",
    response_model=PersonalRecordsSummary,
    response_model_by_alias=True,
)
async def get_personal_records(client_id: str):
    """
    Get a client's current best lift per exercise.

    Sorted by estimated 1RM (Epley) descending. The most recent PR comes
    from PR history, falling back to the newest current best.
    """
    if not client_id.strip():
        raise HTTPException(status_code=400, detail="client_id is required")

    try:
        with db_manager.get_conn() as conn:
            stats = fetch_exercise_stats(conn, client_id)
            history = fetch_pr_history(conn, client_id)
            exercises = fetch_exercises(
                conn,
                [s.exercise_id for s in stats] + [p.exercise_id for p in history],
            )
    except sqlite3.Error as e:
        logger.error(f"[DB] Failed to load personal records for {client_id}: {e}")
        raise HTTPException(status_code=503, detail=f"Coaching database unavailable: {e}")

    by_id = {e.id: e for e in exercises}
    entries = [
        _stat_to_entry(stat, by_id.get(stat.exercise_id))
        for stat in stats
        if stat.pr_weight_kg and stat.pr_weight_kg > 0
    ]
    entries.sort(key=lambda e: e.estimated_1rm, reverse=True)

    latest = most_recent_record(history)
    if latest:
        most_recent = _record_to_entry(latest, by_id.get(latest.exercise_id))
    elif entries:
        most_recent = max(entries, key=lambda e: e.achieved_at or "")
    else:
        most_recent = None

    return PersonalRecordsSummary(
        prs=entries,
        total_prs=len(entries),
        highest_estimated_1rm=max((e.estimated_1rm for e in entries), default=0),
        most_recent_pr=most_recent,
    )
