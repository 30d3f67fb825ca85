"""Workout history API routes."""
import logging
import sqlite3
from datetime import timedelta

from fastapi import APIRouter, HTTPException, Query

from insights_engine.models import WorkoutSession
from insights_engine.windows import utc_now

from ..models.activity import WorkoutSessionRecord
from ..database import db_manager
from ..services.client_data import fetch_sessions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["Workout History"])


def _session_to_record(session: WorkoutSession) -> WorkoutSessionRecord:
    """Convert an engine session to the API model."""
    return WorkoutSessionRecord(
        id=session.id,
        started_at=session.started_at.isoformat(),
        completed_at=session.completed_at.isoformat() if session.completed_at else None,
        status=session.status.value,
        routine_id=session.routine_id,
        duration_minutes=session.duration_minutes,
        notes=session.notes,
    )


@router.get(
    "/{client_id}/sessions",
    response_model=list[WorkoutSessionRecord],
    response_model_by_alias=True,
)
async def get_client_sessions(
    client_id: str,
    days: int = Query(default=28, ge=1, le=90, description="Number of days of history"),
):
    """Get a client's workout sessions for the specified number of days, newest first."""
    if not client_id.strip():
        raise HTTPException(status_code=400, detail="client_id is required")

    since = utc_now() - timedelta(days=days)
    try:
        with db_manager.get_conn() as conn:
            sessions = fetch_sessions(conn, client_id, since)
    except sqlite3.Error as e:
        logger.error(f"[DB] Failed to load sessions for {client_id}: {e}")
        raise HTTPException(status_code=503, detail=f"Coaching database unavailable: {e}")

    return [_session_to_record(s) for s in reversed(sessions)]
