"""Workout history and personal record models."""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Literal

SessionStatusName = Literal["in_progress", "completed", "paused"]


class WorkoutSessionRecord(BaseModel):
    """A workout session in the client's history."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    started_at: str = Field(serialization_alias="startedAt")
    completed_at: Optional[str] = Field(default=None, serialization_alias="completedAt")
    status: SessionStatusName
    routine_id: Optional[str] = Field(default=None, serialization_alias="routineId")
    duration_minutes: Optional[float] = Field(default=None, serialization_alias="durationMinutes")
    notes: Optional[str] = None


class PersonalRecordEntry(BaseModel):
    """Best lift for one exercise, with an estimated 1RM."""

    model_config = ConfigDict(populate_by_name=True)

    exercise_id: str = Field(serialization_alias="exerciseId")
    exercise_name: str = Field(serialization_alias="exerciseName")
    muscle_group: Optional[str] = Field(default=None, serialization_alias="muscleGroup")
    weight_kg: float = Field(serialization_alias="weightKg")
    reps: int
    achieved_at: Optional[str] = Field(default=None, serialization_alias="achievedAt")
    estimated_1rm: float = Field(serialization_alias="estimated1RM")


class PersonalRecordsSummary(BaseModel):
    """A client's current PRs."""

    model_config = ConfigDict(populate_by_name=True)

    prs: list[PersonalRecordEntry]
    total_prs: int = Field(serialization_alias="totalPRs")
    highest_estimated_1rm: float = Field(serialization_alias="highestEstimated1RM")
    most_recent_pr: Optional[PersonalRecordEntry] = Field(
        default=None, serialization_alias="mostRecentPR"
    )
