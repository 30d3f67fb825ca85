"""Pydantic models for coaching API responses."""
from .insights import (
    InsightModel,
    WeeklyTrendPoint,
    TrainingPatternModel,
    QuickStatsModel,
    InsightsSummaryModel,
    ClientInsightsResponse,
)
from .activity import WorkoutSessionRecord, PersonalRecordEntry, PersonalRecordsSummary

__all__ = [
    "InsightModel",
    "WeeklyTrendPoint",
    "TrainingPatternModel",
    "QuickStatsModel",
    "InsightsSummaryModel",
    "ClientInsightsResponse",
    "WorkoutSessionRecord",
    "PersonalRecordEntry",
    "PersonalRecordsSummary",
]
