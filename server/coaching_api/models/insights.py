"""Client insights response models."""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Literal

InsightTypeName = Literal[
    "strength_gain", "consistency", "recovery", "nutrition", "volume", "velocity",
    "recommendation", "warning", "celebration", "pr", "pattern", "goal",
]
InsightCategoryName = Literal["training", "nutrition", "recovery", "progress", "behavior"]
Priority = Literal["high", "medium", "low"]
TrendName = Literal["up", "down", "stable"]


class InsightModel(BaseModel):
    """Single insight about a client."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: InsightTypeName
    category: InsightCategoryName
    priority: Priority
    title: str
    description: str
    metric: Optional[str] = None
    trend: Optional[TrendName] = None
    actionable: Optional[str] = None
    related_exercise: Optional[str] = Field(
        default=None, serialization_alias="relatedExercise"
    )


class WeeklyTrendPoint(BaseModel):
    """Training totals for one week of the 8-week trend."""

    model_config = ConfigDict(populate_by_name=True)

    week_start: str = Field(serialization_alias="weekStart")
    sessions: int
    volume: float
    avg_rpe: Optional[float] = Field(default=None, serialization_alias="avgRpe")
    prs: int


class TrainingPatternModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day_counts: list[int] = Field(serialization_alias="dayCounts")
    preferred_days: list[str] = Field(serialization_alias="preferredDays")
    avg_rest_days: Optional[float] = Field(default=None, serialization_alias="avgRestDays")
    avg_session_duration: float = Field(serialization_alias="avgSessionDuration")
    most_trained_muscles: list[str] = Field(
        default_factory=list, serialization_alias="mostTrainedMuscles"
    )


class QuickStatsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_workouts: int = Field(serialization_alias="totalWorkouts")
    avg_per_week: float = Field(serialization_alias="avgPerWeek")
    total_volume: float = Field(serialization_alias="totalVolume")
    prs_this_month: int = Field(serialization_alias="prsThisMonth")
    current_streak: int = Field(serialization_alias="currentStreak")
    longest_streak: int = Field(serialization_alias="longestStreak")


class InsightsSummaryModel(BaseModel):
    """Scores and highlights across all insights."""

    model_config = ConfigDict(populate_by_name=True)

    training_score: float = Field(ge=0, le=100, serialization_alias="trainingScore")
    nutrition_score: float = Field(ge=0, le=100, serialization_alias="nutritionScore")
    consistency_score: float = Field(ge=0, le=100, serialization_alias="consistencyScore")
    progress_score: float = Field(ge=0, le=100, serialization_alias="progressScore")
    overall_score: int = Field(ge=0, le=100, serialization_alias="overallScore")
    strengths: list[str]
    areas_to_improve: list[str] = Field(serialization_alias="areasToImprove")
    top_insight: Optional[InsightModel] = Field(default=None, serialization_alias="topInsight")
    weekly_trend: list[WeeklyTrendPoint] = Field(serialization_alias="weeklyTrend")
    training_pattern: Optional[TrainingPatternModel] = Field(
        default=None, serialization_alias="trainingPattern"
    )
    quick_stats: QuickStatsModel = Field(serialization_alias="quickStats")


class ClientInsightsResponse(BaseModel):
    """Insights feed for a client."""

    model_config = ConfigDict(populate_by_name=True)

    insights: list[InsightModel]
    summary: InsightsSummaryModel
    last_updated: str = Field(serialization_alias="lastUpdated")
