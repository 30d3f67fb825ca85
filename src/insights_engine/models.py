"""
Data Model for the Client Insights Engine.

Raw activity rows (sessions, sets, personal records, nutrition) come in as
read-only snapshots. Insights and summaries are derived values that are
recomputed on every run and never stored.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Dict


class SessionStatus(str, Enum):
    """Lifecycle state of a workout session."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    PAUSED = "paused"


class InsightType(str, Enum):
    """Kind of insight emitted by a rule."""

    STRENGTH_GAIN = "strength_gain"
    CONSISTENCY = "consistency"
    RECOVERY = "recovery"
    NUTRITION = "nutrition"
    VOLUME = "volume"
    VELOCITY = "velocity"
    RECOMMENDATION = "recommendation"
    WARNING = "warning"
    CELEBRATION = "celebration"
    PR = "pr"
    PATTERN = "pattern"
    GOAL = "goal"


class InsightCategory(str, Enum):
    """Area of the client's program an insight belongs to."""

    TRAINING = "training"
    NUTRITION = "nutrition"
    RECOVERY = "recovery"
    PROGRESS = "progress"
    BEHAVIOR = "behavior"


class InsightPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


# ============================================================================
# Activity snapshots
# ============================================================================


@dataclass
class WorkoutSession:
    """A client's workout session."""

    id: str
    client_id: str
    started_at: datetime
    status: SessionStatus = SessionStatus.COMPLETED
    completed_at: Optional[datetime] = None
    routine_id: Optional[str] = None
    duration_minutes: Optional[float] = None
    notes: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED


@dataclass
class SetRecord:
    """A single logged set within a session."""

    id: str
    session_id: str
    exercise_id: str
    weight_kg: float = 0.0
    reps: int = 0
    rpe: Optional[float] = None
    peak_velocity: Optional[float] = None  # m/s
    velocity_drop: Optional[float] = None  # percent
    completed_at: Optional[datetime] = None

    @property
    def volume(self) -> float:
        return (self.weight_kg or 0) * (self.reps or 0)

    @property
    def has_velocity(self) -> bool:
        return self.peak_velocity is not None or self.velocity_drop is not None


@dataclass
class PersonalRecord:
    """A PR achieved by a client on an exercise."""

    id: str
    client_id: str
    exercise_id: str
    weight_kg: float
    reps: int
    achieved_at: datetime


@dataclass
class ExerciseStat:
    """Current best lift for a (client, exercise) pair."""

    exercise_id: str
    pr_weight_kg: Optional[float] = None
    pr_weight_reps: Optional[int] = None
    pr_weight_date: Optional[datetime] = None
    estimated_1rm_kg: Optional[float] = None


@dataclass
class NutritionLog:
    """A day of nutrition tracking."""

    id: str
    client_id: str
    date: date
    target_calories: Optional[float] = None
    target_protein: Optional[float] = None
    target_carbs: Optional[float] = None
    target_fat: Optional[float] = None
    notes: Optional[str] = None


@dataclass
class Meal:
    id: str
    nutrition_log_id: str
    name: Optional[str] = None


@dataclass
class MealItem:
    id: str
    meal_id: str
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


@dataclass
class Exercise:
    id: str
    name: str
    muscle_group: Optional[str] = None


@dataclass
class ClientActivity:
    """
    Everything the engine needs to know about one client.

    Each collection may be empty; the engine treats absence as "no data".
    """

    client_id: str
    sessions: List[WorkoutSession] = field(default_factory=list)
    sets: List[SetRecord] = field(default_factory=list)
    personal_records: List[PersonalRecord] = field(default_factory=list)
    exercise_stats: List[ExerciseStat] = field(default_factory=list)
    nutrition_logs: List[NutritionLog] = field(default_factory=list)
    meals: List[Meal] = field(default_factory=list)
    meal_items: List[MealItem] = field(default_factory=list)
    exercises: List[Exercise] = field(default_factory=list)


# ============================================================================
# Derived values
# ============================================================================


@dataclass(frozen=True)
class Insight:
    """A single human-readable insight about a client."""

    id: str
    type: InsightType
    category: InsightCategory
    priority: InsightPriority
    title: str
    description: str
    metric: Optional[str] = None
    trend: Optional[Trend] = None
    actionable: Optional[str] = None
    related_exercise: Optional[str] = None

    @property
    def is_positive(self) -> bool:
        """Celebrations, upward trends, consistency and PR insights count in the client's favor."""
        return (
            self.type in (InsightType.CELEBRATION, InsightType.CONSISTENCY, InsightType.PR)
            or self.trend == Trend.UP
        )

    @property
    def is_negative(self) -> bool:
        return self.type == InsightType.WARNING

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "type": self.type.value,
            "category": self.category.value,
            "priority": self.priority.value,
            "title": self.title,
            "description": self.description,
            "metric": self.metric,
            "trend": self.trend.value if self.trend else None,
            "actionable": self.actionable,
            "related_exercise": self.related_exercise,
        }


@dataclass(frozen=True)
class WeeklyStat:
    """Training totals for one 7-day bucket."""

    week_start: date
    sessions: int
    volume: float
    avg_rpe: Optional[float]
    prs: int

    def to_dict(self) -> dict:
        return {
            "week_start": self.week_start.isoformat(),
            "sessions": self.sessions,
            "volume": self.volume,
            "avg_rpe": self.avg_rpe,
            "prs": self.prs,
        }


@dataclass(frozen=True)
class TrainingPattern:
    """When and how the client tends to train."""

    day_counts: tuple
    preferred_days: tuple
    avg_rest_days: Optional[float]
    avg_session_duration: float
    most_trained_muscles: tuple = ()

    def to_dict(self) -> dict:
        return {
            "day_counts": list(self.day_counts),
            "preferred_days": list(self.preferred_days),
            "avg_rest_days": self.avg_rest_days,
            "avg_session_duration": self.avg_session_duration,
            "most_trained_muscles": list(self.most_trained_muscles),
        }


@dataclass(frozen=True)
class QuickStats:
    total_workouts: int
    avg_per_week: float
    total_volume: float
    prs_this_month: int
    current_streak: int
    longest_streak: int

    def to_dict(self) -> dict:
        return {
            "total_workouts": self.total_workouts,
            "avg_per_week": self.avg_per_week,
            "total_volume": self.total_volume,
            "prs_this_month": self.prs_this_month,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
        }


@dataclass(frozen=True)
class InsightsSummary:
    """Scores and highlights computed from the ranked insight feed."""

    training_score: float
    nutrition_score: float
    consistency_score: float
    progress_score: float
    overall_score: int
    strengths: tuple
    areas_to_improve: tuple
    top_insight: Optional[Insight]
    weekly_trend: tuple
    training_pattern: Optional[TrainingPattern]
    quick_stats: QuickStats

    def to_dict(self) -> dict:
        return {
            "training_score": self.training_score,
            "nutrition_score": self.nutrition_score,
            "consistency_score": self.consistency_score,
            "progress_score": self.progress_score,
            "overall_score": self.overall_score,
            "strengths": list(self.strengths),
            "areas_to_improve": list(self.areas_to_improve),
            "top_insight": self.top_insight.to_dict() if self.top_insight else None,
            "weekly_trend": [w.to_dict() for w in self.weekly_trend],
            "training_pattern": (
                self.training_pattern.to_dict() if self.training_pattern else None
            ),
            "quick_stats": self.quick_stats.to_dict(),
        }


@dataclass(frozen=True)
class InsightsReport:
    """Full engine output for one client."""

    client_id: str
    insights: tuple
    summary: InsightsSummary
    last_updated: str

    def to_dict(self) -> Dict:
        return {
            "client_id": self.client_id,
            "insights": [i.to_dict() for i in self.insights],
            "summary": self.summary.to_dict(),
            "last_updated": self.last_updated,
        }
