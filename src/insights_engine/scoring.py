"""
Scoring and Ranking of Insights.

Ranks the emitted insights by priority and folds them into four category
scores plus a weighted overall score.
"""

from typing import Dict, List, Optional

from .aggregation import Aggregates, round_half_up
from .models import (
    Insight,
    InsightCategory,
    InsightPriority,
    InsightsSummary,
    InsightType,
    QuickStats,
)

PRIORITY_RANK = {
    InsightPriority.HIGH: 0,
    InsightPriority.MEDIUM: 1,
    InsightPriority.LOW: 2,
}

ADJUSTMENT = {
    InsightPriority.HIGH: 15,
    InsightPriority.MEDIUM: 10,
    InsightPriority.LOW: 5,
}

BASELINE_SCORES = {
    "training": 60.0,
    "nutrition": 50.0,
    "consistency": 50.0,
    "progress": 50.0,
}

SCORE_WEIGHTS = {
    "training": 0.3,
    "nutrition": 0.2,
    "consistency": 0.3,
    "progress": 0.2,
}

# Which score each insight category moves. Recovery has no score of its own.
CATEGORY_SCORE = {
    InsightCategory.TRAINING: "training",
    InsightCategory.NUTRITION: "nutrition",
    InsightCategory.BEHAVIOR: "consistency",
    InsightCategory.PROGRESS: "progress",
}

MIN_SESSIONS_FOR_PATTERN = 5
HIGHLIGHT_COUNT = 3


def rank_insights(insights: List[Insight]) -> List[Insight]:
    """Order by priority (high first); equal priorities keep catalog order."""
    return sorted(insights, key=lambda i: PRIORITY_RANK[i.priority])


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def score_insights(insights: List[Insight]) -> Dict[str, float]:
    """
    Fold insights into the four category scores.

    Positive insights raise their category's score and warnings lower it.
    A negative recovery insight also takes half its adjustment off the
    training score; positive recovery insights have no cross effect.

    Returns:
        Dict of training, nutrition, consistency and progress scores in [0, 100]
    """
    scores = dict(BASELINE_SCORES)

    for insight in insights:
        adjustment = ADJUSTMENT[insight.priority]
        target = CATEGORY_SCORE.get(insight.category)

        if insight.is_positive:
            if target:
                scores[target] += adjustment
        elif insight.is_negative:
            if target:
                scores[target] -= adjustment
            if insight.category == InsightCategory.RECOVERY:
                scores["training"] -= adjustment / 2

    return {name: clamp(value) for name, value in scores.items()}


def overall_score(scores: Dict[str, float]) -> int:
    return round_half_up(sum(scores[name] * weight for name, weight in SCORE_WEIGHTS.items()))


def build_summary(ranked: List[Insight], aggregates: Aggregates) -> InsightsSummary:
    """Assemble scores, highlights, trend series and quick stats."""
    scores = score_insights(ranked)

    strengths = [i.title for i in ranked if i.is_positive][:HIGHLIGHT_COUNT]
    areas = [
        i.title
        for i in ranked
        if i.type in (InsightType.WARNING, InsightType.RECOMMENDATION)
    ][:HIGHLIGHT_COUNT]
    top: Optional[Insight] = ranked[0] if ranked else None

    pattern = None
    if aggregates.total_workouts >= MIN_SESSIONS_FOR_PATTERN:
        pattern = aggregates.training_pattern

    quick_stats = QuickStats(
        total_workouts=aggregates.total_workouts,
        avg_per_week=aggregates.month_sessions / 4,
        total_volume=aggregates.total_volume,
        prs_this_month=aggregates.prs_this_month,
        current_streak=aggregates.current_streak,
        longest_streak=aggregates.longest_streak,
    )

    return InsightsSummary(
        training_score=scores["training"],
        nutrition_score=scores["nutrition"],
        consistency_score=scores["consistency"],
        progress_score=scores["progress"],
        overall_score=overall_score(scores),
        strengths=tuple(strengths),
        areas_to_improve=tuple(areas),
        top_insight=top,
        weekly_trend=aggregates.weekly_stats,
        training_pattern=pattern,
        quick_stats=quick_stats,
    )
