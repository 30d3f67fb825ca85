"""
Unit tests for insight ranking and scoring.

Usage:
    pytest tests/test_scoring.py -v
"""
import pytest

from insights_engine.aggregation import build_aggregates
from insights_engine.models import (
    Insight,
    InsightCategory,
    InsightPriority,
    InsightType,
    Trend,
)
from insights_engine.scoring import (
    build_summary,
    clamp,
    overall_score,
    rank_insights,
    score_insights,
)
from insights_engine.windows import TimeWindows

from helpers import NOW, make_activity, make_sessions


def make_insight(
    insight_id="test",
    insight_type=InsightType.WARNING,
    category=InsightCategory.TRAINING,
    priority=InsightPriority.MEDIUM,
    trend=None,
    title=None,
) -> Insight:
    return Insight(
        id=insight_id,
        type=insight_type,
        category=category,
        priority=priority,
        title=title or insight_id,
        description="",
        trend=trend,
    )


def aggregates_for(activity):
    return build_aggregates(activity, TimeWindows.at(NOW))


class TestRanking:
    """Test priority ordering of the insight feed."""

    def test_high_before_medium_before_low(self):
        insights = [
            make_insight("a", priority=InsightPriority.LOW),
            make_insight("b", priority=InsightPriority.HIGH),
            make_insight("c", priority=InsightPriority.MEDIUM),
            make_insight("d", priority=InsightPriority.HIGH),
        ]

        assert [i.id for i in rank_insights(insights)] == ["b", "d", "c", "a"]

    def test_equal_priorities_keep_catalog_order(self):
        insights = [make_insight(str(n), priority=InsightPriority.LOW) for n in range(5)]

        assert [i.id for i in rank_insights(insights)] == ["0", "1", "2", "3", "4"]


class TestCategoryScores:
    """Test how insights move the four category scores."""

    def test_baseline_scores(self):
        scores = score_insights([])

        assert scores == {"training": 60, "nutrition": 50, "consistency": 50, "progress": 50}
        assert overall_score(scores) == 53

    def test_positive_behavior_insight_raises_consistency(self):
        """A medium consistency insight adds 10 to consistency: 18 + 10 + 18 + 10 = 56."""
        scores = score_insights([
            make_insight(
                "consistency-high",
                InsightType.CONSISTENCY,
                InsightCategory.BEHAVIOR,
                InsightPriority.MEDIUM,
                trend=Trend.UP,
            )
        ])

        assert scores["consistency"] == 60
        assert overall_score(scores) == 56

    def test_negative_recovery_insight_costs_training_half(self):
        scores = score_insights([
            make_insight("rest-days-low", category=InsightCategory.RECOVERY, priority=InsightPriority.HIGH)
        ])

        assert scores["training"] == pytest.approx(52.5)
        assert scores["nutrition"] == 50
        assert scores["consistency"] == 50
        assert scores["progress"] == 50

    def test_positive_recovery_insight_has_no_effect(self):
        scores = score_insights([
            make_insight("recovered", InsightType.CELEBRATION, InsightCategory.RECOVERY, InsightPriority.HIGH)
        ])

        assert scores == score_insights([])

    def test_warning_lowers_its_category(self):
        scores = score_insights([
            make_insight("nutrition-warning", category=InsightCategory.NUTRITION, priority=InsightPriority.HIGH)
        ])

        assert scores["nutrition"] == 35

    def test_upward_trend_counts_as_positive(self):
        scores = score_insights([
            make_insight("volume-increase", InsightType.VOLUME, trend=Trend.UP)
        ])

        assert scores["training"] == 70

    def test_neutral_insights_do_not_move_scores(self):
        """Recommendations, patterns and stable velocity readings are neutral."""
        scores = score_insights([
            make_insight("rpe-low", InsightType.RECOMMENDATION),
            make_insight("training-concentrated", InsightType.PATTERN, InsightCategory.BEHAVIOR),
            make_insight("velocity-optimal", InsightType.VELOCITY, trend=Trend.STABLE),
        ])

        assert scores == score_insights([])

    def test_recovery_and_nutrition_types_are_neutral(self):
        """Only warnings lower a score, so advisory recovery and nutrition insights do not."""
        scores = score_insights([
            make_insight("velocity-fatigue", InsightType.RECOVERY, InsightCategory.RECOVERY, InsightPriority.HIGH),
            make_insight("rpe-high", InsightType.RECOVERY, InsightCategory.RECOVERY, InsightPriority.MEDIUM),
            make_insight("protein-low", InsightType.NUTRITION, InsightCategory.NUTRITION, InsightPriority.HIGH),
        ])

        assert scores == score_insights([])

    def test_scores_are_clamped(self):
        warnings = [make_insight(str(n), priority=InsightPriority.HIGH) for n in range(10)]
        celebrations = [
            make_insight(str(n), InsightType.CELEBRATION, InsightCategory.PROGRESS, InsightPriority.HIGH)
            for n in range(10)
        ]

        scores = score_insights(warnings + celebrations)

        assert scores["training"] == 0
        assert scores["progress"] == 100

    def test_clamp(self):
        assert clamp(-5) == 0
        assert clamp(105) == 100
        assert clamp(42.5) == 42.5

    def test_overall_rounds_half_up(self):
        scores = {"training": 65, "nutrition": 50, "consistency": 50, "progress": 50}

        # 19.5 + 10 + 15 + 10 = 54.5
        assert overall_score(scores) == 55


class TestSummary:
    """Test the summary built from ranked insights."""

    def test_strengths_and_areas_take_first_three(self):
        ranked = rank_insights([
            make_insight("w1", priority=InsightPriority.HIGH, title="Warning 1"),
            make_insight("w2", priority=InsightPriority.HIGH, title="Warning 2"),
            make_insight("r1", InsightType.RECOMMENDATION, title="Recommendation 1"),
            make_insight("w3", priority=InsightPriority.LOW, title="Warning 3"),
            make_insight("c1", InsightType.CELEBRATION, priority=InsightPriority.LOW, title="Celebration 1"),
            make_insight("p1", InsightType.PR, InsightCategory.PROGRESS, title="PR 1"),
            make_insight("s1", InsightType.STRENGTH_GAIN, trend=Trend.UP, title="Strength 1"),
            make_insight("c2", InsightType.CELEBRATION, title="Celebration 2"),
        ])

        summary = build_summary(ranked, aggregates_for(make_activity()))

        assert summary.areas_to_improve == ("Warning 1", "Warning 2", "Recommendation 1")
        assert summary.strengths == ("PR 1", "Strength 1", "Celebration 2")
        assert summary.top_insight.id == "w1"

    def test_empty_feed(self):
        summary = build_summary([], aggregates_for(make_activity()))

        assert summary.top_insight is None
        assert summary.strengths == ()
        assert summary.areas_to_improve == ()
        assert summary.overall_score == 53

    def test_training_pattern_needs_five_sessions(self):
        four = build_summary([], aggregates_for(make_activity(sessions=make_sessions([1, 3, 5, 7]))))
        five = build_summary([], aggregates_for(make_activity(sessions=make_sessions([1, 3, 5, 7, 9]))))

        assert four.training_pattern is None
        assert five.training_pattern is not None
        assert sum(five.training_pattern.day_counts) == 5

    def test_quick_stats(self):
        sessions = make_sessions([1, 3, 5, 10, 20, 30, 40])
        summary = build_summary([], aggregates_for(make_activity(sessions=sessions)))
        stats = summary.quick_stats

        assert stats.total_workouts == 7
        assert stats.avg_per_week == pytest.approx(5 / 4)
        assert stats.current_streak == 3
        assert len(summary.weekly_trend) == 8
