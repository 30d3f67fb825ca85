"""
Insight Rule Catalog.

Each rule is a pure function of the run's Aggregates registered under a
constant insight id. Rules run in registration order, never read each
other's output, and emit at most one insight each.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .aggregation import Aggregates, mean_or_none, percent_change, round_half_up
from .models import Insight, InsightCategory, InsightPriority, InsightType, Trend
from .windows import FOUR_WEEK_DAYS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Finding:
    """The per-run details a rule fills in when it fires."""

    description: str
    metric: Optional[str] = None
    related_exercise: Optional[str] = None


@dataclass(frozen=True)
class InsightRule:
    """A registered rule and the fixed attributes of the insight it emits."""

    id: str
    type: InsightType
    category: InsightCategory
    priority: InsightPriority
    title: str
    check: Callable[[Aggregates], Optional[Finding]]
    trend: Optional[Trend] = None
    actionable: Optional[str] = None

    def evaluate(self, aggregates: Aggregates) -> Optional[Insight]:
        finding = self.check(aggregates)
        if finding is None:
            return None
        return Insight(
            id=self.id,
            type=self.type,
            category=self.category,
            priority=self.priority,
            title=self.title,
            description=finding.description,
            metric=finding.metric,
            trend=self.trend,
            actionable=self.actionable,
            related_exercise=finding.related_exercise,
        )


RULES: List[InsightRule] = []


def rule(
    insight_id: str,
    insight_type: InsightType,
    category: InsightCategory,
    priority: InsightPriority,
    title: str,
    trend: Optional[Trend] = None,
    actionable: Optional[str] = None,
):
    """Register a check function in the catalog."""

    def register(check):
        if any(r.id == insight_id for r in RULES):
            raise ValueError(f"Duplicate insight rule id: {insight_id}")
        RULES.append(
            InsightRule(
                id=insight_id,
                type=insight_type,
                category=category,
                priority=priority,
                title=title,
                check=check,
                trend=trend,
                actionable=actionable,
            )
        )
        return check

    return register


def evaluate_rules(aggregates: Aggregates, rules: Optional[List[InsightRule]] = None) -> List[Insight]:
    """Run every rule in catalog order and keep the insights that fired."""
    insights = []
    for r in rules if rules is not None else RULES:
        insight = r.evaluate(aggregates)
        if insight is not None:
            insights.append(insight)
    logger.debug(f"[INSIGHTS] {len(insights)} rules fired: {[i.id for i in insights]}")
    return insights


# ============================================================================
# Consistency
# ============================================================================


@rule(
    "consistency-high",
    InsightType.CONSISTENCY,
    InsightCategory.BEHAVIOR,
    InsightPriority.MEDIUM,
    "Excellent Workout Consistency",
    trend=Trend.UP,
)
def consistency_high(agg: Aggregates) -> Optional[Finding]:
    if agg.recent_sessions < 6:
        return None
    return Finding(
        description=f"Training {agg.recent_sessions / 2:.1f} times per week. Keep up the great work!",
        metric=f"{agg.recent_sessions} sessions in 2 weeks",
    )


@rule(
    "consistency-dropping",
    InsightType.WARNING,
    InsightCategory.BEHAVIOR,
    InsightPriority.HIGH,
    "Training Frequency Dropping",
    trend=Trend.DOWN,
    actionable="Consider scheduling specific workout times to maintain consistency.",
)
def consistency_dropping(agg: Aggregates) -> Optional[Finding]:
    if agg.recent_sessions >= 2 or agg.prior_sessions < 4:
        return None
    return Finding(
        description="Workout frequency has decreased significantly in the last 2 weeks.",
        metric=f"{agg.recent_sessions} vs {agg.prior_sessions} sessions",
    )


@rule(
    "no-recent-training",
    InsightType.WARNING,
    InsightCategory.BEHAVIOR,
    InsightPriority.HIGH,
    "No Recent Training",
    actionable="Reach out to check in and help get back on track.",
)
def no_recent_training(agg: Aggregates) -> Optional[Finding]:
    if agg.recent_sessions != 0 or agg.total_workouts == 0:
        return None
    return Finding(
        description=f"It's been {agg.days_since_last_session} days since the last workout.",
        metric=f"{agg.days_since_last_session} days",
    )


# ============================================================================
# Volume
# ============================================================================


@rule(
    "volume-increase",
    InsightType.VOLUME,
    InsightCategory.TRAINING,
    InsightPriority.MEDIUM,
    "Training Volume Increasing",
    trend=Trend.UP,
)
def volume_increase(agg: Aggregates) -> Optional[Finding]:
    change = percent_change(agg.recent_volume, agg.prior_volume)
    if change is None or change <= 15:
        return None
    return Finding(
        description="Total volume has increased by more than 15% compared to the previous 2 weeks.",
        metric=f"+{round_half_up(change)}%",
    )


@rule(
    "volume-decrease",
    InsightType.WARNING,
    InsightCategory.TRAINING,
    InsightPriority.MEDIUM,
    "Training Volume Decreased",
    trend=Trend.DOWN,
    actionable="Review if a deload was planned or if adjustments are needed.",
)
def volume_decrease(agg: Aggregates) -> Optional[Finding]:
    change = percent_change(agg.recent_volume, agg.prior_volume)
    if change is None or change >= -25:
        return None
    return Finding(
        description=(
            "Volume has dropped significantly. Consider if this is intentional "
            "(deload) or needs addressing."
        ),
        metric=f"{round_half_up(-change)}% decrease",
    )


# ============================================================================
# Personal records
# ============================================================================


@rule(
    "pr-streak",
    InsightType.STRENGTH_GAIN,
    InsightCategory.PROGRESS,
    InsightPriority.LOW,
    "PR Streak!",
    trend=Trend.UP,
)
def pr_streak(agg: Aggregates) -> Optional[Finding]:
    if agg.prs_this_week < 3:
        return None
    return Finding(
        description=f"{agg.prs_this_week} personal records set in the last 7 days.",
        metric=f"{agg.prs_this_week} PRs this week",
        related_exercise=agg.latest_pr_exercise,
    )


@rule(
    "new-prs",
    InsightType.PR,
    InsightCategory.PROGRESS,
    InsightPriority.MEDIUM,
    "New Personal Record",
    trend=Trend.UP,
)
def new_prs(agg: Aggregates) -> Optional[Finding]:
    if not 0 < agg.prs_this_week < 3:
        return None
    plural = "s" if agg.prs_this_week > 1 else ""
    return Finding(
        description=f"Set {agg.prs_this_week} new PR{plural} this week.",
        metric=f"{agg.prs_this_week} new PR{plural}",
        related_exercise=agg.latest_pr_exercise,
    )


@rule(
    "pr-plateau",
    InsightType.WARNING,
    InsightCategory.PROGRESS,
    InsightPriority.MEDIUM,
    "Strength Plateau",
    actionable="Try varying rep ranges or adding a new progression scheme.",
)
def pr_plateau(agg: Aggregates) -> Optional[Finding]:
    if agg.days_since_last_pr is None or agg.days_since_last_pr <= 21:
        return None
    if agg.total_workouts <= 5:
        return None
    return Finding(
        description=f"No new personal records in {agg.days_since_last_pr} days.",
        metric=f"{agg.days_since_last_pr} days since last PR",
    )


# ============================================================================
# Velocity-based training
# ============================================================================


@rule(
    "velocity-fatigue",
    InsightType.RECOVERY,
    InsightCategory.RECOVERY,
    InsightPriority.HIGH,
    "High Fatigue Detected",
    trend=Trend.DOWN,
    actionable="Consider reducing volume or intensity, or adding more rest.",
)
def velocity_fatigue(agg: Aggregates) -> Optional[Finding]:
    if agg.velocity_sample_count < 5 or agg.avg_velocity_drop <= 25:
        return None
    return Finding(
        description=(
            f"Average velocity loss of {agg.avg_velocity_drop:.0f}% indicates "
            "high fatigue accumulation."
        ),
        metric=f"{agg.avg_velocity_drop:.0f}% avg velocity loss",
    )


@rule(
    "velocity-optimal",
    InsightType.VELOCITY,
    InsightCategory.TRAINING,
    InsightPriority.LOW,
    "Optimal Training Intensity",
    trend=Trend.STABLE,
)
def velocity_optimal(agg: Aggregates) -> Optional[Finding]:
    if agg.velocity_sample_count < 5 or agg.avg_velocity_drop >= 15:
        return None
    return Finding(
        description="Velocity loss is within the optimal range for strength gains.",
        metric=f"{agg.avg_velocity_drop:.0f}% avg velocity loss",
    )


@rule(
    "velocity-declining",
    InsightType.WARNING,
    InsightCategory.RECOVERY,
    InsightPriority.HIGH,
    "Bar Speed Declining",
    trend=Trend.DOWN,
    actionable="Check sleep, stress and recovery before pushing intensity further.",
)
def velocity_declining(agg: Aggregates) -> Optional[Finding]:
    if len(agg.recent_peak_velocities) < 3 or len(agg.older_peak_velocities) < 3:
        return None
    recent = mean_or_none(agg.recent_peak_velocities)
    older = mean_or_none(agg.older_peak_velocities)
    if recent >= 0.9 * older:
        return None
    return Finding(
        description="Peak velocity over the last 2 weeks is more than 10% below earlier sessions.",
        metric=f"{recent:.2f} vs {older:.2f} m/s",
    )


# ============================================================================
# Effort (RPE)
# ============================================================================


def _enough_rpe(agg: Aggregates) -> bool:
    return agg.rpe_sample_count >= 10 and agg.recent_rpe_sample_count >= 5


@rule(
    "rpe-high",
    InsightType.RECOVERY,
    InsightCategory.RECOVERY,
    InsightPriority.HIGH,
    "Training at Maximum Effort",
    actionable="Plan deload weeks or vary intensity throughout the week.",
)
def rpe_high(agg: Aggregates) -> Optional[Finding]:
    if not _enough_rpe(agg) or agg.recent_avg_rpe < 9:
        return None
    return Finding(
        description="Average RPE is very high. Consider periodization to prevent burnout.",
        metric=f"Avg RPE: {agg.recent_avg_rpe:.1f}",
    )


@rule(
    "rpe-low",
    InsightType.RECOMMENDATION,
    InsightCategory.TRAINING,
    InsightPriority.MEDIUM,
    "Room to Push Harder",
    actionable="Consider progressive overload - increase weight or reps.",
)
def rpe_low(agg: Aggregates) -> Optional[Finding]:
    if not _enough_rpe(agg) or agg.recent_avg_rpe >= 6 or agg.recent_volume <= 0:
        return None
    return Finding(
        description="Average RPE suggests there's capacity for more challenging workouts.",
        metric=f"Avg RPE: {agg.recent_avg_rpe:.1f}",
    )


# ============================================================================
# Training pattern
# ============================================================================


@rule(
    "training-concentrated",
    InsightType.PATTERN,
    InsightCategory.BEHAVIOR,
    InsightPriority.LOW,
    "Training Concentrated on One Day",
    actionable="Spreading sessions across the week can improve recovery.",
)
def training_concentrated(agg: Aggregates) -> Optional[Finding]:
    pattern = agg.training_pattern
    total_days = sum(pattern.day_counts)
    if agg.total_workouts < 8 or not total_days:
        return None
    share = max(pattern.day_counts) / total_days
    if share <= 0.4:
        return None
    return Finding(
        description=f"Most sessions happen on {pattern.preferred_days[0]}.",
        metric=f"{round_half_up(share * 100)}% of sessions on {pattern.preferred_days[0]}",
    )


@rule(
    "rest-days-low",
    InsightType.WARNING,
    InsightCategory.RECOVERY,
    InsightPriority.HIGH,
    "Not Enough Rest Days",
    actionable="Schedule at least one full rest day between hard sessions.",
)
def rest_days_low(agg: Aggregates) -> Optional[Finding]:
    rest = agg.training_pattern.avg_rest_days
    if rest is None or rest >= 1:
        return None
    return Finding(
        description="Sessions are packed closely together with little time to recover.",
        metric=f"{rest:.1f} avg rest days",
    )


@rule(
    "rest-days-high",
    InsightType.RECOMMENDATION,
    InsightCategory.BEHAVIOR,
    InsightPriority.MEDIUM,
    "Long Gaps Between Sessions",
    actionable="Aim for a steadier rhythm of 2-4 sessions per week.",
)
def rest_days_high(agg: Aggregates) -> Optional[Finding]:
    rest = agg.training_pattern.avg_rest_days
    if rest is None or rest <= 4:
        return None
    return Finding(
        description="There are usually several days between workouts.",
        metric=f"{rest:.1f} avg rest days",
    )


# ============================================================================
# Nutrition
# ============================================================================


@rule(
    "nutrition-consistent",
    InsightType.NUTRITION,
    InsightCategory.NUTRITION,
    InsightPriority.LOW,
    "Strong Nutrition Tracking",
    trend=Trend.UP,
)
def nutrition_consistent(agg: Aggregates) -> Optional[Finding]:
    if agg.nutrition_days_logged < 7 or agg.nutrition_adherence < 80:
        return None
    return Finding(
        description=(
            f"{round_half_up(agg.nutrition_adherence)}% logging adherence "
            "shows excellent commitment."
        ),
        metric=f"{agg.nutrition_days_logged}/{FOUR_WEEK_DAYS} days logged",
    )


@rule(
    "nutrition-inconsistent",
    InsightType.WARNING,
    InsightCategory.NUTRITION,
    InsightPriority.MEDIUM,
    "Nutrition Logging Needs Attention",
    actionable="Encourage daily meal logging, even if estimates.",
)
def nutrition_inconsistent(agg: Aggregates) -> Optional[Finding]:
    if agg.nutrition_days_logged == 0 or agg.nutrition_adherence >= 50:
        return None
    return Finding(
        description="Inconsistent nutrition tracking makes it harder to optimize results.",
        metric=f"Only {round_half_up(agg.nutrition_adherence)}% days logged",
    )


@rule(
    "protein-low",
    InsightType.NUTRITION,
    InsightCategory.NUTRITION,
    InsightPriority.HIGH,
    "Protein Intake May Be Low",
    actionable="Aim for 1.6-2.2g protein per kg body weight.",
)
def protein_low(agg: Aggregates) -> Optional[Finding]:
    protein = agg.avg_daily_protein
    if protein is None or not 0 < protein < 100:
        return None
    return Finding(
        description="Average daily protein might be insufficient for optimal muscle growth.",
        metric=f"~{round_half_up(protein)}g/day",
    )


@rule(
    "protein-high",
    InsightType.CELEBRATION,
    InsightCategory.NUTRITION,
    InsightPriority.LOW,
    "Protein Target Met",
    trend=Trend.STABLE,
)
def protein_high(agg: Aggregates) -> Optional[Finding]:
    protein = agg.avg_daily_protein
    if protein is None or protein < 150:
        return None
    return Finding(
        description="Daily protein intake supports muscle growth and recovery.",
        metric=f"~{round_half_up(protein)}g/day",
    )


@rule(
    "no-nutrition-tracking",
    InsightType.RECOMMENDATION,
    InsightCategory.NUTRITION,
    InsightPriority.MEDIUM,
    "No Nutrition Tracking",
    actionable="Encourage the client to start logging meals.",
)
def no_nutrition_tracking(agg: Aggregates) -> Optional[Finding]:
    if agg.nutrition_days_logged != 0:
        return None
    return Finding(
        description="Nutrition data would help provide better insights for optimization.",
    )


# ============================================================================
# Celebrations
# ============================================================================


@rule(
    "streak-active",
    InsightType.CELEBRATION,
    InsightCategory.BEHAVIOR,
    InsightPriority.LOW,
    "Training Streak Active",
)
def streak_active(agg: Aggregates) -> Optional[Finding]:
    if agg.current_streak < 4:
        return None
    return Finding(
        description=f"{agg.current_streak} sessions in a row without a long break.",
        metric=f"{agg.current_streak} session streak",
    )


@rule(
    "milestone-sessions",
    InsightType.CELEBRATION,
    InsightCategory.PROGRESS,
    InsightPriority.LOW,
    "Training Milestone!",
)
def milestone_sessions(agg: Aggregates) -> Optional[Finding]:
    if agg.total_workouts < 20:
        return None
    return Finding(
        description=f"{agg.total_workouts} workouts completed in the last 8 weeks!",
        metric=f"{agg.total_workouts} workouts",
    )


@rule(
    "pr-month",
    InsightType.CELEBRATION,
    InsightCategory.PROGRESS,
    InsightPriority.LOW,
    "Big Month for PRs",
)
def pr_month(agg: Aggregates) -> Optional[Finding]:
    if agg.prs_this_month < 5:
        return None
    return Finding(
        description=f"{agg.prs_this_month} personal records in the last 4 weeks.",
        metric=f"{agg.prs_this_month} PRs in 4 weeks",
        related_exercise=agg.latest_pr_exercise,
    )
