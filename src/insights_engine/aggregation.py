"""
Windowing and Aggregation for Client Activity.

Turns the raw activity snapshot into the numbers the rule engine reads:
trailing-window counts and volumes, weekly buckets, training pattern,
streaks, velocity/RPE samples and nutrition adherence.

Nothing here raises for missing data. Empty inputs produce zero counts
and ``None`` averages.
"""

import logging
import math
import statistics
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Dict, Tuple

from .models import (
    ClientActivity,
    SetRecord,
    TrainingPattern,
    WeeklyStat,
    WorkoutSession,
    PersonalRecord,
)
from .windows import TimeWindows, days_between, FOUR_WEEK_DAYS

logger = logging.getLogger(__name__)

# Consecutive sessions at most this many days apart belong to the same streak
STREAK_GAP_DAYS = 3

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def mean_or_none(values) -> Optional[float]:
    """Mean of a sequence, or None when it is empty."""
    values = list(values)
    if not values:
        return None
    return statistics.fmean(values)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def percent_change(recent: float, previous: float) -> Optional[float]:
    """Percentage change from previous to recent, or None when previous is zero."""
    if not previous:
        return None
    return (recent - previous) / previous * 100


def day_of_week(moment: datetime) -> int:
    """Sunday=0 .. Saturday=6."""
    return (moment.weekday() + 1) % 7


@dataclass(frozen=True)
class Aggregates:
    """Pre-computed metrics shared by every insight rule."""

    now: datetime
    completed_sessions: tuple

    # Session frequency
    recent_sessions: int  # trailing 2 weeks
    prior_sessions: int  # the 2 weeks before that
    month_sessions: int  # trailing 4 weeks
    days_since_last_session: Optional[int]

    # Volume
    recent_volume: float
    prior_volume: float
    total_volume: float

    # Personal records
    prs_this_week: int
    prs_this_month: int
    days_since_last_pr: Optional[int]
    latest_pr_exercise: Optional[str]

    # Velocity-based training
    velocity_sample_count: int
    avg_velocity_drop: Optional[float]
    recent_peak_velocities: tuple
    older_peak_velocities: tuple

    # RPE
    rpe_sample_count: int
    recent_rpe_sample_count: int
    recent_avg_rpe: Optional[float]

    # Nutrition
    nutrition_days_logged: int
    nutrition_adherence: float  # percent of the 28-day window
    avg_daily_protein: Optional[float]

    # Derived series
    weekly_stats: tuple
    training_pattern: TrainingPattern
    current_streak: int
    longest_streak: int

    @property
    def total_workouts(self) -> int:
        return len(self.completed_sessions)


def completed_sessions(sessions: List[WorkoutSession]) -> List[WorkoutSession]:
    """Completed sessions, oldest first."""
    return sorted(
        (s for s in sessions if s.is_completed),
        key=lambda s: s.started_at,
    )


def sets_by_session(sets: List[SetRecord]) -> Dict[str, List[SetRecord]]:
    grouped = defaultdict(list)
    for s in sets:
        grouped[s.session_id].append(s)
    return grouped


def session_volume(sessions, grouped_sets: Dict[str, List[SetRecord]]) -> float:
    """Sum of weight x reps across every set of the given sessions."""
    return sum(
        s.volume for session in sessions for s in grouped_sets.get(session.id, [])
    )


def weekly_stats(
    windows: TimeWindows,
    sessions: List[WorkoutSession],
    grouped_sets: Dict[str, List[SetRecord]],
    prs: List[PersonalRecord],
) -> List[WeeklyStat]:
    """Per-week sessions, volume, average RPE and PR count for the trailing 8 weeks."""
    stats = []
    for start, end in windows.weekly_buckets():
        week_sessions = [s for s in sessions if windows.contains(s.started_at, start, end)]
        week_sets = [
            st for session in week_sessions for st in grouped_sets.get(session.id, [])
        ]
        stats.append(
            WeeklyStat(
                week_start=start.date(),
                sessions=len(week_sessions),
                volume=sum(st.volume for st in week_sets),
                avg_rpe=mean_or_none(st.rpe for st in week_sets if st.rpe is not None),
                prs=sum(1 for pr in prs if windows.contains(pr.achieved_at, start, end)),
            )
        )
    return stats


def training_pattern(
    sessions: List[WorkoutSession],
    grouped_sets: Dict[str, List[SetRecord]],
    muscle_groups: Dict[str, Optional[str]],
) -> TrainingPattern:
    """Day-of-week preferences, rest days and most-trained muscles."""
    day_counts = [0] * 7
    for session in sessions:
        day_counts[day_of_week(session.started_at)] += 1

    # sorted() is stable, so ties keep Sunday..Saturday order
    ranked_days = sorted(range(7), key=lambda d: day_counts[d], reverse=True)
    preferred = tuple(DAY_NAMES[d] for d in ranked_days if day_counts[d] > 0)[:3]

    ordered = sorted(sessions, key=lambda s: s.started_at)
    rest_gaps = [
        days_between(cur.started_at, prev.started_at) - 1
        for prev, cur in zip(ordered, ordered[1:])
    ]

    durations = [s.duration_minutes or 0 for s in sessions]

    muscles = Counter()
    for session in sessions:
        for st in grouped_sets.get(session.id, []):
            muscles[muscle_groups.get(st.exercise_id) or "Other"] += 1

    return TrainingPattern(
        day_counts=tuple(day_counts),
        preferred_days=preferred,
        avg_rest_days=mean_or_none(rest_gaps),
        avg_session_duration=mean_or_none(durations) or 0.0,
        most_trained_muscles=tuple(name for name, _ in muscles.most_common(3)),
    )


def compute_streaks(
    sessions: List[WorkoutSession], gap_days: int = STREAK_GAP_DAYS
) -> Tuple[int, int]:
    """
    Walk sessions newest-first and split them into runs.

    A gap of ``gap_days`` or less keeps the run going. The first run found
    is reported as the current streak even if it is old.

    Returns:
        Tuple of (current_streak, longest_streak)
    """
    ordered = sorted(sessions, key=lambda s: s.started_at, reverse=True)
    if not ordered:
        return 0, 0

    runs = []
    run = 1
    for newer, older in zip(ordered, ordered[1:]):
        if days_between(newer.started_at, older.started_at) <= gap_days:
            run += 1
        else:
            runs.append(run)
            run = 1
    runs.append(run)

    return runs[0], max(runs)


def build_aggregates(activity: ClientActivity, windows: TimeWindows) -> Aggregates:
    """
    Compute every aggregate the rule engine and summary need.

    Args:
        activity: Snapshot of the client's raw activity
        windows: Lookback windows anchored on the run's reference instant

    Returns:
        Aggregates for this run
    """
    now = windows.now
    done = completed_sessions(activity.sessions)
    session_index = {s.id: s for s in done}
    grouped = sets_by_session(activity.sets)
    exercise_names = {e.id: e.name for e in activity.exercises}
    muscle_groups = {e.id: e.muscle_group for e in activity.exercises}

    recent = [s for s in done if windows.contains(s.started_at, windows.two_weeks_ago)]
    prior = [
        s for s in done
        if windows.contains(s.started_at, windows.four_weeks_ago, windows.two_weeks_ago)
    ]
    month = [s for s in done if windows.contains(s.started_at, windows.four_weeks_ago)]

    # Sets of completed sessions, each stamped with when it was performed
    stamped_sets = []
    for st in activity.sets:
        session = session_index.get(st.session_id)
        if session is None:
            continue
        stamped_sets.append((st.completed_at or session.started_at, st))

    # Personal records
    prs = sorted(activity.personal_records, key=lambda p: p.achieved_at)
    pr_dates = [p.achieved_at for p in prs]
    if not pr_dates:
        pr_dates = [s.pr_weight_date for s in activity.exercise_stats if s.pr_weight_date]
    last_pr_at = max(pr_dates) if pr_dates else None
    latest_pr_exercise = None
    if prs:
        latest_id = prs[-1].exercise_id
        latest_pr_exercise = exercise_names.get(latest_id, latest_id)

    # Velocity
    velocity_sets = [st for _, st in stamped_sets if st.has_velocity]
    avg_velocity_drop = None
    if velocity_sets:
        avg_velocity_drop = sum(st.velocity_drop or 0 for st in velocity_sets) / len(velocity_sets)
    recent_peaks = tuple(
        st.peak_velocity for at, st in stamped_sets
        if st.peak_velocity is not None and windows.contains(at, windows.two_weeks_ago)
    )
    older_peaks = tuple(
        st.peak_velocity for at, st in stamped_sets
        if st.peak_velocity is not None and at < windows.two_weeks_ago
    )

    # RPE
    rpe_samples = [(at, st.rpe) for at, st in stamped_sets if st.rpe is not None]
    recent_rpe = [rpe for at, rpe in rpe_samples if windows.contains(at, windows.two_weeks_ago)]

    # Nutrition over the trailing 4 weeks
    start_day = windows.four_weeks_ago.date()
    logs = [log for log in activity.nutrition_logs if start_day <= log.date <= now.date()]
    log_ids = {log.id for log in logs}
    days_logged = len({log.date for log in logs})
    meal_ids = {m.id for m in activity.meals if m.nutrition_log_id in log_ids}
    total_protein = sum(
        item.protein or 0 for item in activity.meal_items if item.meal_id in meal_ids
    )
    avg_protein = total_protein / max(days_logged, 1) if days_logged else None

    current_streak, longest_streak = compute_streaks(done)

    aggregates = Aggregates(
        now=now,
        completed_sessions=tuple(done),
        recent_sessions=len(recent),
        prior_sessions=len(prior),
        month_sessions=len(month),
        days_since_last_session=days_between(now, done[-1].started_at) if done else None,
        recent_volume=session_volume(recent, grouped),
        prior_volume=session_volume(prior, grouped),
        total_volume=session_volume(done, grouped),
        prs_this_week=sum(1 for p in prs if windows.contains(p.achieved_at, windows.week_ago)),
        prs_this_month=sum(
            1 for p in prs if windows.contains(p.achieved_at, windows.four_weeks_ago)
        ),
        days_since_last_pr=days_between(now, last_pr_at) if last_pr_at else None,
        latest_pr_exercise=latest_pr_exercise,
        velocity_sample_count=len(velocity_sets),
        avg_velocity_drop=avg_velocity_drop,
        recent_peak_velocities=recent_peaks,
        older_peak_velocities=older_peaks,
        rpe_sample_count=len(rpe_samples),
        recent_rpe_sample_count=len(recent_rpe),
        recent_avg_rpe=mean_or_none(recent_rpe),
        nutrition_days_logged=days_logged,
        nutrition_adherence=days_logged / FOUR_WEEK_DAYS * 100,
        avg_daily_protein=avg_protein,
        weekly_stats=tuple(weekly_stats(windows, done, grouped, prs)),
        training_pattern=training_pattern(done, grouped, muscle_groups),
        current_streak=current_streak,
        longest_streak=longest_streak,
    )

    logger.debug(
        f"[INSIGHTS] Aggregated {activity.client_id}: "
        f"workouts={aggregates.total_workouts}, recent={aggregates.recent_sessions}, "
        f"prior={aggregates.prior_sessions}, streak={current_streak}/{longest_streak}"
    )
    return aggregates
