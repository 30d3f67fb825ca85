"""Personal record helpers."""

from typing import List, Optional

from .aggregation import round_half_up
from .models import ExerciseStat, PersonalRecord


def estimate_one_rep_max(weight: float, reps: int) -> float:
    """Epley estimate of a one-rep max; a single rep is its own max."""
    if reps == 1:
        return weight
    return round_half_up(weight * (1 + reps / 30))


def best_estimated_1rm(stat: ExerciseStat) -> float:
    """Stored estimate when present, otherwise computed from the PR lift."""
    if stat.estimated_1rm_kg:
        return stat.estimated_1rm_kg
    return estimate_one_rep_max(stat.pr_weight_kg or 0, stat.pr_weight_reps or 0)


def most_recent_record(records: List[PersonalRecord]) -> Optional[PersonalRecord]:
    """Newest dated record; undated records are ignored."""
    dated = [r for r in records if r.achieved_at is not None]
    if not dated:
        return None
    return max(dated, key=lambda r: r.achieved_at)
