"""
Client Insights Engine entry point.

Runs aggregation, the rule catalog and scoring for one client snapshot.
The pipeline is synchronous and side-effect free: given the same
activity and the same reference instant it returns the same report.
"""

import logging
from datetime import datetime
from typing import Optional

from .aggregation import build_aggregates
from .models import ClientActivity, InsightsReport
from .rules import evaluate_rules
from .scoring import build_summary, rank_insights
from .windows import TimeWindows

logger = logging.getLogger(__name__)


def generate_insights(
    activity: ClientActivity,
    now: Optional[datetime] = None,
) -> InsightsReport:
    """
    Generate the ranked insight feed and summary for a client.

    Args:
        activity: Snapshot of the client's sessions, sets, PRs and nutrition
        now: Reference instant for every window (defaults to the current UTC time)

    Returns:
        InsightsReport with ranked insights, summary and timestamp
    """
    if not activity.client_id:
        raise ValueError("client_id is required")

    windows = TimeWindows.at(now)
    aggregates = build_aggregates(activity, windows)
    ranked = rank_insights(evaluate_rules(aggregates))
    summary = build_summary(ranked, aggregates)

    logger.info(
        f"[INSIGHTS] Generated {len(ranked)} insights for {activity.client_id}: "
        f"overall={summary.overall_score}"
    )

    return InsightsReport(
        client_id=activity.client_id,
        insights=tuple(ranked),
        summary=summary,
        last_updated=windows.now.isoformat(),
    )
