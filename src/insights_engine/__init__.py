"""
Client Insights Engine.

Aggregates a client's training, PR and nutrition history into a ranked
feed of insights and a scored summary.
"""

from .engine import generate_insights
from .models import (
    ClientActivity,
    Insight,
    InsightsReport,
    InsightsSummary,
)
from .records import estimate_one_rep_max
from .rules import RULES, evaluate_rules

__all__ = [
    "generate_insights",
    "ClientActivity",
    "Insight",
    "InsightsReport",
    "InsightsSummary",
    "estimate_one_rep_max",
    "RULES",
    "evaluate_rules",
]
