"""Client insights API routes.

Serves the ranked insight feed and summary produced by the insights
engine. Reports are cached per client for a short staleness window.
"""
import logging
import sqlite3

from fastapi import APIRouter, HTTPException, Query

from insights_engine.models import InsightsReport

from ..models.insights import ClientInsightsResponse
from ..services.insights import get_client_insights
from ..services.insights_cache import insights_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["Client Insights"])


def _report_to_response(report: InsightsReport) -> ClientInsightsResponse:
    """Convert an engine report to the API response model."""
    return ClientInsightsResponse.model_validate(report.to_dict())


@router.get(
    "/{client_id}/insights",
    response_model=ClientInsightsResponse,
    response_model_by_alias=True,
)
async def get_insights(
    client_id: str,
    refresh: bool = Query(default=False, description="Recompute instead of using the cached report"),
):
    """
    Get the insights feed for a client.

    Returns ranked insights, category scores, strengths, areas to improve,
    the 8-week trend and quick stats.
    """
    if not client_id.strip():
        raise HTTPException(status_code=400, detail="client_id is required")

    try:
        report = get_client_insights(client_id, refresh=refresh)
    except sqlite3.Error as e:
        logger.error(f"[INSIGHTS] Failed to load data for {client_id}: {e}")
        raise HTTPException(
            status_code=503,
            detail=f"Coaching database unavailable: {e}",
        )

    return _report_to_response(report)


@router.get("/insights/cache")
async def get_insights_cache_stats():
    """Get insights cache statistics."""
    return insights_cache.get_stats()
