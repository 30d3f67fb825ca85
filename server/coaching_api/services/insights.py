"""Insights query service: load a client's activity and run the engine."""
import logging
from datetime import datetime
from typing import Optional

from insights_engine import generate_insights
from insights_engine.models import InsightsReport
from insights_engine.windows import utc_now

from ..database import DatabaseManager, db_manager
from .client_data import load_client_activity
from .insights_cache import InsightsCache, insights_cache

logger = logging.getLogger(__name__)


def compute_client_insights(
    client_id: str,
    now: Optional[datetime] = None,
    manager: DatabaseManager = db_manager,
) -> InsightsReport:
    """Fetch the client's data and run the full insights pipeline once."""
    now = now or utc_now()
    activity = load_client_activity(client_id, now, manager)
    return generate_insights(activity, now)


def get_client_insights(
    client_id: str,
    refresh: bool = False,
    cache: InsightsCache = insights_cache,
    manager: DatabaseManager = db_manager,
) -> Optional[InsightsReport]:
    """
    Cached insights for a client.

    A blank client id disables the query: nothing is computed and None
    is returned.
    """
    if not client_id or not client_id.strip():
        logger.debug("[INSIGHTS] No client id, skipping computation")
        return None

    return cache.get_or_compute(
        client_id,
        lambda: compute_client_insights(client_id, manager=manager),
        refresh=refresh,
    )
