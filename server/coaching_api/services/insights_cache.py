"""Thread-safe in-memory cache of computed insights reports.

Reports are keyed by client id and recomputed once they are older than
the staleness window. Nothing invalidates entries proactively; a stale
entry simply triggers a fresh engine run on the next read.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from insights_engine.models import InsightsReport

from ..config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class CachedInsights:
    """A cached report and when it was computed (monotonic seconds)."""

    report: InsightsReport
    computed_at: float

    def age(self, now: float) -> float:
        return now - self.computed_at


class InsightsCache:
    """Per-client insights cache with a fixed staleness window."""

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Age after which a cached report is recomputed
            clock: Monotonic time source (injectable for tests)
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CachedInsights] = {}
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "computations": 0}

    def get(self, client_id: str) -> Optional[InsightsReport]:
        """Return the cached report if it is still fresh."""
        with self._lock:
            entry = self._entries.get(client_id)
            if entry is None or entry.age(self._clock()) >= self.ttl_seconds:
                self._stats["misses"] += 1
                return None
            self._stats["hits"] += 1
            return entry.report

    def put(self, client_id: str, report: InsightsReport) -> None:
        """Store a report, dropping entries that have gone stale."""
        with self._lock:
            now = self._clock()
            expired = [cid for cid, e in self._entries.items() if e.age(now) >= self.ttl_seconds]
            for cid in expired:
                del self._entries[cid]
            self._entries[client_id] = CachedInsights(report=report, computed_at=now)

    def get_or_compute(
        self,
        client_id: str,
        compute: Callable[[], InsightsReport],
        refresh: bool = False,
    ) -> InsightsReport:
        """
        Return a fresh cached report, computing and storing one if needed.

        Args:
            client_id: Cache key
            compute: Zero-argument callable producing a new report
            refresh: Skip the cache lookup and always recompute

        Returns:
            The cached or newly computed report
        """
        if not refresh:
            cached = self.get(client_id)
            if cached is not None:
                logger.debug(f"[CACHE] Hit for {client_id}")
                return cached

        # Computed outside the lock; concurrent misses may both run the engine
        report = compute()
        self.put(client_id, report)
        with self._lock:
            self._stats["computations"] += 1
        logger.debug(f"[CACHE] Stored fresh insights for {client_id}")
        return report

    def invalidate(self, client_id: Optional[str] = None) -> None:
        """Drop one client's entry, or every entry when no id is given."""
        with self._lock:
            if client_id:
                self._entries.pop(client_id, None)
            else:
                self._entries.clear()
        logger.info(f"[CACHE] Invalidated {client_id or 'all clients'}")

    def get_stats(self) -> dict:
        with self._lock:
            return {
                **self._stats,
                "entries": len(self._entries),
                "ttl_seconds": self.ttl_seconds,
            }


# Global singleton instance
insights_cache = InsightsCache(ttl_seconds=get_settings().insights_cache_ttl_seconds)
