"""
Lookback windows anchored on a single reference instant.

Every window is half-open: ``[now - N days, now)``.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

SECONDS_PER_DAY = 86400

WEEK_DAYS = 7
TWO_WEEK_DAYS = 14
FOUR_WEEK_DAYS = 28
EIGHT_WEEK_DAYS = 56
TREND_WEEKS = 8


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_between(later: datetime, earlier: datetime) -> int:
    """Whole 24-hour days elapsed between two instants, truncated toward zero."""
    return int((later - earlier).total_seconds() / SECONDS_PER_DAY)


@dataclass(frozen=True)
class TimeWindows:
    """Trailing windows used by the aggregation step."""

    now: datetime

    @classmethod
    def at(cls, now: Optional[datetime] = None) -> "TimeWindows":
        return cls(now=ensure_aware(now) if now else utc_now())

    def days_ago(self, days: int) -> datetime:
        return self.now - timedelta(days=days)

    @property
    def week_ago(self) -> datetime:
        return self.days_ago(WEEK_DAYS)

    @property
    def two_weeks_ago(self) -> datetime:
        return self.days_ago(TWO_WEEK_DAYS)

    @property
    def four_weeks_ago(self) -> datetime:
        return self.days_ago(FOUR_WEEK_DAYS)

    @property
    def eight_weeks_ago(self) -> datetime:
        return self.days_ago(EIGHT_WEEK_DAYS)

    def contains(self, moment: datetime, start: datetime, end: Optional[datetime] = None) -> bool:
        """Check ``start <= moment < end`` (``end`` defaults to now)."""
        end = end or self.now
        return start <= moment < end

    def weekly_buckets(self, weeks: int = TREND_WEEKS) -> list:
        """Non-overlapping 7-day (start, end) pairs ending at now, oldest first."""
        buckets = []
        for i in range(weeks, 0, -1):
            start = self.days_ago(i * WEEK_DAYS)
            end = self.days_ago((i - 1) * WEEK_DAYS)
            buckets.append((start, end))
        return buckets
