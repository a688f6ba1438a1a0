# services/booking-service/src/apps/core/services/intervals.py
"""
Time Interval Utilities

Half-open [start, end) intervals over aware datetimes or whole dates.
Time-of-day comparisons happen on UTC instants; whole-day ranges are
resolved in the listing's own timezone.
"""

from dataclasses import dataclass
from datetime import datetime, date, time, timedelta, timezone as dt_timezone
from typing import Iterable, List, Optional, Union
from zoneinfo import ZoneInfo

Instant = Union[datetime, date]

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class TimeInterval:
    """Half-open interval [start, end)."""
    start: Instant
    end: Instant

    @classmethod
    def for_days(cls, start_date: date, end_date: date) -> 'TimeInterval':
        """Whole-day interval covering start_date..end_date inclusive."""
        return cls(start_date, end_date + ONE_DAY)

    @property
    def is_date_range(self) -> bool:
        return not isinstance(self.start, datetime)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)

    @property
    def is_empty(self) -> bool:
        return self.end <= self.start

    def overlaps(self, other: 'TimeInterval') -> bool:
        return overlaps(self, other)

    def contains(self, other: 'TimeInterval') -> bool:
        return contains(self, other)

    def merge(self, other: 'TimeInterval') -> Optional['TimeInterval']:
        return merge(self, other)

    def to_utc(self) -> 'TimeInterval':
        if self.is_date_range:
            return self
        return TimeInterval(to_utc(self.start), to_utc(self.end))


def to_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt_timezone.utc)
    return value.astimezone(dt_timezone.utc)


def _comparable(a: TimeInterval, b: TimeInterval):
    if a.is_date_range == b.is_date_range:
        return a.to_utc(), b.to_utc()
    raise TypeError("Cannot compare a date range with a datetime interval")


def overlaps(i1: TimeInterval, i2: TimeInterval) -> bool:
    """True iff the two half-open intervals share at least one instant."""
    a, b = _comparable(i1, i2)
    return a.start < b.end and b.start < a.end


def contains(outer: TimeInterval, inner: TimeInterval) -> bool:
    a, b = _comparable(outer, inner)
    return a.start <= b.start and b.end <= a.end


def adjacent(i1: TimeInterval, i2: TimeInterval) -> bool:
    a, b = _comparable(i1, i2)
    return a.end == b.start or b.end == a.start


def merge(i1: TimeInterval, i2: TimeInterval) -> Optional[TimeInterval]:
    """Union of two intervals, or None when they neither overlap nor touch."""
    if not (overlaps(i1, i2) or adjacent(i1, i2)):
        return None
    a, b = _comparable(i1, i2)
    return TimeInterval(min(a.start, b.start), max(a.end, b.end))


def merge_all(intervals: Iterable[TimeInterval]) -> List[TimeInterval]:
    """Collapse intervals into a sorted list of disjoint, non-touching intervals."""
    merged: List[TimeInterval] = []
    for interval in sorted(intervals, key=lambda i: i.to_utc().start):
        if merged:
            combined = merge(merged[-1], interval)
            if combined is not None:
                merged[-1] = combined
                continue
        merged.append(interval.to_utc())
    return merged


# ==========================================================================
# Listing-timezone day resolution
# ==========================================================================

def get_zone(tz_name: str) -> ZoneInfo:
    return ZoneInfo(tz_name or 'UTC')


def local_datetime(day: date, at: time, tz_name: str) -> datetime:
    """Wall-clock time on a day in the given zone, as an aware datetime."""
    return datetime.combine(day, at, tzinfo=get_zone(tz_name))


def local_day_bounds(day: date, tz_name: str) -> TimeInterval:
    """UTC instants spanning one local calendar day."""
    start = local_datetime(day, time.min, tz_name)
    end = local_datetime(day + ONE_DAY, time.min, tz_name)
    return TimeInterval(to_utc(start), to_utc(end))


def local_day_span(start_date: date, end_date: date, tz_name: str) -> TimeInterval:
    """UTC instants from local midnight of start_date to the end of end_date."""
    start = local_datetime(start_date, time.min, tz_name)
    end = local_datetime(end_date + ONE_DAY, time.min, tz_name)
    return TimeInterval(to_utc(start), to_utc(end))


def local_date(value: datetime, tz_name: str) -> date:
    return to_utc(value).astimezone(get_zone(tz_name)).date()


def days_touched(interval: TimeInterval, tz_name: str = 'UTC') -> List[date]:
    """Every calendar day, in the listing's zone, that the interval touches."""
    if interval.is_empty:
        return []

    if interval.is_date_range:
        first, last = interval.start, interval.end - ONE_DAY
    else:
        first = local_date(interval.start, tz_name)
        last = local_date(to_utc(interval.end) - timedelta(microseconds=1), tz_name)

    days = []
    current = first
    while current <= last:
        days.append(current)
        current += ONE_DAY
    return days


def date_range(start_date: date, end_date: date) -> List[date]:
    """Inclusive list of dates."""
    return [start_date + timedelta(days=n) for n in range((end_date - start_date).days + 1)]
