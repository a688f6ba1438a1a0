# services/booking-service/src/apps/core/services/availability_index.py
"""
Availability Index

Answers whether an interval is free for one listing, given its declared
availability periods and its non-cancelled bookings. Pure: it never reads
the clock or storage.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import InvalidInterval
from .intervals import ONE_DAY, TimeInterval, days_touched, local_day_span
from .records import (
    AvailabilityType,
    DayStatus,
    Listing,
    Period,
    Reservation,
)

logger = logging.getLogger(__name__)


def supersede_periods(existing: Iterable[Period], new_period: Period) -> Tuple[List[Period], List[Period]]:
    """
    Apply a new declaration over existing periods.

    Any existing period whose date range intersects the new one is removed
    whole; the rest are kept. Returns (resulting periods, removed periods).
    """
    kept, removed = [], []
    for period in existing:
        if period.overlaps(new_period):
            removed.append(period)
        else:
            kept.append(period)
    kept.append(new_period)
    return kept, removed


class AvailabilityIndex:
    """
    Free/busy view of a single listing.

    Day resolution uses the most recently declared period covering a day.
    Days without a declaration fall back to the listing's default.
    """

    def __init__(
        self,
        listing: Listing,
        periods: Iterable[Period] = (),
        bookings: Iterable[Reservation] = ()
    ):
        self.listing = listing
        self.periods = list(periods)
        if all(p.declared_at is not None for p in self.periods):
            # Stable sort: insertion order breaks timestamp ties
            self.periods.sort(key=lambda p: p.declared_at)
        self.bookings = [b for b in bookings if b.is_active]
        self._day_cache: Dict[date, DayStatus] = {}

    def with_booking(self, booking: Reservation) -> 'AvailabilityIndex':
        """Index that also accounts for one more committed booking."""
        return AvailabilityIndex(self.listing, self.periods, self.bookings + [booking])

    # ==========================================================================
    # Day resolution
    # ==========================================================================

    def covering_period(self, day: date) -> Optional[Period]:
        covering = [p for p in self.periods if p.covers(day)]
        return covering[-1] if covering else None

    def resolve_day(self, day: date) -> DayStatus:
        if day not in self._day_cache:
            period = self.covering_period(day)
            if period is None:
                status = self.listing.undeclared_day_status
            elif period.availability_type == AvailabilityType.BLOCKED:
                status = DayStatus.BLOCKED
            else:
                status = DayStatus.AVAILABLE
            self._day_cache[day] = status
        return self._day_cache[day]

    def days_of(self, interval: TimeInterval) -> List[date]:
        return days_touched(interval, self.listing.timezone)

    def first_unavailable_day(self, interval: TimeInterval) -> Optional[Tuple[date, DayStatus]]:
        for day in self.days_of(interval):
            status = self.resolve_day(day)
            if status != DayStatus.AVAILABLE:
                return day, status
        return None

    # ==========================================================================
    # Booking overlap
    # ==========================================================================

    def overlapping_bookings(self, interval: TimeInterval) -> List[Reservation]:
        candidate = self._as_instants(interval)
        return [b for b in self.bookings if b.interval.overlaps(candidate)]

    def booked_days(self) -> Dict[date, Reservation]:
        days = {}
        for booking in self.bookings:
            for day in self.days_of(booking.interval):
                days.setdefault(day, booking)
        return days

    def is_free(self, listing_id, candidate: TimeInterval) -> bool:
        """True only if every touched day is available and no booking overlaps."""
        if str(listing_id) != str(self.listing.id):
            raise ValueError(f"Index holds listing {self.listing.id}, not {listing_id}")
        if candidate.is_empty:
            raise InvalidInterval("Interval has zero or negative duration")

        if self.first_unavailable_day(candidate) is not None:
            return False

        return not self.overlapping_bookings(candidate)

    def _as_instants(self, interval: TimeInterval) -> TimeInterval:
        if not interval.is_date_range:
            return interval
        return local_day_span(interval.start, interval.end - ONE_DAY, self.listing.timezone)
