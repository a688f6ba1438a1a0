# services/booking-service/src/apps/core/services/slot_generator.py
"""
Slot Generator

Builds the ordered slot list for one listing on one calendar day.
"""

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from .availability_index import AvailabilityIndex
from .exceptions import NotFound
from .intervals import TimeInterval, local_datetime, to_utc
from .pricing import PriceCalculator
from .records import (
    DayStatus,
    Listing,
    SlotUnavailableReason,
    TimedListing,
    TimeSlot,
)

logger = logging.getLogger(__name__)


class SlotGenerator:
    """
    Steps through a day's operating window one slot at a time.

    Consecutive slots are separated by the listing's buffer. A slot is kept
    only while it ends inside the window. Each slot is flagged unavailable
    with the first matching reason: past, break, blocked, booked.
    """

    def __init__(self, index: AvailabilityIndex, now: datetime, pricing: PriceCalculator = None):
        self.index = index
        self.now = to_utc(now)
        self.pricing = pricing or PriceCalculator()

    def generate(self, listing: Listing, day: date, service_option: Optional[str] = None) -> List[TimeSlot]:
        if not isinstance(listing, TimedListing):
            return []

        window = listing.window_for(day)
        if window is None:
            return []

        option = None
        if service_option:
            option = listing.option(service_option)
            if option is None:
                raise NotFound('service option', service_option)

        duration_minutes = option.duration_minutes if option else listing.slot_minutes
        if duration_minutes <= 0:
            return []

        duration = timedelta(minutes=duration_minutes)
        step = duration + timedelta(minutes=max(listing.buffer_minutes, 0))

        cursor = to_utc(local_datetime(day, window.start, listing.timezone))
        window_end = to_utc(local_datetime(day, window.end, listing.timezone))
        breaks = [
            TimeInterval(
                to_utc(local_datetime(day, b.start, listing.timezone)),
                to_utc(local_datetime(day, b.end, listing.timezone)),
            )
            for b in listing.break_times
            if b.end > b.start
        ]
        price = self.pricing.price(listing, option or duration)
        day_status = self.index.resolve_day(day)

        slots = []
        while cursor + duration <= window_end:
            interval = TimeInterval(cursor, cursor + duration)
            reason = self._unavailable_reason(interval, breaks, day_status)
            slots.append(TimeSlot(
                start=interval.start,
                end=interval.end,
                is_available=reason is None,
                price=price,
                service_option=option.name if option else None,
                unavailable_reason=reason,
            ))
            cursor += step

        return slots

    def _unavailable_reason(self, interval, breaks, day_status) -> Optional[SlotUnavailableReason]:
        if interval.start < self.now:
            return SlotUnavailableReason.PAST
        if any(interval.overlaps(b) for b in breaks):
            return SlotUnavailableReason.BREAK
        if day_status != DayStatus.AVAILABLE:
            return SlotUnavailableReason.BLOCKED
        if not self.index.is_free(self.index.listing.id, interval):
            return SlotUnavailableReason.BOOKED
        return None
