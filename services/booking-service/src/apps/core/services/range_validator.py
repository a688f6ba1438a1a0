# services/booking-service/src/apps/core/services/range_validator.py
"""
Range Booking Validator

Whole-day validation of a rental's inclusive [start_date, end_date] range.
"""

import logging
from datetime import date

from .availability_index import AvailabilityIndex
from .exceptions import InvalidRange, RangeConflict
from .intervals import date_range
from .records import DayStatus, RentalListing

logger = logging.getLogger(__name__)


class RangeBookingValidator:
    """
    Checks every day of a rental range, in order.

    Returns the number of days on success. Raises InvalidRange for a
    malformed range or one outside the listing's duration limits, and
    RangeConflict for the first day that cannot be booked.
    """

    def __init__(self, index: AvailabilityIndex):
        self.index = index

    def validate(self, listing: RentalListing, start_date: date, end_date: date) -> int:
        if end_date < start_date:
            raise InvalidRange(start_date, end_date)

        days = (end_date - start_date).days + 1

        if listing.min_days and days < listing.min_days:
            raise InvalidRange(
                start_date, end_date,
                message=f"Minimum rental is {listing.min_days} days",
                details={"min_days": listing.min_days, "days": days}
            )
        if listing.max_days and days > listing.max_days:
            raise InvalidRange(
                start_date, end_date,
                message=f"Maximum rental is {listing.max_days} days",
                details={"max_days": listing.max_days, "days": days}
            )

        booked = self.index.booked_days()
        for day in date_range(start_date, end_date):
            status = self.index.resolve_day(day)
            if status != DayStatus.AVAILABLE:
                raise RangeConflict(day, status.value)
            if day in booked:
                raise RangeConflict(
                    day, 'booked',
                    details={"booking_id": str(booked[day].id) if booked[day].id else None}
                )

        logger.debug(f"Range {start_date}..{end_date} valid for listing {listing.id}")
        return days
