# services/booking-service/src/tests/unit/test_range_validator.py
"""
Unit Tests for Rental Range Validation
"""

import uuid
from dataclasses import replace
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

import pytest

from apps.core.services import (
    AvailabilityIndex,
    InvalidRange,
    RangeBookingValidator,
    RangeConflict,
    TimeInterval,
)
from apps.core.services.records import (
    AvailabilityType,
    BookingStatus,
    CustomerRef,
    Money,
    Period,
    Reservation,
)


def open_june(listing):
    return Period(
        listing_id=listing.id,
        start_date=date(2024, 6, 1),
        end_date=date(2024, 6, 30),
        availability_type=AvailabilityType.AVAILABLE,
    )


def validator(listing, periods=None, bookings=()):
    periods = [open_june(listing)] if periods is None else periods
    return RangeBookingValidator(AvailabilityIndex(listing, periods, bookings))


class TestRangeBookingValidator:

    def test_valid_range_returns_day_count(self, rental_listing):
        days = validator(rental_listing).validate(rental_listing, date(2024, 6, 1), date(2024, 6, 3))
        assert days == 3

    def test_single_day(self, rental_listing):
        assert validator(rental_listing).validate(rental_listing, date(2024, 6, 5), date(2024, 6, 5)) == 1

    def test_end_before_start(self, rental_listing):
        with pytest.raises(InvalidRange):
            validator(rental_listing).validate(rental_listing, date(2024, 6, 5), date(2024, 6, 4))

    def test_undeclared_day_conflicts(self, rental_listing):
        """Rentals are unavailable unless a period opens them."""
        with pytest.raises(RangeConflict) as exc_info:
            validator(rental_listing, periods=[]).validate(rental_listing, date(2024, 6, 1), date(2024, 6, 2))

        assert exc_info.value.day == date(2024, 6, 1)
        assert exc_info.value.day_reason == 'unavailable'

    def test_first_blocked_day_is_reported(self, rental_listing):
        periods = [
            open_june(rental_listing),
            Period(
                listing_id=rental_listing.id,
                start_date=date(2024, 6, 4),
                end_date=date(2024, 6, 5),
                availability_type=AvailabilityType.BLOCKED,
            ),
        ]

        with pytest.raises(RangeConflict) as exc_info:
            validator(rental_listing, periods).validate(rental_listing, date(2024, 6, 2), date(2024, 6, 8))

        assert exc_info.value.day == date(2024, 6, 4)
        assert exc_info.value.details['reason'] == 'blocked'

    def test_booked_day(self, rental_listing):
        existing = Reservation(
            listing_id=rental_listing.id,
            provider_id=rental_listing.provider_id,
            customer=CustomerRef(user_id=uuid.uuid4()),
            interval=TimeInterval(
                datetime(2024, 6, 6, tzinfo=dt_timezone.utc),
                datetime(2024, 6, 8, tzinfo=dt_timezone.utc),
            ),
            status=BookingStatus.PENDING,
            price=Money(Decimal('100'), 'GBP'),
            id=uuid.uuid4(),
        )

        with pytest.raises(RangeConflict) as exc_info:
            validator(rental_listing, bookings=[existing]).validate(
                rental_listing, date(2024, 6, 3), date(2024, 6, 9)
            )

        assert exc_info.value.day == date(2024, 6, 6)
        assert exc_info.value.day_reason == 'booked'
        assert exc_info.value.details['booking_id'] == str(existing.id)

    def test_minimum_days(self, rental_listing):
        listing = replace(rental_listing, min_days=3)

        with pytest.raises(InvalidRange) as exc_info:
            validator(listing).validate(listing, date(2024, 6, 1), date(2024, 6, 2))

        assert exc_info.value.details['min_days'] == 3

    def test_maximum_days(self, rental_listing):
        listing = replace(rental_listing, max_days=7)

        with pytest.raises(InvalidRange):
            validator(listing).validate(listing, date(2024, 6, 1), date(2024, 6, 8))
