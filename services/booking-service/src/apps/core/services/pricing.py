# services/booking-service/src/apps/core/services/pricing.py
"""
Price Calculator

Maps a duration or a service option onto a listing's rate schedule.
Partial units always round up. Prices are in the listing's currency.
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Union

from .exceptions import InvalidInterval
from .records import (
    Listing,
    Money,
    ProjectListing,
    RateUnit,
    RentalListing,
    ServiceOption,
    SubscriptionListing,
    TimedListing,
    ceil_div,
)

logger = logging.getLogger(__name__)

DurationOrOption = Union[int, timedelta, ServiceOption]

# Rate multiplier for a rental of `days` whole days
RENTAL_UNITS = {
    RateUnit.HOURLY: lambda days: days * 24,
    RateUnit.DAILY: lambda days: days,
    RateUnit.WEEKLY: lambda days: ceil_div(days, 7),
    RateUnit.MONTHLY: lambda days: ceil_div(days, 30),
}


class PriceCalculator:
    """Computes the total price of a validated booking."""

    def price(self, listing: Listing, duration_or_option: DurationOrOption) -> Money:
        """
        Price a booking.

        Args:
            listing: Listing being booked
            duration_or_option: whole days (int) for rentals, a timedelta for
                slot-based listings, or a ServiceOption for its fixed price

        Returns:
            Money in the listing's currency
        """
        if isinstance(duration_or_option, ServiceOption):
            return Money(duration_or_option.price, listing.currency)

        if isinstance(listing, RentalListing):
            days = duration_or_option
            if isinstance(days, timedelta):
                days = days.days
            return self.rental_price(listing, days)

        if isinstance(listing, TimedListing):
            minutes = duration_or_option
            if isinstance(minutes, timedelta):
                minutes = int(minutes.total_seconds() // 60)
            return self.timed_price(listing, minutes)

        if isinstance(listing, (SubscriptionListing, ProjectListing)):
            return Money(listing.price, listing.currency)

        raise InvalidInterval(f"Cannot price listing kind {listing.kind.value}")

    def rental_price(self, listing: RentalListing, days: int) -> Money:
        if days < 1:
            raise InvalidInterval("Rental must last at least one day", details={"days": days})

        rate = listing.active_rate
        if rate is None:
            raise InvalidInterval(
                f"Listing has no {listing.rate_unit.value} rate",
                details={"rate_unit": listing.rate_unit.value}
            )

        units = RENTAL_UNITS[listing.rate_unit](days)
        return Money(Decimal(rate) * units, listing.currency)

    def timed_price(self, listing: TimedListing, minutes: int) -> Money:
        """Base price per default slot, charged for every started slot."""
        if minutes <= 0:
            raise InvalidInterval("Duration must be positive", details={"minutes": minutes})
        if listing.slot_minutes <= 0:
            raise InvalidInterval(
                "Listing slot length must be positive",
                details={"slot_minutes": listing.slot_minutes}
            )

        slots = ceil_div(minutes, listing.slot_minutes)
        return Money(Decimal(listing.base_price) * slots, listing.currency)
