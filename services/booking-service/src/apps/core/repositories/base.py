# services/booking-service/src/apps/core/repositories/base.py
"""
Storage contracts the scheduling engine depends on.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional

from apps.core.services.intervals import TimeInterval
from apps.core.services.records import BookingStatus, Listing, Period, Reservation


class ListingRepository(ABC):
    """Read access to listings."""

    @abstractmethod
    def get_listing(self, listing_id: Any) -> Listing:
        """Return the listing, or raise NotFound if absent or not booking-enabled."""
        raise NotImplementedError


class BookingRepository(ABC):
    """Read/write access to bookings."""

    @abstractmethod
    def get_booking(self, booking_id: Any) -> Reservation:
        """Return the booking or raise NotFound."""
        raise NotImplementedError

    @abstractmethod
    def list_active_bookings(self, listing_id: Any, window: Optional[TimeInterval] = None) -> List[Reservation]:
        """Non-cancelled bookings of a listing, optionally only those overlapping `window`."""
        raise NotImplementedError

    @abstractmethod
    def insert_booking(self, booking: Reservation) -> Reservation:
        """
        Persist a new booking.

        Must raise ConstraintViolation when another non-cancelled booking of
        the same listing overlaps, even under concurrent writers.
        """
        raise NotImplementedError

    @abstractmethod
    def update_booking_status(
        self,
        booking_id: Any,
        new_status: BookingStatus,
        expected_status: Optional[BookingStatus] = None,
        **fields
    ) -> Reservation:
        """
        Move a booking to `new_status`, saving any extra lifecycle fields.

        When `expected_status` is given and the stored status differs, raise
        InvalidTransition instead of writing.
        """
        raise NotImplementedError

    @abstractmethod
    def list_bookings_to_complete(self, now: datetime) -> List[Reservation]:
        """Confirmed bookings whose end time is at or before `now`."""
        raise NotImplementedError


class AvailabilityRepository(ABC):
    """Read/write access to availability periods."""

    @abstractmethod
    def list_periods(self, listing_id: Any) -> List[Period]:
        """Periods of a listing, oldest declaration first."""
        raise NotImplementedError

    @abstractmethod
    def replace_periods(self, listing_id: Any, new_period: Period) -> List[Period]:
        """
        Store `new_period`, removing every existing period it intersects,
        as one atomic step. Returns the listing's resulting periods.
        """
        raise NotImplementedError
