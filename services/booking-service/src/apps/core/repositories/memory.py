# services/booking-service/src/apps/core/repositories/memory.py
"""
In-memory storage.

Thread-safe implementations of the storage contracts, enforcing the same
no-overlap rule as the database. Used by engine-level tests and local runs.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict, List, Optional

from apps.core.services.availability_index import supersede_periods
from apps.core.services.exceptions import ConstraintViolation, InvalidTransition, NotFound
from apps.core.services.intervals import TimeInterval
from apps.core.services.records import (
    BookingStatus,
    Listing,
    Period,
    Reservation,
    generate_booking_number,
)

from .base import AvailabilityRepository, BookingRepository, ListingRepository

logger = logging.getLogger(__name__)


def _key(value: Any) -> str:
    return str(value)


class InMemoryListingRepository(ListingRepository):

    def __init__(self, listings=()):
        self._listings: Dict[str, Listing] = {}
        for listing in listings:
            self.add(listing)

    def add(self, listing: Listing) -> Listing:
        self._listings[_key(listing.id)] = listing
        return listing

    def get_listing(self, listing_id: Any) -> Listing:
        listing = self._listings.get(_key(listing_id))
        if listing is None or not listing.booking_enabled:
            raise NotFound('listing', listing_id)
        return listing


class InMemoryBookingRepository(BookingRepository):

    def __init__(self):
        self._bookings: Dict[str, Reservation] = {}
        self._lock = threading.Lock()

    def get_booking(self, booking_id: Any) -> Reservation:
        booking = self._bookings.get(_key(booking_id))
        if booking is None:
            raise NotFound('booking', booking_id)
        return booking

    def all(self) -> List[Reservation]:
        return sorted(self._bookings.values(), key=lambda b: b.interval.start)

    def list_active_bookings(self, listing_id: Any, window: Optional[TimeInterval] = None) -> List[Reservation]:
        bookings = [
            b for b in self.all()
            if _key(b.listing_id) == _key(listing_id) and b.is_active
        ]
        if window is not None:
            bookings = [b for b in bookings if b.interval.overlaps(window)]
        return bookings

    def insert_booking(self, booking: Reservation) -> Reservation:
        with self._lock:
            clashes = self.list_active_bookings(booking.listing_id, booking.interval)
            if clashes:
                raise ConstraintViolation(details={"booking_id": str(clashes[0].id)})

            created_at = booking.created_at or datetime.now(dt_timezone.utc)
            stored = booking.evolve(
                id=booking.id or uuid.uuid4(),
                booking_number=booking.booking_number or generate_booking_number(created_at),
                created_at=created_at,
            )
            self._bookings[_key(stored.id)] = stored

        logger.info(f"Stored booking {stored.booking_number} for listing {stored.listing_id}")
        return stored

    def update_booking_status(
        self,
        booking_id: Any,
        new_status: BookingStatus,
        expected_status: Optional[BookingStatus] = None,
        **fields
    ) -> Reservation:
        with self._lock:
            booking = self.get_booking(booking_id)
            if expected_status is not None and booking.status != expected_status:
                raise InvalidTransition(
                    booking.status.value, BookingStatus(new_status).value,
                    message="Booking status changed concurrently"
                )
            updated = booking.evolve(status=BookingStatus(new_status), **fields)
            self._bookings[_key(updated.id)] = updated
        return updated

    def list_bookings_to_complete(self, now: datetime) -> List[Reservation]:
        return [
            b for b in self.all()
            if b.status == BookingStatus.CONFIRMED and b.interval.end <= now
        ]


class InMemoryAvailabilityRepository(AvailabilityRepository):

    def __init__(self):
        self._periods: Dict[str, List[Period]] = {}
        self._lock = threading.Lock()

    def list_periods(self, listing_id: Any) -> List[Period]:
        return list(self._periods.get(_key(listing_id), []))

    def replace_periods(self, listing_id: Any, new_period: Period) -> List[Period]:
        with self._lock:
            stored = new_period
            if stored.id is None or stored.declared_at is None:
                stored = Period(
                    listing_id=listing_id,
                    start_date=new_period.start_date,
                    end_date=new_period.end_date,
                    availability_type=new_period.availability_type,
                    reason=new_period.reason,
                    id=new_period.id or uuid.uuid4(),
                    declared_at=new_period.declared_at or datetime.now(dt_timezone.utc),
                )
            periods, removed = supersede_periods(self.list_periods(listing_id), stored)
            self._periods[_key(listing_id)] = periods

        if removed:
            logger.info(f"Declaration on listing {listing_id} superseded {len(removed)} period(s)")
        return list(periods)
