# services/booking-service/src/apps/core/repositories/django_orm.py
"""
Database storage.

Booking inserts and period replacement lock the listing row so concurrent
writers on one listing are serialized. On PostgreSQL an exclusion
constraint on (listing, time range) backs the insert check.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from apps.core.models import AvailabilityPeriod, Booking, Listing
from apps.core.services.exceptions import ConstraintViolation, InvalidTransition, NotFound
from apps.core.services.intervals import TimeInterval
from apps.core.services.records import BookingStatus, Period, Reservation

from .base import AvailabilityRepository, BookingRepository, ListingRepository

logger = logging.getLogger(__name__)

NO_OVERLAP_CONSTRAINT = 'bookings_no_overlap'
BOOKING_NUMBER_ATTEMPTS = 3


def _lock_listing(listing_id: Any) -> Listing:
    try:
        return Listing.objects.select_for_update().get(pk=listing_id)
    except (Listing.DoesNotExist, ValidationError):
        raise NotFound('listing', listing_id)


class DjangoListingRepository(ListingRepository):

    def get_listing(self, listing_id: Any):
        try:
            listing = Listing.objects.get(pk=listing_id)
        except (Listing.DoesNotExist, ValidationError):
            raise NotFound('listing', listing_id)

        if not listing.booking_enabled:
            raise NotFound('listing', listing_id, message=f"Listing {listing_id} is not taking bookings")
        return listing.to_variant()


class DjangoBookingRepository(BookingRepository):

    def get_booking(self, booking_id: Any) -> Reservation:
        try:
            return Booking.objects.get(pk=booking_id).to_reservation()
        except (Booking.DoesNotExist, ValidationError):
            raise NotFound('booking', booking_id)

    def _active(self, listing_id: Any, window: Optional[TimeInterval] = None):
        queryset = Booking.objects.filter(listing_id=listing_id).exclude(status=Booking.Status.CANCELLED)
        if window is not None:
            queryset = queryset.filter(start_time__lt=window.end, end_time__gt=window.start)
        return queryset

    def list_active_bookings(self, listing_id: Any, window: Optional[TimeInterval] = None) -> List[Reservation]:
        return [b.to_reservation() for b in self._active(listing_id, window).order_by('start_time')]

    def insert_booking(self, booking: Reservation) -> Reservation:
        attempts = 1 if booking.booking_number else BOOKING_NUMBER_ATTEMPTS
        for attempt in range(1, attempts + 1):
            try:
                row = self._insert(booking)
            except IntegrityError as e:
                if NO_OVERLAP_CONSTRAINT in str(e):
                    logger.warning(f"Booking insert on listing {booking.listing_id} hit {NO_OVERLAP_CONSTRAINT}")
                    raise ConstraintViolation()
                if 'booking_number' not in str(e) or attempt == attempts:
                    raise
                logger.warning(
                    f"Booking number collision on listing {booking.listing_id}, "
                    f"retrying ({attempt}/{attempts})"
                )
                continue

            logger.info(f"Stored booking {row.booking_number} for listing {row.listing_id}")
            return row.to_reservation()

    def _insert(self, booking: Reservation) -> Booking:
        with transaction.atomic():
            _lock_listing(booking.listing_id)

            clash = self._active(booking.listing_id, booking.interval).first()
            if clash is not None:
                raise ConstraintViolation(details={"booking_id": str(clash.id)})

            row = Booking.from_reservation(booking)
            row.save(force_insert=True)
        return row

    @transaction.atomic
    def update_booking_status(
        self,
        booking_id: Any,
        new_status: BookingStatus,
        expected_status: Optional[BookingStatus] = None,
        **fields
    ) -> Reservation:
        try:
            row = Booking.objects.select_for_update().get(pk=booking_id)
        except (Booking.DoesNotExist, ValidationError):
            raise NotFound('booking', booking_id)

        new_status = BookingStatus(new_status)
        if expected_status is not None and row.status != BookingStatus(expected_status).value:
            raise InvalidTransition(
                row.status, new_status.value,
                message="Booking status changed concurrently"
            )

        row.status = new_status.value
        for name, value in fields.items():
            if name == 'cancelled_by' and value is not None:
                value = getattr(value, 'value', value)
            setattr(row, name, value)
        row.save(update_fields=['status', 'updated_at', *fields.keys()])
        return row.to_reservation()

    def list_bookings_to_complete(self, now: datetime) -> List[Reservation]:
        queryset = Booking.objects.filter(
            status=Booking.Status.CONFIRMED,
            end_time__lte=now
        ).order_by('end_time')
        return [b.to_reservation() for b in queryset]


class DjangoAvailabilityRepository(AvailabilityRepository):

    def list_periods(self, listing_id: Any) -> List[Period]:
        queryset = AvailabilityPeriod.objects.filter(listing_id=listing_id).order_by('declared_at')
        return [p.to_period() for p in queryset]

    @transaction.atomic
    def replace_periods(self, listing_id: Any, new_period: Period) -> List[Period]:
        listing = _lock_listing(listing_id)

        superseded = AvailabilityPeriod.objects.filter(
            listing=listing,
            start_date__lte=new_period.end_date,
            end_date__gte=new_period.start_date,
        )
        removed = superseded.count()
        superseded.delete()

        AvailabilityPeriod.objects.create(
            listing=listing,
            start_date=new_period.start_date,
            end_date=new_period.end_date,
            availability_type=new_period.availability_type.value,
            reason=new_period.reason,
        )

        if removed:
            logger.info(f"Declaration on listing {listing_id} superseded {removed} period(s)")
        return self.list_periods(listing_id)
