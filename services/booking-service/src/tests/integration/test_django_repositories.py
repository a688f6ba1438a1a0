# services/booking-service/src/tests/integration/test_django_repositories.py
"""
Integration Tests for Database Storage
"""

import uuid
from datetime import date, timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.db import IntegrityError
from django.utils import timezone

from apps.core.models import AvailabilityPeriod, Booking
from apps.core.repositories.django_orm import (
    DjangoAvailabilityRepository,
    DjangoBookingRepository,
    DjangoListingRepository,
)
from apps.core.services import (
    ConstraintViolation,
    InvalidTransition,
    NotFound,
    RejectionReason,
    TimeInterval,
    build_scheduling_service,
)
from apps.core.services.records import (
    AvailabilityType,
    BookingStatus,
    CustomerRef,
    ListingKind,
    Money,
    Period,
    RateUnit,
    Reservation,
)
from apps.core.tasks import complete_finished_bookings

OVERLAP_ERROR = 'conflicting key value violates exclusion constraint "bookings_no_overlap"'


def tomorrow_at(hour):
    day = timezone.now().date() + timedelta(days=1)
    return timezone.now().replace(
        year=day.year, month=day.month, day=day.day,
        hour=hour, minute=0, second=0, microsecond=0
    )


def reservation_for(listing, start, end, **kwargs):
    defaults = dict(
        listing_id=listing.id,
        provider_id=listing.provider_id,
        customer=CustomerRef(user_id=uuid.uuid4()),
        interval=TimeInterval(start, end),
        status=BookingStatus.PENDING,
        price=Money(Decimal('40.00'), 'GBP'),
    )
    defaults.update(kwargs)
    return Reservation(**defaults)


@pytest.mark.django_db
class TestDjangoListingRepository:

    def test_service_variant(self, create_listing):
        listing = create_listing(
            service_options=[{'name': 'Deep tissue', 'duration_minutes': 90, 'price': '75.00'}],
            break_times=[{'start': '12:00', 'end': '13:00', 'title': 'Lunch'}],
        )

        variant = DjangoListingRepository().get_listing(listing.id)

        assert variant.kind == ListingKind.SERVICE
        assert variant.is_slot_based
        assert variant.slot_minutes == 60
        assert variant.option('Deep tissue').price == Decimal('75.00')
        assert variant.break_times[0].title == 'Lunch'

    def test_rental_variant(self, create_rental):
        listing = create_rental(weekly_rate=Decimal('500.00'))

        variant = DjangoListingRepository().get_listing(listing.id)

        assert variant.is_range_based
        assert variant.rates == {RateUnit.DAILY: Decimal('80.00'), RateUnit.WEEKLY: Decimal('500.00')}
        assert variant.active_rate == Decimal('80.00')

    def test_disabled_listing(self, create_listing):
        listing = create_listing(booking_enabled=False)

        with pytest.raises(NotFound):
            DjangoListingRepository().get_listing(listing.id)

    def test_malformed_id(self):
        with pytest.raises(NotFound):
            DjangoListingRepository().get_listing('not-a-uuid')


@pytest.mark.django_db
class TestDjangoBookingRepository:

    def test_insert_assigns_number(self, create_listing):
        listing = create_listing()

        stored = DjangoBookingRepository().insert_booking(
            reservation_for(listing, tomorrow_at(10), tomorrow_at(11))
        )

        assert stored.id is not None
        assert stored.booking_number.startswith('BK-')
        assert Booking.objects.get(pk=stored.id).duration_minutes == 60

    def test_overlapping_insert(self, create_listing, create_booking):
        listing = create_listing()
        create_booking(listing, tomorrow_at(10), tomorrow_at(11))

        with pytest.raises(ConstraintViolation):
            DjangoBookingRepository().insert_booking(
                reservation_for(listing, tomorrow_at(10), tomorrow_at(12))
            )

    def test_cancelled_rows_do_not_block(self, create_listing, create_booking):
        listing = create_listing()
        create_booking(listing, tomorrow_at(10), tomorrow_at(11), status=Booking.Status.CANCELLED)

        stored = DjangoBookingRepository().insert_booking(
            reservation_for(listing, tomorrow_at(10), tomorrow_at(11))
        )

        assert stored.status == BookingStatus.PENDING

    def test_update_with_stale_status(self, create_listing, create_booking):
        listing = create_listing()
        row = create_booking(listing, tomorrow_at(10), tomorrow_at(11), status=Booking.Status.CANCELLED)

        with pytest.raises(InvalidTransition):
            DjangoBookingRepository().update_booking_status(
                row.id, BookingStatus.CONFIRMED, expected_status=BookingStatus.PENDING
            )

    def test_list_bookings_to_complete(self, create_listing, create_booking):
        listing = create_listing()
        past = timezone.now() - timedelta(days=2)
        ended = create_booking(listing, past, past + timedelta(hours=1))
        create_booking(listing, past + timedelta(hours=2), past + timedelta(hours=3), status=Booking.Status.PENDING)
        create_booking(listing, tomorrow_at(10), tomorrow_at(11))

        due = DjangoBookingRepository().list_bookings_to_complete(timezone.now())

        assert [b.id for b in due] == [ended.id]

    def test_exclusion_violation_becomes_constraint_violation(self, create_listing):
        listing = create_listing()

        with mock.patch.object(Booking, 'save', side_effect=IntegrityError(OVERLAP_ERROR)):
            with pytest.raises(ConstraintViolation):
                DjangoBookingRepository().insert_booking(
                    reservation_for(listing, tomorrow_at(10), tomorrow_at(11))
                )

    def test_booking_number_collision_retries(self, create_listing):
        listing = create_listing()
        save = Booking.save
        calls = []

        def number_taken_once(row, *args, **kwargs):
            calls.append(row.id)
            if len(calls) == 1:
                raise IntegrityError('UNIQUE constraint failed: bookings.booking_number')
            return save(row, *args, **kwargs)

        with mock.patch.object(Booking, 'save', autospec=True, side_effect=number_taken_once):
            stored = DjangoBookingRepository().insert_booking(
                reservation_for(listing, tomorrow_at(10), tomorrow_at(11))
            )

        assert len(calls) == 2
        assert Booking.objects.get(pk=stored.id).booking_number == stored.booking_number

    def test_given_booking_number_collision_is_not_a_conflict(self, create_listing, create_booking):
        listing = create_listing()
        existing = create_booking(listing, tomorrow_at(10), tomorrow_at(11))

        with pytest.raises(IntegrityError):
            DjangoBookingRepository().insert_booking(
                reservation_for(
                    listing, tomorrow_at(13), tomorrow_at(14),
                    booking_number=existing.booking_number
                )
            )

        assert Booking.objects.filter(listing=listing).count() == 1


@pytest.mark.django_db
class TestDatabaseBackedProposals:

    def test_lost_race_is_rejected_as_conflict(self, create_listing):
        listing = create_listing()
        notifier = mock.Mock()
        service = build_scheduling_service(notifier=notifier)

        with mock.patch.object(Booking, 'save', side_effect=IntegrityError(OVERLAP_ERROR)):
            outcome = service.propose_booking(
                listing.id,
                TimeInterval(tomorrow_at(10), tomorrow_at(11)),
                CustomerRef(user_id=uuid.uuid4()),
            )

        assert outcome.ok is False
        assert outcome.reason == RejectionReason.CONFLICT
        assert outcome.code == 'CONFLICT'
        assert outcome.message == 'This time was just booked by someone else'
        assert Booking.objects.filter(listing=listing).count() == 0
        notifier.notify.assert_not_called()


@pytest.mark.django_db
class TestDjangoAvailabilityRepository:

    def test_replace_supersedes_intersecting(self, create_rental):
        listing = create_rental()
        repository = DjangoAvailabilityRepository()

        def declare(start, end, availability_type):
            return repository.replace_periods(
                listing.id,
                Period(listing.id, start, end, availability_type)
            )

        declare(date(2030, 1, 1), date(2030, 1, 10), AvailabilityType.AVAILABLE)
        declare(date(2030, 2, 1), date(2030, 2, 5), AvailabilityType.AVAILABLE)
        periods = declare(date(2030, 1, 5), date(2030, 1, 20), AvailabilityType.BLOCKED)

        assert [(p.start_date, p.availability_type) for p in periods] == [
            (date(2030, 2, 1), AvailabilityType.AVAILABLE),
            (date(2030, 1, 5), AvailabilityType.BLOCKED),
        ]
        assert AvailabilityPeriod.objects.filter(listing=listing).count() == 2


@pytest.mark.django_db
class TestCompleteFinishedBookingsTask:

    def test_completes_ended_bookings(self, create_listing, create_booking):
        listing = create_listing()
        past = timezone.now() - timedelta(days=1)
        row = create_booking(listing, past, past + timedelta(hours=1))

        result = complete_finished_bookings()

        assert result == {'success': True, 'completed': 1}
        row.refresh_from_db()
        assert row.status == Booking.Status.COMPLETED
        assert row.completed_at is not None
