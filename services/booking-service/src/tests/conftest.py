# services/booking-service/src/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for booking service tests.
"""

import uuid
from datetime import datetime, time, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from apps.core.repositories import (
    InMemoryAvailabilityRepository,
    InMemoryBookingRepository,
    InMemoryListingRepository,
)
from apps.core.services import SchedulingService
from apps.core.services.records import (
    WEEKDAYS,
    CustomerRef,
    OperatingWindow,
    RateUnit,
    RentalListing,
    ServiceListing,
    ServiceOption,
)

# Monday
NOW = datetime(2024, 6, 3, 7, 0, tzinfo=dt_timezone.utc)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    """Collects notifications for assertions."""

    def __init__(self):
        self.events = []
        self.declarations = []

    def notify(self, booking, old_status, new_status):
        self.events.append((booking.id, old_status, new_status))

    def availability_declared(self, listing, period):
        self.declarations.append((listing.id, period))


@pytest.fixture
def api_client():
    """Provide API client for testing."""
    return APIClient()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def customer():
    return CustomerRef(user_id=uuid.uuid4())


@pytest.fixture
def guest():
    return CustomerRef(guest_name='Ada Guest', guest_email='ada@example.com')


@pytest.fixture
def service_listing():
    """30-minute slots, 09:00-12:00 every day, UTC."""
    window = OperatingWindow(time(9, 0), time(12, 0))
    return ServiceListing(
        id=uuid.uuid4(),
        provider_id=uuid.uuid4(),
        title='Haircut',
        timezone='UTC',
        working_hours={day: window for day in WEEKDAYS},
        slot_minutes=30,
        base_price=Decimal('20.00'),
        service_options=[ServiceOption('Deluxe', 45, Decimal('55.00'))],
    )


@pytest.fixture
def rental_listing():
    """Daily-rate rental, UTC."""
    return RentalListing(
        id=uuid.uuid4(),
        provider_id=uuid.uuid4(),
        title='Camper van',
        timezone='UTC',
        rate_unit=RateUnit.DAILY,
        rates={RateUnit.DAILY: Decimal('50'), RateUnit.WEEKLY: Decimal('300')},
    )


@pytest.fixture
def listings(service_listing, rental_listing):
    return InMemoryListingRepository([service_listing, rental_listing])


@pytest.fixture
def bookings():
    return InMemoryBookingRepository()


@pytest.fixture
def periods():
    return InMemoryAvailabilityRepository()


@pytest.fixture
def scheduling_service(listings, bookings, periods, notifier, clock):
    """Engine over in-memory storage with a fixed clock."""
    return SchedulingService(
        listings=listings,
        bookings=bookings,
        periods=periods,
        notifier=notifier,
        clock=clock,
    )


# =============================================================================
# Database fixtures
# =============================================================================

@pytest.fixture
def provider_id():
    return uuid.uuid4()


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def customer_headers(user_id):
    """Headers for a customer request."""
    return {
        'HTTP_X_USER_ID': str(user_id),
        'HTTP_X_ACTOR_ROLE': 'customer',
    }


@pytest.fixture
def provider_headers(provider_id):
    """Headers for a provider request."""
    return {
        'HTTP_X_USER_ID': str(provider_id),
        'HTTP_X_ACTOR_ROLE': 'provider',
    }


@pytest.fixture
def create_listing(provider_id):
    """Factory fixture for creating listings."""
    from apps.core.models import Listing

    def _create_listing(**kwargs):
        defaults = {
            'provider_id': provider_id,
            'kind': Listing.Kind.SERVICE,
            'title': 'Sports massage',
            'timezone': 'UTC',
            'working_hours': {
                day: {'enabled': True, 'start': '09:00', 'end': '17:00'}
                for day in WEEKDAYS
            },
            'slot_minutes': 60,
            'base_price': Decimal('40.00'),
        }
        defaults.update(kwargs)

        return Listing.objects.create(**defaults)

    return _create_listing


@pytest.fixture
def create_rental(create_listing):
    """Factory fixture for rental listings."""
    from apps.core.models import Listing

    def _create_rental(**kwargs):
        defaults = {
            'kind': Listing.Kind.RENTAL,
            'title': 'Cabin',
            'rate_unit': Listing.RateUnit.DAILY,
            'daily_rate': Decimal('80.00'),
        }
        defaults.update(kwargs)
        return create_listing(**defaults)

    return _create_rental


@pytest.fixture
def create_booking():
    """Factory fixture for booking rows written directly to the database."""
    from apps.core.models import Booking

    def _create_booking(listing, start_time, end_time, **kwargs):
        defaults = {
            'listing': listing,
            'provider_id': listing.provider_id,
            'customer_id': uuid.uuid4(),
            'start_time': start_time,
            'end_time': end_time,
            'status': Booking.Status.CONFIRMED,
            'price': listing.base_price,
        }
        defaults.update(kwargs)

        return Booking.objects.create(**defaults)

    return _create_booking
