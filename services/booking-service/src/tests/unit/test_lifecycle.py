# services/booking-service/src/tests/unit/test_lifecycle.py
"""
Unit Tests for the Booking Lifecycle
"""

import uuid
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest

from apps.core.services import BookingLifecycle, InvalidTransition, TimeInterval
from apps.core.services.lifecycle import TERMINAL_STATES, TRANSITIONS
from apps.core.services.records import Actor, BookingStatus, CustomerRef, Money, Reservation

BEFORE = datetime(2024, 6, 3, 8, 0, tzinfo=dt_timezone.utc)
AFTER = datetime(2024, 6, 3, 12, 0, tzinfo=dt_timezone.utc)


def booking(status):
    return Reservation(
        listing_id=uuid.uuid4(),
        provider_id=uuid.uuid4(),
        customer=CustomerRef(user_id=uuid.uuid4()),
        interval=TimeInterval(
            datetime(2024, 6, 3, 10, 0, tzinfo=dt_timezone.utc),
            datetime(2024, 6, 3, 11, 0, tzinfo=dt_timezone.utc),
        ),
        status=status,
        price=Money(Decimal('20'), 'GBP'),
        id=uuid.uuid4(),
    )


@pytest.fixture
def lifecycle():
    return BookingLifecycle()


class TestBookingLifecycle:

    def test_provider_confirms(self, lifecycle):
        moved = lifecycle.transition(booking(BookingStatus.PENDING), BookingStatus.CONFIRMED, Actor.PROVIDER, BEFORE)

        assert moved.status == BookingStatus.CONFIRMED
        assert moved.confirmed_at == BEFORE

    def test_customer_cannot_confirm(self, lifecycle):
        with pytest.raises(InvalidTransition) as exc_info:
            lifecycle.transition(booking(BookingStatus.PENDING), BookingStatus.CONFIRMED, Actor.CUSTOMER, BEFORE)

        assert exc_info.value.details['actor'] == 'customer'

    def test_cancel_records_actor_and_reason(self, lifecycle):
        moved = lifecycle.transition(
            booking(BookingStatus.CONFIRMED),
            BookingStatus.CANCELLED,
            Actor.CUSTOMER,
            BEFORE,
            cancellation_reason='Plans changed',
        )

        assert moved.status == BookingStatus.CANCELLED
        assert moved.cancelled_by == Actor.CUSTOMER
        assert moved.cancelled_at == BEFORE
        assert moved.cancellation_reason == 'Plans changed'

    def test_interval_and_price_never_change(self, lifecycle):
        original = booking(BookingStatus.PENDING)
        moved = lifecycle.transition(original, BookingStatus.CANCELLED, Actor.PROVIDER, BEFORE)

        assert moved.interval == original.interval
        assert moved.price == original.price

    def test_complete_requires_end_to_pass(self, lifecycle):
        with pytest.raises(InvalidTransition):
            lifecycle.transition(booking(BookingStatus.CONFIRMED), BookingStatus.COMPLETED, Actor.SYSTEM, BEFORE)

        moved = lifecycle.transition(booking(BookingStatus.CONFIRMED), BookingStatus.COMPLETED, Actor.SYSTEM, AFTER)
        assert moved.completed_at == AFTER

    def test_pending_cannot_complete(self, lifecycle):
        with pytest.raises(InvalidTransition):
            lifecycle.transition(booking(BookingStatus.PENDING), BookingStatus.COMPLETED, Actor.PROVIDER, AFTER)

    def test_only_provider_marks_no_show(self, lifecycle):
        with pytest.raises(InvalidTransition):
            lifecycle.transition(booking(BookingStatus.CONFIRMED), BookingStatus.NO_SHOW, Actor.SYSTEM, AFTER)

        moved = lifecycle.transition(booking(BookingStatus.CONFIRMED), BookingStatus.NO_SHOW, Actor.PROVIDER, AFTER)
        assert moved.status == BookingStatus.NO_SHOW

    @pytest.mark.parametrize('terminal', sorted(TERMINAL_STATES, key=lambda s: s.value))
    def test_terminal_states_have_no_exit(self, lifecycle, terminal):
        for target in BookingStatus:
            for actor in Actor:
                with pytest.raises(InvalidTransition):
                    lifecycle.check(booking(terminal), target, actor, AFTER)

        assert lifecycle.is_terminal(terminal)
        assert all(source != terminal for source, _ in TRANSITIONS)

    def test_allowed_transitions(self, lifecycle):
        assert set(lifecycle.allowed_transitions(BookingStatus.CONFIRMED, Actor.PROVIDER)) == {
            BookingStatus.CANCELLED,
            BookingStatus.COMPLETED,
            BookingStatus.NO_SHOW,
        }
        assert lifecycle.allowed_transitions(BookingStatus.PENDING, Actor.SYSTEM) == [BookingStatus.CONFIRMED]
