# services/booking-service/src/apps/core/services/lifecycle.py
"""
Booking Lifecycle

State machine for booking status and the actors allowed to move it.
"""

import logging
from datetime import datetime
from typing import Dict, FrozenSet, List, Tuple

from .exceptions import InvalidTransition
from .intervals import to_utc
from .records import Actor, BookingStatus, Reservation

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[Tuple[BookingStatus, BookingStatus], FrozenSet[Actor]] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): frozenset({Actor.PROVIDER, Actor.SYSTEM}),
    (BookingStatus.PENDING, BookingStatus.CANCELLED): frozenset({Actor.CUSTOMER, Actor.PROVIDER}),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): frozenset({Actor.CUSTOMER, Actor.PROVIDER}),
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED): frozenset({Actor.PROVIDER, Actor.SYSTEM}),
    (BookingStatus.CONFIRMED, BookingStatus.NO_SHOW): frozenset({Actor.PROVIDER}),
}

TERMINAL_STATES = frozenset({
    BookingStatus.COMPLETED,
    BookingStatus.CANCELLED,
    BookingStatus.NO_SHOW,
})

TIMESTAMP_FIELDS = {
    BookingStatus.CONFIRMED: 'confirmed_at',
    BookingStatus.CANCELLED: 'cancelled_at',
    BookingStatus.COMPLETED: 'completed_at',
}


class BookingLifecycle:
    """Validates and applies status transitions."""

    def is_terminal(self, status: BookingStatus) -> bool:
        return BookingStatus(status) in TERMINAL_STATES

    def allowed_transitions(self, status: BookingStatus, actor: Actor) -> List[BookingStatus]:
        return [
            target for (source, target), actors in TRANSITIONS.items()
            if source == status and actor in actors
        ]

    def check(self, booking: Reservation, target: BookingStatus, actor: Actor, now: datetime):
        """Raise InvalidTransition unless `actor` may move `booking` to `target` at `now`."""
        current = BookingStatus(booking.status)
        target = BookingStatus(target)
        actor = Actor(actor)

        if current in TERMINAL_STATES:
            raise InvalidTransition(
                current.value, target.value, actor.value,
                message=f"Booking is already {current.value}"
            )

        actors = TRANSITIONS.get((current, target))
        if actors is None:
            raise InvalidTransition(current.value, target.value, actor.value)

        if actor not in actors:
            raise InvalidTransition(
                current.value, target.value, actor.value,
                message=f"{actor.value.capitalize()} cannot move a booking to {target.value}"
            )

        if target == BookingStatus.COMPLETED and to_utc(now) < to_utc(booking.interval.end):
            raise InvalidTransition(
                current.value, target.value, actor.value,
                message="Booking cannot be completed before it ends"
            )

    def transition(
        self,
        booking: Reservation,
        target: BookingStatus,
        actor: Actor,
        now: datetime,
        **changes
    ) -> Reservation:
        """Return the booking in its new state. Interval and price never change."""
        self.check(booking, target, actor, now)
        target = BookingStatus(target)

        timestamp_field = TIMESTAMP_FIELDS.get(target)
        if timestamp_field:
            changes[timestamp_field] = now
        if target == BookingStatus.CANCELLED:
            changes.setdefault('cancelled_by', Actor(actor))

        logger.debug(f"Booking {booking.id}: {booking.status.value} -> {target.value} by {Actor(actor).value}")
        return booking.evolve(status=target, **changes)
