# services/booking-service/src/apps/core/services/scheduling_service.py
"""
Scheduling Service

Orchestrates listings, availability and bookings behind the public
scheduling operations. Booking operations return Accepted/Rejected values;
query and provider operations raise the typed scheduling errors.
"""

import logging
import uuid
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from django.utils import timezone

from .availability_index import AvailabilityIndex
from .exceptions import (
    Conflict,
    ConstraintViolation,
    InvalidInterval,
    InvalidRange,
    NotFound,
    RejectionReason,
    SchedulingError,
)
from .intervals import (
    TimeInterval,
    date_range,
    days_touched,
    local_date,
    local_day_span,
    to_utc,
)
from .lifecycle import BookingLifecycle
from .pricing import PriceCalculator
from .range_validator import RangeBookingValidator
from .records import (
    Accepted,
    Actor,
    AvailabilityType,
    BookingStatus,
    CustomerRef,
    Frequency,
    Listing,
    Money,
    Outcome,
    Period,
    RecurrencePattern,
    RecurringOutcome,
    Rejected,
    RentalListing,
    Reservation,
    TimedListing,
    TimeSlot,
)
from .recurrence import RecurrencePlanner
from .slot_generator import SlotGenerator

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

LIFECYCLE_FIELDS = (
    'confirmed_at',
    'cancelled_at',
    'completed_at',
    'cancelled_by',
    'cancellation_reason',
    'is_late_cancellation',
)


class NullNotifier:
    """Notifier that does nothing."""

    def notify(self, booking: Reservation, old_status: Optional[BookingStatus], new_status: BookingStatus):
        pass

    def availability_declared(self, listing: Listing, period: Period):
        pass


class SchedulingService:
    """
    Public scheduling operations.

    Handles:
    - Slot and calendar queries
    - Booking proposals, single and recurring
    - Lifecycle transitions and the completion sweep
    - Availability declarations
    """

    MAX_CALENDAR_DAYS = 62

    def __init__(
        self,
        listings,
        bookings,
        periods,
        notifier=None,
        clock: Clock = None,
        pricing: PriceCalculator = None,
        planner: RecurrencePlanner = None,
        lifecycle: BookingLifecycle = None,
    ):
        self.listings = listings
        self.bookings = bookings
        self.periods = periods
        self.notifier = notifier or NullNotifier()
        self.clock = clock or timezone.now
        self.pricing = pricing or PriceCalculator()
        self.planner = planner or RecurrencePlanner()
        self.lifecycle = lifecycle or BookingLifecycle()

    # ==========================================================================
    # Queries
    # ==========================================================================

    def compute_available_slots(
        self,
        listing_id: Any,
        day: date,
        service_option: Optional[str] = None
    ) -> List[TimeSlot]:
        """Slots for one day. Empty for range-based listings and closed days."""
        listing = self.listings.get_listing(listing_id)
        if not isinstance(listing, TimedListing):
            return []

        now = self._now()
        if not self._is_bookable_day(listing, day, now):
            return []

        index = self._index_for(listing, day, day)
        return SlotGenerator(index, now, self.pricing).generate(listing, day, service_option)

    def availability_calendar(
        self,
        listing_id: Any,
        start_date: date,
        end_date: date,
        service_option: Optional[str] = None
    ) -> Dict[date, List[TimeSlot]]:
        """Slots for every day of an inclusive date range."""
        self._check_calendar_range(start_date, end_date)
        listing = self.listings.get_listing(listing_id)
        calendar = {day: [] for day in date_range(start_date, end_date)}
        if not isinstance(listing, TimedListing):
            return calendar

        now = self._now()
        generator = SlotGenerator(self._index_for(listing, start_date, end_date), now, self.pricing)
        for day in calendar:
            if self._is_bookable_day(listing, day, now):
                calendar[day] = generator.generate(listing, day, service_option)
        return calendar

    def rental_calendar(self, listing_id: Any, start_date: date, end_date: date) -> Dict[date, str]:
        """Whole-day status for an inclusive date range: available, blocked, unavailable, booked or past."""
        self._check_calendar_range(start_date, end_date)
        listing = self.listings.get_listing(listing_id)
        index = self._index_for(listing, start_date, end_date)
        today = local_date(self._now(), listing.timezone)
        booked = index.booked_days()

        calendar = {}
        for day in date_range(start_date, end_date):
            if day < today:
                calendar[day] = 'past'
            elif day in booked:
                calendar[day] = 'booked'
            else:
                calendar[day] = index.resolve_day(day).value
        return calendar

    def quote(self, listing_id: Any, requested: TimeInterval, service_option: Optional[str] = None) -> Money:
        """Price a booking without checking availability."""
        listing = self.listings.get_listing(listing_id)
        if requested.is_empty:
            raise InvalidInterval("Interval has zero or negative duration")

        if isinstance(listing, RentalListing):
            return self.pricing.price(listing, len(days_touched(requested, listing.timezone)))

        option = self._service_option(listing, service_option)
        return self.pricing.price(listing, option or requested.duration)

    def get_booking(self, booking_id: Any) -> Reservation:
        return self.bookings.get_booking(booking_id)

    def list_periods(self, listing_id: Any) -> List[Period]:
        listing = self.listings.get_listing(listing_id)
        return self.periods.list_periods(listing.id)

    # ==========================================================================
    # Proposals
    # ==========================================================================

    def propose_booking(
        self,
        listing_id: Any,
        requested: TimeInterval,
        customer: CustomerRef,
        service_option: Optional[str] = None
    ) -> Outcome:
        """
        Validate and create a booking.

        Rental requests may be a date range or a datetime interval; every
        local day the request touches is booked. Other kinds book the exact
        interval requested.
        """
        try:
            listing = self.listings.get_listing(listing_id)
            booking = self._commit(self._admit(listing, requested, customer, service_option))
        except SchedulingError as e:
            return self._reject(e, listing_id)

        logger.info(
            f"Booking {booking.booking_number} created for listing {listing.id} "
            f"({booking.status.value})"
        )
        self._notify(booking, None, booking.status)
        return Accepted(booking)

    def propose_recurring_booking(
        self,
        listing_id: Any,
        template: TimeInterval,
        pattern: RecurrencePattern,
        customer: CustomerRef,
        service_option: Optional[str] = None
    ) -> RecurringOutcome:
        """
        Commit occurrences one at a time in chronological order.

        Stops at the first rejected occurrence. Occurrences committed before
        it are kept.
        """
        try:
            listing = self.listings.get_listing(listing_id)
            candidates = self.planner.expand(template, pattern, as_of=self._now(), tz_name=listing.timezone)
        except SchedulingError as e:
            return RecurringOutcome(committed=[], planned=0, rejected=self._reject(e, listing_id))

        if not candidates:
            return RecurringOutcome(
                committed=[],
                planned=0,
                rejected=Rejected(
                    reason=RejectionReason.INVALID_INTERVAL,
                    message="No occurrences fall after the current time",
                    code="INVALID_INTERVAL",
                ),
            )

        group_id = uuid.uuid4()
        committed = []
        for candidate in candidates:
            try:
                booking = self._admit(listing, candidate.interval, customer, service_option).evolve(
                    recurrence_group_id=group_id,
                    recurrence_sequence=candidate.sequence,
                    recurrence_pattern=Frequency(pattern.frequency),
                )
                booking = self._commit(booking)
            except SchedulingError as e:
                logger.info(
                    f"Recurring booking on listing {listing.id} stopped at occurrence "
                    f"{candidate.sequence + 1}/{len(candidates)}: {e.code}"
                )
                return RecurringOutcome(committed, len(candidates), self._reject(e, listing_id))

            committed.append(booking)
            self._notify(booking, None, booking.status)

        logger.info(f"Recurring booking group {group_id}: {len(committed)} occurrences committed")
        return RecurringOutcome(committed, len(candidates))

    def _admit(
        self,
        listing: Listing,
        requested: TimeInterval,
        customer: CustomerRef,
        service_option: Optional[str]
    ) -> Reservation:
        """Build the booking to store, or raise why it cannot be made."""
        if requested.is_empty:
            raise InvalidInterval("Interval has zero or negative duration")
        if not customer.is_complete:
            raise InvalidInterval("Guest bookings need a name and an email", code="INCOMPLETE_CUSTOMER")

        now = self._now()
        today = local_date(now, listing.timezone)

        if isinstance(listing, RentalListing):
            days = days_touched(requested, listing.timezone)
            start_date, end_date = days[0], days[-1]
            if start_date < today:
                raise InvalidInterval("Requested dates are in the past", code="PAST_INTERVAL")
            self._check_booking_window(listing, start_date, today)

            index = self._index_for(listing, start_date, end_date)
            day_count = RangeBookingValidator(index).validate(listing, start_date, end_date)
            interval = local_day_span(start_date, end_date, listing.timezone)
            price = self.pricing.price(listing, day_count)
            option = None
        else:
            if requested.is_date_range:
                raise InvalidInterval("A start and end time are required for this listing")
            interval = requested.to_utc()
            if interval.start < to_utc(now):
                raise InvalidInterval("Requested time is in the past", code="PAST_INTERVAL")

            days = days_touched(interval, listing.timezone)
            start_date, end_date = days[0], days[-1]
            self._check_booking_window(listing, start_date, today)

            index = self._index_for(listing, start_date, end_date)
            if not index.is_free(listing.id, interval):
                blocked = index.first_unavailable_day(interval)
                details = {"day": blocked[0].isoformat(), "reason": blocked[1].value} if blocked else {
                    "booking_ids": [str(b.id) for b in index.overlapping_bookings(interval)]
                }
                raise Conflict(details=details)

            option = self._service_option(listing, service_option)
            price = self.pricing.price(listing, option or interval.duration)

        booking = Reservation(
            listing_id=listing.id,
            provider_id=listing.provider_id,
            customer=customer,
            interval=interval,
            status=BookingStatus.PENDING,
            price=price,
            service_name=option.name if option else (listing.title or ''),
            start_date=start_date if isinstance(listing, RentalListing) else None,
            end_date=end_date if isinstance(listing, RentalListing) else None,
            created_at=now,
        )

        if listing.policy.auto_confirm:
            booking = self.lifecycle.transition(booking, BookingStatus.CONFIRMED, Actor.SYSTEM, now)
        return booking

    def _commit(self, booking: Reservation) -> Reservation:
        try:
            return self.bookings.insert_booking(booking)
        except ConstraintViolation as e:
            logger.info(f"Lost booking race on listing {booking.listing_id}")
            raise Conflict(message="This time was just booked by someone else", details=e.details)

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def cancel_booking(self, booking_id: Any, actor: Actor, reason: str = '') -> Outcome:
        """Cancel a pending or confirmed booking, freeing its interval."""
        return self._transition(booking_id, BookingStatus.CANCELLED, actor, cancellation_reason=reason or '')

    def confirm_booking(self, booking_id: Any, actor: Actor = Actor.PROVIDER) -> Outcome:
        return self._transition(booking_id, BookingStatus.CONFIRMED, actor)

    def complete_booking(self, booking_id: Any, actor: Actor = Actor.PROVIDER) -> Outcome:
        return self._transition(booking_id, BookingStatus.COMPLETED, actor)

    def mark_no_show(self, booking_id: Any, actor: Actor = Actor.PROVIDER) -> Outcome:
        return self._transition(booking_id, BookingStatus.NO_SHOW, actor)

    def complete_finished_bookings(self) -> int:
        """Complete every confirmed booking that has ended. Returns how many were completed."""
        completed = 0
        for booking in self.bookings.list_bookings_to_complete(self._now()):
            outcome = self._transition(booking.id, BookingStatus.COMPLETED, Actor.SYSTEM)
            if outcome.ok:
                completed += 1
        return completed

    def _transition(self, booking_id: Any, target: BookingStatus, actor: Actor, **changes) -> Outcome:
        now = self._now()
        try:
            booking = self.bookings.get_booking(booking_id)
            if target == BookingStatus.CANCELLED:
                changes['is_late_cancellation'] = self._is_late_cancellation(booking, now)

            moved = self.lifecycle.transition(booking, target, actor, now, **changes)
            fields = {
                name: getattr(moved, name) for name in LIFECYCLE_FIELDS
                if getattr(moved, name) != getattr(booking, name)
            }
            updated = self.bookings.update_booking_status(
                booking.id, moved.status, expected_status=booking.status, **fields
            )
        except SchedulingError as e:
            return self._reject(e, booking_id)

        logger.info(
            f"Booking {updated.booking_number}: {booking.status.value} -> {updated.status.value} "
            f"by {Actor(actor).value}"
        )
        self._notify(updated, booking.status, updated.status)
        return Accepted(updated)

    def _is_late_cancellation(self, booking: Reservation, now: datetime) -> bool:
        try:
            listing = self.listings.get_listing(booking.listing_id)
        except NotFound:
            return False
        notice = timedelta(hours=listing.policy.cancellation_hours)
        return to_utc(booking.interval.start) - to_utc(now) < notice

    # ==========================================================================
    # Availability declarations
    # ==========================================================================

    def declare_availability(
        self,
        listing_id: Any,
        start_date: date,
        end_date: date,
        availability_type: AvailabilityType,
        reason: str = ''
    ) -> List[Period]:
        """Store a provider declaration, superseding every period it intersects."""
        if end_date < start_date:
            raise InvalidRange(start_date, end_date)

        listing = self.listings.get_listing(listing_id)
        period = Period(
            listing_id=listing.id,
            start_date=start_date,
            end_date=end_date,
            availability_type=AvailabilityType(availability_type),
            reason=reason or '',
        )
        periods = self.periods.replace_periods(listing.id, period)

        logger.info(
            f"Listing {listing.id} declared {period.availability_type.value} "
            f"{start_date}..{end_date}"
        )
        stored = next(
            (p for p in reversed(periods)
             if p.start_date == start_date and p.end_date == end_date),
            period
        )
        try:
            self.notifier.availability_declared(listing, stored)
        except Exception:
            logger.exception(f"Notifier failed for availability on listing {listing.id}")
        return periods

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _now(self) -> datetime:
        return to_utc(self.clock())

    def _index_for(self, listing: Listing, start_date: date, end_date: date) -> AvailabilityIndex:
        window = local_day_span(start_date, end_date, listing.timezone)
        return AvailabilityIndex(
            listing,
            self.periods.list_periods(listing.id),
            self.bookings.list_active_bookings(listing.id, window),
        )

    def _service_option(self, listing: Listing, name: Optional[str]):
        if not name:
            return None
        option = listing.option(name) if isinstance(listing, TimedListing) else None
        if option is None:
            raise NotFound('service option', name)
        return option

    def _is_bookable_day(self, listing: Listing, day: date, now: datetime) -> bool:
        try:
            self._check_booking_window(listing, day, local_date(now, listing.timezone))
        except InvalidInterval:
            return False
        return True

    def _check_booking_window(self, listing: Listing, day: date, today: date):
        policy = listing.policy
        if day == today and not policy.same_day_booking:
            raise InvalidInterval("Same-day bookings are not accepted", code="SAME_DAY_NOT_ALLOWED")
        if (day - today).days > policy.advance_booking_days:
            raise InvalidInterval(
                f"Bookings open {policy.advance_booking_days} days in advance",
                code="OUTSIDE_BOOKING_WINDOW",
                details={"advance_booking_days": policy.advance_booking_days},
            )

    def _check_calendar_range(self, start_date: date, end_date: date):
        if end_date < start_date:
            raise InvalidRange(start_date, end_date)
        if (end_date - start_date).days + 1 > self.MAX_CALENDAR_DAYS:
            raise InvalidRange(
                start_date, end_date,
                message=f"Calendar requests are limited to {self.MAX_CALENDAR_DAYS} days"
            )

    def _notify(self, booking: Reservation, old_status: Optional[BookingStatus], new_status: BookingStatus):
        try:
            self.notifier.notify(booking, old_status, new_status)
        except Exception:
            logger.exception(f"Notifier failed for booking {booking.booking_number}")

    def _reject(self, error: SchedulingError, subject: Any) -> Rejected:
        logger.info(f"Rejected request for {subject}: {error.code} {error.message}")
        return Rejected.from_error(error)
