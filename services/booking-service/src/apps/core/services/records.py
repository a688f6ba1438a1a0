# services/booking-service/src/apps/core/services/records.py
"""
Scheduling Records

Plain value types the engine works on. Listings are a closed set of
variants, one per listing kind, each carrying only the fields its kind uses.
"""

import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, date, time
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from .exceptions import RejectionReason
from .intervals import TimeInterval

CENT = Decimal('0.01')


class ListingKind(str, Enum):
    """Kinds of bookable listing."""
    SERVICE = 'service'
    EXPERIENCE = 'experience'
    RENTAL = 'rental'
    SUBSCRIPTION = 'subscription'
    PROJECT = 'project'


class RateUnit(str, Enum):
    """Rental rate units."""
    HOURLY = 'hourly'
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'


class BillingCycle(str, Enum):
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    QUARTERLY = 'quarterly'
    YEARLY = 'yearly'


class AvailabilityType(str, Enum):
    """Declared state of an availability period."""
    AVAILABLE = 'available'
    BLOCKED = 'blocked'


class DayStatus(str, Enum):
    """Resolved availability of one calendar day."""
    AVAILABLE = 'available'
    BLOCKED = 'blocked'
    UNAVAILABLE = 'unavailable'


class BookingStatus(str, Enum):
    """Booking lifecycle states."""
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'
    NO_SHOW = 'no_show'


class Actor(str, Enum):
    """Who triggers a lifecycle transition."""
    CUSTOMER = 'customer'
    PROVIDER = 'provider'
    SYSTEM = 'system'


class Frequency(str, Enum):
    """Recurrence frequencies."""
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'


class SlotUnavailableReason(str, Enum):
    PAST = 'past'
    BOOKED = 'booked'
    BLOCKED = 'blocked'
    BREAK = 'break'


WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')


# ==========================================================================
# Money
# ==========================================================================

@dataclass(frozen=True)
class Money:
    """Amount in a single currency, rounded to cents."""
    amount: Decimal
    currency: str

    def __post_init__(self):
        amount = Decimal(str(self.amount)).quantize(CENT, rounding=ROUND_HALF_UP)
        object.__setattr__(self, 'amount', amount)

    def to_dict(self) -> Dict[str, Any]:
        return {'amount': str(self.amount), 'currency': self.currency}


# ==========================================================================
# Listing variants
# ==========================================================================

@dataclass(frozen=True)
class OperatingWindow:
    """Opening hours for one weekday."""
    start: time
    end: time

    @classmethod
    def parse(cls, start: str, end: str) -> 'OperatingWindow':
        return cls(time.fromisoformat(start), time.fromisoformat(end))


@dataclass(frozen=True)
class BreakTime:
    start: time
    end: time
    title: str = ''


@dataclass(frozen=True)
class ServiceOption:
    """Named variant of a service with its own duration and fixed price."""
    name: str
    duration_minutes: int
    price: Decimal


@dataclass(frozen=True)
class BookingPolicy:
    auto_confirm: bool = False
    advance_booking_days: int = 30
    same_day_booking: bool = True
    cancellation_hours: int = 24


def default_working_hours() -> Dict[str, OperatingWindow]:
    """Monday to Friday, 09:00-17:00."""
    window = OperatingWindow(time(9, 0), time(17, 0))
    return {day: window for day in WEEKDAYS[:5]}


@dataclass(frozen=True)
class BaseListing:
    """Fields every listing kind shares."""
    id: Any
    provider_id: Any
    title: str = ''
    currency: str = 'GBP'
    timezone: str = 'Europe/London'
    policy: BookingPolicy = field(default_factory=BookingPolicy)
    booking_enabled: bool = True

    kind: ClassVar[ListingKind]

    @property
    def is_slot_based(self) -> bool:
        return False

    @property
    def is_range_based(self) -> bool:
        return False

    @property
    def undeclared_day_status(self) -> DayStatus:
        """How a day with no declared period resolves."""
        return DayStatus.AVAILABLE


@dataclass(frozen=True)
class TimedListing(BaseListing):
    """Listing booked in time slots within weekly operating hours."""
    working_hours: Dict[str, OperatingWindow] = field(default_factory=default_working_hours)
    slot_minutes: int = 60
    buffer_minutes: int = 0
    base_price: Decimal = Decimal('0')
    service_options: List[ServiceOption] = field(default_factory=list)
    break_times: List[BreakTime] = field(default_factory=list)

    @property
    def is_slot_based(self) -> bool:
        return True

    def window_for(self, day: date) -> Optional[OperatingWindow]:
        return self.working_hours.get(WEEKDAYS[day.weekday()])

    def option(self, name: Optional[str]) -> Optional[ServiceOption]:
        if not name:
            return None
        for option in self.service_options:
            if option.name == name:
                return option
        return None


@dataclass(frozen=True)
class ServiceListing(TimedListing):
    kind: ClassVar[ListingKind] = ListingKind.SERVICE


@dataclass(frozen=True)
class ExperienceListing(TimedListing):
    kind: ClassVar[ListingKind] = ListingKind.EXPERIENCE


@dataclass(frozen=True)
class RentalListing(BaseListing):
    """Listing booked by whole days and priced by rate unit."""
    rate_unit: RateUnit = RateUnit.DAILY
    rates: Dict[RateUnit, Decimal] = field(default_factory=dict)
    min_days: int = 1
    max_days: Optional[int] = None

    kind: ClassVar[ListingKind] = ListingKind.RENTAL

    @property
    def is_range_based(self) -> bool:
        return True

    @property
    def undeclared_day_status(self) -> DayStatus:
        return DayStatus.UNAVAILABLE

    @property
    def active_rate(self) -> Optional[Decimal]:
        return self.rates.get(self.rate_unit)


@dataclass(frozen=True)
class SubscriptionListing(BaseListing):
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    price: Decimal = Decimal('0')

    kind: ClassVar[ListingKind] = ListingKind.SUBSCRIPTION


@dataclass(frozen=True)
class ProjectListing(BaseListing):
    price: Decimal = Decimal('0')

    kind: ClassVar[ListingKind] = ListingKind.PROJECT


LISTING_VARIANTS = {
    ListingKind.SERVICE: ServiceListing,
    ListingKind.EXPERIENCE: ExperienceListing,
    ListingKind.RENTAL: RentalListing,
    ListingKind.SUBSCRIPTION: SubscriptionListing,
    ListingKind.PROJECT: ProjectListing,
}

Listing = Union[ServiceListing, ExperienceListing, RentalListing, SubscriptionListing, ProjectListing]


# ==========================================================================
# Availability periods
# ==========================================================================

@dataclass(frozen=True)
class Period:
    """Provider declaration over an inclusive range of whole days."""
    listing_id: Any
    start_date: date
    end_date: date
    availability_type: AvailabilityType
    reason: str = ''
    id: Any = None
    declared_at: Optional[datetime] = None

    @property
    def days(self) -> TimeInterval:
        return TimeInterval.for_days(self.start_date, self.end_date)

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def overlaps(self, other: 'Period') -> bool:
        return self.days.overlaps(other.days)


# ==========================================================================
# Bookings
# ==========================================================================

@dataclass(frozen=True)
class CustomerRef:
    """Registered user or guest contact details."""
    user_id: Any = None
    guest_name: str = ''
    guest_email: str = ''
    guest_phone: str = ''

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    @property
    def is_complete(self) -> bool:
        if self.is_guest:
            return bool(self.guest_name and self.guest_email)
        return True


@dataclass(frozen=True)
class Reservation:
    """Engine view of a booking."""
    listing_id: Any
    provider_id: Any
    customer: CustomerRef
    interval: TimeInterval
    status: BookingStatus
    price: Money
    id: Any = None
    booking_number: str = ''
    service_name: str = ''
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    recurrence_group_id: Any = None
    recurrence_sequence: Optional[int] = None
    recurrence_pattern: Optional[Frequency] = None
    is_late_cancellation: bool = False
    cancellation_reason: str = ''
    cancelled_by: Optional[Actor] = None
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    @property
    def duration_minutes(self) -> int:
        return self.interval.minutes

    def evolve(self, **changes) -> 'Reservation':
        return replace(self, **changes)


@dataclass(frozen=True)
class TimeSlot:
    """Computed, never stored, candidate slot."""
    start: datetime
    end: datetime
    is_available: bool
    price: Optional[Money] = None
    service_option: Optional[str] = None
    unavailable_reason: Optional[SlotUnavailableReason] = None

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start, self.end)

    @property
    def duration_minutes(self) -> int:
        return self.interval.minutes


# ==========================================================================
# Recurrence
# ==========================================================================

@dataclass(frozen=True)
class RecurrencePattern:
    frequency: Frequency
    until: Optional[date] = None
    max_occurrences: Optional[int] = None


@dataclass(frozen=True)
class CandidateBooking:
    """One planned occurrence of a recurring booking."""
    interval: TimeInterval
    sequence: int


# ==========================================================================
# Outcomes
# ==========================================================================

@dataclass(frozen=True)
class Accepted:
    booking: Reservation

    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    message: str
    code: str = ''
    details: Dict[str, Any] = field(default_factory=dict)

    ok: ClassVar[bool] = False

    @classmethod
    def from_error(cls, error) -> 'Rejected':
        return cls(
            reason=error.reason,
            message=error.message,
            code=error.code,
            details=dict(error.details),
        )


Outcome = Union[Accepted, Rejected]


@dataclass(frozen=True)
class RecurringOutcome:
    """Result of committing a recurring booking occurrence by occurrence."""
    committed: List[Reservation]
    planned: int
    rejected: Optional[Rejected] = None

    @property
    def is_complete(self) -> bool:
        return self.rejected is None and len(self.committed) == self.planned


def ceil_div(numerator: int, denominator: int) -> int:
    return math.ceil(numerator / denominator)


def generate_booking_number(moment: datetime) -> str:
    """Booking reference such as BK-20240601-3F9A1C."""
    return f"BK-{moment.strftime('%Y%m%d')}-{uuid.uuid4().hex[:6].upper()}"
