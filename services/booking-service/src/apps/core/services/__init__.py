# services/booking-service/src/apps/core/services/__init__.py
"""
Scheduling Engine
"""

from .exceptions import (
    SchedulingError,
    InvalidInterval,
    InvalidRange,
    Conflict,
    RangeConflict,
    InvalidTransition,
    NotFound,
    ConstraintViolation,
    RejectionReason,
)
from .intervals import TimeInterval
from .availability_index import AvailabilityIndex, supersede_periods
from .slot_generator import SlotGenerator
from .range_validator import RangeBookingValidator
from .pricing import PriceCalculator
from .recurrence import RecurrencePlanner
from .lifecycle import BookingLifecycle
from .scheduling_service import SchedulingService


def build_scheduling_service(**kwargs) -> SchedulingService:
    """SchedulingService wired to the database and the event publisher."""
    from apps.core.events import BookingNotifier
    from apps.core.repositories.django_orm import (
        DjangoAvailabilityRepository,
        DjangoBookingRepository,
        DjangoListingRepository,
    )

    kwargs.setdefault('notifier', BookingNotifier())
    return SchedulingService(
        listings=DjangoListingRepository(),
        bookings=DjangoBookingRepository(),
        periods=DjangoAvailabilityRepository(),
        **kwargs
    )


__all__ = [
    # Services
    'SchedulingService',
    'AvailabilityIndex',
    'SlotGenerator',
    'RangeBookingValidator',
    'PriceCalculator',
    'RecurrencePlanner',
    'BookingLifecycle',
    'TimeInterval',
    'supersede_periods',
    'build_scheduling_service',

    # Exceptions
    'SchedulingError',
    'InvalidInterval',
    'InvalidRange',
    'Conflict',
    'RangeConflict',
    'InvalidTransition',
    'NotFound',
    'ConstraintViolation',
    'RejectionReason',
]
