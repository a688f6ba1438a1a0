# services/booking-service/src/apps/api/serializers/__init__.py
"""
Scheduling API Serializers
"""

from .booking_serializers import (
    BookingSerializer,
    BookingListSerializer,
    BookingCreateSerializer,
    RecurringBookingCreateSerializer,
    BookingTransitionSerializer,
    QuoteQuerySerializer,
)

from .availability_serializers import (
    PeriodSerializer,
    AvailabilityDeclareSerializer,
    SlotQuerySerializer,
    CalendarQuerySerializer,
    TimeSlotSerializer,
)


__all__ = [
    # Booking
    'BookingSerializer',
    'BookingListSerializer',
    'BookingCreateSerializer',
    'RecurringBookingCreateSerializer',
    'BookingTransitionSerializer',
    'QuoteQuerySerializer',

    # Availability
    'PeriodSerializer',
    'AvailabilityDeclareSerializer',
    'SlotQuerySerializer',
    'CalendarQuerySerializer',
    'TimeSlotSerializer',
]
