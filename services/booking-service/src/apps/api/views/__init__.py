# services/booking-service/src/apps/api/views/__init__.py
"""
Scheduling API Views
"""

from .booking_views import BookingViewSet

from .availability_views import (
    AvailableSlotsView,
    AvailabilityCalendarView,
    QuoteView,
    ListingAvailabilityView,
)


__all__ = [
    # Booking
    'BookingViewSet',

    # Availability
    'AvailableSlotsView',
    'AvailabilityCalendarView',
    'QuoteView',
    'ListingAvailabilityView',
]
