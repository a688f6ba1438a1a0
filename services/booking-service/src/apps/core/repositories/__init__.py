# services/booking-service/src/apps/core/repositories/__init__.py
"""
Booking Service Storage
"""

from .base import AvailabilityRepository, BookingRepository, ListingRepository
from .memory import (
    InMemoryAvailabilityRepository,
    InMemoryBookingRepository,
    InMemoryListingRepository,
)

__all__ = [
    'ListingRepository',
    'BookingRepository',
    'AvailabilityRepository',
    'InMemoryListingRepository',
    'InMemoryBookingRepository',
    'InMemoryAvailabilityRepository',
]
