"""
Booking Service Models
"""

from .listing import Listing
from .availability import AvailabilityPeriod
from .booking import Booking

__all__ = [
    'Listing',
    'AvailabilityPeriod',
    'Booking',
]
