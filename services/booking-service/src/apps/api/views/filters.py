# services/booking-service/src/apps/api/views/filters.py
"""
API Filters

Django Filter classes for scheduling API.
"""

import django_filters

from apps.core.models import Booking


class BookingFilter(django_filters.FilterSet):
    """Filter for bookings."""

    listing = django_filters.UUIDFilter(field_name='listing_id')
    provider_id = django_filters.UUIDFilter()
    customer_id = django_filters.UUIDFilter()
    status = django_filters.MultipleChoiceFilter(choices=Booking.Status.choices)
    recurrence_group_id = django_filters.UUIDFilter()

    # Date range filters
    start_after = django_filters.IsoDateTimeFilter(field_name='start_time', lookup_expr='gte')
    start_before = django_filters.IsoDateTimeFilter(field_name='start_time', lookup_expr='lt')
    date = django_filters.DateFilter(method='filter_date')

    # Boolean filters
    is_guest = django_filters.BooleanFilter(field_name='customer_id', lookup_expr='isnull')
    is_late_cancellation = django_filters.BooleanFilter()

    class Meta:
        model = Booking
        fields = [
            'listing', 'provider_id', 'customer_id', 'status',
            'recurrence_group_id', 'is_late_cancellation',
        ]

    def filter_date(self, queryset, name, value):
        """Bookings starting on a specific UTC date."""
        return queryset.filter(start_time__date=value)
