# services/booking-service/src/apps/core/models/availability.py
"""
Availability Period Model

Provider declarations marking whole days of a listing available or blocked.
"""

import uuid

from django.db import models
from django.utils import timezone

from apps.core.services.records import AvailabilityType, Period


class AvailabilityPeriod(models.Model):
    """
    Inclusive [start_date, end_date] declaration over a listing.

    A new declaration replaces every stored period it intersects, so at
    most one period covers any given day.
    """

    class AvailabilityType(models.TextChoices):
        AVAILABLE = 'available', 'Available'
        BLOCKED = 'blocked', 'Blocked'

    # Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    listing = models.ForeignKey(
        'core.Listing',
        on_delete=models.CASCADE,
        related_name='availability_periods'
    )

    # Range
    start_date = models.DateField(db_index=True)
    end_date = models.DateField(db_index=True)
    availability_type = models.CharField(max_length=20, choices=AvailabilityType.choices)
    reason = models.CharField(max_length=255, blank=True, default='')

    # Audit
    declared_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'availability_periods'
        ordering = ['declared_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F('start_date')),
                name='valid_period_range'
            ),
        ]

    def __str__(self):
        return f"{self.listing_id}: {self.availability_type} {self.start_date}..{self.end_date}"

    def to_period(self) -> Period:
        return Period(
            listing_id=self.listing_id,
            start_date=self.start_date,
            end_date=self.end_date,
            availability_type=AvailabilityType(self.availability_type),
            reason=self.reason or '',
            id=self.id,
            declared_at=self.declared_at,
        )
