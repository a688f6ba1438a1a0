# services/booking-service/src/apps/core/models/booking.py
"""
Booking Model

Reservations of a listing for a half-open [start_time, end_time) interval.
"""

import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone

from apps.core.services.intervals import TimeInterval
from apps.core.services.records import (
    Actor,
    BookingStatus,
    CustomerRef,
    Frequency,
    Money,
    Reservation,
    generate_booking_number,
)


class Booking(models.Model):
    """
    Booking of a listing by a registered customer or a guest.

    The interval never changes after creation; rescheduling is a cancel
    followed by a new booking. Rows are never deleted.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        CONFIRMED = 'confirmed', 'Confirmed'
        CANCELLED = 'cancelled', 'Cancelled'
        COMPLETED = 'completed', 'Completed'
        NO_SHOW = 'no_show', 'No Show'

    class Actor(models.TextChoices):
        CUSTOMER = 'customer', 'Customer'
        PROVIDER = 'provider', 'Provider'
        SYSTEM = 'system', 'System'

    class RecurrencePattern(models.TextChoices):
        DAILY = 'daily', 'Daily'
        WEEKLY = 'weekly', 'Weekly'
        MONTHLY = 'monthly', 'Monthly'

    # Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Booking Number
    booking_number = models.CharField(max_length=20, unique=True, db_index=True)

    # Parties
    listing = models.ForeignKey('core.Listing', on_delete=models.PROTECT, related_name='bookings')
    provider_id = models.UUIDField(db_index=True)
    customer_id = models.UUIDField(blank=True, null=True, db_index=True)
    guest_name = models.CharField(max_length=255, blank=True, default='')
    guest_email = models.EmailField(blank=True, default='')
    guest_phone = models.CharField(max_length=50, blank=True, default='')

    # Schedule
    service_name = models.CharField(max_length=255, blank=True, default='')
    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField(db_index=True)
    start_date = models.DateField(blank=True, null=True)
    end_date = models.DateField(blank=True, null=True)
    duration_minutes = models.PositiveIntegerField()

    # Status
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )

    # Pricing
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='GBP')

    # Recurrence
    recurrence_group_id = models.UUIDField(blank=True, null=True, db_index=True)
    recurrence_sequence = models.PositiveIntegerField(blank=True, null=True)
    recurrence_pattern = models.CharField(
        max_length=10,
        choices=RecurrencePattern.choices,
        blank=True,
        null=True
    )

    # Cancellation
    cancelled_by = models.CharField(max_length=10, choices=Actor.choices, blank=True, null=True)
    cancellation_reason = models.TextField(blank=True, default='')
    is_late_cancellation = models.BooleanField(default=False)

    # Lifecycle Timestamps
    confirmed_at = models.DateTimeField(blank=True, null=True)
    cancelled_at = models.DateTimeField(blank=True, null=True)
    completed_at = models.DateTimeField(blank=True, null=True)

    # Audit
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bookings'
        ordering = ['start_time']
        indexes = [
            models.Index(fields=['listing', 'start_time', 'end_time'], name='bookings_listing_8e2d41_idx'),
            models.Index(fields=['status', 'end_time'], name='bookings_status_5b7c90_idx'),
            models.Index(fields=['customer_id', 'start_time'], name='bookings_custome_a41f3e_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F('start_time')),
                name='valid_booking_times'
            ),
        ]

    def __str__(self):
        return f"{self.booking_number}: {self.start_time.strftime('%Y-%m-%d %H:%M')}"

    def save(self, *args, **kwargs):
        if not self.booking_number:
            self.booking_number = generate_booking_number(self.created_at or timezone.now())

        if self.start_time and self.end_time and not self.duration_minutes:
            delta = self.end_time - self.start_time
            self.duration_minutes = int(delta.total_seconds() / 60)

        super().save(*args, **kwargs)

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_guest(self) -> bool:
        return self.customer_id is None

    @property
    def customer_display(self) -> str:
        return self.guest_name if self.is_guest else str(self.customer_id)

    # ==========================================================================
    # Engine Conversion
    # ==========================================================================

    def to_reservation(self) -> Reservation:
        return Reservation(
            id=self.id,
            booking_number=self.booking_number,
            listing_id=self.listing_id,
            provider_id=self.provider_id,
            customer=CustomerRef(
                user_id=self.customer_id,
                guest_name=self.guest_name,
                guest_email=self.guest_email,
                guest_phone=self.guest_phone,
            ),
            interval=TimeInterval(self.start_time, self.end_time),
            status=BookingStatus(self.status),
            price=Money(self.price, self.currency),
            service_name=self.service_name,
            start_date=self.start_date,
            end_date=self.end_date,
            recurrence_group_id=self.recurrence_group_id,
            recurrence_sequence=self.recurrence_sequence,
            recurrence_pattern=Frequency(self.recurrence_pattern) if self.recurrence_pattern else None,
            is_late_cancellation=self.is_late_cancellation,
            cancellation_reason=self.cancellation_reason,
            cancelled_by=Actor(self.cancelled_by) if self.cancelled_by else None,
            created_at=self.created_at,
            confirmed_at=self.confirmed_at,
            cancelled_at=self.cancelled_at,
            completed_at=self.completed_at,
        )

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> 'Booking':
        """Unsaved row for a new reservation."""
        customer = reservation.customer
        return cls(
            id=reservation.id or uuid.uuid4(),
            booking_number=reservation.booking_number or '',
            listing_id=reservation.listing_id,
            provider_id=reservation.provider_id,
            customer_id=customer.user_id,
            guest_name=customer.guest_name,
            guest_email=customer.guest_email,
            guest_phone=customer.guest_phone,
            service_name=reservation.service_name,
            start_time=reservation.interval.start,
            end_time=reservation.interval.end,
            start_date=reservation.start_date,
            end_date=reservation.end_date,
            duration_minutes=reservation.duration_minutes,
            status=reservation.status.value,
            price=reservation.price.amount,
            currency=reservation.price.currency,
            recurrence_group_id=reservation.recurrence_group_id,
            recurrence_sequence=reservation.recurrence_sequence,
            recurrence_pattern=reservation.recurrence_pattern.value if reservation.recurrence_pattern else None,
            confirmed_at=reservation.confirmed_at,
            created_at=reservation.created_at or timezone.now(),
        )
