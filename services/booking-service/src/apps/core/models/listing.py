# services/booking-service/src/apps/core/models/listing.py
"""
Listing Model

Bookable offerings and their scheduling settings.
"""

import uuid
from datetime import time
from decimal import Decimal

from django.db import models

from apps.core.services.records import (
    BillingCycle,
    BookingPolicy,
    BreakTime,
    ListingKind,
    LISTING_VARIANTS,
    OperatingWindow,
    RateUnit,
    ServiceOption,
    WEEKDAYS,
)


def default_working_hours() -> dict:
    """Monday to Friday 09:00-17:00, weekends closed."""
    return {
        day: {'enabled': day not in ('saturday', 'sunday'), 'start': '09:00', 'end': '17:00'}
        for day in WEEKDAYS
    }


class Listing(models.Model):
    """
    A provider's bookable offering.

    Stored flat; `to_variant()` returns the engine's typed listing with only
    the fields relevant to its kind.
    """

    class Kind(models.TextChoices):
        SERVICE = 'service', 'Service'
        EXPERIENCE = 'experience', 'Experience'
        RENTAL = 'rental', 'Rental'
        SUBSCRIPTION = 'subscription', 'Subscription'
        PROJECT = 'project', 'Project'

    class RateUnit(models.TextChoices):
        HOURLY = 'hourly', 'Per Hour'
        DAILY = 'daily', 'Per Day'
        WEEKLY = 'weekly', 'Per Week'
        MONTHLY = 'monthly', 'Per Month'

    class BillingCycle(models.TextChoices):
        WEEKLY = 'weekly', 'Weekly'
        MONTHLY = 'monthly', 'Monthly'
        QUARTERLY = 'quarterly', 'Quarterly'
        YEARLY = 'yearly', 'Yearly'

    # Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    provider_id = models.UUIDField(db_index=True)

    # Description
    kind = models.CharField(max_length=20, choices=Kind.choices, default=Kind.SERVICE)
    title = models.CharField(max_length=255)
    currency = models.CharField(max_length=3, default='GBP')
    timezone = models.CharField(max_length=64, default='Europe/London')

    # Booking Policy
    booking_enabled = models.BooleanField(default=True)
    auto_confirm = models.BooleanField(default=False)
    advance_booking_days = models.PositiveIntegerField(default=30)
    same_day_booking = models.BooleanField(default=True)
    cancellation_hours = models.PositiveIntegerField(default=24)

    # Slot-based Settings
    working_hours = models.JSONField(default=default_working_hours, blank=True)
    slot_minutes = models.PositiveIntegerField(default=60)
    buffer_minutes = models.PositiveIntegerField(default=0)
    base_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    service_options = models.JSONField(
        default=list,
        blank=True,
        help_text="[{name, duration_minutes, price}]"
    )
    break_times = models.JSONField(
        default=list,
        blank=True,
        help_text="[{start, end, title}]"
    )

    # Rental Settings
    rate_unit = models.CharField(max_length=10, choices=RateUnit.choices, default=RateUnit.DAILY)
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    daily_rate = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    weekly_rate = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    monthly_rate = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    min_days = models.PositiveIntegerField(default=1)
    max_days = models.PositiveIntegerField(blank=True, null=True)

    # Subscription / Project Settings
    billing_cycle = models.CharField(
        max_length=10,
        choices=BillingCycle.choices,
        default=BillingCycle.MONTHLY
    )
    fixed_price = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)

    # Audit
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'listings'
        ordering = ['title']
        indexes = [
            models.Index(fields=['provider_id', 'kind'], name='listings_provide_2f1c7a_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.kind})"

    # ==========================================================================
    # Engine Conversion
    # ==========================================================================

    @property
    def rates(self) -> dict:
        rates = {
            RateUnit.HOURLY: self.hourly_rate,
            RateUnit.DAILY: self.daily_rate,
            RateUnit.WEEKLY: self.weekly_rate,
            RateUnit.MONTHLY: self.monthly_rate,
        }
        return {unit: Decimal(rate) for unit, rate in rates.items() if rate is not None}

    def get_working_hours(self) -> dict:
        windows = {}
        for day, hours in (self.working_hours or {}).items():
            if hours and hours.get('enabled'):
                windows[day.lower()] = OperatingWindow.parse(hours['start'], hours['end'])
        return windows

    def get_service_options(self) -> list:
        return [
            ServiceOption(
                name=option['name'],
                duration_minutes=int(option.get('duration_minutes') or option.get('duration') or self.slot_minutes),
                price=Decimal(str(option.get('price', 0))),
            )
            for option in self.service_options or []
        ]

    def get_break_times(self) -> list:
        return [
            BreakTime(
                start=time.fromisoformat(item['start']),
                end=time.fromisoformat(item['end']),
                title=item.get('title', ''),
            )
            for item in self.break_times or []
        ]

    def to_variant(self):
        """Engine listing for this row's kind."""
        kind = ListingKind(self.kind)
        common = dict(
            id=self.id,
            provider_id=self.provider_id,
            title=self.title,
            currency=self.currency,
            timezone=self.timezone,
            booking_enabled=self.booking_enabled,
            policy=BookingPolicy(
                auto_confirm=self.auto_confirm,
                advance_booking_days=self.advance_booking_days,
                same_day_booking=self.same_day_booking,
                cancellation_hours=self.cancellation_hours,
            ),
        )

        if kind in (ListingKind.SERVICE, ListingKind.EXPERIENCE):
            return LISTING_VARIANTS[kind](
                working_hours=self.get_working_hours(),
                slot_minutes=self.slot_minutes,
                buffer_minutes=self.buffer_minutes,
                base_price=Decimal(self.base_price),
                service_options=self.get_service_options(),
                break_times=self.get_break_times(),
                **common
            )

        if kind == ListingKind.RENTAL:
            return LISTING_VARIANTS[kind](
                rate_unit=RateUnit(self.rate_unit),
                rates=self.rates,
                min_days=self.min_days,
                max_days=self.max_days,
                **common
            )

        if kind == ListingKind.SUBSCRIPTION:
            return LISTING_VARIANTS[kind](
                billing_cycle=BillingCycle(self.billing_cycle),
                price=Decimal(self.fixed_price or 0),
                **common
            )

        return LISTING_VARIANTS[kind](price=Decimal(self.fixed_price or 0), **common)
