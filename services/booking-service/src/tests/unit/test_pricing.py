# services/booking-service/src/tests/unit/test_pricing.py
"""
Unit Tests for Price Calculation
"""

import uuid
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import pytest

from apps.core.services import InvalidInterval, PriceCalculator
from apps.core.services.records import (
    Money,
    ProjectListing,
    RateUnit,
    ServiceOption,
    SubscriptionListing,
)


@pytest.fixture
def calculator():
    return PriceCalculator()


class TestRentalPricing:

    def test_daily_rate(self, calculator, rental_listing):
        """Three days at 50 per day."""
        assert calculator.price(rental_listing, 3) == Money(Decimal('150'), 'GBP')

    def test_weekly_rate_rounds_up(self, calculator, rental_listing):
        """Ten days at 300 per week is charged as two weeks."""
        listing = replace(rental_listing, rate_unit=RateUnit.WEEKLY)
        assert calculator.price(listing, 10) == Money(Decimal('600'), 'GBP')

    def test_hourly_rate(self, calculator, rental_listing):
        listing = replace(rental_listing, rate_unit=RateUnit.HOURLY, rates={RateUnit.HOURLY: Decimal('5')})
        assert calculator.price(listing, 2) == Money(Decimal('240'), 'GBP')

    def test_monthly_rate(self, calculator, rental_listing):
        listing = replace(rental_listing, rate_unit=RateUnit.MONTHLY, rates={RateUnit.MONTHLY: Decimal('900')})
        assert calculator.price(listing, 31) == Money(Decimal('1800'), 'GBP')

    def test_timedelta_counts_whole_days(self, calculator, rental_listing):
        assert calculator.price(rental_listing, timedelta(days=2)) == Money(Decimal('100'), 'GBP')

    def test_missing_rate(self, calculator, rental_listing):
        listing = replace(rental_listing, rate_unit=RateUnit.MONTHLY)
        with pytest.raises(InvalidInterval):
            calculator.price(listing, 3)

    def test_zero_days(self, calculator, rental_listing):
        with pytest.raises(InvalidInterval):
            calculator.price(rental_listing, 0)

    @pytest.mark.parametrize('unit', list(RateUnit))
    def test_price_never_decreases_with_duration(self, calculator, rental_listing, unit):
        listing = replace(rental_listing, rate_unit=unit, rates={unit: Decimal('10')})

        prices = [calculator.price(listing, days).amount for days in range(1, 70)]

        assert prices == sorted(prices)


class TestTimedPricing:

    def test_base_price_per_slot(self, calculator, service_listing):
        assert calculator.price(service_listing, timedelta(minutes=30)) == Money(Decimal('20.00'), 'GBP')

    def test_partial_slot_rounds_up(self, calculator, service_listing):
        assert calculator.price(service_listing, 45) == Money(Decimal('40.00'), 'GBP')

    def test_service_option_is_fixed_price(self, calculator, service_listing):
        option = ServiceOption('Trim', 15, Decimal('12.50'))
        assert calculator.price(service_listing, option) == Money(Decimal('12.50'), 'GBP')

    def test_zero_slot_length(self, calculator, service_listing):
        listing = replace(service_listing, slot_minutes=0)
        with pytest.raises(InvalidInterval):
            calculator.price(listing, 30)


class TestFixedPricing:

    def test_subscription_and_project(self, calculator):
        subscription = SubscriptionListing(id=uuid.uuid4(), provider_id=uuid.uuid4(), price=Decimal('29.99'))
        project = ProjectListing(id=uuid.uuid4(), provider_id=uuid.uuid4(), price=Decimal('1500'), currency='EUR')

        assert calculator.price(subscription, timedelta(days=30)) == Money(Decimal('29.99'), 'GBP')
        assert calculator.price(project, timedelta(days=3)) == Money(Decimal('1500'), 'EUR')
