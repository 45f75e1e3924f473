"""Shared fixtures for booking tests."""

from decimal import Decimal

import pytest

from booking.constants import DAY, DEFAULT_PRICING_RULES, NIGHT, WEEKDAY, WEEKEND
from booking.pricing import RateTable
from tests.helpers import MONDAY


@pytest.fixture(autouse=True)
def disable_ratelimit(settings):
    settings.RATELIMIT_ENABLE = False


@pytest.fixture
def rates():
    return RateTable({
        (WEEKDAY, DAY): Decimal('90'),
        (WEEKDAY, NIGHT): Decimal('110'),
        (WEEKEND, DAY): Decimal('110'),
        (WEEKEND, NIGHT): Decimal('135'),
    })


@pytest.fixture
def pricing_rules(db):
    from booking.models import PricingRule

    return [
        PricingRule.objects.create(day_type=day_type, time_slot=time_slot, price_per_hour=price)
        for day_type, time_slot, price in DEFAULT_PRICING_RULES
    ]


@pytest.fixture
def court(db):
    from booking.models import Court

    return Court.objects.create(name='Net 1', description='Turf net with bowling machine')


@pytest.fixture
def other_court(db):
    from booking.models import Court

    return Court.objects.create(name='Net 2', description='Mat net')


@pytest.fixture
def booking_payload(court):
    def build(**overrides):
        payload = {
            'court_id': court.id,
            'booking_date': MONDAY.isoformat(),
            'start_time': '10:00',
            'end_time': '12:00',
            'customer_phone': '0501234567',
            'customer_name': 'Ahmed',
        }
        payload.update(overrides)
        return payload

    return build
