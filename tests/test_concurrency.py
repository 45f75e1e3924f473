import threading

import pytest
from django.db import connection

from booking.constants import DEFAULT_PRICING_RULES
from booking.exceptions import ConflictError
from booking.models import Booking, BookingSlot, Court, PricingRule
from booking.services import BookingService
from customers.models import Customer
from tests.helpers import MONDAY

pytestmark = pytest.mark.django_db(transaction=True)


def book_concurrently(payloads):
    """Запускает create_booking в отдельных потоках одновременно"""
    barrier = threading.Barrier(len(payloads))
    created, errors = [], []

    def worker(payload):
        try:
            barrier.wait()
            created.append(BookingService.create_booking(payload))
        except Exception as exc:
            errors.append(exc)
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(payload,)) for payload in payloads]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    return created, errors


@pytest.fixture
def race_court():
    for day_type, time_slot, price in DEFAULT_PRICING_RULES:
        PricingRule.objects.create(day_type=day_type, time_slot=time_slot, price_per_hour=price)
    return Court.objects.create(name='Net 1', description='Turf net')


def payload(court, start_time, end_time, phone):
    return {
        'court_id': court.id,
        'booking_date': MONDAY.isoformat(),
        'start_time': start_time,
        'end_time': end_time,
        'customer_phone': phone,
        'customer_name': 'Ahmed',
    }


def test_two_threads_overlapping_booking_only_one_wins(race_court):
    created, errors = book_concurrently([
        payload(race_court, '10:00', '12:00', '0501234567'),
        payload(race_court, '11:15', '12:45', '0559876543'),
    ])

    assert len(created) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], ConflictError)
    assert list(Booking.objects.values_list('id', flat=True)) == [created[0].id]
    assert BookingSlot.objects.count() == created[0].slots.count()
    assert Customer.objects.count() == 1


def test_two_threads_adjacent_off_grid_bookings_both_succeed(race_court):
    created, errors = book_concurrently([
        payload(race_court, '10:15', '11:15', '0501234567'),
        payload(race_court, '11:15', '12:15', '0559876543'),
    ])

    assert errors == []
    assert len(created) == 2
    assert BookingSlot.objects.count() == 120
