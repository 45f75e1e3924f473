from decimal import Decimal

import pytest
from django.core.cache import cache

from tests.helpers import MONDAY, SATURDAY

pytestmark = pytest.mark.django_db


def post_json(client, url, body):
    return client.post(url, body, content_type='application/json')


def test_health(client):
    response = client.get('/api/health/')

    assert response.status_code == 200
    assert response.json()['success'] is True


def test_courts_list_and_detail(client, court):
    listing = client.get('/api/courts/').json()

    assert listing['count'] == 1
    assert listing['data'][0]['name'] == 'Net 1'

    detail = client.get(f'/api/courts/{court.id}/')
    assert detail.json()['data']['id'] == court.id
    assert client.get('/api/courts/999/').status_code == 404


def test_price_preview(client, pricing_rules):
    response = post_json(client, '/api/pricing/calculate/', {
        'booking_date': SATURDAY.isoformat(),
        'start_time': '19:00',
        'end_time': '21:00',
    })

    data = response.json()['data']
    assert response.status_code == 200
    assert Decimal(data['final_price']) == Decimal('220')
    assert len(data['breakdown']) == 2


def test_price_preview_rejects_short_booking(client, pricing_rules):
    response = post_json(client, '/api/pricing/calculate/', {
        'booking_date': MONDAY.isoformat(),
        'start_time': '10:00',
        'end_time': '10:30',
    })

    assert response.status_code == 400
    assert response.json()['error'] == 'invalid_duration'


def test_price_preview_reports_missing_rate(client):
    response = post_json(client, '/api/pricing/calculate/', {
        'booking_date': MONDAY.isoformat(),
        'start_time': '10:00',
        'end_time': '12:00',
    })

    assert response.status_code == 500
    assert response.json()['error'] == 'missing_rate'


def test_bad_time_format_is_invalid_request(client, pricing_rules):
    response = post_json(client, '/api/pricing/calculate/', {
        'booking_date': MONDAY.isoformat(),
        'start_time': '10am',
        'end_time': '12:00',
    })

    assert response.status_code == 400
    assert response.json()['error'] == 'invalid_request'


def test_current_pricing(client, pricing_rules):
    data = client.get('/api/pricing/current/').json()['data']

    assert Decimal(data['weekday_day_rate']) == Decimal('90')
    assert Decimal(data['weekend_night_rate']) == Decimal('135')


def test_create_booking_then_conflict(client, pricing_rules, booking_payload):
    created = post_json(client, '/api/bookings/', booking_payload())

    assert created.status_code == 201
    booking = created.json()['data']
    assert booking['status'] == 'pending'
    assert Decimal(booking['final_price']) == Decimal('180')
    assert booking['customer']['phone'] == '+966501234567'

    availability = post_json(client, '/api/bookings/check-availability/', {
        'court_id': booking['court']['id'],
        'booking_date': MONDAY.isoformat(),
        'start_time': '11:00',
        'end_time': '13:00',
    }).json()['data']
    assert availability['available'] is False
    assert availability['conflicting_booking']['id'] == booking['id']

    conflict = post_json(client, '/api/bookings/', booking_payload(start_time='11:00', end_time='13:00'))
    assert conflict.status_code == 409
    assert conflict.json()['error'] == 'conflict'


def test_create_booking_requires_customer_fields(client, pricing_rules, booking_payload):
    payload = booking_payload()
    del payload['customer_name']

    response = post_json(client, '/api/bookings/', payload)

    assert response.status_code == 400
    assert response.json()['success'] is False


def test_booking_detail_and_cancel(client, pricing_rules, booking_payload):
    booking_id = post_json(client, '/api/bookings/', booking_payload()).json()['data']['id']

    assert client.get(f'/api/bookings/{booking_id}/').json()['data']['id'] == booking_id

    cancelled = post_json(client, f'/api/bookings/{booking_id}/cancel/', {'reason': 'Rain'})
    assert cancelled.json()['data']['status'] == 'cancelled'

    again = post_json(client, f'/api/bookings/{booking_id}/cancel/', {})
    assert again.status_code == 400
    assert again.json()['error'] == 'invalid_transition'


def test_available_slots(client, pricing_rules, court, booking_payload):
    post_json(client, '/api/bookings/', booking_payload())

    data = client.get('/api/bookings/slots/', {'court': court.id, 'date': MONDAY.isoformat()}).json()['data']

    assert data['total_slots'] == 24
    assert [slot['hour'] for slot in data['slots'] if not slot['is_available']] == [10, 11]


def test_available_slots_requires_court_and_date(client):
    response = client.get('/api/bookings/slots/')

    assert response.status_code == 400


def test_write_endpoint_is_rate_limited(client, settings, pricing_rules, booking_payload):
    settings.RATELIMIT_ENABLE = True
    cache.clear()

    statuses = [
        post_json(client, '/api/bookings/', booking_payload(start_time=f'{hour:02d}:00', end_time=f'{hour + 1:02d}:00')).status_code
        for hour in range(9, 21)
    ]

    assert statuses.count(201) == 10
    assert statuses[-1] == 429
