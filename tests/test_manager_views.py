from decimal import Decimal

import pytest
from django.test import Client

from booking.models import Booking, Court, PricingRule
from tests.helpers import MONDAY

pytestmark = pytest.mark.django_db

BASE = '/api/manager'


def post_json(client, url, body):
    return client.post(url, body, content_type='application/json')


def test_anonymous_user_is_redirected_to_login(client):
    response = client.get(f'{BASE}/bookings/')

    assert response.status_code == 302
    assert '/admin/login/' in response['Location']


def test_court_lifecycle(admin_client):
    created = post_json(admin_client, f'{BASE}/courts/create/', {
        'name': 'Net 5',
        'description': 'Indoor net',
        'features': ['indoor', 'bowling_machine'],
    })
    assert created.status_code == 201
    court_id = created.json()['court']['id']

    updated = post_json(admin_client, f'{BASE}/courts/{court_id}/update/', {'description': 'Indoor turf net'})
    assert updated.json()['court']['description'] == 'Indoor turf net'
    assert updated.json()['court']['name'] == 'Net 5'

    status = post_json(admin_client, f'{BASE}/courts/{court_id}/status/', {'status': 'maintenance'})
    assert status.json()['court']['status'] == 'maintenance'

    listing = admin_client.get(f'{BASE}/courts/', {'status': 'maintenance'}).json()
    assert [court['id'] for court in listing['courts']] == [court_id]

    deleted = post_json(admin_client, f'{BASE}/courts/{court_id}/delete/', {})
    assert deleted.status_code == 200
    assert not Court.objects.filter(pk=court_id).exists()


def test_duplicate_court_name_is_conflict(admin_client, court):
    response = post_json(admin_client, f'{BASE}/courts/create/', {'name': court.name, 'description': 'Copy'})

    assert response.status_code == 409


def test_court_features_must_be_a_list(admin_client):
    response = post_json(admin_client, f'{BASE}/courts/create/', {
        'name': 'Net 6',
        'description': 'Mat',
        'features': {'turf': True},
    })

    assert response.status_code == 400


def test_pricing_initialize_and_edit(admin_client):
    initialized = post_json(admin_client, f'{BASE}/pricing/initialize/', {})
    assert initialized.status_code == 201
    assert len(initialized.json()['rules']) == 4

    again = post_json(admin_client, f'{BASE}/pricing/initialize/', {})
    assert again.status_code == 400

    rule = PricingRule.objects.get(day_type='weekday', time_slot='day')
    updated = post_json(admin_client, f'{BASE}/pricing/{rule.id}/update/', {'price_per_hour': '95'})
    assert Decimal(updated.json()['rule']['price_per_hour']) == Decimal('95')
    assert updated.json()['rule']['is_active'] is True

    rule.refresh_from_db()
    assert rule.price_per_hour == Decimal('95')


def test_pricing_create_defaults_to_active(admin_client):
    response = post_json(admin_client, f'{BASE}/pricing/create/', {
        'day_type': 'weekend',
        'time_slot': 'night',
        'price_per_hour': '140',
    })

    assert response.status_code == 201
    assert response.json()['rule']['is_active'] is True


def test_pricing_rejects_non_positive_price(admin_client):
    response = post_json(admin_client, f'{BASE}/pricing/create/', {
        'day_type': 'weekday',
        'time_slot': 'day',
        'price_per_hour': '0',
    })

    assert response.status_code == 400


def test_pricing_duplicate_is_conflict(admin_client, pricing_rules):
    response = post_json(admin_client, f'{BASE}/pricing/create/', {
        'day_type': 'weekday',
        'time_slot': 'day',
        'price_per_hour': '100',
    })

    assert response.status_code == 409


def test_pricing_delete(admin_client, pricing_rules):
    rule = pricing_rules[0]

    response = post_json(admin_client, f'{BASE}/pricing/{rule.id}/delete/', {})

    assert response.status_code == 200
    assert admin_client.get(f'{BASE}/pricing/{rule.id}/').status_code == 404
    assert admin_client.get(f'{BASE}/pricing/').json()['count'] == 3


def test_manual_block_and_booking_flow(admin_client, court, pricing_rules):
    blocked = post_json(admin_client, f'{BASE}/bookings/create/', {
        'court_id': court.id,
        'booking_date': MONDAY.isoformat(),
        'start_time': '08:00',
        'end_time': '10:00',
        'is_blocked': True,
    })
    assert blocked.status_code == 201
    assert blocked.json()['booking']['status'] == 'blocked'
    assert blocked.json()['booking']['customer'] is None

    conflict = post_json(admin_client, f'{BASE}/bookings/create/', {
        'court_id': court.id,
        'booking_date': MONDAY.isoformat(),
        'start_time': '09:00',
        'end_time': '11:00',
        'customer_phone': '0501234567',
        'customer_name': 'Ahmed',
    })
    assert conflict.status_code == 409

    booked = post_json(admin_client, f'{BASE}/bookings/create/', {
        'court_id': court.id,
        'booking_date': MONDAY.isoformat(),
        'start_time': '10:00',
        'end_time': '12:00',
        'customer_phone': '0501234567',
        'customer_name': 'Ahmed',
        'payment_status': 'partial',
    })
    assert booked.status_code == 201
    assert booked.json()['booking']['status'] == 'confirmed'


def test_booking_status_payment_and_notes(admin_client, court, pricing_rules, booking_payload):
    from booking.services import BookingService

    booking = BookingService.create_booking(booking_payload())

    paid = post_json(admin_client, f'{BASE}/bookings/{booking.id}/payment/', {
        'payment_status': 'paid',
        'amount_paid': '180',
        'payment_method': 'card',
    })
    assert paid.json()['booking']['status'] == 'confirmed'
    assert paid.json()['booking']['payment_method'] == 'card'

    notes = post_json(admin_client, f'{BASE}/bookings/{booking.id}/update/', {'notes': 'Bring own balls'})
    assert notes.json()['booking']['notes'] == 'Bring own balls'

    completed = post_json(admin_client, f'{BASE}/bookings/{booking.id}/status/', {'status': 'completed'})
    assert completed.json()['booking']['status'] == 'completed'

    rejected = post_json(admin_client, f'{BASE}/bookings/{booking.id}/status/', {'status': 'pending'})
    assert rejected.status_code == 400
    assert rejected.json()['error'] == 'invalid_transition'

    detail = admin_client.get(f'{BASE}/bookings/{booking.id}/').json()
    assert [entry['action'] for entry in detail['history']] == [
        'created', 'payment_updated', 'notes_updated', 'status_changed',
    ]


def test_bookings_list_filters(admin_client, court, other_court, pricing_rules, booking_payload):
    from booking.services import BookingService

    BookingService.create_booking(booking_payload())
    BookingService.create_booking(booking_payload(court_id=other_court.id))

    response = admin_client.get(f'{BASE}/bookings/', {'court_id': other_court.id, 'limit': 5})

    data = response.json()
    assert data['count'] == 1
    assert data['bookings'][0]['court']['id'] == other_court.id
    assert data['pagination']['total'] == 1
    assert data['pagination']['limit'] == 5


def test_bookings_list_rejects_bad_filters(admin_client):
    response = admin_client.get(f'{BASE}/bookings/', {'limit': 500})

    assert response.status_code == 400


def test_manager_cancel_releases_slot(admin_client, court, pricing_rules, booking_payload):
    from booking.services import BookingService

    booking = BookingService.create_booking(booking_payload())

    response = post_json(admin_client, f'{BASE}/bookings/{booking.id}/cancel/', {'reason': 'Court repair'})

    assert response.json()['booking']['status'] == 'cancelled'
    assert Booking.objects.get(pk=booking.id).slots.count() == 0


def test_customers_search(admin_client, pricing_rules, booking_payload):
    from booking.services import BookingService

    BookingService.create_booking(booking_payload())
    BookingService.create_booking(booking_payload(
        start_time='14:00', end_time='15:00', customer_phone='0559876543', customer_name='Omar',
    ))

    data = admin_client.get(f'{BASE}/customers/', {'q': 'Omar'}).json()

    assert [customer['name'] for customer in data['customers']] == ['Omar']


def test_manager_write_requires_csrf_token(admin_user, pricing_rules):
    csrf_client = Client(enforce_csrf_checks=True)
    csrf_client.force_login(admin_user)
    rule = pricing_rules[0]

    response = post_json(csrf_client, f'{BASE}/pricing/{rule.id}/delete/', {})

    assert response.status_code == 403
    assert PricingRule.objects.filter(pk=rule.id).exists()


def test_manager_write_accepts_csrf_token(admin_user, pricing_rules):
    csrf_client = Client(enforce_csrf_checks=True)
    csrf_client.force_login(admin_user)
    csrf_client.get('/admin/')
    rule = pricing_rules[0]

    response = csrf_client.post(
        f'{BASE}/pricing/{rule.id}/delete/', {}, content_type='application/json',
        HTTP_X_CSRFTOKEN=csrf_client.cookies['csrftoken'].value,
    )

    assert response.status_code == 200
    assert not PricingRule.objects.filter(pk=rule.id).exists()


def test_public_booking_api_needs_no_csrf_token(pricing_rules, booking_payload):
    csrf_client = Client(enforce_csrf_checks=True)

    response = post_json(csrf_client, '/api/bookings/', booking_payload())

    assert response.status_code == 201


def test_court_image_url_without_scheme_gets_https(admin_client):
    response = post_json(admin_client, f'{BASE}/courts/create/', {
        'name': 'Net 7',
        'description': 'Outdoor net',
        'image_url': 'example.com/net.png',
    })

    assert response.status_code == 201
    assert response.json()['court']['image_url'] == 'https://example.com/net.png'
