import pytest

from booking.exceptions import InvalidRequestError
from customers.models import Customer
from customers.services import CustomerService


@pytest.mark.parametrize('raw', [
    '0501234567',
    '501234567',
    '966501234567',
    '00966501234567',
    '+966 50 123 4567',
    '+966-50-123-4567',
])
def test_saudi_mobile_formats_normalize(raw):
    assert Customer.objects.normalize_phone(raw) == '+966501234567'


@pytest.mark.parametrize('raw', ['', None, '12345', '0401234567', '+971501234567', '05012345678'])
def test_invalid_numbers_normalize_to_none(raw):
    assert Customer.objects.normalize_phone(raw) is None


@pytest.mark.django_db
def test_find_or_create_creates_then_finds():
    customer, created = CustomerService.find_or_create('0501234567', ' Ahmed ', 'Ahmed@Example.com')

    assert created is True
    assert customer.phone == '+966501234567'
    assert customer.name == 'Ahmed'
    assert customer.email == 'ahmed@example.com'

    same, created = CustomerService.find_or_create('+966501234567', 'Someone else')

    assert created is False
    assert same.pk == customer.pk
    assert same.name == 'Ahmed'


@pytest.mark.django_db
def test_find_or_create_rejects_bad_phone():
    with pytest.raises(InvalidRequestError):
        CustomerService.find_or_create('12345', 'Ahmed')

    assert Customer.objects.count() == 0


@pytest.mark.django_db
def test_find_or_create_requires_name():
    with pytest.raises(InvalidRequestError):
        CustomerService.find_or_create('0501234567', '   ')


@pytest.mark.django_db
def test_increment_bookings_is_atomic_update():
    customer, _ = CustomerService.find_or_create('0501234567', 'Ahmed')

    CustomerService.increment_bookings(customer)
    CustomerService.increment_bookings(customer)

    assert customer.total_bookings == 2
    assert Customer.objects.get(pk=customer.pk).total_bookings == 2


@pytest.mark.django_db
def test_customer_lookup_endpoint(client):
    CustomerService.find_or_create('0501234567', 'Ahmed')

    response = client.get('/api/customers/phone/0501234567/')

    assert response.status_code == 200
    assert response.json()['data']['phone'] == '+966501234567'
    assert client.get('/api/customers/phone/0559999999/').status_code == 404


@pytest.mark.django_db
def test_find_or_create_endpoint_reports_creation(client):
    body = {'phone': '0501234567', 'name': 'Ahmed'}

    first = client.post('/api/customers/find-or-create/', body, content_type='application/json')
    second = client.post('/api/customers/find-or-create/', body, content_type='application/json')

    assert first.status_code == 201
    assert first.json()['created'] is True
    assert second.status_code == 200
    assert second.json()['created'] is False
