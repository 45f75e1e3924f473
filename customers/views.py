from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from booking.decorators import api_data_ratelimit, api_view, json_body
from booking.exceptions import InvalidRequestError, NotFoundError
from .models import Customer
from .services import CustomerService


@require_GET
@api_view
@api_data_ratelimit()
def customer_by_phone(request, phone):
    """API: Найти клиента по номеру телефона"""
    customer = Customer.objects.get_by_phone(phone)
    if customer is None:
        raise NotFoundError('Клиент')
    return JsonResponse({'success': True, 'data': customer.as_dict()})


@csrf_exempt
@require_POST
@api_view
@api_data_ratelimit()
def find_or_create(request):
    """API: Найти или создать клиента, Body: {phone, name, email?}"""
    data = json_body(request)
    if not data.get('phone') or not data.get('name'):
        raise InvalidRequestError('Необходимо указать имя и телефон')

    customer, created = CustomerService.find_or_create(
        phone=data['phone'],
        name=data['name'],
        email=data.get('email'),
    )
    return JsonResponse({
        'success': True,
        'data': customer.as_dict(),
        'created': created,
    }, status=201 if created else 200)
