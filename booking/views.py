import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .decorators import api_data_ratelimit, api_view, api_write_ratelimit, json_body
from .exceptions import InvalidRequestError
from .forms import AvailabilityForm, PricePreviewForm, validated_data
from .services import BookingService, CourtService, PricingService
from .utils import parse_date

logger = logging.getLogger(__name__)


# =============================================================================
# COURTS
# =============================================================================

@require_GET
@api_view
def courts_list(request):
    """Список кортов (фильтр ?status=active|inactive|maintenance)"""
    courts = CourtService.list_courts(request.GET.get('status'))
    return JsonResponse({
        'success': True,
        'count': len(courts),
        'data': [court.as_dict() for court in courts],
    })


@require_GET
@api_view
def court_detail(request, court_id):
    court = CourtService.get_court(court_id)
    return JsonResponse({'success': True, 'data': court.as_dict()})


# =============================================================================
# PRICING
# =============================================================================

@csrf_exempt
@require_POST
@api_view
@api_data_ratelimit()
def calculate_price(request):
    """
    API: Предварительный расчет стоимости без сохранения
    POST /api/pricing/calculate/
    Body: {booking_date, start_time, end_time}
    """
    data = validated_data(PricePreviewForm, json_body(request))
    preview = PricingService.get_price_preview(data['booking_date'], data['start_time'], data['end_time'])
    return JsonResponse({'success': True, 'data': preview})


@require_GET
@api_view
def current_pricing(request):
    return JsonResponse({'success': True, 'data': PricingService.current_pricing()})


# =============================================================================
# BOOKINGS
# =============================================================================

@csrf_exempt
@require_POST
@api_view
@api_data_ratelimit()
def check_availability(request):
    """
    API: Проверка доступности слота
    POST /api/bookings/check-availability/
    Body: {court_id, booking_date, start_time, end_time}
    """
    data = validated_data(AvailabilityForm, json_body(request))
    result = BookingService.check_availability(
        data['court_id'], data['booking_date'], data['start_time'], data['end_time']
    )
    return JsonResponse({
        'success': True,
        'data': result.as_dict(),
        'message': 'Время свободно' if result.available else 'Время занято',
    })


@require_GET
@api_view
@api_data_ratelimit()
def available_slots(request):
    """API: Часовая сетка корта на день ?court=<id>&date=YYYY-MM-DD"""
    court_id = request.GET.get('court')
    date_str = request.GET.get('date')

    if not court_id or not date_str:
        raise InvalidRequestError('Необходимо указать корт и дату')

    try:
        court_id = int(court_id)
    except ValueError:
        raise InvalidRequestError('Некорректный идентификатор корта')

    slots = BookingService.available_slots(court_id, parse_date(date_str))
    return JsonResponse({'success': True, 'data': slots})


@csrf_exempt
@require_POST
@api_view
@api_write_ratelimit()
def create_booking(request):
    """
    API: Бронирование клиентом
    POST /api/bookings/
    Body: {court_id, booking_date, start_time, end_time,
           customer_phone, customer_name, customer_email?, notes?}
    """
    booking = BookingService.create_booking(json_body(request))
    return JsonResponse({
        'success': True,
        'data': booking.as_dict(),
        'message': 'Бронирование успешно создано',
    }, status=201)


@require_GET
@api_view
def booking_detail(request, booking_id):
    booking = BookingService.get_booking(booking_id)
    return JsonResponse({'success': True, 'data': booking.as_dict()})


@csrf_exempt
@require_http_methods(['POST', 'PATCH'])
@api_view
def cancel_booking(request, booking_id):
    """API: Отмена бронирования клиентом, Body: {reason?}"""
    data = json_body(request)
    booking = BookingService.cancel_booking(booking_id, reason=(data.get('reason') or '').strip())
    return JsonResponse({
        'success': True,
        'data': booking.as_dict(),
        'message': 'Бронирование отменено',
    })
