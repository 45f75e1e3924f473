"""
Manager App Views
API панели менеджера: корты, тарифы, ручные бронирования и оплаты
"""
import logging

from django.contrib.admin.views.decorators import staff_member_required
from django.db.models import Q
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from booking.decorators import api_view, json_body
from booking.forms import (
    BookingFilterForm,
    CourtForm,
    CourtStatusForm,
    CourtUpdateForm,
    PaymentUpdateForm,
    PricingRuleForm,
    PricingRuleUpdateForm,
    StatusUpdateForm,
    validated_data,
)
from booking.services import BookingService, CourtService, PricingService
from customers.models import Customer

logger = logging.getLogger(__name__)


# =============================================================================
# API ENDPOINTS FOR COURTS
# =============================================================================

@staff_member_required
@require_GET
@api_view
def api_courts_list(request):
    courts = CourtService.list_courts(request.GET.get('status'))
    return JsonResponse({
        'success': True,
        'count': len(courts),
        'courts': [court.as_dict() for court in courts],
    })


@staff_member_required
@require_POST
@api_view
def api_court_create(request):
    data = validated_data(CourtForm, json_body(request))
    court = CourtService.create_court(data)
    return JsonResponse({
        'success': True,
        'court': court.as_dict(),
        'message': 'Корт создан',
    }, status=201)


@staff_member_required
@require_POST
@api_view
def api_court_update(request, court_id):
    changes = validated_data(CourtUpdateForm, json_body(request), partial=True)
    court = CourtService.update_court(court_id, changes)
    return JsonResponse({'success': True, 'court': court.as_dict(), 'message': 'Корт обновлен'})


@staff_member_required
@require_POST
@api_view
def api_court_status(request, court_id):
    data = validated_data(CourtStatusForm, json_body(request))
    court = CourtService.set_status(court_id, data['status'])
    return JsonResponse({'success': True, 'court': court.as_dict()})


@staff_member_required
@require_POST
@api_view
def api_court_delete(request, court_id):
    court = CourtService.delete_court(court_id)
    return JsonResponse({'success': True, 'court': court, 'message': 'Корт удален'})


# =============================================================================
# API ENDPOINTS FOR PRICING RULES
# =============================================================================

@staff_member_required
@require_GET
@api_view
def api_pricing_list(request):
    rules = PricingService.list_rules()
    return JsonResponse({
        'success': True,
        'count': len(rules),
        'rules': [rule.as_dict() for rule in rules],
    })


@staff_member_required
@require_GET
@api_view
def api_pricing_detail(request, rule_id):
    rule = PricingService.get_rule(rule_id)
    return JsonResponse({'success': True, 'rule': rule.as_dict()})


@staff_member_required
@require_POST
@api_view
def api_pricing_create(request):
    payload = json_body(request)
    data = validated_data(PricingRuleForm, payload)
    rule = PricingService.create_rule(
        day_type=data['day_type'],
        time_slot=data['time_slot'],
        price_per_hour=data['price_per_hour'],
        is_active=data['is_active'] if 'is_active' in payload else True,
    )
    return JsonResponse({'success': True, 'rule': rule.as_dict(), 'message': 'Тариф создан'}, status=201)


@staff_member_required
@require_POST
@api_view
def api_pricing_update(request, rule_id):
    changes = validated_data(PricingRuleUpdateForm, json_body(request), partial=True)
    rule = PricingService.update_rule(rule_id, changes)
    return JsonResponse({'success': True, 'rule': rule.as_dict(), 'message': 'Тариф обновлен'})


@staff_member_required
@require_POST
@api_view
def api_pricing_delete(request, rule_id):
    rule = PricingService.delete_rule(rule_id)
    return JsonResponse({'success': True, 'rule': rule, 'message': 'Тариф удален'})


@staff_member_required
@require_POST
@api_view
def api_pricing_initialize(request):
    rules = PricingService.initialize_default_rules()
    return JsonResponse({
        'success': True,
        'rules': [rule.as_dict() for rule in rules],
        'message': 'Тарифы по умолчанию созданы',
    }, status=201)


# =============================================================================
# API ENDPOINTS FOR BOOKINGS
# =============================================================================

@staff_member_required
@require_GET
@api_view
def api_bookings_list(request):
    """API: Список бронирований с фильтрами и пагинацией"""
    filters = validated_data(BookingFilterForm, request.GET.dict())
    result = BookingService.list_bookings(filters)
    return JsonResponse({
        'success': True,
        'count': len(result['bookings']),
        'bookings': [booking.as_dict() for booking in result['bookings']],
        'pagination': result['pagination'],
    })


@staff_member_required
@require_GET
@api_view
def api_booking_detail(request, booking_id):
    booking = BookingService.get_booking(booking_id)
    history = [
        {
            'action': entry.action,
            'changes': entry.changes,
            'comment': entry.comment,
            'created_at': entry.created_at.isoformat(),
        }
        for entry in booking.history.all()
    ]
    return JsonResponse({'success': True, 'booking': booking.as_dict(), 'history': history})


@staff_member_required
@require_POST
@api_view
def api_booking_create(request):
    """
    API: Ручное бронирование или блокировка слота
    Body: {court_id, booking_date, start_time, end_time, is_blocked?,
           customer_phone?, customer_name?, customer_email?, payment_status?, notes?}
    """
    booking = BookingService.create_manual_booking(json_body(request))
    message = 'Слот заблокирован' if booking.customer is None else 'Бронирование создано'
    return JsonResponse({'success': True, 'booking': booking.as_dict(), 'message': message}, status=201)


@staff_member_required
@require_POST
@api_view
def api_booking_status(request, booking_id):
    data = validated_data(StatusUpdateForm, json_body(request))
    booking = BookingService.update_status(booking_id, data['status'], notes=data.get('notes'))
    return JsonResponse({'success': True, 'booking': booking.as_dict(), 'message': 'Статус обновлен'})


@staff_member_required
@require_POST
@api_view
def api_booking_payment(request, booking_id):
    changes = validated_data(PaymentUpdateForm, json_body(request), partial=True)
    booking = BookingService.update_payment(booking_id, changes)
    return JsonResponse({'success': True, 'booking': booking.as_dict(), 'message': 'Оплата обновлена'})


@staff_member_required
@require_POST
@api_view
def api_booking_update(request, booking_id):
    """API: Изменение заметок; время меняется только через отмену и новое бронирование"""
    data = json_body(request)
    booking = BookingService.update_notes(booking_id, data.get('notes', ''))
    return JsonResponse({'success': True, 'booking': booking.as_dict()})


@staff_member_required
@require_POST
@api_view
def api_booking_cancel(request, booking_id):
    data = json_body(request)
    booking = BookingService.cancel_booking(booking_id, reason=(data.get('reason') or '').strip())
    return JsonResponse({'success': True, 'booking': booking.as_dict(), 'message': 'Бронирование отменено'})


# =============================================================================
# API ENDPOINTS FOR CUSTOMERS
# =============================================================================

@staff_member_required
@require_GET
@api_view
def api_customers_list(request):
    """API: Клиенты, поиск ?q= по имени, телефону и email"""
    customers = Customer.objects.all()

    query = (request.GET.get('q') or '').strip()
    if query:
        customers = customers.filter(
            Q(name__icontains=query) | Q(phone__icontains=query) | Q(email__icontains=query)
        )

    customers = customers[:100]
    return JsonResponse({
        'success': True,
        'customers': [customer.as_dict() for customer in customers],
    })
