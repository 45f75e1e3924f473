"""
Сервисы для работы с бронированиями, тарифами, кортами и историей
"""
import logging
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from customers.services import CustomerService
from .availability import check_availability, requested_interval
from .constants import (
    COURT_ACTIVE,
    COURT_STATUS_CHOICES,
    DEFAULT_PRICING_RULES,
    MAX_COURTS,
    PAYMENT_PAID,
    PAYMENT_PARTIAL,
    PAYMENT_PENDING,
    STATUS_BLOCKED,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
)
from .exceptions import (
    ConflictError,
    InvalidRequestError,
    InvalidTransitionError,
    NotFoundError,
)
from .forms import BookingRequestForm, ManualBookingForm, validated_data
from .models import Booking, BookingHistory, BookingSlot, Court, PricingRule
from .pricing import PricingRuleRateTable, calculate_price
from .utils import (
    format_time,
    hours_from_minutes,
    intervals_overlap,
    iter_slot_starts,
    minutes_between,
    pluralize_hours,
    to_hours,
    to_money,
)

logger = logging.getLogger(__name__)


class PricingService:
    """Сервис расчета цен и управления тарифной таблицей"""

    @staticmethod
    def calculate_booking_price(booking_date, start_time, end_time, rates=None):
        if rates is None:
            rates = PricingRuleRateTable()
        return calculate_price(booking_date, start_time, end_time, rates)

    @staticmethod
    def get_price_preview(booking_date, start_time, end_time, rates=None):
        """Предварительная стоимость без сохранения"""
        calculation = PricingService.calculate_booking_price(booking_date, start_time, end_time, rates)
        return {
            'total_hours': to_hours(calculation.total_hours),
            'breakdown': calculation.breakdown_as_list(),
            'subtotal': to_money(calculation.subtotal),
            'discount': to_money(calculation.discount),
            'final_price': to_money(calculation.final_price),
        }

    @staticmethod
    def current_pricing():
        """Текущие ставки в плоском виде для клиентов"""
        pricing = {
            'weekday_day_rate': 0,
            'weekday_night_rate': 0,
            'weekend_day_rate': 0,
            'weekend_night_rate': 0,
        }
        for rule in PricingRule.objects.filter(is_active=True):
            pricing[f'{rule.day_type}_{rule.time_slot}_rate'] = rule.price_per_hour
        return pricing

    @staticmethod
    def list_rules():
        return list(PricingRule.objects.all())

    @staticmethod
    def get_rule(rule_id):
        rule = PricingRule.objects.filter(pk=rule_id).first()
        if rule is None:
            raise NotFoundError('Тариф')
        return rule

    @staticmethod
    def initialize_default_rules():
        if PricingRule.objects.exists():
            raise InvalidRequestError('Тарифы уже инициализированы')

        rules = PricingRule.objects.bulk_create([
            PricingRule(day_type=day_type, time_slot=time_slot, price_per_hour=price)
            for day_type, time_slot, price in DEFAULT_PRICING_RULES
        ])
        logger.info(f"Default pricing rules initialized: {len(rules)} rules")
        return list(PricingRule.objects.all())

    @staticmethod
    def create_rule(day_type, time_slot, price_per_hour, is_active=True):
        if PricingRule.objects.filter(day_type=day_type, time_slot=time_slot).exists():
            raise ConflictError(f'Тариф для {day_type} {time_slot} уже существует')

        try:
            with transaction.atomic():
                rule = PricingRule.objects.create(
                    day_type=day_type,
                    time_slot=time_slot,
                    price_per_hour=price_per_hour,
                    is_active=is_active,
                )
        except IntegrityError:
            raise ConflictError(f'Тариф для {day_type} {time_slot} уже существует')

        logger.info(f"Pricing rule created: {rule}")
        return rule

    @staticmethod
    def update_rule(rule_id, changes):
        rule = PricingService.get_rule(rule_id)

        price = changes.get('price_per_hour')
        if 'price_per_hour' in changes and (price is None or price <= 0):
            raise InvalidRequestError('Цена за час должна быть больше 0')

        day_type = changes.get('day_type') or rule.day_type
        time_slot = changes.get('time_slot') or rule.time_slot
        duplicate = PricingRule.objects.filter(day_type=day_type, time_slot=time_slot).exclude(pk=rule.pk)
        if duplicate.exists():
            raise ConflictError(f'Тариф для {day_type} {time_slot} уже существует')

        for field in ('day_type', 'time_slot', 'price_per_hour', 'is_active'):
            if field in changes and changes[field] not in (None, ''):
                setattr(rule, field, changes[field])
        rule.save()

        logger.info(f"Pricing rule updated: {rule}")
        return rule

    @staticmethod
    def delete_rule(rule_id):
        rule = PricingService.get_rule(rule_id)
        data = rule.as_dict()
        rule.delete()
        logger.warning(f"Pricing rule deleted: {data['day_type']}/{data['time_slot']}")
        return data


class CourtService:
    """Сервис управления кортами"""

    @staticmethod
    def list_courts(status=None):
        courts = Court.objects.all()
        if status in dict(COURT_STATUS_CHOICES):
            courts = courts.filter(status=status)
        return list(courts)

    @staticmethod
    def get_court(court_id):
        court = Court.objects.filter(pk=court_id).first()
        if court is None:
            raise NotFoundError('Корт')
        return court

    @staticmethod
    def create_court(data):
        if Court.objects.count() >= MAX_COURTS:
            raise InvalidRequestError(f'Достигнут лимит кортов ({MAX_COURTS})')

        if Court.objects.filter(name=data['name']).exists():
            raise ConflictError('Корт с таким названием уже существует')

        court = Court.objects.create(
            name=data['name'],
            description=data['description'],
            status=data.get('status') or COURT_ACTIVE,
            features=data.get('features') or [],
            image_url=data.get('image_url') or '',
        )
        logger.info(f"Court created: {court.name}")
        return court

    @staticmethod
    def update_court(court_id, changes):
        court = CourtService.get_court(court_id)

        if 'name' in changes:
            if not changes['name']:
                raise InvalidRequestError('Название корта не может быть пустым')
            if Court.objects.filter(name=changes['name']).exclude(pk=court.pk).exists():
                raise ConflictError('Корт с таким названием уже существует')

        if 'description' in changes and not changes['description']:
            raise InvalidRequestError('Описание корта не может быть пустым')

        for field in ('name', 'description', 'status', 'features', 'image_url'):
            if field in changes and changes[field] is not None:
                if field == 'status' and not changes[field]:
                    continue
                setattr(court, field, changes[field])
        court.save()
        return court

    @staticmethod
    def set_status(court_id, status):
        court = CourtService.get_court(court_id)
        court.status = status
        court.save(update_fields=['status', 'updated_at'])
        logger.info(f"Court {court.name} status changed to {status}")
        return court

    @staticmethod
    def delete_court(court_id):
        court = CourtService.get_court(court_id)
        data = court.as_dict()
        court.delete()
        logger.warning(f"Court deleted: {data['name']}")
        return data


class BookingHistoryService:
    """Сервис для работы с историей бронирований"""

    @staticmethod
    def create_history_entry(booking, action, changes=None, comment=''):
        history_entry = BookingHistory.objects.create(
            booking=booking,
            action=action,
            changes=changes or {},
            comment=comment
        )

        logger.debug(f"History entry created: {booking.id} - {action}")
        return history_entry

    @staticmethod
    def log_booking_created(booking):
        return BookingHistoryService.create_history_entry(
            booking=booking,
            action='blocked' if booking.status == STATUS_BLOCKED else 'created',
            changes={
                'court': booking.court.name,
                'date': booking.booking_date.isoformat(),
                'start_time': format_time(booking.start_time),
                'end_time': format_time(booking.end_time),
                'price': str(booking.final_price),
                'created_by': booking.created_by,
            }
        )


class BookingService:
    """
    Сценарии бронирования

    Проверка доступности, расчет цены и запись бронирования выполняются в
    одной транзакции. Окончательное слово за уникальным ключом BookingSlot:
    из двух параллельных запросов на пересекающиеся интервалы зафиксируется
    только один, второй получит ConflictError.
    """

    @staticmethod
    def get_booking(booking_id, lock=False):
        bookings = Booking.objects.select_related('court', 'customer')
        if lock:
            bookings = bookings.select_for_update()
        booking = bookings.filter(pk=booking_id).first()
        if booking is None:
            raise NotFoundError('Бронирование')
        return booking

    @staticmethod
    def overlapping_bookings(court, starts_at, ends_at, lock=False):
        """Неотмененные бронирования корта, пересекающие [starts_at, ends_at)"""
        bookings = Booking.objects.filter(
            court=court,
            starts_at__lt=ends_at,
            ends_at__gt=starts_at,
        ).exclude(status=STATUS_CANCELLED)

        if lock:
            bookings = bookings.select_for_update()

        return list(bookings.order_by('starts_at'))

    @staticmethod
    def check_availability(court_id, booking_date, start_time, end_time):
        """Проверка для отображения: прошедшее время не отклоняется"""
        court = CourtService.get_court(court_id)
        starts_at, ends_at = requested_interval(booking_date, start_time, end_time)
        existing = BookingService.overlapping_bookings(court, starts_at, ends_at)
        return check_availability(court, booking_date, start_time, end_time, existing)

    @staticmethod
    def available_slots(court_id, booking_date, now=None):
        """Часовая сетка дня (00:00-24:00) с признаком доступности"""
        court = CourtService.get_court(court_id)
        now = now or timezone.now()

        day_start = timezone.make_aware(datetime.combine(booking_date, time.min))
        day_end = timezone.make_aware(datetime.combine(booking_date + timedelta(days=1), time.min))
        existing = BookingService.overlapping_bookings(court, day_start, day_end)

        slots = []
        for hour in range(24):
            slot_start = day_start + timedelta(hours=hour)
            slot_end = slot_start + timedelta(hours=1)
            busy = any(
                intervals_overlap(slot_start, slot_end, booking.starts_at, booking.ends_at)
                for booking in existing
            )
            slots.append({
                'start_time': f"{hour:02d}:00",
                'end_time': f"{(hour + 1) % 24:02d}:00",
                'hour': hour,
                'is_available': court.is_bookable and not busy and slot_start >= now,
            })

        return {
            'court_id': court.id,
            'court_name': court.name,
            'date': booking_date.isoformat(),
            'slots': slots,
            'available_count': sum(1 for slot in slots if slot['is_available']),
            'total_slots': len(slots),
        }

    @staticmethod
    def _bookable_court(court_id):
        court = CourtService.get_court(court_id)
        if not court.is_bookable:
            raise InvalidRequestError('Корт недоступен для бронирования')
        return court

    @staticmethod
    def _ensure_available(court, booking_date, start_time, end_time, now):
        """Проверка внутри транзакции; возвращает разрешенный интервал"""
        starts_at, ends_at = requested_interval(booking_date, start_time, end_time)
        existing = BookingService.overlapping_bookings(court, starts_at, ends_at, lock=True)

        result = check_availability(court, booking_date, start_time, end_time, existing, now=now)
        if not result.available:
            conflict = result.conflicting_booking
            raise ConflictError(
                f'Выбранное время уже занято с {timezone.localtime(conflict.starts_at):%H:%M} '
                f'до {timezone.localtime(conflict.ends_at):%H:%M}'
            )
        return starts_at, ends_at

    @staticmethod
    def _persist(booking):
        """Запись бронирования и его ячеек; нарушение уникальности - конфликт"""
        cells = [
            BookingSlot(court=booking.court, starts_at=cell_start)
            for cell_start in iter_slot_starts(booking.starts_at, booking.ends_at)
        ]
        try:
            with transaction.atomic():
                booking.save()
                for cell in cells:
                    cell.booking = booking
                BookingSlot.objects.bulk_create(cells)
        except IntegrityError:
            logger.warning(
                f"Slot race lost on court {booking.court_id} "
                f"{booking.starts_at.isoformat()} - {booking.ends_at.isoformat()}"
            )
            booking.pk = None
            raise ConflictError('Это время только что забронировали, выберите другое')
        return booking

    @staticmethod
    def _new_booking(court, data, starts_at, ends_at, **fields):
        return Booking(
            court=court,
            booking_date=data['booking_date'],
            start_time=data['start_time'],
            end_time=data['end_time'],
            starts_at=starts_at,
            ends_at=ends_at,
            duration_hours=to_money(hours_from_minutes(minutes_between(starts_at, ends_at))),
            notes=data.get('notes') or '',
            **fields
        )

    @staticmethod
    def create_booking(payload, now=None):
        """
        Бронирование клиентом

        Порядок: проверка данных, поиск/создание клиента по телефону,
        проверка доступности, расчет цены, запись (pending/pending),
        увеличение счетчика бронирований клиента.
        """
        data = validated_data(BookingRequestForm, payload)
        now = now or timezone.now()
        court = BookingService._bookable_court(data['court_id'])

        with transaction.atomic():
            customer, _ = CustomerService.find_or_create(
                phone=data['customer_phone'],
                name=data['customer_name'],
                email=data.get('customer_email'),
            )

            starts_at, ends_at = BookingService._ensure_available(
                court, data['booking_date'], data['start_time'], data['end_time'], now
            )

            pricing = PricingService.calculate_booking_price(
                data['booking_date'], data['start_time'], data['end_time']
            )

            booking = BookingService._new_booking(
                court, data, starts_at, ends_at,
                customer=customer,
                status=STATUS_PENDING,
                pricing_breakdown=pricing.breakdown_as_list(),
                total_price=to_money(pricing.subtotal),
                discount_amount=to_money(pricing.discount),
                final_price=to_money(pricing.final_price),
                payment_status=PAYMENT_PENDING,
                amount_paid=Decimal('0'),
                created_by='customer',
            )
            BookingService._persist(booking)
            CustomerService.increment_bookings(customer)
            BookingHistoryService.log_booking_created(booking)

        logger.info(
            f"Booking created: {customer.phone} booked court {court.name} "
            f"on {booking.booking_date} from {format_time(booking.start_time)} to {format_time(booking.end_time)} "
            f"(Duration: {pluralize_hours(booking.duration_hours)}, Price: {booking.final_price})"
        )
        return booking

    @staticmethod
    def create_manual_booking(payload, now=None):
        """
        Бронирование администратором или блокировка слота

        Блокировка создается без клиента и без расчета цены.
        """
        data = validated_data(ManualBookingForm, payload)
        now = now or timezone.now()
        court = BookingService._bookable_court(data['court_id'])
        is_blocked = data.get('is_blocked', False)

        with transaction.atomic():
            starts_at, ends_at = BookingService._ensure_available(
                court, data['booking_date'], data['start_time'], data['end_time'], now
            )

            if is_blocked:
                booking = BookingService._new_booking(
                    court, data, starts_at, ends_at,
                    customer=None,
                    status=STATUS_BLOCKED,
                    payment_status=PAYMENT_PAID,
                    created_by='admin',
                )
                BookingService._persist(booking)
            else:
                customer, _ = CustomerService.find_or_create(
                    phone=data['customer_phone'],
                    name=data['customer_name'],
                    email=data.get('customer_email'),
                )
                pricing = PricingService.calculate_booking_price(
                    data['booking_date'], data['start_time'], data['end_time']
                )
                payment_status = data.get('payment_status') or PAYMENT_PENDING
                status = STATUS_PENDING
                if payment_status in (PAYMENT_PAID, PAYMENT_PARTIAL):
                    status = STATUS_CONFIRMED

                booking = BookingService._new_booking(
                    court, data, starts_at, ends_at,
                    customer=customer,
                    status=status,
                    pricing_breakdown=pricing.breakdown_as_list(),
                    total_price=to_money(pricing.subtotal),
                    discount_amount=to_money(pricing.discount),
                    final_price=to_money(pricing.final_price),
                    payment_status=payment_status,
                    created_by='admin',
                )
                BookingService._persist(booking)
                CustomerService.increment_bookings(customer)

            BookingHistoryService.log_booking_created(booking)

        logger.info(
            f"{'Slot blocked' if is_blocked else 'Manual booking created'}: court {court.name} "
            f"on {booking.booking_date} {format_time(booking.start_time)}-{format_time(booking.end_time)}"
        )
        return booking

    @staticmethod
    def update_status(booking_id, status, notes=None):
        with transaction.atomic():
            booking = BookingService.get_booking(booking_id, lock=True)

            if booking.status == STATUS_CANCELLED:
                raise InvalidTransitionError('Нельзя изменить статус отмененного бронирования')
            if booking.status == STATUS_COMPLETED:
                raise InvalidTransitionError('Нельзя изменить статус завершенного бронирования')

            old_status = booking.status
            booking.status = status
            if notes:
                booking.notes = notes
            booking.save()

            if status == STATUS_CANCELLED:
                booking.slots.all().delete()

            BookingHistoryService.create_history_entry(
                booking=booking,
                action='cancelled' if status == STATUS_CANCELLED else 'status_changed',
                changes={'old_status': old_status, 'new_status': status},
            )

        logger.info(f"Booking {booking.id} status changed: {old_status} -> {status}")
        return booking

    @staticmethod
    def update_payment(booking_id, changes):
        """
        Обновление оплаты; оплата (полная или частичная) подтверждает
        бронирование в ожидании
        """
        with transaction.atomic():
            booking = BookingService.get_booking(booking_id, lock=True)

            if booking.status == STATUS_CANCELLED:
                raise InvalidTransitionError('Нельзя изменить оплату отмененного бронирования')

            for field in ('amount_paid', 'payment_status', 'payment_method', 'payment_reference'):
                value = changes.get(field)
                if value not in (None, ''):
                    setattr(booking, field, value)

            if changes.get('payment_status') in (PAYMENT_PAID, PAYMENT_PARTIAL):
                if booking.status == STATUS_PENDING:
                    booking.status = STATUS_CONFIRMED

            booking.save()
            BookingHistoryService.create_history_entry(
                booking=booking,
                action='payment_updated',
                changes={key: value for key, value in changes.items() if value not in (None, '')},
            )

        logger.info(f"Payment updated for booking {booking.id}: {booking.payment_status}, paid {booking.amount_paid}")
        return booking

    @staticmethod
    def update_notes(booking_id, notes):
        booking = BookingService.get_booking(booking_id)
        booking.notes = notes or ''
        booking.save(update_fields=['notes', 'updated_at'])
        BookingHistoryService.create_history_entry(booking=booking, action='notes_updated')
        return booking

    @staticmethod
    def cancel_booking(booking_id, reason=''):
        """Отмена (мягкое удаление): слот освобождается"""
        with transaction.atomic():
            booking = BookingService.get_booking(booking_id, lock=True)

            if booking.status == STATUS_CANCELLED:
                raise InvalidTransitionError('Бронирование уже отменено')
            if booking.status == STATUS_COMPLETED:
                raise InvalidTransitionError('Нельзя отменить завершенное бронирование')

            booking.status = STATUS_CANCELLED
            if reason:
                line = f'Причина отмены: {reason}'
                booking.notes = f'{booking.notes}\n{line}' if booking.notes else line
            booking.save()
            booking.slots.all().delete()

            BookingHistoryService.create_history_entry(
                booking=booking,
                action='cancelled',
                comment=reason or '',
            )

        logger.info(f"Booking {booking.id} cancelled" + (f": {reason}" if reason else ''))
        return booking

    @staticmethod
    def list_bookings(filters):
        bookings = Booking.objects.select_related('court', 'customer')

        if filters.get('court_id'):
            bookings = bookings.filter(court_id=filters['court_id'])
        if filters.get('customer_id'):
            bookings = bookings.filter(customer_id=filters['customer_id'])
        if filters.get('status'):
            bookings = bookings.filter(status=filters['status'])
        if filters.get('payment_status'):
            bookings = bookings.filter(payment_status=filters['payment_status'])
        if filters.get('created_by'):
            bookings = bookings.filter(created_by=filters['created_by'])
        if filters.get('start_date'):
            bookings = bookings.filter(booking_date__gte=filters['start_date'])
        if filters.get('end_date'):
            bookings = bookings.filter(booking_date__lte=filters['end_date'])

        page = filters.get('page') or 1
        limit = filters.get('limit') or 20
        total = bookings.count()
        offset = (page - 1) * limit

        return {
            'bookings': list(bookings.order_by('-booking_date', '-start_time')[offset:offset + limit]),
            'pagination': {
                'page': page,
                'limit': limit,
                'total': total,
                'pages': (total + limit - 1) // limit,
            },
        }
