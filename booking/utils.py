"""
Утилиты для модуля бронирования
"""
from datetime import datetime, date, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction

from django.utils import timezone

from .constants import (
    BOOKING_STEP_MINUTES,
    DATE_FORMAT,
    HOURS_PLACES,
    MIN_BOOKING_DURATION_MINUTES,
    MONEY_PLACES,
    SLOT_CELL_MINUTES,
    TIME_FORMAT,
)
from .exceptions import InvalidDurationError, InvalidRequestError


def parse_date(value, field='date'):
    """Дата 'YYYY-MM-DD' -> date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise InvalidRequestError(f'Некорректная дата в поле {field}: ожидается YYYY-MM-DD')


def parse_time(value, field='time'):
    """Время 'HH:MM' -> time"""
    if isinstance(value, time):
        return value
    try:
        return datetime.strptime(str(value), TIME_FORMAT).time()
    except (TypeError, ValueError):
        raise InvalidRequestError(f'Некорректное время в поле {field}: ожидается HH:MM')


def resolve_interval(booking_date, start_time, end_time):
    """
    Переводит дату и время "HH:MM" в полуинтервал [start, end) локального времени

    Если end_time <= start_time, бронирование заканчивается на следующий день.

    Returns:
        (start_dt, end_dt) - наивные datetime в часовом поясе площадки
    """
    start_dt = datetime.combine(booking_date, start_time)
    end_dt = datetime.combine(booking_date, end_time)

    if end_dt <= start_dt:
        end_dt += timedelta(days=1)  # на случай если бронирование через полночь

    return start_dt, end_dt


def make_aware_interval(start_dt, end_dt):
    return timezone.make_aware(start_dt), timezone.make_aware(end_dt)


def minutes_between(start_dt, end_dt):
    return int((end_dt - start_dt).total_seconds() // 60)


def hours_from_minutes(minutes):
    """Точная доля часа: 90 минут -> Fraction(3, 2), 5 минут -> Fraction(1, 12)"""
    return Fraction(minutes, 60)


def to_decimal(value, places):
    """Рациональное число -> Decimal, округленный до places знаков"""
    if isinstance(value, Fraction):
        value = Decimal(value.numerator) / Decimal(value.denominator)
    return Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def to_money(value):
    return to_decimal(value, MONEY_PLACES)


def to_hours(value):
    return to_decimal(value, HOURS_PLACES)


def validate_booking_duration(start_dt, end_dt):
    """
    Проверка продолжительности бронирования

    Args:
        start_dt: Начало (после разрешения перехода через полночь)
        end_dt: Окончание

    Returns:
        Продолжительность в минутах
    """
    if end_dt <= start_dt:
        raise InvalidDurationError('Время окончания должно быть позже времени начала')

    duration_minutes = minutes_between(start_dt, end_dt)

    if duration_minutes < MIN_BOOKING_DURATION_MINUTES:
        raise InvalidDurationError('Минимальная продолжительность бронирования - 1 час')

    if duration_minutes % BOOKING_STEP_MINUTES:
        raise InvalidDurationError(
            'Бронирование возможно только с шагом 30 минут (1 ч, 1.5 ч, 2 ч ...)'
        )

    return duration_minutes


def resolve_booking_interval(booking_date, start_time, end_time):
    """Разрешает интервал и проверяет продолжительность"""
    start_dt, end_dt = resolve_interval(booking_date, start_time, end_time)
    validate_booking_duration(start_dt, end_dt)
    return start_dt, end_dt


def intervals_overlap(start_a, end_a, start_b, end_b):
    """Пересечение полуинтервалов [start, end): смежные интервалы не пересекаются"""
    return start_a < end_b and start_b < end_a


def iter_slot_starts(start_dt, end_dt, step_minutes=SLOT_CELL_MINUTES):
    """Начала всех минутных ячеек, которые занимает интервал"""
    step = timedelta(minutes=step_minutes)
    current = start_dt
    while current < end_dt:
        yield current
        current += step


def format_time(value):
    return value.strftime(TIME_FORMAT)


def pluralize_hours(hours):
    hours = Decimal(hours).normalize()
    if hours == hours.to_integral_value():
        hours = int(hours)
    return f'{hours} ч'
