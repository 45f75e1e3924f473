"""
Проверка доступности корта

Запрошенный интервал сравнивается с уже существующими бронированиями того же
корта как полуинтервалы [start, end) в разрешенном (после перехода через
полночь) времени. Отмененные бронирования слот не занимают, заблокированные
занимают.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from django.utils import timezone

from .constants import STATUS_CANCELLED
from .exceptions import InvalidRequestError
from .utils import intervals_overlap, make_aware_interval, resolve_booking_interval

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    conflicting_booking: Optional[Any] = None

    def as_dict(self):
        conflict = None
        if self.conflicting_booking is not None:
            booking = self.conflicting_booking
            conflict = {
                'id': booking.id,
                'starts_at': booking.starts_at.isoformat(),
                'ends_at': booking.ends_at.isoformat(),
                'status': booking.status,
            }
        return {'available': self.available, 'conflicting_booking': conflict}


def requested_interval(booking_date, start_time, end_time):
    """Проверенный интервал запроса как aware datetime"""
    return make_aware_interval(*resolve_booking_interval(booking_date, start_time, end_time))


def find_conflict(court, starts_at, ends_at, existing_bookings):
    """Первое неотмененное бронирование корта, пересекающее [starts_at, ends_at)"""
    for booking in existing_bookings:
        if booking.status == STATUS_CANCELLED:
            continue
        if booking.court_id != court.id:
            continue
        if intervals_overlap(starts_at, ends_at, booking.starts_at, booking.ends_at):
            return booking
    return None


def check_availability(court, booking_date, start_time, end_time, existing_bookings, now=None):
    """
    Свободен ли корт в запрошенное время

    Args:
        court: Корт
        booking_date: Дата бронирования
        start_time: Время начала
        end_time: Время окончания (<= start_time означает следующий день)
        existing_bookings: Бронирования корта, пересекающие обе календарные даты
        now: Если передан, начало не может быть в прошлом (проверка при создании)

    Raises:
        InvalidRequestError: некорректная продолжительность или начало в прошлом
    """
    starts_at, ends_at = requested_interval(booking_date, start_time, end_time)

    if now is not None and starts_at < now:
        raise InvalidRequestError('Нельзя бронировать корт на прошедшее время')

    conflict = find_conflict(court, starts_at, ends_at, existing_bookings)
    if conflict is not None:
        logger.info(
            f"Court {court.id} is busy on {booking_date} "
            f"{timezone.localtime(starts_at):%H:%M}-{timezone.localtime(ends_at):%H:%M}: "
            f"conflicts with booking {conflict.id}"
        )
        return AvailabilityResult(available=False, conflicting_booking=conflict)

    return AvailabilityResult(available=True)
