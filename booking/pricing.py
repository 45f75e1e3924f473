"""
Расчет стоимости бронирования по тарифной сетке

Интервал бронирования режется на отрезки по границам часов. Каждый отрезок
классифицируется по типу дня (будний/выходной) и временному слоту
(день/ночь) и оценивается по своей ставке. Смежные отрезки с одинаковой
ставкой не объединяются.

Часы и суммы считаются в Fraction без округления, в Decimal они
переводятся только при сохранении и выводе.
"""
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from fractions import Fraction
from typing import List

from .constants import (
    DAY,
    DAY_STARTS_AT_HOUR,
    EFFECTIVE_DAY_CUTOFF_HOUR,
    NIGHT,
    NIGHT_STARTS_AT_HOUR,
    SATURDAY,
    SATURDAY_NIGHT_RATE,
    WEEKDAY,
    WEEKEND,
    WEEKEND_DAYS,
)
from .exceptions import MissingRateError
from .utils import hours_from_minutes, minutes_between, resolve_booking_interval, to_hours, to_money


def get_day_type(day):
    return WEEKEND if day.weekday() in WEEKEND_DAYS else WEEKDAY


def get_time_slot(hour):
    """Ночь: 18:00-08:59, переходит через полночь"""
    return NIGHT if hour >= NIGHT_STARTS_AT_HOUR or hour < DAY_STARTS_AT_HOUR else DAY


def get_effective_date(moment):
    """00:00-03:59 относится к предыдущему дню"""
    if moment.hour < EFFECTIVE_DAY_CUTOFF_HOUR:
        return moment.date() - timedelta(days=1)
    return moment.date()


def is_saturday_night(moment):
    return get_effective_date(moment).weekday() == SATURDAY and get_time_slot(moment.hour) == NIGHT


class RateTable:
    """Ставки в памяти: {(day_type, time_slot): цена за час}"""

    def __init__(self, rates=None):
        self._rates = {}
        for (day_type, time_slot), price in (rates or {}).items():
            self._rates[(day_type, time_slot)] = Decimal(str(price))

    def find_rate(self, day_type, time_slot):
        try:
            return self._rates[(day_type, time_slot)]
        except KeyError:
            raise MissingRateError(day_type, time_slot)


class PricingRuleRateTable(RateTable):
    """
    Ставки из активных PricingRule

    Каждая пара (day_type, time_slot) читается из базы один раз за расчет,
    поэтому один экземпляр нужно использовать для одного бронирования.
    """

    def __init__(self):
        super().__init__()
        self._loaded = set()

    def find_rate(self, day_type, time_slot):
        key = (day_type, time_slot)
        if key not in self._loaded:
            from .models import PricingRule

            rule = PricingRule.objects.filter(
                day_type=day_type,
                time_slot=time_slot,
                is_active=True
            ).first()
            if rule is not None:
                self._rates[key] = rule.price_per_hour
            self._loaded.add(key)
        return super().find_rate(day_type, time_slot)


@dataclass(frozen=True)
class PricedSegment:
    start: object
    end: object
    minutes: int
    hours: Fraction
    price_per_hour: Decimal
    total_price: Fraction
    day_type: str
    time_slot: str
    is_override: bool = False

    def as_dict(self):
        return {
            'start_time': self.start.isoformat(timespec='minutes'),
            'end_time': self.end.isoformat(timespec='minutes'),
            'minutes': self.minutes,
            'hours': to_hours(self.hours),
            'price_per_hour': to_money(self.price_per_hour),
            'total_price': to_money(self.total_price),
            'day_type': self.day_type,
            'time_slot': self.time_slot,
            'is_override': self.is_override,
        }


@dataclass(frozen=True)
class PriceCalculation:
    start: object
    end: object
    total_hours: Fraction
    breakdown: List[PricedSegment] = field(default_factory=list)
    subtotal: Fraction = Fraction(0)
    discount: Fraction = Fraction(0)
    final_price: Fraction = Fraction(0)

    def breakdown_as_list(self):
        return [segment.as_dict() for segment in self.breakdown]

    def as_dict(self):
        return {
            'start_time': self.start.isoformat(timespec='minutes'),
            'end_time': self.end.isoformat(timespec='minutes'),
            'total_hours': to_hours(self.total_hours),
            'breakdown': self.breakdown_as_list(),
            'subtotal': to_money(self.subtotal),
            'discount': to_money(self.discount),
            'final_price': to_money(self.final_price),
        }


def get_rate(moment, rates):
    """
    Ставка для момента начала отрезка

    Returns:
        (price_per_hour, day_type, time_slot, is_override)
    """
    if is_saturday_night(moment):
        return SATURDAY_NIGHT_RATE, WEEKEND, NIGHT, True

    day_type = get_day_type(get_effective_date(moment))
    time_slot = get_time_slot(moment.hour)
    return rates.find_rate(day_type, time_slot), day_type, time_slot, False


def calculate_price(booking_date, start_time, end_time, rates):
    """
    Стоимость бронирования с разбивкой по часам

    Args:
        booking_date: Дата бронирования
        start_time: Время начала
        end_time: Время окончания (<= start_time означает следующий день)
        rates: Объект с методом find_rate(day_type, time_slot)

    Raises:
        InvalidDurationError: меньше часа или не кратно 30 минутам
        MissingRateError: нет активной ставки для нужной комбинации
    """
    start_dt, end_dt = resolve_booking_interval(booking_date, start_time, end_time)

    breakdown = []
    subtotal = Fraction(0)
    current = start_dt

    while current < end_dt:
        next_hour = current.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
        segment_end = min(next_hour, end_dt)
        minutes = minutes_between(current, segment_end)
        hours = hours_from_minutes(minutes)

        price_per_hour, day_type, time_slot, is_override = get_rate(current, rates)
        segment_price = Fraction(price_per_hour) * hours
        subtotal += segment_price

        breakdown.append(PricedSegment(
            start=current,
            end=segment_end,
            minutes=minutes,
            hours=hours,
            price_per_hour=price_per_hour,
            total_price=segment_price,
            day_type=day_type,
            time_slot=time_slot,
            is_override=is_override,
        ))
        current = segment_end

    return PriceCalculation(
        start=start_dt,
        end=end_dt,
        total_hours=hours_from_minutes(minutes_between(start_dt, end_dt)),
        breakdown=breakdown,
        subtotal=subtotal,
        discount=Fraction(0),
        final_price=subtotal,
    )
