"""Shared dates and builders for booking tests."""

from datetime import date, datetime, time
from types import SimpleNamespace

from django.utils import timezone

# 2030-01-01 is a Tuesday
THURSDAY = date(2030, 1, 3)
FRIDAY = date(2030, 1, 4)
SATURDAY = date(2030, 1, 5)
SUNDAY = date(2030, 1, 6)
MONDAY = date(2030, 1, 7)


def at(day, hour, minute=0):
    """Aware datetime in the venue time zone."""
    return timezone.make_aware(datetime.combine(day, time(hour, minute)))


def hm(value):
    hour, minute = value.split(':')
    return time(int(hour), int(minute))


def fake_booking(booking_id, court_id, starts_at, ends_at, status='pending'):
    return SimpleNamespace(
        id=booking_id,
        court_id=court_id,
        starts_at=starts_at,
        ends_at=ends_at,
        status=status,
    )
