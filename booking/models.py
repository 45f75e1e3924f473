from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone

from .constants import (
    BOOKING_STATUS_CHOICES,
    COURT_ACTIVE,
    COURT_INACTIVE,
    COURT_STATUS_CHOICES,
    CREATED_BY_CHOICES,
    DAY_TYPE_CHOICES,
    PAYMENT_PENDING,
    PAYMENT_STATUS_CHOICES,
    STATUS_PENDING,
    TERMINAL_STATUSES,
    TIME_SLOT_CHOICES,
)
from .utils import format_time


class Court(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField()
    status = models.CharField(max_length=20, choices=COURT_STATUS_CHOICES, default=COURT_ACTIVE)
    features = models.JSONField(default=list, blank=True)
    image_url = models.URLField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return self.name

    @property
    def is_bookable(self):
        return self.status != COURT_INACTIVE

    def as_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'status': self.status,
            'features': self.features,
            'image_url': self.image_url,
        }


class PricingRule(models.Model):
    """Строка тарифной таблицы: цена за час для (тип дня, временной слот)"""
    day_type = models.CharField(max_length=10, choices=DAY_TYPE_CHOICES)
    time_slot = models.CharField(max_length=10, choices=TIME_SLOT_CHOICES)
    price_per_hour = models.DecimalField(max_digits=8, decimal_places=2)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['day_type', 'time_slot']
        constraints = [
            models.UniqueConstraint(
                fields=['day_type', 'time_slot'],
                name='unique_pricing_rule_day_type_time_slot'
            )
        ]

    def __str__(self):
        return f"{self.day_type}/{self.time_slot}: {self.price_per_hour}"

    def as_dict(self):
        return {
            'id': self.id,
            'day_type': self.day_type,
            'time_slot': self.time_slot,
            'price_per_hour': self.price_per_hour,
            'is_active': self.is_active,
        }


class Booking(models.Model):
    court = models.ForeignKey(Court, on_delete=models.CASCADE, related_name='bookings')
    # Заблокированный слот не имеет клиента
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bookings'
    )
    booking_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    starts_at = models.DateTimeField(db_index=True)
    ends_at = models.DateTimeField(db_index=True)
    duration_hours = models.DecimalField(max_digits=5, decimal_places=2)

    status = models.CharField(max_length=20, choices=BOOKING_STATUS_CHOICES, default=STATUS_PENDING)

    pricing_breakdown = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder)
    total_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    final_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING)
    amount_paid = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    payment_method = models.CharField(max_length=50, blank=True, default='')
    payment_reference = models.CharField(max_length=100, blank=True, default='')

    notes = models.TextField(blank=True, default='')
    created_by = models.CharField(max_length=20, choices=CREATED_BY_CHOICES, default='customer')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-booking_date', '-start_time']
        indexes = [
            models.Index(fields=['court', 'starts_at', 'ends_at']),
        ]

    def __str__(self):
        who = self.customer.name if self.customer else 'BLOCKED'
        return f"{who} - {self.court.name} - {self.booking_date}"

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    @property
    def booking_datetime(self):
        """Полная дата и время начала бронирования"""
        return timezone.localtime(self.starts_at)

    def as_dict(self):
        customer = None
        if self.customer:
            customer = {
                'id': self.customer.id,
                'name': self.customer.name,
                'phone': self.customer.phone,
                'email': self.customer.email,
            }

        return {
            'id': self.id,
            'court': {'id': self.court.id, 'name': self.court.name, 'description': self.court.description},
            'customer': customer,
            'booking_date': self.booking_date.isoformat(),
            'start_time': format_time(self.start_time),
            'end_time': format_time(self.end_time),
            'starts_at': self.starts_at.isoformat(),
            'ends_at': self.ends_at.isoformat(),
            'duration_hours': self.duration_hours,
            'status': self.status,
            'pricing_breakdown': self.pricing_breakdown,
            'total_price': self.total_price,
            'discount_amount': self.discount_amount,
            'final_price': self.final_price,
            'payment_status': self.payment_status,
            'amount_paid': self.amount_paid,
            'payment_method': self.payment_method,
            'payment_reference': self.payment_reference,
            'notes': self.notes,
            'created_by': self.created_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class BookingSlot(models.Model):
    """
    Минутная ячейка корта, занятая неотмененным бронированием

    Уникальность (court, starts_at) - окончательная защита от двойного
    бронирования при конкурентных запросах.
    """
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='slots')
    court = models.ForeignKey(Court, on_delete=models.CASCADE, related_name='occupied_slots')
    starts_at = models.DateTimeField()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['court', 'starts_at'],
                name='unique_court_slot_start'
            )
        ]

    def __str__(self):
        return f"{self.court_id} @ {self.starts_at.isoformat()}"


class BookingHistory(models.Model):
    ACTION_CHOICES = [
        ('created', 'Создано'),
        ('blocked', 'Слот заблокирован'),
        ('status_changed', 'Статус изменен'),
        ('payment_updated', 'Оплата обновлена'),
        ('notes_updated', 'Заметки обновлены'),
        ('cancelled', 'Отменено'),
    ]

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='history')
    action = models.CharField(max_length=30, choices=ACTION_CHOICES)
    changes = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    comment = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.booking_id} - {self.action}"
