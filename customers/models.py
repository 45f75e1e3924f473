import re

from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator, validate_email
from django.db import models


class CustomerManager(models.Manager):
    def normalize_phone(self, phone):
        """
        Нормализует саудовский мобильный номер к виду +9665XXXXXXXX

        Принимает 05XXXXXXXX, 5XXXXXXXX, 9665XXXXXXXX, 009665XXXXXXXX и
        +9665XXXXXXXX (пробелы и дефисы игнорируются).
        """
        if not phone:
            return None

        # Убираем все нецифровые символы
        digits = re.sub(r'\D', '', str(phone))

        if not digits:
            return None

        if digits.startswith('00'):
            digits = digits[2:]

        if len(digits) == 10 and digits.startswith('05'):
            digits = '966' + digits[1:]
        elif len(digits) == 9 and digits.startswith('5'):
            digits = '966' + digits

        if len(digits) != 12 or not digits.startswith('9665'):
            return None

        return '+' + digits

    def get_by_phone(self, phone):
        """Найти клиента по номеру телефона"""
        normalized_phone = self.normalize_phone(phone)
        if not normalized_phone:
            return None
        return self.filter(phone=normalized_phone).first()


class Customer(models.Model):
    phone_regex = RegexValidator(
        regex=r'^\+9665\d{8}$',
        message="Номер телефона должен быть в формате: '+9665XXXXXXXX'"
    )

    name = models.CharField(max_length=100)
    phone = models.CharField(validators=[phone_regex], max_length=13, unique=True)
    email = models.EmailField(blank=True, default='')
    total_bookings = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomerManager()

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.name} - {self.phone}"

    def clean(self):
        """Нормализация и проверка полей перед сохранением"""
        super().clean()

        self.name = (self.name or '').strip()
        if not self.name:
            raise ValidationError({'name': 'Имя клиента обязательно'})

        normalized = self.__class__.objects.normalize_phone(self.phone)
        if not normalized:
            raise ValidationError({'phone': 'Введите корректный саудовский номер телефона'})
        self.phone = normalized

        if self.email:
            self.email = self.email.strip().lower()
            try:
                validate_email(self.email)
            except ValidationError:
                raise ValidationError({'email': 'Введите корректный email'})

    def as_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'total_bookings': self.total_bookings,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
