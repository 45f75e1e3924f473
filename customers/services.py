"""
Сервис для работы с клиентами
"""
import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F

from booking.exceptions import InvalidRequestError
from .models import Customer

logger = logging.getLogger(__name__)


def validation_message(error):
    """Первое сообщение из ValidationError"""
    if hasattr(error, 'message_dict'):
        for messages in error.message_dict.values():
            if messages:
                return messages[0]
    return error.messages[0] if error.messages else 'Некорректные данные'


class CustomerService:

    @staticmethod
    def find_or_create(phone, name, email=''):
        """
        Найти клиента по телефону или создать нового

        Returns:
            (customer, created)
        """
        normalized_phone = Customer.objects.normalize_phone(phone)
        if not normalized_phone:
            raise InvalidRequestError('Введите корректный саудовский номер телефона')

        customer = Customer.objects.filter(phone=normalized_phone).first()
        if customer:
            return customer, False

        customer = Customer(name=name or '', phone=normalized_phone, email=email or '')
        try:
            customer.full_clean()
        except ValidationError as e:
            raise InvalidRequestError(validation_message(e))

        # Параллельный запрос мог создать клиента с тем же номером
        try:
            with transaction.atomic():
                customer.save()
        except IntegrityError:
            existing = Customer.objects.filter(phone=customer.phone).first()
            if existing is None:
                raise
            return existing, False

        logger.info(f"Customer created: {customer.name} ({customer.phone})")
        return customer, True

    @staticmethod
    def increment_bookings(customer):
        Customer.objects.filter(pk=customer.pk).update(total_bookings=F('total_bookings') + 1)
        customer.refresh_from_db(fields=['total_bookings'])
        return customer
