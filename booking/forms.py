from django import forms

from .constants import (
    BOOKING_STATUS_CHOICES,
    COURT_STATUS_CHOICES,
    CREATED_BY_CHOICES,
    DATE_FORMAT,
    DAY_TYPE_CHOICES,
    PAYMENT_STATUS_CHOICES,
    TIME_FORMAT,
    TIME_SLOT_CHOICES,
)
from .exceptions import InvalidRequestError


def validated_data(form_class, data, partial=False):
    """
    Прогоняет данные через форму

    Args:
        form_class: Класс формы
        data: dict из тела запроса
        partial: Вернуть только поля, присутствующие в запросе

    Raises:
        InvalidRequestError: с первым сообщением об ошибке
    """
    form = form_class(data)
    if not form.is_valid():
        field, errors = next(iter(form.errors.items()))
        prefix = '' if field == '__all__' else f'{field}: '
        raise InvalidRequestError(f'{prefix}{errors[0]}')

    cleaned = form.cleaned_data
    if partial:
        return {key: value for key, value in cleaned.items() if key in data}
    return cleaned


class PricePreviewForm(forms.Form):
    booking_date = forms.DateField(input_formats=[DATE_FORMAT], label='Дата')
    start_time = forms.TimeField(input_formats=[TIME_FORMAT], label='Время начала')
    end_time = forms.TimeField(input_formats=[TIME_FORMAT], label='Время окончания')


class AvailabilityForm(PricePreviewForm):
    court_id = forms.IntegerField(min_value=1, label='Корт')


class BookingRequestForm(AvailabilityForm):
    customer_phone = forms.CharField(max_length=20, label='Телефон')
    customer_name = forms.CharField(max_length=100, label='Имя')
    customer_email = forms.EmailField(required=False, label='Email')
    notes = forms.CharField(required=False, label='Заметки')


class ManualBookingForm(AvailabilityForm):
    """Бронирование администратором или блокировка слота"""
    is_blocked = forms.BooleanField(required=False, label='Заблокировать слот')
    customer_phone = forms.CharField(max_length=20, required=False, label='Телефон')
    customer_name = forms.CharField(max_length=100, required=False, label='Имя')
    customer_email = forms.EmailField(required=False, label='Email')
    payment_status = forms.ChoiceField(choices=PAYMENT_STATUS_CHOICES, required=False, label='Оплата')
    notes = forms.CharField(required=False, label='Заметки')

    def clean(self):
        cleaned_data = super().clean()

        # Для обычного бронирования нужны данные клиента
        if not cleaned_data.get('is_blocked'):
            if not cleaned_data.get('customer_phone') or not cleaned_data.get('customer_name'):
                raise forms.ValidationError('Для бронирования нужны имя и телефон клиента')

        return cleaned_data


class PricingRuleForm(forms.Form):
    day_type = forms.ChoiceField(choices=DAY_TYPE_CHOICES, label='Тип дня')
    time_slot = forms.ChoiceField(choices=TIME_SLOT_CHOICES, label='Временной слот')
    price_per_hour = forms.DecimalField(max_digits=8, decimal_places=2, label='Цена за час')
    is_active = forms.BooleanField(required=False, initial=True, label='Активен')

    def clean_price_per_hour(self):
        price = self.cleaned_data['price_per_hour']
        if price <= 0:
            raise forms.ValidationError('Цена за час должна быть больше 0')
        return price


class PricingRuleUpdateForm(PricingRuleForm):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            field.required = False

    def clean_price_per_hour(self):
        if self.cleaned_data.get('price_per_hour') is None:
            return None
        return super().clean_price_per_hour()


class CourtForm(forms.Form):
    name = forms.CharField(max_length=100, strip=True, label='Название')
    description = forms.CharField(strip=True, label='Описание')
    status = forms.ChoiceField(choices=COURT_STATUS_CHOICES, required=False, label='Статус')
    features = forms.JSONField(required=False, label='Особенности')
    image_url = forms.URLField(required=False, assume_scheme='https', label='Изображение')

    def clean_features(self):
        features = self.cleaned_data.get('features')
        if features in (None, ''):
            return []
        if not isinstance(features, list):
            raise forms.ValidationError('Особенности должны быть JSON-массивом')
        return features


class CourtUpdateForm(CourtForm):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            field.required = False


class CourtStatusForm(forms.Form):
    status = forms.ChoiceField(choices=COURT_STATUS_CHOICES, label='Статус')


class StatusUpdateForm(forms.Form):
    status = forms.ChoiceField(choices=BOOKING_STATUS_CHOICES, label='Статус')
    notes = forms.CharField(required=False, label='Заметки')


class PaymentUpdateForm(forms.Form):
    amount_paid = forms.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    payment_status = forms.ChoiceField(choices=PAYMENT_STATUS_CHOICES, required=False)
    payment_method = forms.CharField(max_length=50, required=False)
    payment_reference = forms.CharField(max_length=100, required=False)


class BookingFilterForm(forms.Form):
    court_id = forms.IntegerField(required=False)
    customer_id = forms.IntegerField(required=False)
    status = forms.ChoiceField(choices=BOOKING_STATUS_CHOICES, required=False)
    payment_status = forms.ChoiceField(choices=PAYMENT_STATUS_CHOICES, required=False)
    created_by = forms.ChoiceField(choices=CREATED_BY_CHOICES, required=False)
    start_date = forms.DateField(input_formats=[DATE_FORMAT], required=False)
    end_date = forms.DateField(input_formats=[DATE_FORMAT], required=False)
    page = forms.IntegerField(min_value=1, required=False)
    limit = forms.IntegerField(min_value=1, max_value=100, required=False)
