"""
Константы для приложения booking
"""
from decimal import Decimal

# Типы дней и временные слоты тарифной сетки
WEEKDAY = 'weekday'
WEEKEND = 'weekend'
DAY = 'day'
NIGHT = 'night'

DAY_TYPE_CHOICES = [
    (WEEKDAY, 'Будний день'),
    (WEEKEND, 'Выходной'),
]

TIME_SLOT_CHOICES = [
    (DAY, 'День'),
    (NIGHT, 'Ночь'),
]

# Выходные в Саудовской Аравии: пятница и суббота (date.weekday())
FRIDAY = 4
SATURDAY = 5
WEEKEND_DAYS = (FRIDAY, SATURDAY)

# Ночной тариф: с 18:00 до 08:59
NIGHT_STARTS_AT_HOUR = 18
DAY_STARTS_AT_HOUR = 9

# Часы 00:00-03:59 относятся к предыдущему календарному дню
EFFECTIVE_DAY_CUTOFF_HOUR = 4

# Суббота ночью - фиксированная цена вместо weekend/night из таблицы
SATURDAY_NIGHT_RATE = Decimal('110')

# Тарифы по умолчанию для инициализации таблицы
DEFAULT_PRICING_RULES = [
    (WEEKDAY, DAY, Decimal('90')),
    (WEEKDAY, NIGHT, Decimal('110')),
    (WEEKEND, DAY, Decimal('110')),
    (WEEKEND, NIGHT, Decimal('135')),
]

# Ограничения на бронирование
MIN_BOOKING_DURATION_MINUTES = 60
BOOKING_STEP_MINUTES = 30

# Ключ сериализации: одна строка BookingSlot на каждую занятую минуту корта
SLOT_CELL_MINUTES = 1

# Точность хранения и вывода денег и часов
MONEY_PLACES = 2
HOURS_PLACES = 4
MAX_COURTS = 7

# Статусы бронирования
STATUS_PENDING = 'pending'
STATUS_CONFIRMED = 'confirmed'
STATUS_BLOCKED = 'blocked'
STATUS_CANCELLED = 'cancelled'
STATUS_COMPLETED = 'completed'

BOOKING_STATUS_CHOICES = [
    (STATUS_PENDING, 'В ожидании'),
    (STATUS_CONFIRMED, 'Подтверждено'),
    (STATUS_BLOCKED, 'Заблокировано'),
    (STATUS_CANCELLED, 'Отменено'),
    (STATUS_COMPLETED, 'Завершено'),
]

TERMINAL_STATUSES = (STATUS_CANCELLED, STATUS_COMPLETED)

# Статусы оплаты
PAYMENT_PENDING = 'pending'
PAYMENT_PARTIAL = 'partial'
PAYMENT_PAID = 'paid'

PAYMENT_STATUS_CHOICES = [
    (PAYMENT_PENDING, 'Ожидает оплаты'),
    (PAYMENT_PARTIAL, 'Частично оплачено'),
    (PAYMENT_PAID, 'Оплачено'),
]

CREATED_BY_CHOICES = [
    ('customer', 'Клиент'),
    ('admin', 'Администратор'),
]

# Статусы корта
COURT_ACTIVE = 'active'
COURT_INACTIVE = 'inactive'
COURT_MAINTENANCE = 'maintenance'

COURT_STATUS_CHOICES = [
    (COURT_ACTIVE, 'Активен'),
    (COURT_INACTIVE, 'Неактивен'),
    (COURT_MAINTENANCE, 'На обслуживании'),
]

# Форматы даты и времени в API
DATE_FORMAT = '%Y-%m-%d'
TIME_FORMAT = '%H:%M'
