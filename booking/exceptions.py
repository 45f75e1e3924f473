"""
Ошибки бронирования со стабильным кодом и HTTP-статусом
"""


class BookingError(Exception):
    code = 'booking_error'
    status = 400
    default_message = 'Ошибка бронирования'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self):
        return {
            'success': False,
            'error': self.code,
            'message': self.message,
        }


class InvalidRequestError(BookingError):
    code = 'invalid_request'
    default_message = 'Некорректный запрос'


class InvalidDurationError(InvalidRequestError):
    code = 'invalid_duration'
    default_message = 'Некорректная продолжительность бронирования'


class MissingRateError(BookingError):
    code = 'missing_rate'
    status = 500
    default_message = 'Тариф не настроен'

    def __init__(self, day_type, time_slot):
        self.day_type = day_type
        self.time_slot = time_slot
        super().__init__(f'Не найден активный тариф для {day_type} {time_slot}')


class ConflictError(BookingError):
    code = 'conflict'
    status = 409
    default_message = 'Выбранное время уже занято'


class NotFoundError(BookingError):
    code = 'not_found'
    status = 404

    def __init__(self, resource='Объект'):
        super().__init__(f'{resource} не найден')


class InvalidTransitionError(BookingError):
    code = 'invalid_transition'
    default_message = 'Недопустимая смена статуса'
