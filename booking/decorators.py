"""
Декораторы для rate limiting и единой обработки ошибок API
"""
import json
import logging
from functools import wraps

from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django_ratelimit.decorators import ratelimit

from .exceptions import BookingError, InvalidRequestError

logger = logging.getLogger(__name__)


def api_ratelimit(key='ip', rate='30/m', method='ALL', block=False):
    """
    Декоратор для rate limiting API endpoints

    Args:
        key: Ключ для группировки (ip, user, user_or_ip, header:x-real-ip)
        rate: Лимит (формат: <count>/<period>, например '10/m', '100/h', '1000/d')
        method: HTTP методы для ограничения (ALL, GET, POST)
        block: Поднимать Ratelimited (True) или вернуть 429 отсюда (False)
    """
    def decorator(func):
        @wraps(func)
        @ratelimit(key=key, rate=rate, method=method, block=block)
        def wrapper(request, *args, **kwargs):
            if getattr(request, 'limited', False):
                logger.warning(
                    f"Rate limit exceeded for {func.__name__}: "
                    f"key={key}, rate={rate}, "
                    f"ip={request.META.get('REMOTE_ADDR')}"
                )

                return JsonResponse({
                    'success': False,
                    'error': 'rate_limit_exceeded',
                    'message': 'Слишком много запросов. Пожалуйста, подождите немного.'
                }, status=429)

            return func(request, *args, **kwargs)

        return wrapper
    return decorator


def api_data_ratelimit(rate='60/m'):
    """Умеренный лимит для endpoints получения данных"""
    return api_ratelimit(key='user_or_ip', rate=rate, method='ALL')


def api_write_ratelimit(rate='10/m'):
    """Лимит для endpoints создания бронирований"""
    return api_ratelimit(key='ip', rate=rate, method='POST')


def api_view(func):
    """
    JSON API view: ошибки бронирования превращаются в ответ со стабильным кодом

    Неожиданные исключения логируются и отдаются как 500. CSRF не
    отключается: публичные views помечаются @csrf_exempt явно.
    """
    @wraps(func)
    def wrapper(request, *args, **kwargs):
        try:
            return func(request, *args, **kwargs)
        except BookingError as e:
            logger.info(f"{func.__name__}: {e.code} - {e.message}")
            return JsonResponse(e.as_dict(), status=e.status)
        except ValidationError as e:
            return JsonResponse({
                'success': False,
                'error': 'invalid_request',
                'message': '; '.join(e.messages),
            }, status=400)
        except Exception as e:
            logger.error(f"Error in {func.__name__}: {str(e)}", exc_info=True)
            return JsonResponse({
                'success': False,
                'error': 'server_error',
                'message': 'Внутренняя ошибка сервера'
            }, status=500)

    return wrapper


def json_body(request):
    """Тело запроса как dict: JSON или form-data"""
    if request.content_type == 'application/json':
        if not request.body:
            return {}
        try:
            data = json.loads(request.body)
        except (TypeError, ValueError):
            raise InvalidRequestError('Некорректный JSON в теле запроса')
        if not isinstance(data, dict):
            raise InvalidRequestError('Тело запроса должно быть JSON-объектом')
        return data
    return request.POST.dict()
