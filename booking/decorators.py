"""
Декораторы для rate limiting и защиты API endpoints
"""
from functools import wraps
import logging

from django.http import JsonResponse
from django_ratelimit.decorators import ratelimit

logger = logging.getLogger(__name__)


def api_ratelimit(key='ip', rate='30/m', method=ratelimit.ALL):
    """
    Декоратор для rate limiting API endpoints

    Превышение лимита не поднимает Ratelimited, а возвращает JSON с кодом 429.

    Args:
        key: Ключ для группировки (ip, user_or_ip, header:x-real-ip)
        rate: Лимит (формат: <count>/<period>, например '10/m', '100/h', '1000/d')
        method: HTTP методы для ограничения (ratelimit.ALL, ratelimit.UNSAFE, 'GET', 'POST')

    Периоды:
        s - секунда
        m - минута
        h - час
        d - день
    """
    def decorator(func):
        @wraps(func)
        @ratelimit(key=key, rate=rate, method=method, block=False)
        def wrapper(request, *args, **kwargs):
            if getattr(request, 'limited', False):
                user = getattr(request, 'user', None)
                logger.warning(
                    f"Rate limit exceeded for {func.__name__}: "
                    f"key={key}, rate={rate}, "
                    f"ip={request.META.get('REMOTE_ADDR')}, "
                    f"user={user if user is not None and user.is_authenticated else 'anonymous'}"
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
    """
    Умеренный rate limiting для endpoints получения данных

    Default: 60 запросов в минуту
    """
    return api_ratelimit(key='user_or_ip', rate=rate, method=ratelimit.ALL)


def api_write_ratelimit(rate='10/m'):
    """
    Строгий rate limiting для endpoints записи данных

    Default: 10 запросов в минуту
    """
    return api_ratelimit(key='user_or_ip', rate=rate, method=ratelimit.UNSAFE)
