"""
Расчёт стоимости бронирования и проверка купонов
"""
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from .scheduling import local_naive

COUPON_FREE = 'free'
COUPON_PERCENTAGE = 'percentage'


def _invalid(error=None):
    return {'valid': False, 'type': None, 'discount': 0, 'description': None, 'error': error}


def validate_coupon(code, duration_hours=None, now=None):
    """
    Проверка купона по таблице settings.BOOKING_COUPONS

    Args:
        code: Код купона (регистр не важен)
        duration_hours: Продолжительность бронирования (для купонов с min_duration)
        now: Текущий момент (для купонов с valid_until)

    Returns:
        Словарь {'valid', 'type', 'discount', 'description', 'error'}
    """
    if not code:
        return _invalid()

    coupon = getattr(settings, 'BOOKING_COUPONS', {}).get(code.strip().upper())
    if not coupon:
        return _invalid()

    valid_until = coupon.get('valid_until')
    if valid_until and now is not None:
        expires = datetime.combine(datetime.strptime(valid_until, '%Y-%m-%d').date(), time(23, 59, 59))
        if local_naive(now) > expires:
            return _invalid('Срок действия купона истёк')

    min_duration = coupon.get('min_duration')
    if min_duration and duration_hours is not None and float(duration_hours) < float(min_duration):
        return _invalid(f'Купон действует при бронировании от {min_duration} ч')

    return {
        'valid': True,
        'type': coupon['type'],
        'discount': coupon.get('discount', 0),
        'description': coupon.get('description', ''),
        'error': None,
    }


def calculate_total(zone, duration_hours, coupon=None):
    """
    Стоимость: часовая ставка зоны * продолжительность, с учётом купона

    Args:
        zone: Зона
        duration_hours: Продолжительность в часах
        coupon: Результат validate_coupon или None

    Returns:
        Decimal, округлённый до копеек
    """
    subtotal = Decimal(zone.hourly_rate) * Decimal(str(duration_hours))

    if coupon and coupon['valid']:
        if coupon['type'] == COUPON_FREE:
            subtotal = Decimal('0')
        elif coupon['type'] == COUPON_PERCENTAGE:
            subtotal = subtotal * (Decimal('100') - Decimal(str(coupon['discount']))) / Decimal('100')

    return subtotal.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
