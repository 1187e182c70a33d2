"""
Движок доступности: правило 4 часов, еженедельные блокировки,
классификация ячеек сетки и итоговая проверка доступности слота.

Все функции, зависящие от текущего времени, получают now явно.
"""
import logging
from datetime import datetime, timedelta

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
from django.db.models import Q
from django.utils import timezone

from .constants import (
    BOOKING_CONFIRMED,
    CLOSING_TIME,
    LEDGER_CELL_MINUTES,
    MIN_LEAD_HOURS,
    OPENING_TIME,
    REASON_AFTER_CLOSE,
    REASON_BEFORE_OPEN,
    REASON_BLOCKED,
    REASON_BOOKED,
    REASON_INVALID_DURATION,
    REASON_LEAD_TIME,
    REASON_OVERLAP,
    REASON_PAST_DATE,
    REASON_WALK_IN,
    SLOT_AVAILABLE,
    SLOT_BLOCKED,
    SLOT_BOOKED,
    SLOT_INVALID_DURATION,
    SLOT_PAST_DATE,
    SLOT_STEP_MINUTES,
    SLOT_UNAVAILABLE,
    SLOT_WALK_IN,
)
from .models import BlockedTime, Booking
from .utils import (
    day_of_week,
    end_minutes,
    generate_time_slots,
    minutes_of_day,
    minutes_to_time,
    overlaps,
    to_12_hour,
    to_date,
)

logger = logging.getLogger(__name__)


# ========== НАСТРОЙКИ ПОЛИТИКИ ==========

def get_lead_hours():
    return getattr(settings, 'BOOKING_MIN_LEAD_HOURS', MIN_LEAD_HOURS)


def get_slot_step_minutes():
    """
    Шаг сетки слотов в минутах

    Ячейки учёта занятости имеют фиксированный размер LEDGER_CELL_MINUTES,
    поэтому шаг должен быть ему кратен.
    """
    step = getattr(settings, 'BOOKING_SLOT_STEP_MINUTES', SLOT_STEP_MINUTES)
    if step <= 0 or step % LEDGER_CELL_MINUTES:
        raise ImproperlyConfigured(
            f"BOOKING_SLOT_STEP_MINUTES must be a positive multiple of {LEDGER_CELL_MINUTES}, got {step}"
        )
    return step


def get_opening_time():
    return getattr(settings, 'BOOKING_OPENING_TIME', OPENING_TIME)


def get_closing_time():
    return getattr(settings, 'BOOKING_CLOSING_TIME', CLOSING_TIME)


def _field(record, name):
    """Поле записи: модель Django или словарь из хранилища"""
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name)


def local_naive(now):
    """now в локальном времени площадки, без tzinfo"""
    if timezone.is_aware(now):
        return timezone.localtime(now).replace(tzinfo=None)
    return now


# ========== ПРАВИЛО ЗАБЛАГОВРЕМЕННОСТИ ==========

def is_booking_time_valid(booking_date, start_time, now, lead_hours=None):
    """
    Начало слота не раньше чем now + lead_hours

    Сравниваются абсолютные моменты (дата + время), а не только даты.
    """
    if lead_hours is None:
        lead_hours = get_lead_hours()

    slot_start = datetime.combine(to_date(booking_date), minutes_to_time(minutes_of_day(start_time)))
    return slot_start >= local_naive(now) + timedelta(hours=lead_hours)


def minimum_bookable_time(booking_date, now, lead_hours=None, closing=None):
    """
    Самое раннее время, доступное для бронирования сегодня

    Args:
        booking_date: Дата бронирования
        now: Текущий момент
        lead_hours: Минимальный запас в часах
        closing: Время закрытия площадки

    Returns:
        "h:mm AM/PM" или None, если дата не сегодняшняя
        или сегодня уже ничего не забронировать
    """
    if lead_hours is None:
        lead_hours = get_lead_hours()
    if closing is None:
        closing = get_closing_time()

    local_now = local_naive(now)
    if to_date(booking_date) != local_now.date():
        return None

    earliest = local_now + timedelta(hours=lead_hours)
    if earliest.date() != local_now.date():
        return None

    # До :30 включительно округляем к :30 этого часа, иначе к :00 следующего
    hour = earliest.hour
    if earliest.minute <= 30:
        minute = 30
    else:
        hour += 1
        minute = 0

    if hour * 60 + minute >= minutes_of_day(closing):
        return None

    return to_12_hour(f"{hour:02d}:{minute:02d}")


# ========== БЛОКИРОВКИ ==========

def blocked_times_for(zone_id, booking_date):
    """
    Активные еженедельные блокировки зоны на день недели даты

    Ошибка чтения из БД не блокирует бронирования: логируем и
    возвращаем пустой список.
    """
    try:
        return list(
            BlockedTime.objects.filter(
                active=True,
                day_of_week=day_of_week(booking_date),
            ).filter(
                Q(zone__isnull=True) | Q(zone_id=zone_id)
            )
        )
    except DatabaseError as e:
        logger.error(f"Error fetching blocked times for zone {zone_id} on {booking_date}: {e}", exc_info=True)
        return []


def applies_to(block, zone_id, booking_date):
    """
    Блокировка действует для зоны в день недели даты

    Записи без поля active считаются активными.
    """
    if _field(block, 'active') is False:
        return False

    if _field(block, 'day_of_week') != day_of_week(booking_date):
        return False

    block_zone = _field(block, 'zone_id')
    return block_zone is None or str(block_zone) == str(zone_id)


def find_blocking(zone_id, booking_date, start_time, duration_hours, blocked_times=None):
    """
    Первая блокировка, пересекающая [start, start + duration), или None

    Переданные блокировки отбираются так же, как в blocked_times_for:
    активные, на день недели даты, для всех зон или для этой зоны.
    """
    if blocked_times is None:
        blocked_times = blocked_times_for(zone_id, booking_date)

    start = minutes_of_day(start_time)
    end = end_minutes(start_time, duration_hours)

    for block in blocked_times:
        if not applies_to(block, zone_id, booking_date):
            continue
        if overlaps(start, end, minutes_of_day(_field(block, 'start_time')), minutes_of_day(_field(block, 'end_time'))):
            return block

    return None


def is_blocked(zone_id, booking_date, start_time, duration_hours, blocked_times=None):
    return find_blocking(zone_id, booking_date, start_time, duration_hours, blocked_times) is not None


# ========== ПЕРЕСЕЧЕНИЯ С БРОНИРОВАНИЯМИ ==========

def _confirmed_for(bookings, zone_id, booking_date):
    day = to_date(booking_date)
    for booking in bookings:
        if str(_field(booking, 'zone_id')) != str(zone_id):
            continue
        if _field(booking, 'status') != BOOKING_CONFIRMED:
            continue
        if to_date(_field(booking, 'date')) != day:
            continue
        yield booking


def find_booking_at(bookings, zone_id, booking_date, slot_time):
    """Подтверждённое бронирование, содержащее начало ячейки"""
    slot = minutes_of_day(slot_time)
    for booking in _confirmed_for(bookings, zone_id, booking_date):
        if minutes_of_day(_field(booking, 'start_time')) <= slot < minutes_of_day(_field(booking, 'end_time')):
            return booking
    return None


def find_conflicting_booking(bookings, zone_id, booking_date, start_time, duration_hours):
    """Подтверждённое бронирование, пересекающее [start, start + duration)"""
    start = minutes_of_day(start_time)
    end = end_minutes(start_time, duration_hours)
    for booking in _confirmed_for(bookings, zone_id, booking_date):
        if overlaps(start, end, minutes_of_day(_field(booking, 'start_time')), minutes_of_day(_field(booking, 'end_time'))):
            return booking
    return None


# ========== КЛАССИФИКАЦИЯ ЯЧЕЕК ==========

def _slot(status, code=None, reason=None, booking=None):
    return {'status': status, 'code': code, 'reason': reason, 'booking': booking}


def classify_slot(zone, booking_date, slot_time, duration_hours, bookings, blocked_times, now, lead_hours=None):
    """
    Статус ячейки сетки для зоны, даты и времени

    Правила проверяются строго по порядку, срабатывает первое:
    прошедшая дата, зона без бронирования, до открытия, после закрытия,
    правило 4 часов, блокировка, занято на начало ячейки,
    недопустимая продолжительность, пересечение с бронированием.

    Args:
        zone: Зона (модель или словарь)
        booking_date: Дата
        slot_time: Начало ячейки "h:mm AM/PM"
        duration_hours: Выбранная продолжительность
        bookings: Бронирования на дату (учитываются только confirmed)
        blocked_times: Блокировки зоны на дату; None - прочитать из БД
        now: Текущий момент

    Returns:
        Словарь {'status', 'code', 'reason', 'booking'}
    """
    local_now = local_naive(now)
    zone_id = _field(zone, 'id')

    if to_date(booking_date) < local_now.date():
        return _slot(SLOT_PAST_DATE, REASON_PAST_DATE)

    if _field(zone, 'is_walk_in'):
        return _slot(SLOT_WALK_IN, REASON_WALK_IN)

    slot_start = minutes_of_day(slot_time)
    open_min = minutes_of_day(_field(zone, 'available_start') or get_opening_time())
    close_min = minutes_of_day(_field(zone, 'available_end') or get_closing_time())

    if slot_start < open_min:
        return _slot(SLOT_UNAVAILABLE, REASON_BEFORE_OPEN)

    slot_end = end_minutes(slot_time, duration_hours)
    if slot_end > close_min:
        return _slot(SLOT_UNAVAILABLE, REASON_AFTER_CLOSE)

    if not is_booking_time_valid(booking_date, slot_time, local_now, lead_hours):
        return _slot(SLOT_UNAVAILABLE, REASON_LEAD_TIME)

    block = find_blocking(zone_id, booking_date, slot_time, duration_hours, blocked_times)
    if block is not None:
        return _slot(SLOT_BLOCKED, REASON_BLOCKED, reason=_field(block, 'reason'))

    existing = find_booking_at(bookings, zone_id, booking_date, slot_time)
    if existing is not None:
        return _slot(SLOT_BOOKED, REASON_BOOKED, booking=existing)

    if float(duration_hours) < float(_field(zone, 'min_duration')) or \
            float(duration_hours) > float(_field(zone, 'max_duration')):
        return _slot(SLOT_INVALID_DURATION, REASON_INVALID_DURATION)

    conflict = find_conflicting_booking(bookings, zone_id, booking_date, slot_time, duration_hours)
    if conflict is None:
        return _slot(SLOT_AVAILABLE)

    return _slot(SLOT_UNAVAILABLE, REASON_OVERLAP, booking=conflict)


# ========== ИТОГОВАЯ ПРОВЕРКА ==========

def is_time_slot_available(bookings, zone_id, booking_date, start_time, duration_hours, now,
                           blocked_times=None, lead_hours=None):
    """
    Можно ли бронировать [start, start + duration) в зоне на дату

    Проверка перед оплатой: правило 4 часов, блокировки (перечитываются
    из БД, если не переданы), пересечение с подтверждёнными бронированиями.
    Не заменяет ограничение уникальности при записи.
    """
    if not is_booking_time_valid(booking_date, start_time, now, lead_hours):
        return False

    if is_blocked(zone_id, booking_date, start_time, duration_hours, blocked_times):
        return False

    return find_conflicting_booking(bookings, zone_id, booking_date, start_time, duration_hours) is None


# ========== СЕТКА ==========

def build_slot_grid(zones, booking_date, duration_hours, now, bookings=None, lead_hours=None):
    """
    Сетка статусов для набора зон на дату

    Бронирования и блокировки читаются один раз на дату/зону
    и используются всеми ячейками.
    """
    booking_date = to_date(booking_date)
    zones = list(zones)

    if bookings is None:
        bookings = list(
            Booking.objects.confirmed().filter(date=booking_date, zone__in=[zone.pk for zone in zones])
        )

    if zones:
        opening = min(zone.available_start for zone in zones)
        closing = max(zone.available_end for zone in zones)
    else:
        opening, closing = get_opening_time(), get_closing_time()

    times = generate_time_slots(opening, closing, get_slot_step_minutes())

    rows = []
    for zone in zones:
        blocks = blocked_times_for(zone.pk, booking_date)
        slots = []
        for slot_time in times:
            state = classify_slot(zone, booking_date, slot_time, duration_hours, bookings, blocks, now, lead_hours)
            state['time'] = slot_time
            slots.append(state)
        rows.append({'zone': zone, 'slots': slots})

    return {
        'date': booking_date,
        'duration': duration_hours,
        'times': times,
        'minimum_bookable_time': minimum_bookable_time(booking_date, now, lead_hours, closing),
        'zones': rows,
    }
