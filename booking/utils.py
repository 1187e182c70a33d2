"""
Утилиты для модуля бронирования: арифметика времени и валидация
"""
from datetime import date, datetime, time

from .constants import MINUTES_PER_DAY, MINUTES_PER_HOUR, SLOT_STEP_MINUTES


def _split_time(value):
    """
    Разбирает время на (часы, минуты)

    Args:
        value: datetime.time, "HH:mm", "HH:mm:ss" или "h:mm AM/PM"

    Returns:
        Кортеж (hour, minute) в 24-часовом формате
    """
    if isinstance(value, time):
        return value.hour, value.minute

    parts = value.strip().split()
    clock = parts[0].split(':')
    hour = int(clock[0])
    minute = int(clock[1])

    if len(parts) > 1:
        meridiem = parts[1].upper()
        if meridiem == 'PM' and hour < 12:
            hour += 12
        if meridiem == 'AM' and hour == 12:
            hour = 0

    return hour, minute


def to_24_hour(time12):
    """Конвертирует "h:mm AM/PM" в "HH:mm" (12 AM -> 00, 12 PM -> 12)"""
    hour, minute = _split_time(time12)
    return f"{hour:02d}:{minute:02d}"


def to_12_hour(time24):
    """Конвертирует "HH:mm" / "HH:mm:ss" / time в "h:mm AM/PM" без ведущего нуля"""
    hour, minute = _split_time(time24)
    hour12 = hour % 12 or 12
    meridiem = 'PM' if hour >= 12 else 'AM'
    return f"{hour12}:{minute:02d} {meridiem}"


def minutes_of_day(value):
    """Количество минут от полуночи: hour * 60 + minute"""
    hour, minute = _split_time(value)
    return hour * MINUTES_PER_HOUR + minute


def minutes_to_time(minutes):
    """Минуты от полуночи -> datetime.time (по модулю суток)"""
    minutes = minutes % MINUTES_PER_DAY
    return time(hour=minutes // MINUTES_PER_HOUR, minute=minutes % MINUTES_PER_HOUR)


def duration_minutes(duration_hours):
    """Продолжительность в часах (шаг 0.5, int/float/Decimal) -> минуты"""
    return int(round(float(duration_hours) * MINUTES_PER_HOUR))


def end_minutes(start_time, duration_hours):
    """
    Минута окончания сеанса без заворота через полночь

    Может быть больше 1440, чтобы проверки закрытия сравнивали честно.
    """
    return minutes_of_day(start_time) + duration_minutes(duration_hours)


def calculate_end_time(start_time, duration_hours):
    """
    Время окончания сеанса в формате "h:mm AM/PM"

    Args:
        start_time: Время начала ("h:mm AM/PM", "HH:mm" или time)
        duration_hours: Продолжительность в часах

    Returns:
        Время окончания по модулю суток
    """
    end = end_minutes(start_time, duration_hours) % MINUTES_PER_DAY
    return to_12_hour(f"{end // MINUTES_PER_HOUR:02d}:{end % MINUTES_PER_HOUR:02d}")


def generate_time_slots(start_time='07:00', end_time='21:00', step_minutes=SLOT_STEP_MINUTES):
    """
    Сетка слотов от start_time до end_time (end_time не включается)

    Returns:
        Список строк "h:mm AM/PM"
    """
    slots = []
    minutes = minutes_of_day(start_time)
    last = minutes_of_day(end_time)

    while minutes < last:
        slots.append(to_12_hour(minutes_to_time(minutes)))
        minutes += step_minutes

    return slots


def overlaps(a_start, a_end, b_start, b_end):
    """Пересечение полуинтервалов [a_start, a_end) и [b_start, b_end)"""
    return a_start < b_end and b_start < a_end


def to_date(value):
    """date или "YYYY-MM-DD" -> date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, '%Y-%m-%d').date()


def day_of_week(value):
    """День недели, 0 = воскресенье ... 6 = суббота"""
    return (to_date(value).weekday() + 1) % 7


def validate_booking_duration(duration_hours, min_hours=1, max_hours=3, step_minutes=SLOT_STEP_MINUTES):
    """
    Проверка продолжительности бронирования

    Args:
        duration_hours: Продолжительность в часах
        min_hours: Минимальная продолжительность в часах
        max_hours: Максимальная продолжительность в часах
        step_minutes: Шаг сетки

    Returns:
        (is_valid, error_message)
    """
    minutes = duration_minutes(duration_hours)

    if minutes <= 0 or minutes % step_minutes:
        return False, f"Продолжительность должна быть кратна {step_minutes} минутам"

    if float(duration_hours) < float(min_hours):
        return False, f"Минимальная продолжительность бронирования - {format_hours(min_hours)}"

    if float(duration_hours) > float(max_hours):
        return False, f"Максимальная продолжительность бронирования - {format_hours(max_hours)}"

    return True, None


def validate_working_hours(start_time, duration_hours, opening, closing):
    """
    Проверка рабочих часов зоны

    Args:
        start_time: Время начала
        duration_hours: Продолжительность в часах
        opening: Время открытия зоны
        closing: Время закрытия зоны

    Returns:
        (is_valid, error_message)
    """
    if minutes_of_day(start_time) < minutes_of_day(opening) or \
            end_minutes(start_time, duration_hours) > minutes_of_day(closing):
        return False, f"Бронирование доступно с {to_12_hour(opening)} до {to_12_hour(closing)}"

    return True, None


def format_hours(hours):
    """Продолжительность для сообщений: 1 -> "1 ч", 1.5 -> "1.5 ч" """
    value = float(hours)
    if value.is_integer():
        return f"{int(value)} ч"
    return f"{value:g} ч"
