"""
Константы для приложения booking
"""
from datetime import time as dt_time

# Часы работы зон по умолчанию (если у зоны не указаны свои)
OPENING_TIME = dt_time(7, 0)  # 07:00
CLOSING_TIME = dt_time(21, 0)  # 21:00

# Сетка слотов
SLOT_STEP_MINUTES = 30  # Шаг сетки бронирования (в минутах)
LEDGER_CELL_MINUTES = 15  # Ячейка учёта занятости; шаг сетки должен быть ей кратен

# Ограничения на бронирование
MIN_LEAD_HOURS = 4  # За сколько часов до начала можно бронировать

# Конвертация времени
MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * 60

# Статусы бронирования
BOOKING_PENDING = 'pending'
BOOKING_CONFIRMED = 'confirmed'
BOOKING_CANCELLED = 'cancelled'

BOOKING_STATUS_CHOICES = [
    (BOOKING_PENDING, 'В ожидании'),
    (BOOKING_CONFIRMED, 'Подтверждено'),
    (BOOKING_CANCELLED, 'Отменено'),
]

# Статусы ячеек сетки слотов
SLOT_PAST_DATE = 'past_date'
SLOT_WALK_IN = 'walk_in'
SLOT_UNAVAILABLE = 'unavailable'
SLOT_BLOCKED = 'blocked'
SLOT_BOOKED = 'booked'
SLOT_INVALID_DURATION = 'invalid_duration'
SLOT_AVAILABLE = 'available'

# Коды причин недоступности
REASON_PAST_DATE = 'past_date'
REASON_WALK_IN = 'walk_in'
REASON_INACTIVE_ZONE = 'inactive_zone'
REASON_BEFORE_OPEN = 'before_open'
REASON_AFTER_CLOSE = 'after_close'
REASON_LEAD_TIME = 'lead_time'
REASON_BLOCKED = 'blocked'
REASON_BOOKED = 'booked'
REASON_OVERLAP = 'overlap'
REASON_INVALID_DURATION = 'invalid_duration'
REASON_MISALIGNED_START = 'misaligned_start'

# Дни недели (0 = воскресенье)
DAY_OF_WEEK_CHOICES = [
    (0, 'Воскресенье'),
    (1, 'Понедельник'),
    (2, 'Вторник'),
    (3, 'Среда'),
    (4, 'Четверг'),
    (5, 'Пятница'),
    (6, 'Суббота'),
]
