"""
Исключения модуля бронирования
Выбрасываются в services.py, перехватываются во views.py
"""


class BookingError(Exception):
    """Базовое исключение бронирования"""

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        self.code = code


class BookingValidationError(BookingError):
    """Неверные данные или нарушение правил (часы работы, 4 часа заранее, блокировка)"""


class BookingConflictError(BookingError):
    """Интервал уже занят другим подтверждённым бронированием"""

    def __init__(self, message, conflicting=None):
        super().__init__(message, code='conflict')
        self.conflicting = conflicting
