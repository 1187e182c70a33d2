"""
Сервисы для работы с бронированиями и уведомлениями
"""
import logging

from django.conf import settings
from django.core.mail import send_mail
from django.db import DatabaseError, IntegrityError, transaction
from django.template.loader import render_to_string

from .constants import (
    BOOKING_CONFIRMED,
    REASON_AFTER_CLOSE,
    REASON_BEFORE_OPEN,
    REASON_BLOCKED,
    REASON_INACTIVE_ZONE,
    REASON_INVALID_DURATION,
    REASON_LEAD_TIME,
    REASON_MISALIGNED_START,
    REASON_PAST_DATE,
    REASON_WALK_IN,
)
from .exceptions import BookingConflictError, BookingValidationError
from .models import Booking, BookingSlot, Zone
from .pricing import calculate_total, validate_coupon
from .scheduling import (
    find_blocking,
    find_conflicting_booking,
    get_lead_hours,
    get_slot_step_minutes,
    is_booking_time_valid,
    is_time_slot_available,
    local_naive,
)
from .utils import (
    calculate_end_time,
    minutes_of_day,
    to_12_hour,
    to_24_hour,
    to_date,
    validate_booking_duration,
    validate_working_hours,
)

logger = logging.getLogger(__name__)


class BookingService:
    """Сервис для создания, проверки и отмены бронирований"""

    @staticmethod
    def validate_request(zone, booking_date, start_time, duration_hours, now, enforce_lead_time=True):
        """
        Проверка запроса на бронирование до записи в БД

        Raises:
            BookingValidationError с кодом причины
        """
        booking_date = to_date(booking_date)
        step = get_slot_step_minutes()

        if not zone.active:
            raise BookingValidationError('Зона недоступна для бронирования', REASON_INACTIVE_ZONE)

        if zone.is_walk_in:
            raise BookingValidationError(
                f'{zone.name} работает без бронирования - просто приходите в часы работы',
                REASON_WALK_IN,
            )

        if booking_date < local_naive(now).date():
            raise BookingValidationError('Нельзя бронировать на прошедшую дату', REASON_PAST_DATE)

        is_valid, error = validate_booking_duration(duration_hours, zone.min_duration, zone.max_duration, step)
        if not is_valid:
            raise BookingValidationError(error, REASON_INVALID_DURATION)

        if minutes_of_day(start_time) % step:
            raise BookingValidationError(
                f'Время начала должно совпадать с сеткой {step} минут',
                REASON_MISALIGNED_START,
            )

        is_valid, error = validate_working_hours(start_time, duration_hours, zone.available_start, zone.available_end)
        if not is_valid:
            before_open = minutes_of_day(start_time) < minutes_of_day(zone.available_start)
            raise BookingValidationError(error, REASON_BEFORE_OPEN if before_open else REASON_AFTER_CLOSE)

        if enforce_lead_time and not is_booking_time_valid(booking_date, start_time, now):
            raise BookingValidationError(
                f'Бронировать нужно минимум за {get_lead_hours()} ч до начала',
                REASON_LEAD_TIME,
            )

        block = find_blocking(zone.pk, booking_date, start_time, duration_hours)
        if block is not None:
            raise BookingValidationError(
                f'Это время закрыто: {block.reason or "техническое обслуживание"}',
                REASON_BLOCKED,
            )

    @staticmethod
    def check_availability(zone, booking_date, start_time, duration_hours, now):
        """
        Итоговая проверка перед оплатой

        Если бронирования не удалось прочитать - слот считается занятым.
        """
        if not zone.active or zone.is_walk_in:
            return False

        booking_date = to_date(booking_date)
        try:
            bookings = list(Booking.objects.confirmed().for_day(zone.pk, booking_date))
        except DatabaseError as e:
            logger.error(f"Error fetching bookings for zone {zone.pk} on {booking_date}: {e}", exc_info=True)
            return False

        return is_time_slot_available(bookings, zone.pk, booking_date, start_time, duration_hours, now)

    @staticmethod
    def create_booking(zone, booking_date, start_time, duration_hours, customer, now,
                       payment_id='', coupon_code='', enforce_lead_time=True):
        """
        Создать подтверждённое бронирование после успешной оплаты

        Args:
            zone: Зона
            booking_date: Дата
            start_time: Время начала "h:mm AM/PM" или "HH:mm"
            duration_hours: Продолжительность в часах
            customer: Словарь name, email, phone, group_size, special_requests
            now: Текущий момент
            payment_id: Ссылка на платёж во внешней платёжной системе
            coupon_code: Код купона
            enforce_lead_time: False для бронирований администратором

        Returns:
            Booking

        Raises:
            BookingValidationError: данные или правила не позволяют бронировать
            BookingConflictError: интервал занят (в том числе параллельным запросом)
        """
        booking_date = to_date(booking_date)
        BookingService.validate_request(zone, booking_date, start_time, duration_hours, now, enforce_lead_time)

        coupon = validate_coupon(coupon_code, duration_hours, now) if coupon_code else None
        total_cost = calculate_total(zone, duration_hours, coupon)
        end_time = to_24_hour(calculate_end_time(start_time, duration_hours))

        try:
            with transaction.atomic():
                # Блокируем строку зоны: запись по зоне идёт последовательно там, где БД это умеет
                Zone.objects.select_for_update().get(pk=zone.pk)

                existing = list(Booking.objects.confirmed().for_day(zone.pk, booking_date))
                conflict = find_conflicting_booking(existing, zone.pk, booking_date, start_time, duration_hours)
                if conflict is not None:
                    raise BookingConflictError(
                        f'Выбранное время уже занято с {to_12_hour(conflict.start_time)} '
                        f'до {to_12_hour(conflict.end_time)}',
                        conflicting=conflict,
                    )

                booking = Booking.objects.create(
                    zone=zone,
                    date=booking_date,
                    start_time=to_24_hour(start_time),
                    end_time=end_time,
                    duration=duration_hours,
                    customer_name=customer.get('name', ''),
                    customer_email=customer.get('email', ''),
                    customer_phone=customer.get('phone', ''),
                    group_size=customer.get('group_size', ''),
                    special_requests=customer.get('special_requests', ''),
                    total_cost=total_cost,
                    coupon_code=coupon_code if coupon and coupon['valid'] else '',
                    status=BOOKING_CONFIRMED,
                    payment_id=payment_id,
                )
                booking.refresh_from_db()

                # Уникальный индекс по ячейкам отклонит пересекающуюся запись
                BookingSlot.objects.bulk_create([
                    BookingSlot(booking=booking, zone=zone, date=booking_date, slot_start=slot_start)
                    for slot_start in booking.slot_starts()
                ])
        except IntegrityError:
            logger.warning(
                f"Booking conflict on write: zone {zone.pk} on {booking_date} "
                f"at {start_time} for {duration_hours}h (payment {payment_id or '-'})"
            )
            raise BookingConflictError('Это время только что забронировали. Пожалуйста, выберите другое')

        transaction.on_commit(lambda: NotificationService.notify_booking_created(booking))

        logger.info(
            f"Booking created: {booking.customer_name} booked zone {zone.name} "
            f"on {booking_date} from {booking.start_time} to {booking.end_time} "
            f"(Duration: {duration_hours}h, Total: {total_cost}, Payment: {payment_id or '-'})"
        )
        return booking

    @staticmethod
    def cancel_booking(booking, reason=''):
        """
        Отмена бронирования администратором

        Returns:
            True, если бронирование было отменено сейчас
        """
        with transaction.atomic():
            cancelled = booking.cancel()

        if cancelled:
            transaction.on_commit(lambda: NotificationService.notify_booking_cancelled(booking, reason))
            logger.info(f"Booking {booking.pk} cancelled ({reason or 'no reason'})")

        return cancelled


class NotificationService:
    """Сервис для отправки email уведомлений"""

    EMAIL_TEMPLATES = {
        'booking_created': {
            'subject': 'Подтверждение бронирования',
            'template': 'emails/booking_created.html',
        },
        'booking_business': {
            'subject': 'Новое бронирование',
            'template': 'emails/booking_business.html',
        },
        'booking_cancelled': {
            'subject': 'Бронирование отменено',
            'template': 'emails/booking_cancelled.html',
        },
    }

    @staticmethod
    def send_email(recipient, notification_type, context=None):
        """
        Отправить email уведомление

        Ошибка отправки логируется и не отменяет бронирование.
        """
        if not recipient:
            logger.warning(f"No recipient for notification type: {notification_type}")
            return False

        template_info = NotificationService.EMAIL_TEMPLATES[notification_type]

        try:
            context = context or {}
            context.update({
                'site_name': getattr(settings, 'SITE_NAME', 'Splash Booking'),
                'site_url': getattr(settings, 'SITE_URL', 'http://localhost:8000'),
            })

            html_message = render_to_string(template_info['template'], context)

            send_mail(
                subject=template_info['subject'],
                message='',
                from_email=getattr(settings, 'DEFAULT_FROM_EMAIL', 'noreply@splashbooking.local'),
                recipient_list=[recipient],
                html_message=html_message,
                fail_silently=False,
            )

            logger.info(f"Email sent to {recipient} for notification type: {notification_type}")
            return True

        except Exception as e:
            logger.error(f"Error sending email to {recipient}: {e}", exc_info=True)
            return False

    @staticmethod
    def _booking_context(booking):
        return {
            'booking': booking,
            'start': to_12_hour(booking.start_time),
            'end': to_12_hour(booking.end_time),
        }

    @staticmethod
    def notify_booking_created(booking):
        """Письмо клиенту и площадке о новом бронировании"""
        context = NotificationService._booking_context(booking)
        sent = NotificationService.send_email(booking.customer_email, 'booking_created', dict(context))
        NotificationService.send_email(getattr(settings, 'BUSINESS_EMAIL', ''), 'booking_business', dict(context))
        return sent

    @staticmethod
    def notify_booking_cancelled(booking, reason=''):
        """Письмо клиенту об отмене"""
        context = NotificationService._booking_context(booking)
        context['reason'] = reason or 'Отмена администратором'
        return NotificationService.send_email(booking.customer_email, 'booking_cancelled', context)
