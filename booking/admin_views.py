"""
API для админ-панели бронирований
Список и создание бронирований, отмена, блокировки, статистика
"""
import logging

from django.contrib.admin.views.decorators import staff_member_required
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from .analytics import get_dashboard_stats, get_zone_stats
from .exceptions import BookingConflictError, BookingValidationError
from .forms import AdminBookingForm, BlockedTimeForm
from .models import BlockedTime, Booking, Zone
from .services import BookingService
from .utils import to_12_hour, to_date
from .views import error_response, form_error_response, request_data, serialize_booking, zone_not_found

logger = logging.getLogger(__name__)


def serialize_blocked_time(block):
    return {
        'id': block.id,
        'zone_id': block.zone_id,
        'zone_name': block.zone.name if block.zone_id else None,
        'day_of_week': block.day_of_week,
        'day_name': block.get_day_of_week_display(),
        'start_time': to_12_hour(block.start_time),
        'end_time': to_12_hour(block.end_time),
        'reason': block.reason,
        'active': block.active,
    }


@staff_member_required
@require_http_methods(["GET"])
def bookings_list_api(request):
    """
    API: Список бронирований
    GET /booking/admin/api/bookings/?status=confirmed&date=2025-07-04&zone=2
    """
    bookings_qs = Booking.objects.select_related('zone')

    status_filter = request.GET.get('status')  # pending, confirmed, cancelled
    if status_filter:
        bookings_qs = bookings_qs.filter(status=status_filter)

    date_str = request.GET.get('date')
    if date_str:
        try:
            bookings_qs = bookings_qs.filter(date=to_date(date_str))
        except ValueError:
            return error_response('validation_error', 'Дата должна быть в формате YYYY-MM-DD')

    zone_id = request.GET.get('zone')
    if zone_id:
        if not zone_id.isdigit():
            return error_response('validation_error', 'Некорректная зона')
        bookings_qs = bookings_qs.filter(zone_id=zone_id)

    bookings = bookings_qs.order_by('date', 'start_time')

    return JsonResponse({
        'success': True,
        'count': len(bookings),
        'bookings': [serialize_booking(booking) for booking in bookings],
    })


@staff_member_required
@require_http_methods(["POST"])
def booking_create_api(request):
    """
    API: Бронирование администратором (звонок, оплата на месте)
    POST /booking/admin/api/bookings/create/

    Правило заблаговременности не применяется, остальные проверки те же.
    """
    data = request_data(request)
    if data is None:
        return error_response('invalid_json', 'Некорректный JSON')

    form = AdminBookingForm(data)
    if not form.is_valid():
        return form_error_response(form)

    zone = Zone.objects.filter(pk=form.cleaned_data['zone']).first()
    if zone is None:
        return zone_not_found()

    cleaned = form.cleaned_data

    try:
        booking = BookingService.create_booking(
            zone,
            cleaned['date'],
            cleaned['start_time'],
            cleaned['duration'],
            form.customer(),
            timezone.now(),
            payment_id=cleaned.get('payment_id', ''),
            coupon_code=cleaned.get('coupon_code', ''),
            enforce_lead_time=False,
        )
    except BookingValidationError as e:
        return error_response(e.code, e.message)
    except BookingConflictError as e:
        return error_response(e.code, e.message, status=409)
    except Exception as e:
        logger.error(f"Error in booking_create_api: {e}", exc_info=True)
        return error_response('server_error', 'Не удалось создать бронирование', status=500)

    logger.info(f"Booking {booking.pk} created by staff {request.user}")

    return JsonResponse({
        'success': True,
        'message': 'Бронирование создано',
        'booking': serialize_booking(booking),
    }, status=201)


@staff_member_required
@require_http_methods(["POST"])
def booking_cancel_api(request, booking_id):
    """
    API: Отмена бронирования
    POST /booking/admin/api/bookings/<id>/cancel/
    Body: {reason?}
    """
    booking = Booking.objects.select_related('zone').filter(pk=booking_id).first()
    if booking is None:
        return error_response('not_found', 'Бронирование не найдено', status=404)

    data = request_data(request)
    if data is None:
        return error_response('invalid_json', 'Некорректный JSON')

    try:
        cancelled = BookingService.cancel_booking(booking, reason=data.get('reason', ''))
    except Exception as e:
        logger.error(f"Error in booking_cancel_api: {e}", exc_info=True)
        return error_response('server_error', 'Не удалось отменить бронирование', status=500)

    if not cancelled:
        return error_response('already_cancelled', 'Бронирование уже отменено')

    return JsonResponse({
        'success': True,
        'message': 'Бронирование отменено',
        'booking': serialize_booking(booking),
    })


@staff_member_required
@require_http_methods(["GET", "POST"])
def blocked_times_api(request):
    """
    API: Еженедельные блокировки
    GET  /booking/admin/api/blocked-times/ - список
    POST /booking/admin/api/blocked-times/ - создать
    """
    if request.method == 'GET':
        blocks = BlockedTime.objects.select_related('zone')
        if request.GET.get('active') == '1':
            blocks = blocks.filter(active=True)

        return JsonResponse({
            'success': True,
            'blocked_times': [serialize_blocked_time(block) for block in blocks],
        })

    data = request_data(request)
    if data is None:
        return error_response('invalid_json', 'Некорректный JSON')

    form = BlockedTimeForm(data)
    if not form.is_valid():
        return form_error_response(form)

    block = form.save()
    logger.info(f"Blocked time {block.pk} created by staff {request.user}: {block}")

    return JsonResponse({
        'success': True,
        'blocked_time': serialize_blocked_time(block),
    }, status=201)


@staff_member_required
@require_http_methods(["POST"])
def blocked_time_deactivate_api(request, block_id):
    """
    API: Снять блокировку
    POST /booking/admin/api/blocked-times/<id>/deactivate/
    """
    block = BlockedTime.objects.select_related('zone').filter(pk=block_id).first()
    if block is None:
        return error_response('not_found', 'Блокировка не найдена', status=404)

    block.active = False
    block.save(update_fields=['active'])
    logger.info(f"Blocked time {block.pk} deactivated by staff {request.user}")

    return JsonResponse({
        'success': True,
        'blocked_time': serialize_blocked_time(block),
    })


@staff_member_required
@require_http_methods(["GET"])
def stats_api(request):
    """
    API: Статистика для дашборда
    GET /booking/admin/api/stats/
    """
    now = timezone.now()
    stats = get_dashboard_stats(now)
    stats['zones'] = get_zone_stats(now=now)['zones']

    return JsonResponse({
        'success': True,
        'stats': stats,
    })
