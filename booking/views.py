import json
import logging

from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from .decorators import api_data_ratelimit, api_write_ratelimit
from .exceptions import BookingConflictError, BookingValidationError
from .forms import AvailabilityForm, BookingCreateForm, CouponForm, SlotGridForm
from .models import Zone
from .pricing import calculate_total, validate_coupon
from .scheduling import build_slot_grid
from .services import BookingService
from .utils import to_12_hour

logger = logging.getLogger(__name__)


# ========== ВСПОМОГАТЕЛЬНЫЕ ==========

def request_data(request):
    """
    Данные запроса: JSON тело или обычная форма

    Returns:
        dict-подобный объект или None, если JSON не разобрать
    """
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except ValueError:
            return None
        return data if isinstance(data, dict) else None
    return request.POST


def error_response(error, message, status=400, **extra):
    payload = {'success': False, 'error': error, 'message': message}
    payload.update(extra)
    return JsonResponse(payload, status=status)


def form_error_response(form):
    return error_response(
        'validation_error',
        'Проверьте правильность заполнения полей',
        errors=form.errors.get_json_data(),
    )


def zone_not_found():
    return error_response('zone_not_found', 'Зона не найдена или недоступна', status=404)


def serialize_zone(zone):
    return {
        'id': zone.id,
        'name': zone.name,
        'slug': zone.slug,
        'description': zone.description,
        'capacity': zone.capacity,
        'hourly_rate': float(zone.hourly_rate),
        'min_duration': float(zone.min_duration),
        'max_duration': float(zone.max_duration),
        'available_start': to_12_hour(zone.available_start),
        'available_end': to_12_hour(zone.available_end),
        'is_walk_in': zone.is_walk_in,
    }


def serialize_booking(booking):
    return {
        'id': booking.id,
        'zone_id': booking.zone_id,
        'zone_name': booking.zone.name,
        'date': booking.date.isoformat(),
        'start_time': to_12_hour(booking.start_time),
        'end_time': to_12_hour(booking.end_time),
        'duration': float(booking.duration),
        'customer_name': booking.customer_name,
        'customer_email': booking.customer_email,
        'customer_phone': booking.customer_phone,
        'group_size': booking.group_size,
        'special_requests': booking.special_requests,
        'total_cost': str(booking.total_cost),
        'coupon_code': booking.coupon_code,
        'status': booking.status,
        'payment_id': booking.payment_id,
        'created_at': booking.created_at.isoformat() if booking.created_at else None,
    }


def serialize_grid(grid):
    rows = []
    for row in grid['zones']:
        rows.append({
            'zone': serialize_zone(row['zone']),
            'slots': [
                {
                    'time': slot['time'],
                    'status': slot['status'],
                    'code': slot['code'],
                    'reason': slot['reason'],
                    'booking_id': slot['booking'].id if slot['booking'] is not None else None,
                }
                for slot in row['slots']
            ],
        })

    return {
        'date': grid['date'].isoformat(),
        'duration': float(grid['duration']),
        'times': grid['times'],
        'minimum_bookable_time': grid['minimum_bookable_time'],
        'zones': rows,
    }


# ========== ПУБЛИЧНЫЕ API ==========

@api_data_ratelimit()
@require_GET
def zones_list(request):
    """Список активных зон"""
    zones = Zone.objects.filter(active=True)
    return JsonResponse({
        'success': True,
        'zones': [serialize_zone(zone) for zone in zones],
    })


@api_data_ratelimit()
@require_GET
def available_slots(request):
    """
    Сетка слотов на дату

    GET /booking/slots/?date=2025-07-04&duration=1.5&zone=2
    """
    form = SlotGridForm(request.GET)
    if not form.is_valid():
        return form_error_response(form)

    zones = Zone.objects.filter(active=True)
    zone_id = form.cleaned_data.get('zone')
    if zone_id:
        zones = zones.filter(pk=zone_id)
        if not zones.exists():
            return zone_not_found()

    try:
        grid = build_slot_grid(
            zones,
            form.cleaned_data['date'],
            form.cleaned_data['duration'],
            timezone.now(),
        )
    except Exception as e:
        logger.error(f"Error in available_slots: {e}", exc_info=True)
        return error_response('server_error', 'Ошибка загрузки слотов', status=500)

    payload = serialize_grid(grid)
    payload['success'] = True
    return JsonResponse(payload)


@csrf_exempt
@api_data_ratelimit()
@require_POST
def check_availability(request):
    """
    Итоговая проверка слота перед оплатой

    POST /booking/check/
    Body: {zone, date, start_time, duration}
    """
    data = request_data(request)
    if data is None:
        return error_response('invalid_json', 'Некорректный JSON')

    form = AvailabilityForm(data)
    if not form.is_valid():
        return form_error_response(form)

    zone = Zone.objects.filter(pk=form.cleaned_data['zone']).first()
    if zone is None:
        return zone_not_found()

    cleaned = form.cleaned_data
    now = timezone.now()

    try:
        BookingService.validate_request(zone, cleaned['date'], cleaned['start_time'], cleaned['duration'], now)
    except BookingValidationError as e:
        return JsonResponse({'success': True, 'available': False, 'code': e.code, 'message': e.message})

    available = BookingService.check_availability(
        zone, cleaned['date'], cleaned['start_time'], cleaned['duration'], now,
    )
    if not available:
        return JsonResponse({
            'success': True,
            'available': False,
            'code': 'unavailable',
            'message': 'Выбранное время недоступно. Пожалуйста, выберите другое',
        })

    return JsonResponse({
        'success': True,
        'available': True,
        'total_cost': str(calculate_total(zone, cleaned['duration'])),
    })


@csrf_exempt
@api_write_ratelimit()
@require_POST
def create_booking(request):
    """
    Создание подтверждённого бронирования после оплаты

    POST /booking/create/
    Body: {zone, date, start_time, duration, name, email, phone,
           group_size, special_requests, payment_id, coupon_code}
    """
    data = request_data(request)
    if data is None:
        return error_response('invalid_json', 'Некорректный JSON')

    form = BookingCreateForm(data)
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
            payment_id=cleaned['payment_id'],
            coupon_code=cleaned.get('coupon_code', ''),
        )
    except BookingValidationError as e:
        return error_response(e.code, e.message)
    except BookingConflictError as e:
        return error_response(e.code, e.message, status=409)
    except Exception as e:
        logger.error(f"Error in create_booking: {e}", exc_info=True)
        return error_response('server_error', 'Не удалось создать бронирование', status=500)

    return JsonResponse({
        'success': True,
        'message': 'Бронирование подтверждено',
        'booking': serialize_booking(booking),
    }, status=201)


@csrf_exempt
@api_write_ratelimit()
@require_POST
def apply_coupon(request):
    """
    Проверка купона

    POST /booking/coupon/
    Body: {coupon_code, duration}
    """
    data = request_data(request)
    if data is None:
        return error_response('invalid_json', 'Некорректный JSON')

    form = CouponForm(data)
    if not form.is_valid():
        return form_error_response(form)

    result = validate_coupon(form.cleaned_data['coupon_code'], form.cleaned_data.get('duration'), timezone.now())
    if not result['valid']:
        return JsonResponse({
            'success': True,
            'valid': False,
            'message': result['error'] or 'Неверный код купона',
        })

    return JsonResponse({
        'success': True,
        'valid': True,
        'type': result['type'],
        'discount': result['discount'],
        'description': result['description'],
    })
