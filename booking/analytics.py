"""
Аналитика для админ-панели по бронированиям
Сводка, выручка и загруженность зон
"""
from datetime import timedelta

from django.db.models import Count, Sum
from django.utils import timezone

from .models import Booking, Zone
from .scheduling import local_naive
from .utils import duration_minutes, minutes_of_day


def get_dashboard_stats(now=None):
    """
    Сводка для главной страницы админки

    Returns:
        - Всего подтверждённых бронирований
        - Бронирований на сегодня
        - Выручка по подтверждённым бронированиям
        - Активные зоны
    """
    today = local_naive(now or timezone.now()).date()
    confirmed = Booking.objects.confirmed()

    return {
        'total_bookings': confirmed.count(),
        'today_bookings': confirmed.filter(date=today).count(),
        'total_revenue': float(confirmed.aggregate(total=Sum('total_cost'))['total'] or 0),
        'active_zones': Zone.objects.filter(active=True).count(),
    }


def get_zone_stats(start_date=None, end_date=None, now=None):
    """
    Выручка и загруженность по зонам за период

    Загруженность - доля забронированных минут от рабочих минут зоны за период.
    По умолчанию период - последние 30 дней.
    """
    today = local_naive(now or timezone.now()).date()

    if not start_date:
        start_date = today - timedelta(days=30)
    if not end_date:
        end_date = today

    days = (end_date - start_date).days + 1
    zones = Zone.objects.filter(active=True, is_walk_in=False)

    rows = {
        row['zone_id']: row
        for row in Booking.objects.confirmed().filter(
            date__range=[start_date, end_date]
        ).values('zone_id').annotate(
            revenue=Sum('total_cost'),
            hours=Sum('duration'),
            bookings_count=Count('id'),
        )
    }

    stats = []
    for zone in zones:
        row = rows.get(zone.id, {})
        open_minutes = (minutes_of_day(zone.available_end) - minutes_of_day(zone.available_start)) * days
        booked_minutes = duration_minutes(row.get('hours') or 0)

        stats.append({
            'zone_id': zone.id,
            'zone_name': zone.name,
            'bookings_count': row.get('bookings_count', 0),
            'revenue': float(row.get('revenue') or 0),
            'booked_hours': booked_minutes / 60,
            'occupancy_rate': round(booked_minutes / open_minutes * 100, 1) if open_minutes else 0,
        })

    return {
        'zones': stats,
        'period': {
            'start': start_date.isoformat(),
            'end': end_date.isoformat(),
            'days': days,
        },
    }
