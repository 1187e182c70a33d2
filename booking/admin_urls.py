"""
URL routing для админских API бронирований
"""

from django.urls import path
from . import admin_views

urlpatterns = [
    # Бронирования
    path('api/bookings/', admin_views.bookings_list_api, name='admin_bookings_list_api'),
    path('api/bookings/create/', admin_views.booking_create_api, name='admin_booking_create_api'),
    path('api/bookings/<int:booking_id>/cancel/', admin_views.booking_cancel_api, name='admin_booking_cancel_api'),

    # Блокировки
    path('api/blocked-times/', admin_views.blocked_times_api, name='admin_blocked_times_api'),
    path(
        'api/blocked-times/<int:block_id>/deactivate/',
        admin_views.blocked_time_deactivate_api,
        name='admin_blocked_time_deactivate_api',
    ),

    # Статистика
    path('api/stats/', admin_views.stats_api, name='admin_stats_api'),
]
