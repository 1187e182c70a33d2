from datetime import time
from decimal import Decimal

import pytest
from django.core.cache import cache

from booking.models import BlockedTime, Zone


@pytest.fixture(autouse=True)
def clear_ratelimit_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def booking_policy(settings):
    settings.BOOKING_MIN_LEAD_HOURS = 4
    settings.BOOKING_SLOT_STEP_MINUTES = 30
    settings.BUSINESS_EMAIL = 'bookings@splashbooking.local'


@pytest.fixture
def zone_data():
    """Зона в виде записи хранилища, без БД"""
    return {
        'id': 1,
        'hourly_rate': 65,
        'min_duration': 1,
        'max_duration': 6,
        'available_start': '07:00:00',
        'available_end': '21:00:00',
        'active': True,
        'is_walk_in': False,
    }


@pytest.fixture
def zone(db):
    return Zone.objects.create(
        name='Пляжный футбол',
        slug='beach-soccer',
        hourly_rate=Decimal('65.00'),
        min_duration=Decimal('1.0'),
        max_duration=Decimal('6.0'),
        available_start=time(7, 0),
        available_end=time(21, 0),
    )


@pytest.fixture
def other_zone(db):
    return Zone.objects.create(
        name='Водный футбол',
        slug='water-soccer-1',
        hourly_rate=Decimal('125.00'),
    )


@pytest.fixture
def walk_in_zone(db):
    return Zone.objects.create(
        name='Детская песочница',
        slug='sandbox',
        hourly_rate=Decimal('5.00'),
        is_walk_in=True,
    )


@pytest.fixture
def friday_block(db):
    return BlockedTime.objects.create(
        zone=None,
        day_of_week=5,
        start_time=time(12, 0),
        end_time=time(15, 0),
        reason='Техническое обслуживание',
    )


@pytest.fixture
def customer():
    return {
        'name': 'Анна Петрова',
        'email': 'anna@example.com',
        'phone': '+1 555 0100',
        'group_size': '6-10',
        'special_requests': '',
    }


@pytest.fixture
def staff_client(client, django_user_model):
    user = django_user_model.objects.create_user(
        username='manager', email='manager@example.com', password='secret-pass', is_staff=True,
    )
    client.force_login(user)
    return client
