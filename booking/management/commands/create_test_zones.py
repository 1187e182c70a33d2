from datetime import time
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from booking.models import BlockedTime, Zone

ZONES = [
    {
        'slug': 'beach-soccer',
        'name': 'Пляжный футбол',
        'description': 'Песчаное поле для пляжного футбола.',
        'capacity': 'До 14 игроков',
        'hourly_rate': Decimal('65.00'),
    },
    {
        'slug': 'beach-volleyball',
        'name': 'Пляжный волейбол',
        'description': 'Песчаная площадка с сеткой.',
        'capacity': 'До 12 игроков',
        'hourly_rate': Decimal('65.00'),
    },
    {
        'slug': 'water-soccer-1',
        'name': 'Водный футбол, поле 1',
        'description': 'Большое поле с водяными пушками.',
        'capacity': 'До 20 игроков',
        'hourly_rate': Decimal('125.00'),
    },
    {
        'slug': 'water-soccer-2',
        'name': 'Водный футбол, поле 2',
        'description': 'Малое поле с водяными пушками.',
        'capacity': 'До 12 игроков',
        'hourly_rate': Decimal('100.00'),
    },
    {
        'slug': 'turf-soccer',
        'name': 'Футбол на газоне',
        'description': 'Поле с искусственным газоном.',
        'capacity': 'До 16 игроков',
        'hourly_rate': Decimal('50.00'),
    },
    {
        'slug': 'bubble-soccer',
        'name': 'Бампербол',
        'description': 'Футбол в надувных шарах, цена за один шар.',
        'capacity': 'До 10 игроков',
        'hourly_rate': Decimal('20.00'),
        'max_duration': Decimal('2.0'),
    },
    {
        'slug': 'sandbox',
        'name': 'Детская песочница',
        'description': 'Без бронирования, оплата входа на месте.',
        'capacity': 'Дети',
        'hourly_rate': Decimal('5.00'),
        'is_walk_in': True,
    },
]

FRIDAY = 5


class Command(BaseCommand):
    help = 'Создает тестовые зоны и еженедельную блокировку на обслуживание'

    @transaction.atomic
    def handle(self, *args, **kwargs):
        created_count = 0
        for zone_data in ZONES:
            data = dict(zone_data)
            zone, created = Zone.objects.get_or_create(slug=data.pop('slug'), defaults=data)

            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f'Создана зона: {zone.name}'))
            else:
                self.stdout.write(self.style.WARNING(f'Зона уже существует: {zone.name}'))

        block, created = BlockedTime.objects.get_or_create(
            zone=None,
            day_of_week=FRIDAY,
            start_time=time(12, 0),
            end_time=time(15, 0),
            defaults={'reason': 'Техническое обслуживание'},
        )
        if created:
            self.stdout.write(self.style.SUCCESS(f'Создана блокировка: {block}'))

        self.stdout.write(self.style.SUCCESS(f'Создано {created_count} новых зон'))
