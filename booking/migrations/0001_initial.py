import datetime
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Zone',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('slug', models.SlugField(unique=True)),
                ('description', models.TextField(blank=True)),
                ('capacity', models.CharField(blank=True, max_length=100, verbose_name='Вместимость')),
                ('hourly_rate', models.DecimalField(decimal_places=2, max_digits=10)),
                ('min_duration', models.DecimalField(decimal_places=1, default=Decimal('1.0'), max_digits=4)),
                ('max_duration', models.DecimalField(decimal_places=1, default=Decimal('6.0'), max_digits=4)),
                ('available_start', models.TimeField(default=datetime.time(7, 0))),
                ('available_end', models.TimeField(default=datetime.time(21, 0))),
                ('active', models.BooleanField(default=True)),
                ('is_walk_in', models.BooleanField(default=False, verbose_name='Без бронирования')),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('duration', models.DecimalField(decimal_places=1, max_digits=4)),
                ('customer_name', models.CharField(max_length=150)),
                ('customer_email', models.EmailField(max_length=254)),
                ('customer_phone', models.CharField(max_length=30)),
                ('group_size', models.CharField(blank=True, max_length=50)),
                ('special_requests', models.TextField(blank=True)),
                ('total_cost', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=10)),
                ('coupon_code', models.CharField(blank=True, max_length=50)),
                ('status', models.CharField(
                    choices=[('pending', 'В ожидании'), ('confirmed', 'Подтверждено'), ('cancelled', 'Отменено')],
                    default='confirmed',
                    max_length=20,
                )),
                ('payment_id', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('zone', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='bookings',
                    to='booking.zone',
                )),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['zone', 'date', 'status'], name='booking_zone_date_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='BlockedTime',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('day_of_week', models.PositiveSmallIntegerField(choices=[
                    (0, 'Воскресенье'), (1, 'Понедельник'), (2, 'Вторник'), (3, 'Среда'),
                    (4, 'Четверг'), (5, 'Пятница'), (6, 'Суббота'),
                ])),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('reason', models.CharField(blank=True, max_length=200)),
                ('active', models.BooleanField(default=True)),
                ('zone', models.ForeignKey(
                    blank=True,
                    help_text='Пусто - блокировка для всех зон',
                    null=True,
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='blocked_times',
                    to='booking.zone',
                )),
            ],
            options={
                'ordering': ['day_of_week', 'start_time'],
            },
        ),
        migrations.CreateModel(
            name='BookingSlot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('slot_start', models.TimeField()),
                ('booking', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='slots',
                    to='booking.booking',
                )),
                ('zone', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='occupied_slots',
                    to='booking.zone',
                )),
            ],
            options={
                'constraints': [
                    models.UniqueConstraint(fields=('zone', 'date', 'slot_start'), name='unique_zone_date_slot'),
                ],
            },
        ),
    ]
