from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .constants import (
    BOOKING_CANCELLED,
    BOOKING_CONFIRMED,
    BOOKING_STATUS_CHOICES,
    CLOSING_TIME,
    DAY_OF_WEEK_CHOICES,
    LEDGER_CELL_MINUTES,
    OPENING_TIME,
    SLOT_STEP_MINUTES,
)
from .utils import duration_minutes, minutes_of_day, minutes_to_time


class Zone(models.Model):
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    capacity = models.CharField(max_length=100, blank=True, verbose_name='Вместимость')
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2)
    min_duration = models.DecimalField(max_digits=4, decimal_places=1, default=Decimal('1.0'))
    max_duration = models.DecimalField(max_digits=4, decimal_places=1, default=Decimal('6.0'))
    available_start = models.TimeField(default=OPENING_TIME)
    available_end = models.TimeField(default=CLOSING_TIME)
    active = models.BooleanField(default=True)
    is_walk_in = models.BooleanField(default=False, verbose_name='Без бронирования')

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    def clean(self):
        if self.hourly_rate is not None and self.hourly_rate <= 0:
            raise ValidationError({'hourly_rate': 'Стоимость часа должна быть положительной'})

        for field in ('min_duration', 'max_duration'):
            value = getattr(self, field)
            if value is not None and (value <= 0 or duration_minutes(value) % SLOT_STEP_MINUTES):
                raise ValidationError({field: 'Продолжительность задаётся с шагом 0.5 часа'})

        if self.min_duration is not None and self.max_duration is not None \
                and self.min_duration > self.max_duration:
            raise ValidationError('Минимальная продолжительность больше максимальной')

        if self.available_start and self.available_end and self.available_start >= self.available_end:
            raise ValidationError('Время открытия должно быть раньше времени закрытия')


class BookingQuerySet(models.QuerySet):
    def confirmed(self):
        return self.filter(status=BOOKING_CONFIRMED)

    def for_day(self, zone_id, booking_date):
        return self.filter(zone_id=zone_id, date=booking_date)


class Booking(models.Model):
    zone = models.ForeignKey(Zone, on_delete=models.PROTECT, related_name='bookings')
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    duration = models.DecimalField(max_digits=4, decimal_places=1)
    customer_name = models.CharField(max_length=150)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=30)
    group_size = models.CharField(max_length=50, blank=True)
    special_requests = models.TextField(blank=True)
    total_cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    coupon_code = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=20, choices=BOOKING_STATUS_CHOICES, default=BOOKING_CONFIRMED)
    payment_id = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['zone', 'date', 'status'], name='booking_zone_date_status_idx'),
        ]

    def __str__(self):
        return f"{self.customer_name} - {self.zone.name} - {self.date}"

    @property
    def is_confirmed(self):
        return self.status == BOOKING_CONFIRMED

    def slot_starts(self):
        """Начала ячеек учёта (LEDGER_CELL_MINUTES), которые занимает бронирование"""
        start = minutes_of_day(self.start_time)
        end = start + duration_minutes(self.duration)
        return [minutes_to_time(minute) for minute in range(start, end, LEDGER_CELL_MINUTES)]

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        # Ячейки держит только подтверждённое бронирование
        if self.status != BOOKING_CONFIRMED:
            self.slots.all().delete()

    def cancel(self):
        """Отменить бронирование и освободить ячейки"""
        if self.status == BOOKING_CANCELLED:
            return False
        self.status = BOOKING_CANCELLED
        self.updated_at = timezone.now()
        self.save(update_fields=['status', 'updated_at'])
        return True


class BlockedTime(models.Model):
    """Еженедельное закрытие: обслуживание, перерыв персонала и т.п."""
    zone = models.ForeignKey(
        Zone,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='blocked_times',
        help_text='Пусто - блокировка для всех зон',
    )
    day_of_week = models.PositiveSmallIntegerField(choices=DAY_OF_WEEK_CHOICES)
    start_time = models.TimeField()
    end_time = models.TimeField()
    reason = models.CharField(max_length=200, blank=True)
    active = models.BooleanField(default=True)

    class Meta:
        ordering = ['day_of_week', 'start_time']

    def __str__(self):
        scope = self.zone.name if self.zone_id else 'Все зоны'
        return f"{scope}: {self.get_day_of_week_display()} {self.start_time}-{self.end_time}"

    def clean(self):
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError('Время начала блокировки должно быть раньше окончания')


class BookingSlot(models.Model):
    """
    Ячейка длиной LEDGER_CELL_MINUTES, занятая подтверждённым бронированием

    Уникальность (zone, date, slot_start) - ограничение исключения на уровне БД:
    два пересекающихся бронирования не могут быть записаны одновременно.
    """
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='slots')
    zone = models.ForeignKey(Zone, on_delete=models.PROTECT, related_name='occupied_slots')
    date = models.DateField()
    slot_start = models.TimeField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['zone', 'date', 'slot_start'], name='unique_zone_date_slot'),
        ]

    def __str__(self):
        return f"{self.zone_id} {self.date} {self.slot_start}"
