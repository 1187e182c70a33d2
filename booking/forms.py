import re
from decimal import Decimal

from django import forms

from .models import BlockedTime
from .utils import to_12_hour, to_24_hour

TIME_RE = re.compile(r'^(\d{1,2}):(\d{2})(?::\d{2})?(?:\s*([AaPp][Mm]))?$')


class SlotTimeField(forms.CharField):
    """Время слота: "h:mm AM/PM" или "HH:mm", приводится к "h:mm AM/PM" """

    default_error_messages = {
        'invalid': 'Неверный формат времени. Пример: 3:00 PM или 15:00',
    }

    def to_python(self, value):
        value = super().to_python(value)
        if not value:
            return value

        match = TIME_RE.match(value.strip())
        if not match:
            raise forms.ValidationError(self.error_messages['invalid'], code='invalid')

        hour, minute, meridiem = int(match.group(1)), int(match.group(2)), match.group(3)
        max_hour = 12 if meridiem else 23
        min_hour = 1 if meridiem else 0
        if not min_hour <= hour <= max_hour or minute > 59:
            raise forms.ValidationError(self.error_messages['invalid'], code='invalid')

        if meridiem:
            return to_12_hour(to_24_hour(f"{hour}:{minute:02d} {meridiem.upper()}"))
        return to_12_hour(f"{hour:02d}:{minute:02d}")


class DurationField(forms.DecimalField):
    def __init__(self, **kwargs):
        kwargs.setdefault('min_value', Decimal('0.5'))
        kwargs.setdefault('max_value', Decimal('24'))
        kwargs.setdefault('max_digits', 4)
        kwargs.setdefault('decimal_places', 1)
        kwargs.setdefault('label', 'Продолжительность (ч)')
        super().__init__(**kwargs)


class SlotGridForm(forms.Form):
    """Параметры сетки слотов"""
    date = forms.DateField(input_formats=['%Y-%m-%d'], label='Дата')
    duration = DurationField(required=False)
    zone = forms.IntegerField(required=False, min_value=1, label='Зона')

    def clean_duration(self):
        return self.cleaned_data.get('duration') or Decimal('1')


class AvailabilityForm(forms.Form):
    """Запрос проверки доступности слота"""
    zone = forms.IntegerField(min_value=1, label='Зона')
    date = forms.DateField(input_formats=['%Y-%m-%d'], label='Дата')
    start_time = SlotTimeField(label='Время начала')
    duration = DurationField()


class BookingCreateForm(AvailabilityForm):
    """Создание бронирования после успешной оплаты"""
    name = forms.CharField(max_length=150, label='Имя')
    email = forms.EmailField(label='Email')
    phone = forms.CharField(max_length=30, label='Телефон')
    group_size = forms.CharField(max_length=50, label='Размер группы')
    special_requests = forms.CharField(required=False, widget=forms.Textarea, label='Пожелания')
    payment_id = forms.CharField(max_length=255, label='Платёж')
    coupon_code = forms.CharField(max_length=50, required=False, label='Купон')

    def customer(self):
        data = self.cleaned_data
        return {
            'name': data['name'],
            'email': data['email'],
            'phone': data['phone'],
            'group_size': data['group_size'],
            'special_requests': data.get('special_requests', ''),
        }


class AdminBookingForm(BookingCreateForm):
    """Бронирование администратором: оплата на месте, группа не обязательна"""
    group_size = forms.CharField(max_length=50, required=False, label='Размер группы')
    payment_id = forms.CharField(max_length=255, required=False, label='Платёж')


class CouponForm(forms.Form):
    coupon_code = forms.CharField(max_length=50, label='Купон')
    duration = DurationField(required=False)


class BlockedTimeForm(forms.ModelForm):
    class Meta:
        model = BlockedTime
        fields = ['zone', 'day_of_week', 'start_time', 'end_time', 'reason']
        labels = {
            'zone': 'Зона',
            'day_of_week': 'День недели',
            'start_time': 'Начало',
            'end_time': 'Окончание',
            'reason': 'Причина',
        }
