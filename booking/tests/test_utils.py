from datetime import date, time
from decimal import Decimal

import pytest

from booking.utils import (
    calculate_end_time,
    day_of_week,
    generate_time_slots,
    minutes_of_day,
    overlaps,
    to_12_hour,
    to_24_hour,
    validate_booking_duration,
    validate_working_hours,
)


class TestTimeConversion:
    @pytest.mark.parametrize('time12, time24', [
        ('12:00 AM', '00:00'),
        ('12:30 AM', '00:30'),
        ('7:00 AM', '07:00'),
        ('11:30 AM', '11:30'),
        ('12:00 PM', '12:00'),
        ('1:30 PM', '13:30'),
        ('11:30 PM', '23:30'),
    ])
    def test_to_24_hour(self, time12, time24):
        assert to_24_hour(time12) == time24

    def test_to_12_hour_has_no_leading_zero(self):
        assert to_12_hour('07:00') == '7:00 AM'
        assert to_12_hour('15:30:00') == '3:30 PM'
        assert to_12_hour(time(0, 0)) == '12:00 AM'

    def test_24_hour_round_trip_every_minute(self):
        for minute in range(24 * 60):
            time24 = f"{minute // 60:02d}:{minute % 60:02d}"
            assert to_24_hour(to_12_hour(time24)) == time24

    def test_round_trip_over_whole_day(self):
        for slot in generate_time_slots('00:00', '24:00'):
            assert to_12_hour(to_24_hour(slot)) == slot

    def test_minutes_of_day_accepts_all_formats(self):
        assert minutes_of_day('3:00 PM') == 900
        assert minutes_of_day('15:00') == 900
        assert minutes_of_day('15:00:00') == 900
        assert minutes_of_day(time(15, 0)) == 900


class TestEndTime:
    def test_half_hour_duration(self):
        assert calculate_end_time('3:00 PM', 1.5) == '4:30 PM'

    def test_decimal_duration(self):
        assert calculate_end_time('10:30 AM', Decimal('2.0')) == '12:30 PM'

    def test_wraps_past_midnight(self):
        assert calculate_end_time('11:30 PM', 1) == '12:30 AM'


class TestGenerateTimeSlots:
    def test_end_is_excluded(self):
        slots = generate_time_slots('07:00', '21:00')
        assert slots[0] == '7:00 AM'
        assert slots[-1] == '8:30 PM'
        assert len(slots) == 28
        assert '9:00 PM' not in slots

    def test_custom_step(self):
        assert generate_time_slots('09:00', '11:00', 60) == ['9:00 AM', '10:00 AM']


class TestOverlaps:
    def test_symmetric(self):
        points = range(0, 240, 30)
        for a_start in points:
            for a_end in points:
                if a_end <= a_start:
                    continue
                for b_start in points:
                    for b_end in points:
                        if b_end <= b_start:
                            continue
                        assert overlaps(a_start, a_end, b_start, b_end) == overlaps(b_start, b_end, a_start, a_end)

    def test_touching_intervals_do_not_overlap(self):
        assert not overlaps(900, 960, 960, 1020)
        assert not overlaps(960, 1020, 900, 960)

    def test_contained_interval_overlaps(self):
        assert overlaps(900, 1080, 960, 990)


class TestDayOfWeek:
    def test_sunday_is_zero(self):
        assert day_of_week(date(2025, 7, 6)) == 0

    def test_friday_is_five(self):
        assert day_of_week('2025-07-04') == 5


class TestValidators:
    def test_duration_in_range(self):
        assert validate_booking_duration(1.5, 1, 6) == (True, None)

    def test_duration_not_multiple_of_step(self):
        is_valid, error = validate_booking_duration(1.25, 1, 6)
        assert not is_valid
        assert '30' in error

    def test_duration_out_of_range(self):
        assert not validate_booking_duration(0.5, 1, 6)[0]
        assert not validate_booking_duration(6.5, 1, 6)[0]

    def test_working_hours(self):
        assert validate_working_hours('8:00 PM', 1, '07:00', '21:00')[0]
        assert not validate_working_hours('8:30 PM', 1, '07:00', '21:00')[0]
        assert not validate_working_hours('6:30 AM', 1, '07:00', '21:00')[0]
