from datetime import timedelta

import pytest
from django.test import Client
from django.urls import reverse
from django.utils import timezone

from booking.models import BlockedTime, Booking
from booking.services import BookingService
from booking.utils import day_of_week

pytestmark = pytest.mark.django_db


@pytest.fixture
def day():
    return timezone.localdate() + timedelta(days=7)


@pytest.fixture
def payload(zone, day):
    return {
        'zone': zone.pk,
        'date': day.isoformat(),
        'start_time': '3:00 PM',
        'duration': 1,
        'name': 'Анна Петрова',
        'email': 'anna@example.com',
        'phone': '+1 555 0100',
        'group_size': '6-10',
        'payment_id': 'pi_123',
    }


def post_json(client, url, data):
    return client.post(url, data=data, content_type='application/json')


def make_booking(zone, day, customer, start='3:00 PM', duration=1):
    return BookingService.create_booking(zone, day, start, duration, customer, timezone.now(), payment_id='pi_seed')


class TestZones:
    def test_lists_active_zones(self, client, zone, walk_in_zone, other_zone):
        other_zone.active = False
        other_zone.save()

        response = client.get(reverse('zones_list'))

        assert response.status_code == 200
        data = response.json()
        assert data['success']
        assert {item['slug'] for item in data['zones']} == {'beach-soccer', 'sandbox'}
        beach = next(item for item in data['zones'] if item['slug'] == 'beach-soccer')
        assert beach['available_start'] == '7:00 AM'
        assert beach['hourly_rate'] == 65.0


class TestSlots:
    def test_grid(self, client, zone, walk_in_zone, day, customer):
        booking = make_booking(zone, day, customer)

        response = client.get(reverse('available_slots'), {'date': day.isoformat(), 'duration': '1'})

        assert response.status_code == 200
        data = response.json()
        assert data['success']
        assert len(data['times']) == 28
        assert data['minimum_bookable_time'] is None

        rows = {row['zone']['slug']: row['slots'] for row in data['zones']}
        slots = {slot['time']: slot for slot in rows['beach-soccer']}
        assert slots['3:00 PM']['status'] == 'booked'
        assert slots['3:00 PM']['booking_id'] == booking.pk
        assert slots['2:30 PM']['status'] == 'unavailable'
        assert slots['2:30 PM']['code'] == 'overlap'
        assert slots['4:00 PM']['status'] == 'available'
        assert {slot['status'] for slot in rows['sandbox']} == {'walk_in'}

    def test_single_zone(self, client, zone, other_zone, day):
        response = client.get(reverse('available_slots'), {'date': day.isoformat(), 'zone': zone.pk})
        assert [row['zone']['id'] for row in response.json()['zones']] == [zone.pk]

    def test_unknown_zone(self, client, zone, day):
        response = client.get(reverse('available_slots'), {'date': day.isoformat(), 'zone': zone.pk + 100})
        assert response.status_code == 404
        assert response.json()['error'] == 'zone_not_found'

    def test_bad_date(self, client, zone):
        response = client.get(reverse('available_slots'), {'date': '04.07.2025'})
        assert response.status_code == 400
        assert 'date' in response.json()['errors']

    def test_only_get(self, client, zone, day):
        assert client.post(reverse('available_slots'), {'date': day.isoformat()}).status_code == 405


class TestCheckAvailability:
    def test_available(self, client, payload):
        response = post_json(client, reverse('check_availability'), payload)
        data = response.json()
        assert response.status_code == 200
        assert data['available']
        assert data['total_cost'] == '65.00'

    def test_taken(self, client, zone, day, customer, payload):
        make_booking(zone, day, customer, start='3:30 PM')
        data = post_json(client, reverse('check_availability'), payload).json()
        assert not data['available']
        assert data['code'] == 'unavailable'

    def test_policy_violation(self, client, payload):
        payload['start_time'] = '8:30 PM'
        data = post_json(client, reverse('check_availability'), payload).json()
        assert not data['available']
        assert data['code'] == 'after_close'


class TestCreateBooking:
    def test_created(self, client, payload):
        response = post_json(client, reverse('create_booking'), payload)

        assert response.status_code == 201
        data = response.json()
        assert data['success']
        assert data['booking']['start_time'] == '3:00 PM'
        assert data['booking']['end_time'] == '4:00 PM'
        assert data['booking']['status'] == 'confirmed'
        assert data['booking']['payment_id'] == 'pi_123'
        assert Booking.objects.count() == 1

    def test_accepts_form_encoded(self, client, payload):
        payload['start_time'] = '15:00'
        response = client.post(reverse('create_booking'), payload)
        assert response.status_code == 201
        assert response.json()['booking']['start_time'] == '3:00 PM'

    def test_conflict(self, client, payload):
        assert post_json(client, reverse('create_booking'), payload).status_code == 201

        payload['start_time'] = '3:30 PM'
        response = post_json(client, reverse('create_booking'), payload)

        assert response.status_code == 409
        assert response.json()['error'] == 'conflict'
        assert Booking.objects.count() == 1

    def test_validation_error(self, client, payload):
        payload['date'] = (timezone.localdate() - timedelta(days=1)).isoformat()
        response = post_json(client, reverse('create_booking'), payload)
        assert response.status_code == 400
        assert response.json()['error'] == 'past_date'

    def test_walk_in_zone(self, client, walk_in_zone, payload):
        payload['zone'] = walk_in_zone.pk
        response = post_json(client, reverse('create_booking'), payload)
        assert response.status_code == 400
        assert response.json()['error'] == 'walk_in'

    def test_missing_fields(self, client, payload):
        del payload['email']
        payload['start_time'] = '25:00'
        response = post_json(client, reverse('create_booking'), payload)
        assert response.status_code == 400
        errors = response.json()['errors']
        assert 'email' in errors
        assert 'start_time' in errors

    def test_unknown_zone(self, client, payload):
        payload['zone'] = 9999
        assert post_json(client, reverse('create_booking'), payload).status_code == 404

    def test_invalid_json(self, client, zone):
        response = client.post(reverse('create_booking'), data='{', content_type='application/json')
        assert response.status_code == 400
        assert response.json()['error'] == 'invalid_json'


class TestCoupon:
    def test_valid(self, client):
        data = post_json(client, reverse('apply_coupon'), {'coupon_code': 'summer25', 'duration': 2}).json()
        assert data['valid']
        assert data['type'] == 'percentage'
        assert data['discount'] == 25

    def test_invalid(self, client):
        data = post_json(client, reverse('apply_coupon'), {'coupon_code': 'BOGUS'}).json()
        assert not data['valid']
        assert data['message'] == 'Неверный код купона'

    def test_rate_limited(self, client):
        url = reverse('apply_coupon')
        for _ in range(10):
            assert post_json(client, url, {'coupon_code': 'BOGUS'}).status_code == 200

        response = post_json(client, url, {'coupon_code': 'BOGUS'})
        assert response.status_code == 429
        assert response.json()['error'] == 'rate_limit_exceeded'


class TestCsrf:
    @pytest.fixture
    def csrf_client(self):
        return Client(enforce_csrf_checks=True)

    def test_public_posts_without_csrf_cookie(self, csrf_client, payload):
        assert post_json(csrf_client, reverse('check_availability'), payload).status_code == 200
        assert post_json(csrf_client, reverse('apply_coupon'), {'coupon_code': 'SUMMER25'}).status_code == 200
        assert post_json(csrf_client, reverse('create_booking'), payload).status_code == 201

    def test_staff_api_still_requires_token(self, csrf_client, payload, django_user_model):
        user = django_user_model.objects.create_user(username='desk', password='secret-pass', is_staff=True)
        csrf_client.force_login(user)
        response = post_json(csrf_client, reverse('admin_booking_create_api'), payload)
        assert response.status_code == 403


class TestStaffAccess:
    @pytest.mark.parametrize('name', ['admin_bookings_list_api', 'admin_blocked_times_api', 'admin_stats_api'])
    def test_anonymous_redirected_to_login(self, client, name):
        response = client.get(reverse(name))
        assert response.status_code == 302
        assert '/admin/login/' in response['Location']

    def test_regular_user_redirected(self, client, django_user_model):
        user = django_user_model.objects.create_user(username='guest', password='secret-pass')
        client.force_login(user)
        assert client.get(reverse('admin_stats_api')).status_code == 302


class TestAdminBookings:
    def test_list_with_filters(self, staff_client, zone, other_zone, day, customer):
        make_booking(zone, day, customer)
        make_booking(other_zone, day, customer)
        cancelled = make_booking(zone, day, customer, start='5:00 PM')
        BookingService.cancel_booking(cancelled)

        url = reverse('admin_bookings_list_api')
        assert staff_client.get(url).json()['count'] == 3
        assert staff_client.get(url, {'status': 'confirmed'}).json()['count'] == 2
        assert staff_client.get(url, {'zone': zone.pk, 'status': 'confirmed'}).json()['count'] == 1
        assert staff_client.get(url, {'date': (day + timedelta(days=1)).isoformat()}).json()['count'] == 0
        assert staff_client.get(url, {'date': 'tomorrow'}).status_code == 400

    def test_create(self, staff_client, payload):
        del payload['payment_id']
        del payload['group_size']

        response = post_json(staff_client, reverse('admin_booking_create_api'), payload)

        assert response.status_code == 201
        assert response.json()['booking']['payment_id'] == ''

    def test_create_conflict(self, staff_client, zone, day, customer, payload):
        make_booking(zone, day, customer)
        response = post_json(staff_client, reverse('admin_booking_create_api'), payload)
        assert response.status_code == 409

    def test_cancel(self, staff_client, zone, day, customer, mailoutbox, django_capture_on_commit_callbacks):
        booking = make_booking(zone, day, customer)
        url = reverse('admin_booking_cancel_api', args=[booking.pk])

        with django_capture_on_commit_callbacks(execute=True):
            response = post_json(staff_client, url, {'reason': 'Гроза'})

        assert response.status_code == 200
        assert response.json()['booking']['status'] == 'cancelled'
        assert booking.slots.count() == 0
        assert [message.to for message in mailoutbox] == [['anna@example.com']]

        assert post_json(staff_client, url, {}).status_code == 400

    def test_cancel_missing(self, staff_client):
        response = post_json(staff_client, reverse('admin_booking_cancel_api', args=[404]), {})
        assert response.status_code == 404


class TestAdminBlockedTimes:
    def test_create_blocks_grid(self, staff_client, client, zone, day):
        response = post_json(staff_client, reverse('admin_blocked_times_api'), {
            'zone': zone.pk,
            'day_of_week': day_of_week(day),
            'start_time': '10:00',
            'end_time': '12:00',
            'reason': 'Замена покрытия',
        })

        assert response.status_code == 201
        assert response.json()['blocked_time']['start_time'] == '10:00 AM'

        grid = staff_client.get(reverse('available_slots'), {'date': day.isoformat(), 'zone': zone.pk}).json()
        slots = {slot['time']: slot for slot in grid['zones'][0]['slots']}
        assert slots['10:30 AM']['status'] == 'blocked'
        assert slots['10:30 AM']['reason'] == 'Замена покрытия'
        assert slots['12:00 PM']['status'] == 'available'

    def test_invalid_window(self, staff_client):
        response = post_json(staff_client, reverse('admin_blocked_times_api'), {
            'day_of_week': 5,
            'start_time': '15:00',
            'end_time': '12:00',
        })
        assert response.status_code == 400

    def test_list_and_deactivate(self, staff_client, friday_block):
        url = reverse('admin_blocked_times_api')
        assert staff_client.get(url).json()['blocked_times'][0]['day_of_week'] == 5

        response = post_json(staff_client, reverse('admin_blocked_time_deactivate_api', args=[friday_block.pk]), {})

        assert response.status_code == 200
        friday_block.refresh_from_db()
        assert not friday_block.active
        assert staff_client.get(url, {'active': '1'}).json()['blocked_times'] == []
        assert BlockedTime.objects.count() == 1


class TestAdminStats:
    def test_dashboard(self, staff_client, zone, other_zone, walk_in_zone, day, customer):
        make_booking(zone, day, customer, duration=2)
        make_booking(other_zone, day, customer)
        cancelled = make_booking(zone, day, customer, start='6:00 PM')
        BookingService.cancel_booking(cancelled)

        stats = staff_client.get(reverse('admin_stats_api')).json()['stats']

        assert stats['total_bookings'] == 2
        assert stats['today_bookings'] == 0
        assert stats['total_revenue'] == 255.0
        assert stats['active_zones'] == 3
        assert {row['zone_id'] for row in stats['zones']} == {zone.pk, other_zone.pk}


class TestBookingAdmin:
    def test_cancel_action_frees_slots(self, admin_client, zone, day, customer):
        booking = make_booking(zone, day, customer)

        response = admin_client.post(
            reverse('admin:booking_booking_changelist'),
            {'action': 'cancel_bookings', '_selected_action': [booking.pk]},
        )

        assert response.status_code == 302
        booking.refresh_from_db()
        assert booking.status == 'cancelled'
        assert booking.slots.count() == 0
        assert make_booking(zone, day, customer).status == 'confirmed'

    def test_schedule_fields_read_only(self, admin_client, zone, day, customer):
        booking = make_booking(zone, day, customer)

        response = admin_client.get(reverse('admin:booking_booking_change', args=[booking.pk]))

        assert response.status_code == 200
        form_fields = response.context['adminform'].form.fields
        for name in ('zone', 'date', 'start_time', 'end_time', 'duration', 'status'):
            assert name not in form_fields
        assert admin_client.get(reverse('admin:booking_booking_add')).status_code == 403
