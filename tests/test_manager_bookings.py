import re
from datetime import timedelta
from types import SimpleNamespace
from unittest import mock

import pytest
from django.utils import timezone

from booking.models import Coupon, Payment

pytestmark = pytest.mark.django_db

API = '/manager/api'


def post_json(client, url, data=None):
    return client.post(f'{API}{url}', data or {}, content_type='application/json')


@pytest.fixture
def bookings(make_booking, coupon):
    first = make_booking()
    second = make_booking(
        guest_name='Casey Lee', guest_email='casey@example.com', coupon_code='SUMMER10',
        participants=[{'first_name': 'Robin', 'last_name': 'Lee'}],
    )
    second.mark_confirmed()
    return first, second


class TestBookingList:

    def test_list_with_stats(self, staff_client, bookings):
        response = staff_client.get(f'{API}/bookings/')

        assert response.status_code == 200
        data = response.json()
        assert len(data['bookings']) == 2
        assert data['stats'] == {
            'total': 2, 'pending': 1, 'confirmed': 1, 'cancelled': 0, 'paid_amount': 180.0,
        }

    def test_filters(self, staff_client, bookings):
        first, second = bookings

        def ids(query):
            return [b['id'] for b in staff_client.get(f'{API}/bookings/?{query}').json()['bookings']]

        assert ids('status=pending') == [first.id]
        assert ids('payment_status=paid') == [second.id]
        assert ids('search=robin') == [second.id]
        assert ids('search=jordan@') == [first.id]
        assert ids(f'date_from={timezone.localdate() + timedelta(days=1)}') == []

    def test_invalid_camp_filter(self, staff_client, bookings):
        response = staff_client.get(f'{API}/bookings/?camp=abc')

        assert response.status_code == 400

    def test_detail(self, staff_client, bookings):
        first, _ = bookings

        data = staff_client.get(f'{API}/bookings/{first.id}/').json()['booking']

        assert [p['first_name'] for p in data['participants']] == ['Alex', 'Sam']
        assert data['history'][0]['action'] == 'created'

    def test_csv_export(self, staff_client, bookings):
        response = staff_client.get(f'{API}/bookings/export/?status=confirmed')

        assert response.status_code == 200
        assert response['Content-Type'].startswith('text/csv')
        content = response.content.decode('utf-8')
        assert content.startswith('\ufeff')
        lines = content.lstrip('\ufeff').strip().splitlines()
        assert lines[0].startswith('ID,Created,Camp,Session')
        assert len(lines) == 2
        assert 'Casey Lee' in lines[1]
        assert 'SUMMER10' in lines[1]


class TestBookingActions:

    def test_update_notes_and_status(self, staff_client, bookings):
        first, _ = bookings

        response = post_json(staff_client, f'/bookings/{first.id}/update/', {
            'notes': 'Needs a left-handed paddle', 'status': 'confirmed', 'payment_method': 'BANK_TRANSFER',
        })

        assert response.status_code == 200
        first.refresh_from_db()
        assert first.notes == 'Needs a left-handed paddle'
        assert first.status == 'CONFIRMED'
        assert first.confirmed_at is not None
        entry = first.history.get(action='updated')
        assert set(entry.changes) == {'notes', 'status', 'payment_method'}
        assert entry.user.username == 'manager'

    def test_same_status_in_lower_case_is_not_a_change(self, staff_client, bookings):
        _, second = bookings

        response = post_json(staff_client, f'/bookings/{second.id}/update/', {'status': 'confirmed'})

        assert response.status_code == 200
        assert response.json()['message'] == 'Nothing to update'
        assert not second.history.filter(action='updated').exists()

    def test_update_rejects_cancel_status(self, staff_client, bookings):
        first, _ = bookings

        response = post_json(staff_client, f'/bookings/{first.id}/update/', {'status': 'CANCELLED'})

        assert response.status_code == 400
        assert 'status' in response.json()['errors']

    def test_cancel(self, staff_client, bookings, session):
        first, _ = bookings

        response = post_json(staff_client, f'/bookings/{first.id}/cancel/', {'reason': 'Duplicate'})

        assert response.status_code == 200
        first.refresh_from_db()
        session.refresh_from_db()
        assert first.status == 'CANCELLED'
        assert session.booked_slots == 1

        response = post_json(staff_client, f'/bookings/{first.id}/cancel/')
        assert response.status_code == 400

    def test_paid_booking_must_be_refunded(self, staff_client, bookings):
        _, second = bookings

        response = post_json(staff_client, f'/bookings/{second.id}/cancel/')

        assert response.status_code == 400
        assert 'Refund' in response.json()['message']

    def test_refund(self, staff_client, bookings):
        _, second = bookings
        payment = Payment.objects.create(
            booking=second, amount=second.final_amount, payment_intent_id='pi_paid', status='succeeded',
        )

        with mock.patch('stripe.Refund.create', return_value=SimpleNamespace(id='re_9')):
            response = post_json(staff_client, f'/bookings/{second.id}/refund/', {'reason': 'Weather'})

        assert response.status_code == 200
        assert response.json()['refund_id'] == 're_9'
        payment.refresh_from_db()
        second.refresh_from_db()
        assert payment.status == 'refunded'
        assert second.status == 'CANCELLED'
        assert second.payment_status == 'REFUNDED'


class TestCoupons:

    def coupon_payload(self, **overrides):
        now = timezone.now()
        payload = {
            'code': 'fall-25',
            'discount_type': 'FIXED_AMOUNT',
            'discount_value': '25.00',
            'valid_from': now.isoformat(),
            'valid_until': (now + timedelta(days=60)).isoformat(),
            'max_uses': 50,
        }
        payload.update(overrides)
        return payload

    def test_create(self, staff_client, camp):
        response = post_json(staff_client, '/coupons/create/', self.coupon_payload(applicable_camps=[camp.id]))

        assert response.status_code == 201
        coupon = response.json()['coupon']
        assert coupon['code'] == 'FALL25'
        assert coupon['applicable_camps'] == [camp.id]
        assert coupon['remaining_uses'] == 50

    def test_auto_generated_code(self, staff_client):
        response = post_json(staff_client, '/coupons/create/', self.coupon_payload(
            code='', auto_generate_code=True, code_prefix='vip',
        ))

        assert response.status_code == 201
        assert re.fullmatch(r'VIP\d{4}', response.json()['coupon']['code'])

    def test_code_required_without_auto_generation(self, staff_client):
        response = post_json(staff_client, '/coupons/create/', self.coupon_payload(code=''))

        assert response.status_code == 400
        assert 'code' in response.json()['errors']

    def test_percentage_over_100(self, staff_client):
        response = post_json(staff_client, '/coupons/create/', self.coupon_payload(
            discount_type='PERCENTAGE', discount_value='120',
        ))

        assert response.status_code == 400
        assert 'discount_value' in response.json()['errors']

    def test_partial_update(self, staff_client, coupon):
        response = post_json(staff_client, f'/coupons/{coupon.id}/update/', {'is_active': False})

        assert response.status_code == 200
        coupon.refresh_from_db()
        assert coupon.is_active is False
        assert coupon.code == 'SUMMER10'

    def test_redeemed_coupon_cannot_be_deleted(self, staff_client, bookings, coupon):
        response = post_json(staff_client, f'/coupons/{coupon.id}/delete/')

        assert response.status_code == 400
        assert Coupon.objects.filter(id=coupon.id).exists()

    def test_delete_unused_coupon(self, staff_client, make_coupon):
        unused = make_coupon(code='UNUSED1')

        response = post_json(staff_client, f'/coupons/{unused.id}/delete/')

        assert response.status_code == 200
        assert not Coupon.objects.filter(id=unused.id).exists()

    def test_generate_code(self, staff_client, db):
        response = staff_client.get(f'{API}/coupons/generate-code/?prefix=camp')

        assert re.fullmatch(r'CAMP\d{4}', response.json()['code'])

    def test_report(self, staff_client, bookings, coupon):
        data = staff_client.get(f'{API}/coupons/report/').json()

        row = next(c for c in data['coupons'] if c['code'] == 'SUMMER10')
        assert row['redemptions_count'] == 1
        assert data['total_redemptions'] == 1
        assert data['total_discount'] == 20.0


class TestDashboard:

    def test_metrics(self, staff_client, bookings):
        response = staff_client.get(f'{API}/metrics/')

        assert response.status_code == 200
        metrics = response.json()['metrics']
        assert metrics['total_bookings'] == 2
        assert metrics['pending_bookings'] == 1
        assert metrics['active_customers'] == 2
        assert len(response.json()['charts']['revenue_trend']) == 7

    def test_analytics_days_must_be_a_number(self, staff_client, db):
        assert staff_client.get(f'{API}/analytics/?days=week').status_code == 400

    def test_analytics(self, staff_client, bookings):
        data = staff_client.get(f'{API}/analytics/?days=7').json()

        assert data['financial']['total_revenue'] == 580.0
        assert data['customers']['active_customers'] == 2
