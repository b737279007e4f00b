"""Shared pytest fixtures: catalog content, coupons, bookings and a staff client."""
from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.utils import timezone

from booking.forms import BookingContactForm, validate_participants
from booking.models import Coupon
from booking.services import BookingService
from catalog.models import Sport, Course, CourseSchedule, Camp, CampSession, CampAddonGroup, CampAddonOption


@pytest.fixture(autouse=True)
def test_settings(settings, tmp_path):
    settings.SECURE_SSL_REDIRECT = False
    settings.SESSION_COOKIE_SECURE = False
    settings.CSRF_COOKIE_SECURE = False
    settings.RATELIMIT_ENABLE = False
    settings.MEDIA_ROOT = str(tmp_path / 'media')
    settings.STRIPE_SECRET_KEY = 'sk_test_dummy'
    settings.STRIPE_PUBLISHABLE_KEY = 'pk_test_dummy'
    settings.STRIPE_WEBHOOK_SECRET = 'whsec_dummy'
    settings.BOOKING_CURRENCY = 'usd'
    return settings


# ── Catalog ──────────────────────────────────────────────────────────────────


@pytest.fixture
def sport(db):
    return Sport.objects.create(name='Pickleball', description='Paddle sport')


@pytest.fixture
def course(sport):
    return Course.objects.create(sport=sport, name='Pickleball Fundamentals')


@pytest.fixture
def schedule(course):
    return CourseSchedule.objects.create(
        course=course,
        schedule_name='Fall term',
        start_date=date(2024, 9, 1),
        end_date=date(2024, 12, 15),
    )


@pytest.fixture
def camp(db):
    return Camp.objects.create(
        title='Summer Pickleball Camp',
        category='Pickleball',
        status='PUBLISHED',
        price_per_slot=Decimal('150.00'),
    )


@pytest.fixture
def session(camp):
    """Open session: $200 a place, 10 places"""
    today = timezone.localdate()
    return CampSession.objects.create(
        camp=camp,
        session_name='Week 1',
        start_date=today + timedelta(days=30),
        end_date=today + timedelta(days=34),
        base_price=Decimal('200.00'),
        max_capacity=10,
    )


@pytest.fixture
def addons(camp):
    """
    Lunch (SINGLE): No lunch $0, Daily lunch $50
    Extras (MULTIPLE): T-shirt $20, Paddle rental $15
    """
    lunch = CampAddonGroup.objects.create(camp=camp, group_name='Lunch', selection_type='SINGLE')
    no_lunch = CampAddonOption.objects.create(group=lunch, option_name='No lunch', price_adjustment=Decimal('0'))
    daily_lunch = CampAddonOption.objects.create(group=lunch, option_name='Daily lunch',
                                                 price_adjustment=Decimal('50.00'), display_order=1)

    extras = CampAddonGroup.objects.create(camp=camp, group_name='Extras', selection_type='MULTIPLE',
                                           display_order=1)
    shirt = CampAddonOption.objects.create(group=extras, option_name='T-shirt', price_adjustment=Decimal('20.00'))
    paddle = CampAddonOption.objects.create(group=extras, option_name='Paddle rental',
                                            price_adjustment=Decimal('15.00'), display_order=1)

    return {
        'lunch': lunch, 'no_lunch': no_lunch, 'daily_lunch': daily_lunch,
        'extras': extras, 'shirt': shirt, 'paddle': paddle,
    }


# ── Coupons ──────────────────────────────────────────────────────────────────


@pytest.fixture
def make_coupon(db):
    def _make_coupon(code='SUMMER10', **kwargs):
        now = timezone.now()
        values = {
            'discount_type': 'PERCENTAGE',
            'discount_value': Decimal('10.00'),
            'valid_from': now - timedelta(days=1),
            'valid_until': now + timedelta(days=30),
        }
        values.update(kwargs)
        return Coupon.objects.create(code=code, **values)
    return _make_coupon


@pytest.fixture
def coupon(make_coupon):
    return make_coupon()


# ── Bookings ─────────────────────────────────────────────────────────────────


@pytest.fixture
def booking_payload(camp, session):
    def _payload(**overrides):
        payload = {
            'guest_name': 'Jordan Smith',
            'guest_email': 'jordan@example.com',
            'guest_phone': '+1 602 555 0100',
            'camp_id': camp.id,
            'session_id': session.id,
            'participants': [
                {'first_name': 'Alex', 'last_name': 'Smith', 'skill_level': 'BEGINNER'},
                {'first_name': 'Sam', 'last_name': 'Smith', 'skill_level': 'INTERMEDIATE'},
            ],
        }
        payload.update(overrides)
        return payload
    return _payload


@pytest.fixture
def make_booking(booking_payload, camp):
    """Create a booking through the service layer"""
    def _make_booking(**overrides):
        data = booking_payload(**overrides)
        contact_form = BookingContactForm(data)
        assert contact_form.is_valid(), contact_form.errors
        participant_forms, errors = validate_participants(data['participants'])
        assert not errors, errors

        return BookingService.initiate_booking(
            camp=camp,
            session_id=contact_form.cleaned_data['session_id'],
            contact=contact_form.cleaned_data,
            participant_forms=participant_forms,
            selected_addons=data.get('selected_addons'),
            coupon_code=contact_form.cleaned_data.get('coupon_code'),
        )
    return _make_booking


# ── Clients ──────────────────────────────────────────────────────────────────


@pytest.fixture
def staff_user(db):
    return User.objects.create_user(username='manager', password='secret-pass-123', is_staff=True)


@pytest.fixture
def staff_client(client, staff_user):
    client.force_login(staff_user)
    return client
