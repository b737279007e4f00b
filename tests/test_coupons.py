import re
from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from booking.models import CampBooking, Coupon, CouponRedemption, normalize_coupon_code
from booking.services import CouponService
from catalog.models import Camp, Sport

pytestmark = pytest.mark.django_db


def test_normalize_coupon_code():
    assert normalize_coupon_code(' summer-10 ') == 'SUMMER10'
    assert normalize_coupon_code(None) == ''


def test_code_is_normalized_on_save(make_coupon):
    coupon = make_coupon(code='spring 2025!')
    assert coupon.code == 'SPRING2025'


def test_valid_coupon(coupon, camp):
    found, message = CouponService.check('summer10', camp, amount=Decimal('100'))

    assert found == coupon
    assert message is None


@pytest.mark.parametrize('code, expected', [
    ('', 'Please enter a coupon code.'),
    ('NOPE', 'Invalid coupon code.'),
])
def test_missing_or_unknown_code(camp, code, expected):
    assert CouponService.check(code, camp) == (None, expected)


def test_inactive_coupon_is_invalid(make_coupon, camp):
    make_coupon(is_active=False)
    assert CouponService.check('SUMMER10', camp) == (None, 'Invalid coupon code.')


def test_coupon_not_active_yet(make_coupon, camp):
    now = timezone.now()
    make_coupon(valid_from=now + timedelta(days=2), valid_until=now + timedelta(days=10))

    assert CouponService.check('SUMMER10', camp) == (None, 'This coupon is not active yet.')


def test_expired_coupon(make_coupon, camp):
    now = timezone.now()
    make_coupon(valid_from=now - timedelta(days=10), valid_until=now - timedelta(days=1))

    assert CouponService.check('SUMMER10', camp) == (None, 'This coupon has expired.')


def test_usage_limit(make_coupon, camp):
    make_coupon(max_uses=5, current_total_uses=5)

    assert CouponService.check('SUMMER10', camp) == (None, 'This coupon has reached its usage limit.')


def test_last_use_taken_by_concurrent_booking(make_coupon, make_booking, session):
    coupon = make_coupon(max_uses=1)
    original_check = CouponService.check

    def check_then_use_up(*args, **kwargs):
        result = original_check(*args, **kwargs)
        Coupon.objects.filter(pk=coupon.pk).update(current_total_uses=1)
        return result

    with mock.patch.object(CouponService, 'check', side_effect=check_then_use_up):
        with pytest.raises(ValidationError, match='usage limit'):
            make_booking(coupon_code='SUMMER10')

    session.refresh_from_db()
    assert not CampBooking.objects.exists()
    assert not coupon.redemptions.exists()
    assert session.booked_slots == 0


def test_lock_for_redemption_rechecks_uses_per_user(coupon, make_booking):
    booking = make_booking()
    CouponRedemption.objects.create(
        coupon=coupon, booking=booking, email='jordan@example.com', discount_amount=Decimal('10')
    )

    with pytest.raises(ValidationError, match='already used'):
        CouponService.lock_for_redemption(coupon, 'Jordan@Example.com')
    assert CouponService.lock_for_redemption(coupon, 'casey@example.com') == coupon


def test_uses_per_user(coupon, camp, make_booking):
    booking = make_booking()
    CouponRedemption.objects.create(
        coupon=coupon, booking=booking, email='Jordan@Example.com', discount_amount=Decimal('10')
    )

    found, message = CouponService.check('SUMMER10', camp, email='jordan@example.com')
    assert found is None
    assert message == 'You have already used this coupon.'

    found, message = CouponService.check('SUMMER10', camp, email='someone.else@example.com')
    assert found == coupon


def test_minimum_purchase(make_coupon, camp):
    make_coupon(min_purchase_amount=Decimal('500.00'))

    found, message = CouponService.check('SUMMER10', camp, amount=Decimal('499.99'))
    assert found is None
    assert message == 'A minimum purchase of $500.00 is required for this coupon.'

    found, _ = CouponService.check('SUMMER10', camp, amount=Decimal('500'))
    assert found is not None


def test_restricted_to_other_camp(coupon, camp):
    other = Camp.objects.create(title='Tennis Week', category='Tennis', status='PUBLISHED')
    coupon.applicable_camps.add(other)

    assert CouponService.check('SUMMER10', camp) == (None, 'This coupon is not valid for this camp.')
    assert CouponService.check('SUMMER10', other)[0] == coupon


def test_sport_restriction_matches_camp_category(coupon, camp, sport):
    coupon.applicable_sports.add(sport)
    assert CouponService.is_applicable(coupon, camp)

    tennis = Sport.objects.create(name='Tennis')
    coupon.applicable_sports.set([tennis])
    assert not CouponService.is_applicable(coupon, camp)


def test_validation_response(coupon, camp):
    assert CouponService.validation_response('SUMMER10', camp) == {
        'valid': True,
        'message': 'Coupon applied successfully!',
        'discount_type': 'PERCENTAGE',
        'discount_value': 10.0,
    }
    assert CouponService.validation_response('NOPE', camp)['valid'] is False


def test_generate_code_uses_prefix_and_four_digits(db):
    code = CouponService.generate_code('fall-')

    assert re.fullmatch(r'FALL\d{4}', code)


def test_generate_code_gives_up_when_taken(make_coupon):
    make_coupon(code='FALL1234')

    with mock.patch('booking.services.random.randint', return_value=1234):
        with pytest.raises(ValidationError):
            CouponService.generate_code('FALL')


def test_redeem_and_release(coupon, make_booking):
    booking = make_booking()

    CouponService.redeem(coupon, booking)
    coupon.refresh_from_db()
    assert coupon.current_total_uses == 1
    assert coupon.redemptions.count() == 1

    assert CouponService.release(booking) is True
    coupon.refresh_from_db()
    assert coupon.current_total_uses == 0
    assert not Coupon.objects.get(pk=coupon.pk).redemptions.exists()

    assert CouponService.release(booking) is False
