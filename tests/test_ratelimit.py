import pytest
from django.core.cache import cache
from django.http import JsonResponse
from django.test import RequestFactory

from booking.decorators import api_ratelimit, booking_ratelimit

COUPON_URL = '/api/public/booking-data/validate-coupon/'


@pytest.fixture
def limits_on(settings):
    settings.RATELIMIT_ENABLE = True
    cache.clear()
    yield settings
    cache.clear()


@booking_ratelimit(rate='2/m')
def hold_place(request):
    return JsonResponse({'success': True})


@api_ratelimit(rate='2/m')
def other_view(request):
    return JsonResponse({'success': True})


def test_third_request_in_a_minute_is_refused(limits_on):
    factory = RequestFactory()

    statuses = [hold_place(factory.post('/hold/')).status_code for _ in range(3)]

    assert statuses == [200, 200, 429]
    response = hold_place(factory.post('/hold/'))
    assert response.status_code == 429
    assert b'"error": "rate_limit_exceeded"' in response.content


def test_views_keep_separate_counters(limits_on):
    factory = RequestFactory()
    for _ in range(2):
        hold_place(factory.post('/hold/'))

    assert hold_place(factory.post('/hold/')).status_code == 429
    assert other_view(factory.get('/other/')).status_code == 200


def test_booking_limit_counts_posts_only(limits_on):
    factory = RequestFactory()

    statuses = [hold_place(factory.get('/hold/')).status_code for _ in range(3)]

    assert statuses == [200, 200, 200]


def test_disabled_limits_let_everything_through(settings):
    settings.RATELIMIT_ENABLE = False
    cache.clear()
    factory = RequestFactory()

    statuses = [hold_place(factory.post('/hold/')).status_code for _ in range(5)]

    assert statuses == [200] * 5


@pytest.mark.django_db
def test_public_endpoint_answers_429_as_json(client, limits_on, camp):
    payload = {'code': 'NOPE', 'camp_id': camp.id}

    statuses = [
        client.post(COUPON_URL, payload, content_type='application/json').status_code
        for _ in range(11)
    ]

    assert statuses[:10] == [200] * 10
    assert statuses[10] == 429
    response = client.post(COUPON_URL, payload, content_type='application/json')
    assert response.json() == {
        'success': False,
        'error': 'rate_limit_exceeded',
        'message': 'Too many requests. Please wait a moment.',
    }


def test_default_limit_covers_every_method(limits_on):
    factory = RequestFactory()

    statuses = [
        other_view(factory.get('/other/')).status_code,
        other_view(factory.post('/other/')).status_code,
        other_view(factory.get('/other/')).status_code,
    ]

    assert statuses == [200, 200, 429]
