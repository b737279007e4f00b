from datetime import date
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from catalog.models import DailyAvailability, Sport, Tournament
from catalog.utils import month_grid, availability_calendar, parse_year_month, unique_slug, paginate


def test_month_starting_on_sunday_has_no_padding():
    grid = month_grid(2024, 9)

    assert grid[0] == date(2024, 9, 1)
    assert len(grid) == 30


def test_leap_february_padding():
    grid = month_grid(2024, 2)

    # 1 Feb 2024 is a Thursday
    assert grid[:4] == [None, None, None, None]
    assert grid[4] == date(2024, 2, 1)
    assert grid[-1] == date(2024, 2, 29)
    assert len(grid) == 33


def test_parse_year_month():
    today = date(2024, 5, 17)

    assert parse_year_month(None, None, today) == (2024, 5)
    assert parse_year_month('2025', '1', today) == (2025, 1)
    with pytest.raises(ValidationError):
        parse_year_month('2025', '13', today)
    with pytest.raises(ValidationError):
        parse_year_month('year', '1', today)


@pytest.mark.django_db
def test_calendar_statuses(schedule):
    DailyAvailability.objects.create(schedule=schedule, available_date=date(2024, 9, 2), max_slots=10)
    DailyAvailability.objects.create(
        schedule=schedule, available_date=date(2024, 9, 3), max_slots=4, booked_slots=4
    )
    DailyAvailability.objects.create(
        schedule=schedule, available_date=date(2024, 9, 4), is_booking_open=False, notes_admin='Coach away'
    )
    DailyAvailability.objects.create(schedule=schedule, available_date=date(2024, 9, 5), is_booking_open=False)

    cells = {cell['day']: cell for cell in availability_calendar(schedule, 2024, 9) if cell}

    assert cells[1]['status'] == 'none'
    assert cells[1]['availability_id'] is None
    assert cells[2]['status'] == 'open'
    assert cells[2]['remarks'] == ''
    assert cells[3]['status'] == 'full'
    assert cells[4]['status'] == 'closed'
    assert cells[4]['remarks'] == 'Coach away'
    assert cells[5]['remarks'] == 'Closed'


@pytest.mark.django_db
def test_calendar_endpoint(staff_client, schedule):
    DailyAvailability.objects.create(schedule=schedule, available_date=date(2024, 2, 14), max_slots=6)

    response = staff_client.get(f'/manager/api/schedules/{schedule.id}/calendar/?year=2024&month=2')

    assert response.status_code == 200
    data = response.json()
    assert data['year'] == 2024
    assert data['month'] == 2
    assert data['days'][:4] == [None, None, None, None]
    valentine = data['days'][4 + 13]
    assert valentine['date'] == '2024-02-14'
    assert valentine['status'] == 'open'
    assert valentine['max_slots'] == 6


@pytest.mark.django_db
def test_calendar_endpoint_rejects_bad_month(staff_client, schedule):
    response = staff_client.get(f'/manager/api/schedules/{schedule.id}/calendar/?year=2024&month=14')

    assert response.status_code == 400


@pytest.mark.django_db
def test_availability_upsert(staff_client, schedule):
    payload = {
        'schedule': schedule.id,
        'available_date': '2024-09-10',
        'max_slots': 8,
        'price_per_slot': '45.00',
    }

    response = staff_client.post('/manager/api/availability/save/', payload, content_type='application/json')
    assert response.status_code == 201
    item_id = response.json()['item']['id']

    payload.update({'max_slots': 12, 'is_booking_open': False})
    response = staff_client.post('/manager/api/availability/save/', payload, content_type='application/json')
    assert response.status_code == 200
    assert response.json()['item']['id'] == item_id

    item = DailyAvailability.objects.get(id=item_id)
    assert item.max_slots == 12
    assert item.price_per_slot == Decimal('45.00')
    assert item.is_booking_open is False
    assert DailyAvailability.objects.count() == 1


@pytest.mark.django_db
def test_max_slots_below_booked_is_rejected(staff_client, schedule):
    DailyAvailability.objects.create(
        schedule=schedule, available_date=date(2024, 9, 10), max_slots=8, booked_slots=5
    )

    response = staff_client.post('/manager/api/availability/save/', {
        'schedule': schedule.id, 'available_date': '2024-09-10', 'max_slots': 3,
    }, content_type='application/json')

    assert response.status_code == 400
    assert 'max_slots' in response.json()['errors']


@pytest.mark.django_db
def test_booked_day_cannot_be_deleted(staff_client, schedule):
    item = DailyAvailability.objects.create(
        schedule=schedule, available_date=date(2024, 9, 10), booked_slots=1
    )

    response = staff_client.post(f'/manager/api/availability/{item.id}/delete/')

    assert response.status_code == 400
    assert DailyAvailability.objects.filter(id=item.id).exists()


@pytest.mark.django_db
def test_unique_slug_adds_suffix(db):
    Sport.objects.create(name='Beach Tennis')
    second = Sport(name='Beach  tennis!')

    assert unique_slug(Sport, second.name, instance=second) == 'beach-tennis-2'


@pytest.mark.django_db
def test_paginate_is_zero_based(db):
    for day in range(1, 13):
        Tournament.objects.create(
            title=f'Open {day}', location_name='Club', start_date=date(2024, 6, day), end_date=date(2024, 6, day),
        )

    page, pagination = paginate(Tournament.objects.all(), '1', '5')

    assert len(page.object_list) == 5
    assert pagination == {
        'current_page': 1,
        'total_pages': 3,
        'total_items': 12,
        'page_size': 5,
        'has_next': True,
        'has_previous': True,
    }

    page, pagination = paginate(Tournament.objects.all(), '99', None)
    assert pagination['current_page'] == 1
