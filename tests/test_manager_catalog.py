import io
from datetime import date

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from catalog.models import (
    Sport, Course, Camp, CampSession, CampAddonGroup, BookingRule, DailyAvailability,
    Tournament, GalleryCategory, GalleryItem, MediaItem,
)

pytestmark = pytest.mark.django_db

API = '/manager/api'


def post_json(client, url, data=None):
    return client.post(f'{API}{url}', data or {}, content_type='application/json')


def test_non_staff_is_redirected_to_login(client, django_user_model):
    user = django_user_model.objects.create_user(username='visitor', password='secret-pass-123')
    client.force_login(user)

    response = client.get(f'{API}/sports/')

    assert response.status_code == 302
    assert '/admin/login/' in response['Location']


class TestSports:

    def test_crud(self, staff_client):
        response = post_json(staff_client, '/sports/create/', {'name': '  Padel ', 'description': 'Glass courts'})
        assert response.status_code == 201
        sport = response.json()['sport']
        assert sport['name'] == 'Padel'
        assert sport['slug'] == 'padel'

        response = post_json(staff_client, f'/sports/{sport["id"]}/update/', {'is_active': False})
        assert response.status_code == 200
        updated = Sport.objects.get(id=sport['id'])
        assert updated.is_active is False
        assert updated.description == 'Glass courts'

        response = staff_client.get(f'{API}/sports/')
        assert [s['name'] for s in response.json()['sports']] == ['Padel']

        response = post_json(staff_client, f'/sports/{sport["id"]}/delete/')
        assert response.status_code == 200
        assert not Sport.objects.exists()

    def test_duplicate_name(self, staff_client, sport):
        response = post_json(staff_client, '/sports/create/', {'name': 'Pickleball'})

        assert response.status_code == 400
        assert 'name' in response.json()['errors']

    def test_sport_with_courses_cannot_be_deleted(self, staff_client, course):
        response = post_json(staff_client, f'/sports/{course.sport_id}/delete/')

        assert response.status_code == 400
        assert Sport.objects.filter(id=course.sport_id).exists()


class TestCoursesAndSchedules:

    def test_course_create_and_filter(self, staff_client, sport):
        response = post_json(staff_client, '/courses/create/', {
            'sport': sport.id, 'name': 'Advanced Drills', 'image_paths': ['/media/a.jpg'],
        })
        assert response.status_code == 201
        assert response.json()['course']['image_paths'] == ['/media/a.jpg']

        other = Sport.objects.create(name='Tennis')
        Course.objects.create(sport=other, name='Serve Clinic')

        response = staff_client.get(f'{API}/courses/?sport={sport.id}')
        assert [c['name'] for c in response.json()['courses']] == ['Advanced Drills']

        response = staff_client.get(f'{API}/courses/?search=clinic')
        assert [c['name'] for c in response.json()['courses']] == ['Serve Clinic']

    def test_schedule_dates_are_validated(self, staff_client, course):
        response = post_json(staff_client, '/schedules/create/', {
            'course': course.id, 'schedule_name': 'Spring', 'start_date': '2025-03-10', 'end_date': '2025-03-01',
        })

        assert response.status_code == 400
        assert 'end_date' in response.json()['errors']

    def test_schedule_with_availability_cannot_be_deleted(self, staff_client, schedule):
        DailyAvailability.objects.create(schedule=schedule, available_date=date(2024, 9, 2))

        response = post_json(staff_client, f'/schedules/{schedule.id}/delete/')

        assert response.status_code == 400

    def test_course_schedules_list(self, staff_client, schedule):
        response = staff_client.get(f'{API}/courses/{schedule.course_id}/schedules/')

        assert [s['schedule_name'] for s in response.json()['schedules']] == ['Fall term']


class TestRules:

    def test_rule_with_ranges(self, staff_client, schedule):
        response = post_json(staff_client, '/rules/create/', {
            'schedule': schedule.id,
            'rule_type': 'CLOSE',
            'recurring': True,
            'priority': 5,
            'days_of_week': ['sunday', 'MONDAY', 'monday'],
            'ranges': [{'start_date': '2024-12-20', 'end_date': '2024-12-31'}],
        })

        assert response.status_code == 201
        rule = response.json()['rule']
        assert rule['days_of_week'] == ['MONDAY', 'SUNDAY']
        assert rule['ranges'][0]['start_date'] == '2024-12-20'

        response = post_json(staff_client, f'/rules/{rule["id"]}/update/', {
            'ranges': [{'start_time': '09:00', 'end_time': '12:00'}, {'start_time': '14:00', 'end_time': '16:00'}],
        })
        assert response.status_code == 200
        saved = BookingRule.objects.get(id=rule['id'])
        assert saved.ranges.count() == 2
        assert saved.priority == 5

    def test_recurring_rule_needs_days(self, staff_client, schedule):
        response = post_json(staff_client, '/rules/create/', {'schedule': schedule.id, 'recurring': True})

        assert response.status_code == 400
        assert 'days_of_week' in response.json()['errors']

    def test_unknown_day_and_bad_range(self, staff_client, schedule):
        response = post_json(staff_client, '/rules/create/', {
            'schedule': schedule.id,
            'days_of_week': ['FUNDAY'],
            'ranges': [{'start_time': '12:00', 'end_time': '09:00'}],
        })

        assert response.status_code == 400
        errors = response.json()['errors']
        assert 'days_of_week' in errors
        assert errors['ranges'][0]['index'] == 0
        assert not BookingRule.objects.exists()


class TestCamps:

    def camp_payload(self, **overrides):
        payload = {
            'title': 'Winter Tennis Camp',
            'category': 'Tennis',
            'status': 'PUBLISHED',
            'price_per_slot': '180.00',
            'meta_title': 'Winter camp',
            'sessions': [
                {'session_name': 'Week A', 'start_date': '2025-01-06', 'end_date': '2025-01-10',
                 'base_price': '180.00', 'max_capacity': 12},
            ],
            'addon_groups': [
                {'group_name': 'Lunch', 'selection_type': 'SINGLE', 'options': [
                    {'option_name': 'None', 'price_adjustment': '0'},
                    {'option_name': 'Hot lunch', 'price_adjustment': '40'},
                ]},
            ],
        }
        payload.update(overrides)
        return payload

    def test_create_with_sessions_and_addons(self, staff_client):
        response = post_json(staff_client, '/camps/create/', self.camp_payload())

        assert response.status_code == 201
        camp = response.json()['camp']
        assert camp['slug'] == 'winter-tennis-camp'
        assert [s['session_name'] for s in camp['sessions']] == ['Week A']
        assert camp['addon_groups'][0]['options'][1]['price_adjustment'] == 40.0
        assert camp['seo']['meta_title'] == 'Winter camp'

    def test_update_replaces_sessions_and_addons(self, staff_client):
        camp_id = post_json(staff_client, '/camps/create/', self.camp_payload()).json()['camp']['id']
        session = CampSession.objects.get(camp_id=camp_id)

        response = post_json(staff_client, f'/camps/{camp_id}/update/', {
            'title': 'Winter Tennis Camp 2025',
            'sessions': [
                {'id': session.id, 'max_capacity': 20},
                {'session_name': 'Week B', 'start_date': '2025-01-13', 'end_date': '2025-01-17'},
            ],
            'addon_groups': [
                {'group_name': 'Gear', 'selection_type': 'MULTIPLE', 'options': [
                    {'option_name': 'Racket', 'price_adjustment': '25'},
                ]},
            ],
        })

        assert response.status_code == 200
        session.refresh_from_db()
        assert session.max_capacity == 20
        assert session.session_name == 'Week A'
        assert CampSession.objects.filter(camp_id=camp_id).count() == 2
        assert list(CampAddonGroup.objects.filter(camp_id=camp_id).values_list('group_name', flat=True)) == ['Gear']
        camp = Camp.objects.get(id=camp_id)
        assert camp.title == 'Winter Tennis Camp 2025'
        assert camp.slug == 'winter-tennis-camp'

    def test_addon_group_needs_options(self, staff_client):
        response = post_json(staff_client, '/camps/create/', self.camp_payload(
            addon_groups=[{'group_name': 'Empty', 'selection_type': 'SINGLE', 'options': []}],
        ))

        assert response.status_code == 400
        assert response.json()['errors']['addon_groups'][0]['options'] == [
            'Each add-on group needs at least one option'
        ]
        assert not Camp.objects.exists()

    def test_booked_session_cannot_be_dropped(self, staff_client, camp, session, make_booking):
        make_booking()

        response = post_json(staff_client, f'/camps/{camp.id}/update/', {'sessions': []})

        assert response.status_code == 400
        assert CampSession.objects.filter(id=session.id).exists()

    def test_camp_with_active_bookings_cannot_be_deleted(self, staff_client, camp, make_booking):
        make_booking()

        response = post_json(staff_client, f'/camps/{camp.id}/delete/')

        assert response.status_code == 400
        assert Camp.objects.filter(id=camp.id).exists()

    def test_list_filters_by_status(self, staff_client, camp):
        Camp.objects.create(title='Draft camp')

        response = staff_client.get(f'{API}/camps/?status=draft')

        camps = response.json()['camps']
        assert [c['title'] for c in camps] == ['Draft camp']
        assert camps[0]['session_count'] == 0


class TestTournaments:

    def test_pagination_and_toggle(self, staff_client):
        for day in range(1, 8):
            Tournament.objects.create(
                title=f'Desert Open {day}', location_name='Phoenix',
                start_date=date(2025, 4, day), end_date=date(2025, 4, day),
            )

        response = staff_client.get(f'{API}/tournaments/?page=1&size=5')
        data = response.json()
        assert len(data['tournaments']) == 2
        assert data['pagination']['total_items'] == 7
        assert data['pagination']['current_page'] == 1

        tournament = Tournament.objects.first()
        response = post_json(staff_client, f'/tournaments/{tournament.id}/toggle/')
        assert response.json()['is_active'] is False

        response = staff_client.get(f'{API}/tournaments/?active=false')
        assert response.json()['pagination']['total_items'] == 1

    def test_end_before_start(self, staff_client):
        response = post_json(staff_client, '/tournaments/create/', {
            'title': 'Backwards Cup', 'location_name': 'Tempe', 'start_date': '2025-05-10', 'end_date': '2025-05-01',
        })

        assert response.status_code == 400
        assert 'end_date' in response.json()['errors']


class TestGallery:

    def test_filters_and_stats(self, staff_client):
        category = GalleryCategory.objects.create(name='Camps')
        GalleryItem.objects.create(title='Group photo', media_url='/media/a.jpg', category=category, is_featured=True)
        GalleryItem.objects.create(title='Highlights', media_url='/media/b.mp4', media_type='VIDEO')
        GalleryItem.objects.create(title='Old photo', media_url='/media/c.jpg', is_active=False)

        def titles(query):
            return [item['title'] for item in staff_client.get(f'{API}/gallery/?{query}').json()['items']]

        assert titles(f'category={category.id}') == ['Group photo']
        assert titles('media_type=video') == ['Highlights']
        assert titles('status=inactive') == ['Old photo']
        assert titles('featured=true') == ['Group photo']

        stats = staff_client.get(f'{API}/gallery/').json()['stats']
        assert stats == {'total': 3, 'active': 2, 'featured': 1}

    def test_create_with_tags(self, staff_client):
        tag_id = post_json(staff_client, '/gallery/tags/create/', {'name': 'Juniors'}).json()['tag']['id']

        response = post_json(staff_client, '/gallery/create/', {
            'title': 'Junior finals', 'media_url': '/media/finals.jpg', 'tags': [tag_id],
        })

        assert response.status_code == 201
        item = GalleryItem.objects.get(id=response.json()['item']['id'])
        assert list(item.tags.values_list('name', flat=True)) == ['Juniors']


class TestMediaLibrary:

    def png_upload(self, name='court.png'):
        buffer = io.BytesIO()
        Image.new('RGBA', (800, 600), (30, 120, 200, 255)).save(buffer, format='PNG')
        return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')

    def test_upload_creates_thumbnail(self, staff_client):
        response = staff_client.post(f'{API}/media/upload/', {'file': self.png_upload(), 'alt_text': 'Court'})

        assert response.status_code == 201
        item = MediaItem.objects.get(id=response.json()['item']['id'])
        assert item.media_type == 'IMAGE'
        assert item.alt_text == 'Court'
        assert item.file_name == 'court.png'
        with Image.open(item.thumbnail.path) as thumb:
            assert max(thumb.size) <= 400

        response = post_json(staff_client, f'/media/{item.id}/delete/')
        assert response.status_code == 200
        assert not MediaItem.objects.exists()

    def test_unsupported_format(self, staff_client):
        upload = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')

        response = staff_client.post(f'{API}/media/upload/', {'file': upload})

        assert response.status_code == 400
        assert 'file' in response.json()['errors']

    def test_corrupt_image(self, staff_client):
        upload = SimpleUploadedFile('broken.png', b'not really a png', content_type='image/png')

        response = staff_client.post(f'{API}/media/upload/', {'file': upload})

        assert response.status_code == 400
        assert response.json()['message'].startswith('Could not read image')
