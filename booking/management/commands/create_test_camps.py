from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.utils import timezone

from booking.models import Coupon
from catalog.models import Sport, Course, Camp, CampSession, CampAddonGroup, CampAddonOption


class Command(BaseCommand):
    help = 'Creates sample sports, courses, a published camp with sessions and add-ons, and a coupon'

    def handle(self, *args, **kwargs):
        today = timezone.localdate()

        sports = {}
        for name, description in [
            ('Pickleball', 'Fast growing paddle sport for all ages.'),
            ('Tennis', 'Classic racket sport on hard and clay courts.'),
        ]:
            sport, created = Sport.objects.get_or_create(name=name, defaults={'description': description})
            sports[name] = sport
            self._report('Sport', sport.name, created)

        courses = [
            {
                'sport': sports['Pickleball'],
                'name': 'Pickleball Fundamentals',
                'short_description': 'Serve, return and dink basics.',
                'duration': '4 weeks',
                'base_price_info': 'From $120',
            },
            {
                'sport': sports['Tennis'],
                'name': 'Junior Tennis Academy',
                'short_description': 'Technique and match play for juniors.',
                'duration': '8 weeks',
                'base_price_info': 'From $240',
            },
        ]
        for course_data in courses:
            course, created = Course.objects.get_or_create(
                name=course_data['name'],
                defaults=course_data,
            )
            self._report('Course', course.name, created)

        camp, created = Camp.objects.get_or_create(
            title='Summer Pickleball Camp',
            defaults={
                'description': 'A week of drills, games and coaching for every level.',
                'location': 'Phoenix, AZ',
                'category': 'Pickleball',
                'status': 'PUBLISHED',
                'price_per_slot': Decimal('299.00'),
                'meta_title': 'Summer Pickleball Camp',
            }
        )
        self._report('Camp', camp.title, created)

        sessions = [
            ('Week 1 - Beginners', 30, Decimal('299.00'), Decimal('249.00')),
            ('Week 2 - Intermediate', 37, Decimal('349.00'), None),
        ]
        for session_name, offset, base_price, discount_price in sessions:
            session, created = CampSession.objects.get_or_create(
                camp=camp,
                session_name=session_name,
                defaults={
                    'start_date': today + timedelta(days=offset),
                    'end_date': today + timedelta(days=offset + 4),
                    'base_price': base_price,
                    'discount_price': discount_price,
                    'max_capacity': 16,
                }
            )
            self._report('Session', session.session_name, created)

        addon_groups = [
            ('Lunch', 'SINGLE', [('No lunch', Decimal('0.00')), ('Daily lunch', Decimal('45.00'))]),
            ('Extras', 'MULTIPLE', [('Camp T-shirt', Decimal('20.00')), ('Paddle rental', Decimal('15.00'))]),
        ]
        for order, (group_name, selection_type, options) in enumerate(addon_groups):
            group, created = CampAddonGroup.objects.get_or_create(
                camp=camp,
                group_name=group_name,
                defaults={'selection_type': selection_type, 'display_order': order},
            )
            self._report('Add-on group', group.group_name, created)
            for option_order, (option_name, price) in enumerate(options):
                CampAddonOption.objects.get_or_create(
                    group=group,
                    option_name=option_name,
                    defaults={'price_adjustment': price, 'display_order': option_order},
                )

        coupon, created = Coupon.objects.get_or_create(
            code='SUMMER10',
            defaults={
                'description': '10% off summer camps',
                'discount_type': 'PERCENTAGE',
                'discount_value': Decimal('10.00'),
                'valid_from': timezone.now(),
                'valid_until': timezone.now() + timedelta(days=90),
                'max_uses': 100,
            }
        )
        self._report('Coupon', coupon.code, created)

        self.stdout.write(self.style.SUCCESS('Test camp data is ready'))

    def _report(self, kind, name, created):
        if created:
            self.stdout.write(self.style.SUCCESS(f'Created {kind.lower()}: {name}'))
        else:
            self.stdout.write(self.style.WARNING(f'{kind} already exists: {name}'))
