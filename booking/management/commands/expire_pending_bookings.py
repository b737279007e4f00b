from django.conf import settings
from django.core.management.base import BaseCommand

from booking.services import BookingService


class Command(BaseCommand):
    help = 'Cancels unpaid pending camp bookings and releases their places'

    def add_arguments(self, parser):
        parser.add_argument(
            '--hours',
            type=int,
            default=settings.PENDING_BOOKING_TTL_HOURS,
            help='Age in hours after which an unpaid booking is cancelled',
        )

    def handle(self, *args, **options):
        hours = options['hours']
        if hours < 1:
            self.stdout.write(self.style.ERROR('--hours must be at least 1'))
            return

        cancelled = BookingService.expire_pending_bookings(hours=hours)
        self.stdout.write(self.style.SUCCESS(f'Cancelled {cancelled} pending booking(s) older than {hours}h'))
