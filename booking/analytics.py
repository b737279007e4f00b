"""
Analytics for the manager dashboard
Revenue, session occupancy, customers and coupon usage
"""

from django.db.models import Count, Sum, Avg, Q, F
from django.db.models.functions import TruncDate, TruncMonth
from django.utils import timezone
from datetime import timedelta

from catalog.models import CampSession
from .constants import BOOKING_CANCELLED, ACTIVE_BOOKING_STATUSES, PAYMENT_PAID
from .models import CampBooking, Coupon, CouponRedemption, Payment


def _period(start_date, end_date):
    today = timezone.localdate()
    if not start_date:
        start_date = today - timedelta(days=30)
    if not end_date:
        end_date = today
    return start_date, end_date


def get_financial_stats(start_date=None, end_date=None):
    """
    Revenue of camp bookings created in the period

    Returns:
        - booked and paid revenue, refunds, discounts
        - revenue by day, by month (last 12) and by camp
        - forecast for the next 30 days
    """
    start_date, end_date = _period(start_date, end_date)
    today = timezone.localdate()

    bookings = CampBooking.objects.filter(
        created_at__date__range=[start_date, end_date],
    ).exclude(status=BOOKING_CANCELLED)

    totals = bookings.aggregate(
        total_revenue=Sum('final_amount'),
        total_discount=Sum('discount_amount'),
        avg_booking=Avg('final_amount'),
    )

    paid_payments = Payment.objects.filter(
        paid_at__date__range=[start_date, end_date],
        status='succeeded'
    ).aggregate(
        total_paid=Sum('amount'),
        avg_payment=Avg('amount'),
        count=Count('id')
    )

    refunded = Payment.objects.filter(
        created_at__date__range=[start_date, end_date],
        status='refunded'
    ).aggregate(total=Sum('amount'))

    daily_revenue = bookings.filter(payment_status=PAYMENT_PAID).annotate(
        day=TruncDate('created_at')
    ).values('day').annotate(
        revenue=Sum('final_amount'),
        bookings_count=Count('id')
    ).order_by('day')

    twelve_months_ago = today - timedelta(days=365)
    monthly_revenue = CampBooking.objects.filter(
        created_at__date__gte=twelve_months_ago,
        payment_status=PAYMENT_PAID
    ).annotate(
        month=TruncMonth('created_at')
    ).values('month').annotate(
        revenue=Sum('final_amount'),
        bookings_count=Count('id')
    ).order_by('month')

    revenue_by_camp = bookings.filter(payment_status=PAYMENT_PAID).values(
        'camp__id', 'camp__title'
    ).annotate(
        revenue=Sum('final_amount'),
        bookings_count=Count('id')
    ).order_by('-revenue')

    total_paid = float(paid_payments['total_paid'] or 0)
    days_in_period = max((end_date - start_date).days, 1)
    avg_daily_revenue = total_paid / days_in_period

    return {
        'total_revenue': float(totals['total_revenue'] or 0),
        'paid_amount': total_paid,
        'unpaid_amount': float((totals['total_revenue'] or 0)) - total_paid,
        'refunded_amount': float(refunded['total'] or 0),
        'total_discount': float(totals['total_discount'] or 0),
        'avg_booking_value': float(totals['avg_booking'] or 0),
        'avg_payment': float(paid_payments['avg_payment'] or 0),
        'payments_count': paid_payments['count'],

        'daily_revenue': [
            {'day': row['day'], 'revenue': float(row['revenue'] or 0), 'bookings_count': row['bookings_count']}
            for row in daily_revenue
        ],
        'monthly_revenue': [
            {'month': row['month'].date().isoformat() if hasattr(row['month'], 'date') else str(row['month']),
             'revenue': float(row['revenue'] or 0), 'bookings_count': row['bookings_count']}
            for row in monthly_revenue
        ],
        'revenue_by_camp': [
            {'camp_id': row['camp__id'], 'camp_title': row['camp__title'],
             'revenue': float(row['revenue'] or 0), 'bookings_count': row['bookings_count']}
            for row in revenue_by_camp
        ],

        'forecast_next_month': float(avg_daily_revenue * 30),
        'avg_daily_revenue': float(avg_daily_revenue),

        'period': {
            'start': start_date.isoformat(),
            'end': end_date.isoformat(),
            'days': days_in_period
        }
    }


def get_occupancy_stats(start_date=None, end_date=None):
    """
    Fill rate of camp sessions running in the period
    """
    start_date, end_date = _period(start_date, end_date)

    sessions = CampSession.objects.filter(
        start_date__lte=end_date,
        end_date__gte=start_date,
    ).select_related('camp')

    totals = sessions.aggregate(capacity=Sum('max_capacity'), booked=Sum('booked_slots'))
    capacity = totals['capacity'] or 0
    booked = totals['booked'] or 0
    occupancy_rate = (booked / capacity * 100) if capacity > 0 else 0

    session_occupancy = []
    for session in sessions.order_by('start_date'):
        session_occupancy.append({
            'session_id': session.id,
            'session_name': session.session_name,
            'camp_title': session.camp.title,
            'start_date': session.start_date.isoformat(),
            'booked_slots': session.booked_slots,
            'max_capacity': session.max_capacity,
            'occupancy_rate': round(session.booked_slots / session.max_capacity * 100, 2)
            if session.max_capacity else 0,
        })

    bookings = CampBooking.objects.filter(
        created_at__date__range=[start_date, end_date],
        status__in=ACTIVE_BOOKING_STATUSES
    )

    return {
        'overall_occupancy_rate': round(occupancy_rate, 2),
        'total_booked_slots': booked,
        'total_capacity': capacity,
        'total_bookings': bookings.count(),
        'full_sessions': sessions.filter(booked_slots__gte=F('max_capacity')).count(),
        'session_occupancy': session_occupancy,

        'period': {
            'start': start_date.isoformat(),
            'end': end_date.isoformat(),
            'days': (end_date - start_date).days + 1
        }
    }


def get_customer_stats(start_date=None, end_date=None):
    """
    Customers are identified by booking email

    Returns:
        - new and returning customers
        - top customers by spend
        - average lifetime value
    """
    start_date, end_date = _period(start_date, end_date)

    bookings = CampBooking.objects.filter(created_at__date__range=[start_date, end_date])

    per_customer = bookings.values('guest_email').annotate(
        bookings_count=Count('id'),
        total_spent=Sum('final_amount', filter=Q(payment_status=PAYMENT_PAID)),
    )

    active_customers = per_customer.count()
    returning_customers = per_customer.filter(bookings_count__gt=1).count()

    earlier_emails = CampBooking.objects.filter(
        created_at__date__lt=start_date
    ).values('guest_email')
    new_customers = bookings.exclude(guest_email__in=earlier_emails).values('guest_email').distinct().count()

    top_customers = [
        {
            'email': row['guest_email'],
            'bookings_count': row['bookings_count'],
            'total_spent': float(row['total_spent'] or 0),
        }
        for row in per_customer.order_by('-total_spent', '-bookings_count')[:10]
    ]

    lifetime = CampBooking.objects.filter(payment_status=PAYMENT_PAID).values('guest_email').annotate(
        spent=Sum('final_amount')
    ).aggregate(avg=Avg('spent'))

    retention_rate = (returning_customers / active_customers * 100) if active_customers > 0 else 0

    return {
        'new_customers': new_customers,
        'active_customers': active_customers,
        'returning_customers': returning_customers,
        'retention_rate': round(retention_rate, 2),
        'top_customers': top_customers,
        'avg_ltv': float(lifetime['avg'] or 0),

        'period': {
            'start': start_date.isoformat(),
            'end': end_date.isoformat(),
            'days': (end_date - start_date).days
        }
    }


def get_coupon_report():
    """
    Usage of every coupon: redemptions, discount given and revenue it brought
    """
    coupons = Coupon.objects.annotate(
        redemptions_count=Count('redemptions', distinct=True),
        total_discount=Sum('redemptions__discount_amount'),
    ).order_by('-redemptions_count', 'code')

    revenue = {
        row['coupon_id']: row['revenue']
        for row in CampBooking.objects.filter(
            coupon__isnull=False,
            payment_status=PAYMENT_PAID,
        ).values('coupon_id').annotate(revenue=Sum('final_amount'))
    }

    now = timezone.now()
    report = []
    for coupon in coupons:
        report.append({
            'id': coupon.id,
            'code': coupon.code,
            'discount_type': coupon.discount_type,
            'discount_value': float(coupon.discount_value),
            'is_active': coupon.is_active,
            'is_valid_now': coupon.is_active and coupon.is_within_validity(now) and not coupon.is_exhausted,
            'current_total_uses': coupon.current_total_uses,
            'max_uses': coupon.max_uses,
            'remaining_uses': coupon.remaining_uses,
            'redemptions_count': coupon.redemptions_count,
            'total_discount': float(coupon.total_discount or 0),
            'revenue': float(revenue.get(coupon.id) or 0),
            'valid_until': coupon.valid_until.isoformat(),
        })

    totals = CouponRedemption.objects.aggregate(count=Count('id'), discount=Sum('discount_amount'))
    return {
        'coupons': report,
        'total_redemptions': totals['count'],
        'total_discount': float(totals['discount'] or 0),
    }
