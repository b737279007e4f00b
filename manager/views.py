"""
Manager App Views
Staff JSON API for the dashboard, camp bookings and coupons
"""

from django.contrib.admin.views.decorators import staff_member_required
from django.core.exceptions import ValidationError
from django.http import JsonResponse, HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_date
from datetime import timedelta
from django.db.models import Q, Sum
from django.views.decorators.http import require_GET, require_POST
import csv

from booking.analytics import get_financial_stats, get_occupancy_stats, get_customer_stats, get_coupon_report
from booking.constants import (
    BOOKING_PENDING, BOOKING_CONFIRMED, BOOKING_CANCELLED, BOOKING_COMPLETED,
    PAYMENT_PAID, PAYMENT_METHOD_CHOICES, MAX_BOOKINGS_IN_LIST,
)
from booking.decorators import json_server_errors
from booking.forms import CouponForm
from booking.models import CampBooking, Coupon
from booking.serializers import serialize_booking, serialize_coupon
from booking.services import BookingService, BookingHistoryService, CouponService, PaymentService, PaymentError
from booking.utils import json_body, validation_message
from .utils import error_response, save_form

import logging
logger = logging.getLogger(__name__)


# =============================================================================
# DASHBOARD
# =============================================================================

@staff_member_required
@json_server_errors
@require_GET
def api_metrics(request):
    """Key metrics and charts for the dashboard home"""
    today = timezone.localdate()
    start_date = today - timedelta(days=30)

    financial = get_financial_stats(start_date, today)
    occupancy = get_occupancy_stats(start_date, today)
    customers = get_customer_stats(start_date, today)

    last_7_days = [today - timedelta(days=i) for i in range(6, -1, -1)]
    daily_revenue_dict = {item['day']: item for item in financial['daily_revenue']}
    revenue_trend = [
        {
            'day': day.isoformat(),
            'revenue': daily_revenue_dict.get(day, {'revenue': 0})['revenue'],
        }
        for day in last_7_days
    ]

    return JsonResponse({
        'success': True,
        'metrics': {
            'total_revenue': financial['total_revenue'],
            'paid_amount': financial['paid_amount'],
            'total_bookings': occupancy['total_bookings'],
            'pending_bookings': CampBooking.objects.filter(status=BOOKING_PENDING).count(),
            'occupancy_rate': occupancy['overall_occupancy_rate'],
            'new_customers': customers['new_customers'],
            'active_customers': customers['active_customers'],
        },
        'charts': {
            'revenue_trend': revenue_trend,
            'session_occupancy': occupancy['session_occupancy'],
        }
    })


@staff_member_required
@json_server_errors
@require_GET
def api_analytics(request):
    """Full analytics for the last ?days= (30 by default)"""
    try:
        days = max(int(request.GET.get('days', 30)), 1)
    except ValueError:
        return JsonResponse({'success': False, 'message': 'days must be a number'}, status=400)

    today = timezone.localdate()
    start_date = today - timedelta(days=days)

    return JsonResponse({
        'success': True,
        'financial': get_financial_stats(start_date, today),
        'occupancy': get_occupancy_stats(start_date, today),
        'customers': get_customer_stats(start_date, today),
    })


# =============================================================================
# BOOKINGS
# =============================================================================

def _filtered_bookings(params):
    """
    Bookings matching the list filters:
    status, payment_status, camp, date_from / date_to (created date), search
    """
    bookings = CampBooking.objects.select_related('camp', 'session', 'coupon')

    status = params.get('status')
    if status:
        bookings = bookings.filter(status=status.upper())

    payment_status = params.get('payment_status')
    if payment_status:
        bookings = bookings.filter(payment_status=payment_status.upper())

    camp_id = params.get('camp')
    if camp_id:
        bookings = bookings.filter(camp_id=camp_id)

    date_from = parse_date(params.get('date_from') or '')
    if date_from:
        bookings = bookings.filter(created_at__date__gte=date_from)

    date_to = parse_date(params.get('date_to') or '')
    if date_to:
        bookings = bookings.filter(created_at__date__lte=date_to)

    search = (params.get('search') or '').strip()
    if search:
        query = (
            Q(guest_name__icontains=search) |
            Q(guest_email__icontains=search) |
            Q(guest_phone__icontains=search) |
            Q(participants__first_name__icontains=search) |
            Q(participants__last_name__icontains=search)
        )
        if search.isdigit():
            query |= Q(id=int(search))
        bookings = bookings.filter(query).distinct()

    return bookings


@staff_member_required
@json_server_errors
@require_GET
def api_bookings_list(request):
    """Latest bookings matching the filters, with totals for the whole match"""
    try:
        bookings = _filtered_bookings(request.GET)
        total = bookings.count()
    except (ValueError, ValidationError):
        return JsonResponse({'success': False, 'message': 'Invalid filter value'}, status=400)

    stats = {
        'total': total,
        'pending': bookings.filter(status=BOOKING_PENDING).count(),
        'confirmed': bookings.filter(status=BOOKING_CONFIRMED).count(),
        'cancelled': bookings.filter(status=BOOKING_CANCELLED).count(),
        'paid_amount': float(
            bookings.filter(payment_status=PAYMENT_PAID).aggregate(total=Sum('final_amount'))['total'] or 0
        ),
    }

    return JsonResponse({
        'success': True,
        'bookings': [serialize_booking(b) for b in bookings[:MAX_BOOKINGS_IN_LIST]],
        'stats': stats,
    })


@staff_member_required
@json_server_errors
@require_GET
def api_booking_detail(request, booking_id):
    booking = get_object_or_404(CampBooking.objects.select_related('camp', 'session', 'coupon'), id=booking_id)
    return JsonResponse({'success': True, 'booking': serialize_booking(booking, detail=True)})


@staff_member_required
@json_server_errors
@require_POST
def api_booking_update(request, booking_id):
    """
    Staff edits of a booking: notes, payment method and the
    CONFIRMED / COMPLETED status changes. Cancellation has its own endpoint.
    """
    booking = get_object_or_404(CampBooking, id=booking_id)
    try:
        data = json_body(request)
    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)

    changes = {}

    if 'notes' in data:
        notes = str(data['notes'] or '')
        if notes != booking.notes:
            changes['notes'] = {'old': booking.notes, 'new': notes}
            booking.notes = notes

    if 'payment_method' in data:
        method = data['payment_method'] or ''
        if method and method not in dict(PAYMENT_METHOD_CHOICES):
            return error_response({'payment_method': ['Unknown payment method']})
        if method != booking.payment_method:
            changes['payment_method'] = {'old': booking.payment_method, 'new': method}
            booking.payment_method = method

    new_status = str(data['status'] or '').upper() if 'status' in data else booking.status
    if new_status != booking.status:
        if new_status not in (BOOKING_CONFIRMED, BOOKING_COMPLETED):
            return error_response({'status': ['Status can only be set to CONFIRMED or COMPLETED here']})
        if booking.status == BOOKING_CANCELLED:
            return error_response({'status': ['A cancelled booking cannot be reopened']})
        changes['status'] = {'old': booking.status, 'new': new_status}
        booking.status = new_status
        if new_status == BOOKING_CONFIRMED and not booking.confirmed_at:
            booking.confirmed_at = timezone.now()

    if changes:
        booking.save()
        BookingHistoryService.create_history_entry(
            booking=booking,
            action='updated',
            user=request.user,
            changes=changes,
            comment=str(data.get('comment') or ''),
        )
        logger.info(f"Booking {booking.id} updated by {request.user.username}: {', '.join(changes)}")

    booking = CampBooking.objects.select_related('camp', 'session', 'coupon').get(id=booking.id)
    return JsonResponse({
        'success': True,
        'message': 'Booking updated' if changes else 'Nothing to update',
        'booking': serialize_booking(booking, detail=True),
    })


@staff_member_required
@json_server_errors
@require_POST
def api_booking_cancel(request, booking_id):
    """Cancel and release the places; body may carry a `reason`"""
    booking = get_object_or_404(CampBooking, id=booking_id)
    try:
        data = json_body(request)
    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)

    if booking.payment_status == PAYMENT_PAID:
        return JsonResponse({
            'success': False,
            'message': 'This booking is paid. Refund it to cancel.',
        }, status=400)

    if not BookingService.cancel_booking(booking, user=request.user, reason=str(data.get('reason') or '')):
        return JsonResponse({'success': False, 'message': 'Booking is already cancelled'}, status=400)

    return JsonResponse({'success': True, 'message': f'Booking #{booking.id} cancelled'})


@staff_member_required
@json_server_errors
@require_POST
def api_booking_refund(request, booking_id):
    """Refund the payment at Stripe and cancel the booking"""
    booking = get_object_or_404(CampBooking, id=booking_id)
    try:
        data = json_body(request)
        payment = PaymentService.refund_booking(booking, user=request.user, reason=str(data.get('reason') or ''))
    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)
    except PaymentError as e:
        return JsonResponse({'success': False, 'message': e.message}, status=e.status)

    return JsonResponse({
        'success': True,
        'message': f'Booking #{booking.id} refunded',
        'refund_id': payment.refund_id,
    })


@staff_member_required
@json_server_errors
@require_GET
def api_bookings_export(request):
    """CSV export of the bookings matching the list filters"""
    try:
        bookings = list(_filtered_bookings(request.GET).prefetch_related('participants'))
    except (ValueError, ValidationError):
        return JsonResponse({'success': False, 'message': 'Invalid filter value'}, status=400)

    response = HttpResponse(content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="camp_bookings_{timezone.localdate()}.csv"'

    # BOM so Excel picks up UTF-8
    response.write('\ufeff')

    writer = csv.writer(response)
    writer.writerow(['ID', 'Created', 'Camp', 'Session', 'Session start', 'Guest', 'Email', 'Phone',
                     'Participants', 'Original', 'Discount', 'Total', 'Coupon', 'Status', 'Payment'])

    for booking in bookings:
        writer.writerow([
            booking.id,
            timezone.localtime(booking.created_at).strftime('%Y-%m-%d %H:%M'),
            booking.camp.title,
            booking.session.session_name,
            booking.session.start_date.strftime('%Y-%m-%d'),
            booking.guest_name,
            booking.guest_email,
            booking.guest_phone,
            '; '.join(str(p) for p in booking.participants.all()),
            booking.original_amount,
            booking.discount_amount,
            booking.final_amount,
            booking.coupon.code if booking.coupon else '',
            booking.status,
            booking.payment_status,
        ])

    return response


# =============================================================================
# COUPONS
# =============================================================================

@staff_member_required
@json_server_errors
@require_GET
def api_coupons_list(request):
    """Coupons, ?search= on code and description, ?active=true|false"""
    coupons = Coupon.objects.prefetch_related('applicable_sports', 'applicable_courses', 'applicable_camps')

    search = request.GET.get('search', '').strip()
    if search:
        coupons = coupons.filter(Q(code__icontains=search) | Q(description__icontains=search))

    active = request.GET.get('active')
    if active in ('true', 'false'):
        coupons = coupons.filter(is_active=active == 'true')

    return JsonResponse({'success': True, 'coupons': [serialize_coupon(c) for c in coupons]})


@staff_member_required
@json_server_errors
@require_GET
def api_coupon_detail(request, coupon_id):
    coupon = get_object_or_404(Coupon, id=coupon_id)
    data = serialize_coupon(coupon)
    data['redemptions'] = [
        {
            'booking_id': r.booking_id,
            'email': r.email,
            'discount_amount': float(r.discount_amount),
            'redeemed_at': r.redeemed_at.isoformat(),
        }
        for r in coupon.redemptions.all()
    ]
    return JsonResponse({'success': True, 'coupon': data})


@staff_member_required
@json_server_errors
@require_POST
def api_coupon_create(request):
    """Empty `code` with `auto_generate_code` draws PREFIX + 4 digits"""
    try:
        coupon, errors = save_form(CouponForm, json_body(request))
    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)
    if errors:
        return error_response(errors)

    logger.info(f"Coupon created: {coupon.code} by {request.user.username}")
    return JsonResponse({'success': True, 'message': 'Coupon created', 'coupon': serialize_coupon(coupon)}, status=201)


@staff_member_required
@json_server_errors
@require_POST
def api_coupon_update(request, coupon_id):
    coupon = get_object_or_404(Coupon, id=coupon_id)
    try:
        coupon, errors = save_form(CouponForm, json_body(request), instance=coupon)
    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)
    if errors:
        return error_response(errors)

    return JsonResponse({'success': True, 'message': 'Coupon updated', 'coupon': serialize_coupon(coupon)})


@staff_member_required
@json_server_errors
@require_POST
def api_coupon_delete(request, coupon_id):
    """Redeemed coupons are kept for the report; deactivate them instead"""
    coupon = get_object_or_404(Coupon, id=coupon_id)

    used = coupon.redemptions.count()
    if used:
        return JsonResponse({
            'success': False,
            'message': f'Coupon {coupon.code} was redeemed {used} time(s). Deactivate it instead.',
        }, status=400)

    code = coupon.code
    coupon.delete()
    return JsonResponse({'success': True, 'message': f'Coupon {code} deleted'})


@staff_member_required
@json_server_errors
@require_GET
def api_coupon_generate_code(request):
    """Free code for ?prefix="""
    try:
        code = CouponService.generate_code(request.GET.get('prefix', ''))
    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)
    return JsonResponse({'success': True, 'code': code})


@staff_member_required
@json_server_errors
@require_GET
def api_coupon_report(request):
    return JsonResponse({'success': True, **get_coupon_report()})
