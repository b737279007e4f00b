"""
Public booking and checkout endpoints for camps
"""
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from catalog.models import Camp, CampSession
from .decorators import api_data_ratelimit, booking_ratelimit, payment_ratelimit, json_server_errors
from .forms import BookingContactForm, validate_participants
from .models import CampBooking
from .serializers import serialize_public_booking
from .services import BookingService, CouponService, PaymentService, PaymentError
from .utils import json_body, form_errors, first_error, validation_message, price_to_json, to_decimal

import logging
logger = logging.getLogger(__name__)


def _published_camp(camp_id):
    try:
        camp_id = int(camp_id)
    except (TypeError, ValueError):
        raise ValidationError('A valid camp_id is required')
    return get_object_or_404(Camp, pk=camp_id, is_active=True, status='PUBLISHED')


def _participant_count(data):
    if isinstance(data.get('participants'), list):
        return len(data['participants'])
    try:
        count = int(data.get('participant_count', 1))
    except (TypeError, ValueError):
        raise ValidationError('participant_count must be a number')
    if count < 1:
        raise ValidationError('At least one participant is required')
    return count


@csrf_exempt
@json_server_errors
@require_POST
@booking_ratelimit()
def validate_coupon(request):
    """
    Check a coupon code for a camp

    Body: {code, camp_id, amount?, email?}
    """
    try:
        data = json_body(request)
        if not data.get('camp_id'):
            return JsonResponse({'success': False, 'message': 'camp_id is required'}, status=400)

        camp = _published_camp(data['camp_id'])
        amount = to_decimal(data['amount']) if data.get('amount') not in (None, '') else None
        result = CouponService.validation_response(data.get('code'), camp, amount=amount, email=data.get('email'))

        return JsonResponse({'success': True, **result})

    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)


@csrf_exempt
@json_server_errors
@require_POST
@booking_ratelimit(rate='30/m')
def price_quote(request):
    """
    Price breakdown for the booking form summary

    Body: {camp_id, session_id, participant_count | participants, selected_addons?, coupon_code?, email?}
    """
    try:
        data = json_body(request)
        camp = _published_camp(data.get('camp_id'))
        try:
            session_id = int(data.get('session_id'))
        except (TypeError, ValueError):
            raise ValidationError('A valid session_id is required')
        session = get_object_or_404(CampSession, pk=session_id, camp=camp)

        price, coupon, coupon_message = BookingService.quote(
            camp, session, _participant_count(data),
            selected_addons=data.get('selected_addons'),
            coupon_code=data.get('coupon_code'),
            email=data.get('email'),
        )

        return JsonResponse({
            'success': True,
            'price': price_to_json(price),
            'coupon': {
                'applied': coupon is not None,
                'code': coupon.code if coupon else None,
                'message': coupon_message if coupon is None else 'Coupon applied successfully!',
            } if data.get('coupon_code') else None,
            'available_spots': session.available_spots,
        })

    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)


@csrf_exempt
@json_server_errors
@require_POST
@booking_ratelimit()
def initiate_booking(request):
    """
    Create a pending camp booking

    Body: {guest_name, guest_email, guest_phone, camp_id, session_id,
           participants: [{first_name, ...}], selected_addons?, coupon_code?, notes?, final_amount?}
    """
    try:
        data = json_body(request)

        contact_form = BookingContactForm(data)
        if not contact_form.is_valid():
            errors = form_errors(contact_form)
            return JsonResponse({
                'success': False,
                'message': first_error(errors),
                'errors': errors,
            }, status=400)

        participant_forms, participant_errors = validate_participants(data.get('participants'))
        if participant_errors:
            return JsonResponse({
                'success': False,
                'message': 'Please check participant details',
                'errors': {'participants': participant_errors},
            }, status=400)

        contact = contact_form.cleaned_data
        camp = _published_camp(contact['camp_id'])

        booking = BookingService.initiate_booking(
            camp=camp,
            session_id=contact['session_id'],
            contact=contact,
            participant_forms=participant_forms,
            selected_addons=data.get('selected_addons'),
            coupon_code=contact.get('coupon_code'),
            client_final_amount=data.get('final_amount'),
            user=request.user,
        )

        return JsonResponse({
            'success': True,
            'message': 'Booking created. Please complete the payment.',
            'booking_id': booking.id,
            'secure_access_token': booking.secure_access_token,
            'original_amount': float(booking.original_amount),
            'discount_amount': float(booking.discount_amount),
            'final_amount': float(booking.final_amount),
            'status': booking.status,
            'payment_status': booking.payment_status,
        }, status=201)

    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)


@json_server_errors
@require_GET
@api_data_ratelimit()
def booking_details(request, token):
    """Booking summary for the checkout page"""
    booking = get_object_or_404(
        CampBooking.objects.select_related('camp', 'session', 'coupon'),
        secure_access_token=token,
    )
    return JsonResponse({
        'success': True,
        'booking': serialize_public_booking(booking),
        'publishable_key': settings.STRIPE_PUBLISHABLE_KEY,
    })


# =============================================================================
# PAYMENTS
# =============================================================================

@csrf_exempt
@json_server_errors
@require_POST
@payment_ratelimit()
def create_payment_intent(request):
    """
    Body: {token}
    Returns the client secret for the Stripe Payment Element
    """
    try:
        data = json_body(request)
        if not data.get('token'):
            return JsonResponse({'success': False, 'message': 'token is required'}, status=400)

        booking = get_object_or_404(
            CampBooking.objects.select_related('camp', 'session'),
            secure_access_token=data['token'],
        )
        payment, client_secret = PaymentService.create_payment_intent(booking)

        return JsonResponse({
            'success': True,
            'client_secret': client_secret,
            'payment_intent_id': payment.payment_intent_id,
            'amount': booking.amount_in_cents,
            'currency': payment.currency,
            'publishable_key': settings.STRIPE_PUBLISHABLE_KEY,
        })

    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)
    except PaymentError as e:
        return JsonResponse({'success': False, 'message': e.message}, status=e.status)


@csrf_exempt
@json_server_errors
@require_POST
@payment_ratelimit()
def cancel_payment_intent(request):
    """Body: {payment_intent_id}"""
    try:
        data = json_body(request)
        if not data.get('payment_intent_id'):
            return JsonResponse({'success': False, 'message': 'payment_intent_id is required'}, status=400)

        payment = PaymentService.cancel_payment_intent(data['payment_intent_id'])
        return JsonResponse({'success': True, 'status': payment.status})

    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)
    except PaymentError as e:
        return JsonResponse({'success': False, 'message': e.message}, status=e.status)


@csrf_exempt
@json_server_errors
@require_POST
@payment_ratelimit()
def confirm_payment(request):
    """
    Called by the checkout after the Payment Element returns

    Body: {payment_intent_id}
    """
    try:
        data = json_body(request)
        if not data.get('payment_intent_id'):
            return JsonResponse({'success': False, 'message': 'payment_intent_id is required'}, status=400)

        intent_status = PaymentService.confirm_payment(data['payment_intent_id'])
        booking = CampBooking.objects.get(payments__payment_intent_id=data['payment_intent_id'])

        return JsonResponse({
            'success': True,
            'intent_status': intent_status,
            'booking_id': booking.id,
            'status': booking.status,
            'payment_status': booking.payment_status,
        })

    except ValidationError as e:
        return JsonResponse({'success': False, 'message': validation_message(e)}, status=400)
    except PaymentError as e:
        return JsonResponse({'success': False, 'message': e.message}, status=e.status)


@csrf_exempt
@json_server_errors
@require_POST
def stripe_webhook(request):
    """Stripe webhook, authenticated by its signature"""
    try:
        event_type = PaymentService.handle_webhook(
            request.body, request.META.get('HTTP_STRIPE_SIGNATURE', '')
        )
    except PaymentError as e:
        logger.warning(f"Rejected Stripe webhook: {e.message}")
        return JsonResponse({'success': False, 'message': e.message}, status=e.status)

    return JsonResponse({'success': True, 'received': event_type})
