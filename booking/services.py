"""
Services for coupons, camp bookings, payments and booking history
"""
import logging
import random
from datetime import timedelta

import stripe
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from catalog.models import CampSession
from .constants import (
    BOOKING_PENDING, BOOKING_CANCELLED, ACTIVE_BOOKING_STATUSES,
    PAYMENT_PENDING, PAYMENT_PAID, PAYMENT_REFUNDED, PAYMENT_FAILED,
    COUPON_CODE_SUFFIX_MIN, COUPON_CODE_SUFFIX_MAX, COUPON_CODE_MAX_ATTEMPTS,
    PRICE_TOLERANCE, INTENT_SUCCEEDED, INTENT_FAILED_STATUSES, INTENT_CLOSED_STATUSES,
)
from .models import (
    Coupon, CouponRedemption, CampBooking, Participant, BookingAddon, Payment, BookingHistory,
    normalize_coupon_code,
)
from .utils import (
    calculate_price, normalize_addon_selection, resolve_addons, validate_addon_selection, to_decimal,
)

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """Payment provider refused or failed the operation"""

    def __init__(self, message, status=402):
        super().__init__(message)
        self.message = message
        self.status = status


class CouponService:
    """Coupon validation, code generation and redemption"""

    @staticmethod
    def generate_code(prefix=''):
        """
        PREFIX + 4 random digits, unique among existing coupons

        Raises:
            ValidationError: no free code found for the prefix
        """
        prefix = normalize_coupon_code(prefix)
        for _ in range(COUPON_CODE_MAX_ATTEMPTS):
            code = f"{prefix}{random.randint(COUPON_CODE_SUFFIX_MIN, COUPON_CODE_SUFFIX_MAX)}"
            if not Coupon.objects.filter(code=code).exists():
                return code
        raise ValidationError(f'Could not generate a free code for prefix "{prefix}"')

    @staticmethod
    def is_applicable(coupon, camp):
        """
        Coupon applies to the camp when it has no restrictions, lists the camp,
        or lists a sport whose name matches the camp category
        """
        camp_ids = set(coupon.applicable_camps.values_list('id', flat=True))
        sport_names = {name.lower() for name in coupon.applicable_sports.values_list('name', flat=True)}
        has_course_restriction = coupon.applicable_courses.exists()

        if not camp_ids and not sport_names and not has_course_restriction:
            return True
        if camp.id in camp_ids:
            return True
        if camp.category and camp.category.lower() in sport_names:
            return True
        return False

    @staticmethod
    def check(code, camp, amount=None, email=None):
        """
        Validate a coupon code for a camp booking

        Args:
            code: Code as typed by the customer
            camp: Camp being booked
            amount: Order subtotal, checked against the minimum purchase
            email: Customer email, checked against uses per user

        Returns:
            (coupon, None) when valid, (None, message) otherwise
        """
        code = normalize_coupon_code(code)
        if not code:
            return None, 'Please enter a coupon code.'

        coupon = Coupon.objects.filter(code=code).first()
        if coupon is None or not coupon.is_active:
            return None, 'Invalid coupon code.'

        now = timezone.now()
        if now < coupon.valid_from:
            return None, 'This coupon is not active yet.'
        if now > coupon.valid_until:
            return None, 'This coupon has expired.'

        if coupon.is_exhausted:
            return None, 'This coupon has reached its usage limit.'

        if email and coupon.uses_per_user:
            used = CouponRedemption.objects.filter(coupon=coupon, email__iexact=email).count()
            if used >= coupon.uses_per_user:
                return None, 'You have already used this coupon.'

        if amount is not None and to_decimal(amount) < coupon.min_purchase_amount:
            return None, f'A minimum purchase of ${coupon.min_purchase_amount} is required for this coupon.'

        if not CouponService.is_applicable(coupon, camp):
            return None, 'This coupon is not valid for this camp.'

        return coupon, None

    @staticmethod
    def validation_response(code, camp, amount=None, email=None):
        coupon, message = CouponService.check(code, camp, amount=amount, email=email)
        if coupon is None:
            return {'valid': False, 'message': message, 'discount_type': None, 'discount_value': None}
        return {
            'valid': True,
            'message': 'Coupon applied successfully!',
            'discount_type': coupon.discount_type,
            'discount_value': float(coupon.discount_value),
        }

    @staticmethod
    def lock_for_redemption(coupon, email):
        """
        Re-read the coupon under a row lock and re-check its usage limits.
        Must run inside a transaction.

        Raises:
            ValidationError: the last free use was taken meanwhile
        """
        coupon = Coupon.objects.select_for_update().get(pk=coupon.pk)
        if coupon.is_exhausted:
            raise ValidationError('This coupon has reached its usage limit.')
        if coupon.uses_per_user:
            used = CouponRedemption.objects.filter(coupon=coupon, email__iexact=email).count()
            if used >= coupon.uses_per_user:
                raise ValidationError('You have already used this coupon.')
        return coupon

    @staticmethod
    def redeem(coupon, booking):
        """Count a use of the coupon for the booking. Caller holds the coupon lock."""
        Coupon.objects.filter(pk=coupon.pk).update(current_total_uses=F('current_total_uses') + 1)
        return CouponRedemption.objects.create(
            coupon=coupon,
            booking=booking,
            email=booking.guest_email,
            discount_amount=booking.discount_amount,
        )

    @staticmethod
    def release(booking):
        """Give back the coupon use held by a cancelled booking"""
        redemption = CouponRedemption.objects.filter(booking=booking).first()
        if redemption is None:
            return False
        Coupon.objects.filter(pk=redemption.coupon_id, current_total_uses__gt=0).update(
            current_total_uses=F('current_total_uses') - 1
        )
        redemption.delete()
        return True


class BookingService:
    """Camp booking initiation and cancellation"""

    @staticmethod
    def quote(camp, session, participant_count, selected_addons=None, coupon_code=None, email=None):
        """
        Price of a prospective booking

        Returns:
            (price_breakdown, coupon, coupon_message)
        """
        if session.camp_id != camp.id:
            raise ValidationError('Selected session does not belong to this camp')

        addon_groups = list(camp.addon_groups.prefetch_related('options'))
        selection = normalize_addon_selection(selected_addons)
        addons = resolve_addons(selection, addon_groups)

        price = calculate_price(session.effective_price, participant_count, addons)

        coupon, coupon_message = None, None
        if coupon_code:
            coupon, coupon_message = CouponService.check(
                coupon_code, camp, amount=price['total_subtotal'], email=email
            )
            if coupon is not None:
                price = calculate_price(
                    session.effective_price, participant_count, addons,
                    discount=(coupon.discount_type, coupon.discount_value),
                )

        return price, coupon, coupon_message

    @staticmethod
    def initiate_booking(camp, session_id, contact, participant_forms, selected_addons=None,
                         coupon_code=None, client_final_amount=None, user=None):
        """
        Create a pending camp booking

        Args:
            camp: Camp being booked
            session_id: Chosen session
            contact: Cleaned BookingContactForm data
            participant_forms: Valid ParticipantForm instances
            selected_addons: {group_id: option_id | [option_id, ...]}
            coupon_code: Optional coupon code
            client_final_amount: Total shown to the customer, compared with the server total
            user: Logged-in user, None for guests

        Returns:
            CampBooking

        Raises:
            ValidationError: the booking cannot be made as requested
        """
        if not participant_forms:
            raise ValidationError('At least one participant is required')

        participant_count = len(participant_forms)
        addon_groups = list(camp.addon_groups.prefetch_related('options'))
        selection = normalize_addon_selection(selected_addons)

        is_valid, error = validate_addon_selection(selection, addon_groups)
        if not is_valid:
            raise ValidationError(error)

        with transaction.atomic():
            session = (
                CampSession.objects.select_for_update()
                .filter(pk=session_id, camp=camp)
                .first()
            )
            if session is None:
                raise ValidationError('Selected session does not belong to this camp')
            if session.status == 'FULL':
                raise ValidationError('This session is full.')
            if session.status != 'OPEN':
                raise ValidationError('This session is not open for booking')
            if session.available_spots < participant_count:
                raise ValidationError(f'Only {session.available_spots} spots available in this session.')

            price, coupon, coupon_message = BookingService.quote(
                camp, session, participant_count, selection,
                coupon_code=coupon_code, email=contact['guest_email'],
            )
            if coupon_code and coupon is None:
                raise ValidationError(coupon_message)
            if coupon is not None:
                coupon = CouponService.lock_for_redemption(coupon, contact['guest_email'])

            if client_final_amount is not None:
                client_amount = to_decimal(client_final_amount)
                if abs(client_amount - price['final_price']) > PRICE_TOLERANCE:
                    logger.warning(
                        f"Price mismatch for camp {camp.id} session {session.id}: "
                        f"client {client_amount}, server {price['final_price']}"
                    )

            booking = CampBooking.objects.create(
                camp=camp,
                session=session,
                user=user if user is not None and user.is_authenticated else None,
                guest_name=contact['guest_name'],
                guest_email=contact['guest_email'],
                guest_phone=contact['guest_phone'],
                notes=contact.get('notes') or '',
                original_amount=price['total_subtotal'],
                discount_amount=price['discount_amount'],
                final_amount=price['final_price'],
                coupon=coupon,
            )

            for form in participant_forms:
                participant = form.save(commit=False)
                participant.booking = booking
                participant.save()

            BookingAddon.objects.bulk_create([
                BookingAddon(
                    booking=booking,
                    group_name=group.group_name,
                    option_name=option.option_name,
                    price_adjustment=option.price_adjustment,
                    quantity=participant_count,
                )
                for group, option in resolve_addons(selection, addon_groups)
            ])

            if coupon is not None:
                CouponService.redeem(coupon, booking)

            session.booked_slots += participant_count
            session.sync_capacity_status()
            session.save(update_fields=['booked_slots', 'status'])

            BookingHistoryService.log_booking_created(booking, user)

        logger.info(
            f"Camp booking {booking.id} created: {booking.guest_email} booked {participant_count} place(s) "
            f"in '{session.session_name}' ({camp.title}), total {booking.final_amount}"
        )
        return booking

    @staticmethod
    def cancel_booking(booking, user=None, reason=''):
        """
        Cancel a booking, its open payment intents, and release its places and coupon use

        Returns:
            True when cancelled, False when it was already cancelled
        """
        for payment in booking.payments.filter(status='pending'):
            try:
                PaymentService.cancel_payment_intent(payment.payment_intent_id)
            except PaymentError as e:
                logger.warning(f"Could not cancel intent {payment.payment_intent_id}: {e.message}")

        with transaction.atomic():
            booking = CampBooking.objects.select_for_update().get(pk=booking.pk)
            if booking.status == BOOKING_CANCELLED:
                return False

            was_holding_places = booking.status in ACTIVE_BOOKING_STATUSES
            booking.status = BOOKING_CANCELLED
            booking.save(update_fields=['status'])

            if was_holding_places:
                BookingService.release_places(booking)
            CouponService.release(booking)
            BookingHistoryService.log_booking_cancelled(booking, user, reason)

        logger.info(f"Camp booking {booking.id} cancelled")
        return True

    @staticmethod
    def release_places(booking):
        count = booking.participants.count()
        session = CampSession.objects.select_for_update().get(pk=booking.session_id)
        session.booked_slots = max(0, session.booked_slots - count)
        session.sync_capacity_status()
        session.save(update_fields=['booked_slots', 'status'])

    @staticmethod
    def expire_pending_bookings(hours=None):
        """
        Cancel unpaid pending bookings older than `hours`

        Returns:
            Number of cancelled bookings
        """
        hours = settings.PENDING_BOOKING_TTL_HOURS if hours is None else hours
        cutoff = timezone.now() - timedelta(hours=hours)
        stale = CampBooking.objects.filter(
            status=BOOKING_PENDING,
            payment_status__in=[PAYMENT_PENDING, PAYMENT_FAILED],
            created_at__lt=cutoff,
        )

        cancelled = 0
        for booking in stale:
            if BookingService.cancel_booking(booking, reason=f'Unpaid for more than {hours}h'):
                cancelled += 1

        return cancelled


class PaymentService:
    """Stripe payment intents for camp bookings"""

    @staticmethod
    def _configure():
        stripe.api_key = settings.STRIPE_SECRET_KEY

    @staticmethod
    def create_payment_intent(booking):
        """
        Create (or reuse) a PaymentIntent for the booking's final amount

        Returns:
            Payment record together with the intent client secret: (payment, client_secret)

        Raises:
            PaymentError: booking is not payable or Stripe refused the request
        """
        if booking.payment_status == PAYMENT_PAID:
            raise PaymentError('This booking has already been paid.', status=409)
        if booking.status != BOOKING_PENDING:
            raise PaymentError('This booking can no longer be paid.', status=409)
        if booking.final_amount <= 0:
            raise PaymentError('Nothing to pay for this booking.', status=400)

        PaymentService._configure()
        amount_cents = booking.amount_in_cents

        existing = booking.payments.filter(status='pending', amount=booking.final_amount).first()
        if existing is not None:
            try:
                intent = stripe.PaymentIntent.retrieve(existing.payment_intent_id)
            except stripe.StripeError as e:
                logger.warning(f"Could not reuse intent {existing.payment_intent_id}: {e}")
            else:
                if intent.status not in INTENT_CLOSED_STATUSES:
                    return existing, intent.client_secret

        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_cents,
                currency=settings.BOOKING_CURRENCY,
                automatic_payment_methods={'enabled': True},
                receipt_email=booking.guest_email,
                metadata={
                    'booking_id': str(booking.id),
                    'camp': booking.camp.title,
                    'session': booking.session.session_name,
                },
                idempotency_key=f'booking-{booking.id}-{amount_cents}-{booking.payments.count()}',
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating intent for booking {booking.id}: {e}")
            raise PaymentError(getattr(e, 'user_message', None) or str(e))

        payment = Payment.objects.create(
            booking=booking,
            amount=booking.final_amount,
            currency=settings.BOOKING_CURRENCY,
            payment_intent_id=intent.id,
        )
        BookingHistoryService.create_history_entry(
            booking=booking,
            action='payment_pending',
            changes={'amount': str(booking.final_amount), 'payment_intent_id': intent.id},
        )

        logger.info(f"Payment intent {intent.id} created for booking {booking.id}: {booking.final_amount}")
        return payment, intent.client_secret

    @staticmethod
    def cancel_payment_intent(payment_intent_id):
        """Cancel an unpaid intent at Stripe and mark the payment cancelled"""
        payment = Payment.objects.filter(payment_intent_id=payment_intent_id).first()
        if payment is None:
            raise PaymentError('Unknown payment.', status=404)
        if payment.status != 'pending':
            return payment

        PaymentService._configure()
        try:
            stripe.PaymentIntent.cancel(payment_intent_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe error cancelling intent {payment_intent_id}: {e}")
            raise PaymentError(getattr(e, 'user_message', None) or str(e))

        payment.status = 'cancelled'
        payment.save(update_fields=['status'])
        logger.info(f"Payment intent {payment_intent_id} cancelled")
        return payment

    @staticmethod
    def confirm_payment(payment_intent_id):
        """
        Sync a payment with the intent status at Stripe

        Returns:
            The Stripe intent status string
        """
        payment = Payment.objects.select_related('booking').filter(payment_intent_id=payment_intent_id).first()
        if payment is None:
            raise PaymentError('Unknown payment.', status=404)

        PaymentService._configure()
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe error retrieving intent {payment_intent_id}: {e}")
            raise PaymentError(getattr(e, 'user_message', None) or str(e))

        PaymentService.apply_intent_status(payment, intent.status)
        return intent.status

    @staticmethod
    def apply_intent_status(payment, intent_status):
        """Update payment and booking from a PaymentIntent status"""
        booking = payment.booking

        if intent_status == INTENT_SUCCEEDED:
            if payment.status in ('succeeded', 'refunded'):
                return
            if booking.status == BOOKING_CANCELLED:
                PaymentService.refund_late_payment(payment)
                return
            with transaction.atomic():
                payment.mark_as_paid()
                booking.mark_confirmed()
                BookingHistoryService.create_history_entry(
                    booking=booking,
                    action='payment_paid',
                    changes={'amount': str(payment.amount), 'payment_intent_id': payment.payment_intent_id},
                )
            logger.info(f"Payment {payment.payment_intent_id} succeeded, booking {booking.id} confirmed")

        elif intent_status in INTENT_FAILED_STATUSES:
            if payment.status != 'pending':
                return
            payment.status = 'failed'
            payment.save(update_fields=['status'])
            booking.payment_status = PAYMENT_FAILED
            booking.save(update_fields=['payment_status'])
            BookingHistoryService.create_history_entry(
                booking=booking,
                action='payment_failed',
                changes={'payment_intent_id': payment.payment_intent_id, 'intent_status': intent_status},
            )
            logger.warning(f"Payment {payment.payment_intent_id} failed ({intent_status}) for booking {booking.id}")

    @staticmethod
    def refund_late_payment(payment):
        """
        Refund an intent that succeeded after its booking was cancelled.
        The places are gone by then, so the booking stays cancelled.

        Raises:
            PaymentError: Stripe refused the refund; the payment stays pending for a retry
        """
        booking = payment.booking
        PaymentService._configure()
        try:
            refund = stripe.Refund.create(
                payment_intent=payment.payment_intent_id,
                idempotency_key=f'late-refund-{payment.payment_intent_id}',
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error refunding late payment {payment.payment_intent_id}: {e}")
            raise PaymentError(getattr(e, 'user_message', None) or str(e))

        with transaction.atomic():
            payment.mark_as_refunded(refund_id=refund.id)
            booking.payment_status = PAYMENT_REFUNDED
            booking.save(update_fields=['payment_status'])
            BookingHistoryService.create_history_entry(
                booking=booking,
                action='payment_refunded',
                changes={'amount': str(payment.amount), 'refund_id': refund.id},
                comment='Paid after the booking was cancelled',
            )

        logger.warning(f"Payment {payment.payment_intent_id} succeeded on cancelled booking {booking.id}, refunded")
        return payment

    @staticmethod
    def handle_webhook(payload, signature):
        """
        Verify and apply a Stripe webhook event

        Returns:
            Event type string

        Raises:
            PaymentError: bad payload or signature
        """
        try:
            event = stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
        except ValueError:
            raise PaymentError('Invalid payload', status=400)
        except stripe.SignatureVerificationError:
            raise PaymentError('Invalid signature', status=400)

        event_type = event['type']
        if event_type in ('payment_intent.succeeded', 'payment_intent.payment_failed'):
            intent = event['data']['object']
            payment = Payment.objects.select_related('booking').filter(payment_intent_id=intent['id']).first()
            if payment is None:
                logger.warning(f"Webhook {event_type} for unknown intent {intent['id']}")
            else:
                status = INTENT_SUCCEEDED if event_type == 'payment_intent.succeeded' else 'requires_payment_method'
                PaymentService.apply_intent_status(payment, status)
        else:
            logger.debug(f"Ignoring webhook event {event_type}")

        return event_type

    @staticmethod
    def refund_booking(booking, user=None, reason=''):
        """
        Refund the succeeded payment of a booking and cancel it

        Raises:
            PaymentError: nothing to refund or Stripe refused
        """
        payment = booking.payments.filter(status='succeeded').first()
        if payment is None:
            raise PaymentError('This booking has no completed payment to refund.', status=400)

        PaymentService._configure()
        try:
            refund = stripe.Refund.create(payment_intent=payment.payment_intent_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe error refunding {payment.payment_intent_id}: {e}")
            raise PaymentError(getattr(e, 'user_message', None) or str(e))

        with transaction.atomic():
            payment.mark_as_refunded(refund_id=refund.id)
            booking.payment_status = PAYMENT_REFUNDED
            booking.save(update_fields=['payment_status'])
            BookingHistoryService.create_history_entry(
                booking=booking,
                action='payment_refunded',
                user=user,
                changes={'amount': str(payment.amount), 'refund_id': refund.id},
            )
            BookingService.cancel_booking(booking, user=user, reason=reason or 'Refunded')

        logger.info(f"Payment {payment.payment_intent_id} refunded for booking {booking.id}")
        return payment


class BookingHistoryService:
    """History entries of camp bookings"""

    @staticmethod
    def create_history_entry(booking, action, user=None, changes=None, comment=''):
        if user is not None and not user.is_authenticated:
            user = None

        history_entry = BookingHistory.objects.create(
            booking=booking,
            action=action,
            user=user,
            changes=changes or {},
            comment=comment
        )

        logger.debug(f"History entry created: {booking.id} - {action}")
        return history_entry

    @staticmethod
    def log_booking_created(booking, user):
        return BookingHistoryService.create_history_entry(
            booking=booking,
            action='created',
            user=user,
            changes={
                'camp': booking.camp.title,
                'session': booking.session.session_name,
                'participants': booking.participants.count(),
                'original_amount': str(booking.original_amount),
                'discount_amount': str(booking.discount_amount),
                'final_amount': str(booking.final_amount),
                'coupon': booking.coupon.code if booking.coupon else None,
            }
        )

    @staticmethod
    def log_booking_cancelled(booking, user, reason=''):
        return BookingHistoryService.create_history_entry(
            booking=booking,
            action='cancelled',
            user=user,
            comment=reason
        )


