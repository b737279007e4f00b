import re
import secrets
from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone

from catalog.models import Sport, Course, Camp, CampSession
from .constants import (
    BOOKING_STATUS_CHOICES, BOOKING_PENDING, BOOKING_CONFIRMED,
    PAYMENT_STATUS_CHOICES, PAYMENT_PENDING, PAYMENT_PAID,
    PAYMENT_METHOD_CHOICES, PAYMENT_RECORD_STATUS_CHOICES,
    DISCOUNT_TYPE_CHOICES, DISCOUNT_PERCENTAGE, GENDER_CHOICES, SKILL_LEVEL_CHOICES, ZERO,
)


def normalize_coupon_code(code):
    """Upper-case and strip everything except A-Z and 0-9"""
    return re.sub(r'[^A-Z0-9]', '', str(code or '').upper())


def generate_access_token():
    return secrets.token_urlsafe(32)


class Coupon(models.Model):
    code = models.CharField(max_length=50, unique=True)
    auto_generate_code = models.BooleanField(default=False)
    code_prefix = models.CharField(max_length=20, blank=True)
    description = models.CharField(max_length=255, blank=True)
    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPE_CHOICES, default=DISCOUNT_PERCENTAGE)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2)
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()
    max_uses = models.PositiveIntegerField(null=True, blank=True)
    uses_per_user = models.PositiveIntegerField(default=1)
    min_purchase_amount = models.DecimalField(max_digits=10, decimal_places=2, default=ZERO)
    current_total_uses = models.PositiveIntegerField(default=0)
    applicable_sports = models.ManyToManyField(Sport, blank=True, related_name='coupons')
    applicable_courses = models.ManyToManyField(Course, blank=True, related_name='coupons')
    applicable_camps = models.ManyToManyField(Camp, blank=True, related_name='coupons')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.code

    def save(self, *args, **kwargs):
        self.code = normalize_coupon_code(self.code)
        super().save(*args, **kwargs)

    @property
    def is_exhausted(self):
        return self.max_uses is not None and self.current_total_uses >= self.max_uses

    @property
    def remaining_uses(self):
        if self.max_uses is None:
            return None
        return max(0, self.max_uses - self.current_total_uses)

    def is_within_validity(self, moment=None):
        moment = moment or timezone.now()
        return self.valid_from <= moment <= self.valid_until


class CampBooking(models.Model):
    secure_access_token = models.CharField(max_length=64, unique=True, default=generate_access_token, editable=False)
    camp = models.ForeignKey(Camp, on_delete=models.PROTECT, related_name='bookings')
    session = models.ForeignKey(CampSession, on_delete=models.PROTECT, related_name='bookings')
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='camp_bookings')
    guest_name = models.CharField(max_length=200)
    guest_email = models.EmailField()
    guest_phone = models.CharField(max_length=30)
    original_amount = models.DecimalField(max_digits=10, decimal_places=2, default=ZERO)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=ZERO)
    final_amount = models.DecimalField(max_digits=10, decimal_places=2, default=ZERO)
    coupon = models.ForeignKey(Coupon, on_delete=models.SET_NULL, null=True, blank=True, related_name='bookings')
    status = models.CharField(max_length=20, choices=BOOKING_STATUS_CHOICES, default=BOOKING_PENDING)
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"#{self.pk} {self.guest_name} - {self.session}"

    @property
    def participant_count(self):
        return self.participants.count()

    @property
    def amount_in_cents(self):
        return int((self.final_amount * 100).quantize(Decimal('1')))

    @property
    def is_payable(self):
        return (
            self.status == BOOKING_PENDING
            and self.payment_status != PAYMENT_PAID
            and self.final_amount > ZERO
        )

    def mark_confirmed(self):
        self.status = BOOKING_CONFIRMED
        self.payment_status = PAYMENT_PAID
        self.confirmed_at = timezone.now()
        self.save(update_fields=['status', 'payment_status', 'confirmed_at'])


class Participant(models.Model):
    booking = models.ForeignKey(CampBooking, on_delete=models.CASCADE, related_name='participants')
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=20, choices=GENDER_CHOICES, default='UNSPECIFIED', blank=True)
    skill_level = models.CharField(max_length=20, choices=SKILL_LEVEL_CHOICES, default='BEGINNER', blank=True)
    medical_notes = models.TextField(blank=True)
    allergies = models.TextField(blank=True)
    emergency_contact_name = models.CharField(max_length=200, blank=True)
    emergency_contact_phone = models.CharField(max_length=30, blank=True)

    def __str__(self):
        return f"{self.first_name} {self.last_name}".strip()


class BookingAddon(models.Model):
    booking = models.ForeignKey(CampBooking, on_delete=models.CASCADE, related_name='addons')
    group_name = models.CharField(max_length=200)
    option_name = models.CharField(max_length=200)
    price_adjustment = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(default=1)

    @property
    def total_price(self):
        return self.price_adjustment * self.quantity


class CouponRedemption(models.Model):
    coupon = models.ForeignKey(Coupon, on_delete=models.CASCADE, related_name='redemptions')
    booking = models.OneToOneField(CampBooking, on_delete=models.CASCADE, related_name='coupon_redemption')
    email = models.EmailField()
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2)
    redeemed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-redeemed_at']


class Payment(models.Model):
    booking = models.ForeignKey(CampBooking, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default=settings.BOOKING_CURRENCY)
    payment_intent_id = models.CharField(max_length=255, unique=True)
    status = models.CharField(max_length=20, choices=PAYMENT_RECORD_STATUS_CHOICES, default='pending')
    refund_id = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.payment_intent_id} ({self.status})"

    def mark_as_paid(self):
        self.status = 'succeeded'
        self.paid_at = timezone.now()
        self.save(update_fields=['status', 'paid_at'])

    def mark_as_refunded(self, refund_id=''):
        self.status = 'refunded'
        self.refund_id = refund_id
        self.save(update_fields=['status', 'refund_id'])


class BookingHistory(models.Model):
    booking = models.ForeignKey(CampBooking, on_delete=models.CASCADE, related_name='history')
    action = models.CharField(max_length=50)
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    changes = models.JSONField(default=dict, blank=True)
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at', 'id']
        verbose_name_plural = 'Booking history'

    def __str__(self):
        return f"{self.booking_id} - {self.action}"
