"""
Constants for the booking app
"""
from decimal import Decimal

# Booking status
BOOKING_PENDING = 'PENDING'
BOOKING_CONFIRMED = 'CONFIRMED'
BOOKING_CANCELLED = 'CANCELLED'
BOOKING_COMPLETED = 'COMPLETED'
BOOKING_STATUS_CHOICES = [
    (BOOKING_PENDING, 'Pending'),
    (BOOKING_CONFIRMED, 'Confirmed'),
    (BOOKING_CANCELLED, 'Cancelled'),
    (BOOKING_COMPLETED, 'Completed'),
]
# Statuses that hold places in a session
ACTIVE_BOOKING_STATUSES = [BOOKING_PENDING, BOOKING_CONFIRMED]

# Payment status on the booking
PAYMENT_PENDING = 'PENDING'
PAYMENT_PAID = 'PAID'
PAYMENT_REFUNDED = 'REFUNDED'
PAYMENT_FAILED = 'FAILED'
PAYMENT_STATUS_CHOICES = [
    (PAYMENT_PENDING, 'Pending'),
    (PAYMENT_PAID, 'Paid'),
    (PAYMENT_REFUNDED, 'Refunded'),
    (PAYMENT_FAILED, 'Failed'),
]

PAYMENT_METHOD_CHOICES = [
    ('CREDIT_CARD', 'Credit card'),
    ('DEBIT_CARD', 'Debit card'),
    ('BANK_TRANSFER', 'Bank transfer'),
    ('OTHER', 'Other'),
]

# Payment record status, follows Stripe PaymentIntent outcomes
PAYMENT_RECORD_STATUS_CHOICES = [
    ('pending', 'Pending'),
    ('succeeded', 'Succeeded'),
    ('cancelled', 'Cancelled'),
    ('failed', 'Failed'),
    ('refunded', 'Refunded'),
]

# Coupons
DISCOUNT_PERCENTAGE = 'PERCENTAGE'
DISCOUNT_FIXED_AMOUNT = 'FIXED_AMOUNT'
DISCOUNT_TYPE_CHOICES = [
    (DISCOUNT_PERCENTAGE, 'Percentage'),
    (DISCOUNT_FIXED_AMOUNT, 'Fixed amount'),
]
COUPON_CODE_SUFFIX_MIN = 1000
COUPON_CODE_SUFFIX_MAX = 9999
COUPON_CODE_MAX_ATTEMPTS = 50

# Participants
GENDER_CHOICES = [
    ('MALE', 'Male'),
    ('FEMALE', 'Female'),
    ('OTHER', 'Other'),
    ('UNSPECIFIED', 'Prefer not to say'),
]
SKILL_LEVEL_CHOICES = [
    ('BEGINNER', 'Beginner'),
    ('INTERMEDIATE', 'Intermediate'),
    ('ADVANCED', 'Advanced'),
]
MAX_PARTICIPANTS_PER_BOOKING = 10

# Money
CENTS = Decimal('0.01')
ZERO = Decimal('0.00')
# Client and server totals may differ by rounding only
PRICE_TOLERANCE = Decimal('0.01')

# Stripe PaymentIntent statuses
INTENT_SUCCEEDED = 'succeeded'
INTENT_FAILED_STATUSES = ['requires_payment_method', 'canceled']
# An intent in one of these can no longer be paid
INTENT_CLOSED_STATUSES = ['succeeded', 'canceled']

# Admin booking list
MAX_BOOKINGS_IN_LIST = 200
