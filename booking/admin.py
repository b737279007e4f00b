from django.contrib import admin
from .models import Coupon, CouponRedemption, CampBooking, Participant, BookingAddon, Payment, BookingHistory


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ['code', 'discount_type', 'discount_value', 'valid_from', 'valid_until',
                    'current_total_uses', 'max_uses', 'is_active']
    list_filter = ['is_active', 'discount_type']
    search_fields = ['code', 'description']
    filter_horizontal = ['applicable_sports', 'applicable_courses', 'applicable_camps']


class ParticipantInline(admin.TabularInline):
    model = Participant
    extra = 0


class BookingAddonInline(admin.TabularInline):
    model = BookingAddon
    extra = 0


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    readonly_fields = ['payment_intent_id', 'amount', 'currency', 'status', 'refund_id', 'paid_at']


@admin.register(CampBooking)
class CampBookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'guest_name', 'guest_email', 'camp', 'session', 'final_amount',
                    'status', 'payment_status', 'created_at']
    list_filter = ['status', 'payment_status', 'camp']
    search_fields = ['guest_name', 'guest_email', 'guest_phone']
    readonly_fields = ['secure_access_token', 'created_at', 'confirmed_at']
    inlines = [ParticipantInline, BookingAddonInline, PaymentInline]


@admin.register(CouponRedemption)
class CouponRedemptionAdmin(admin.ModelAdmin):
    list_display = ['coupon', 'booking', 'email', 'discount_amount', 'redeemed_at']
    search_fields = ['coupon__code', 'email']


@admin.register(BookingHistory)
class BookingHistoryAdmin(admin.ModelAdmin):
    list_display = ['booking', 'action', 'user', 'created_at']
    list_filter = ['action']
