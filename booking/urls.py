from django.urls import path
from . import views

urlpatterns = [
    # Booking form
    path('booking-data/validate-coupon/', views.validate_coupon, name='validate_coupon'),
    path('booking-data/camp/price-quote/', views.price_quote, name='camp_price_quote'),
    path('booking-data/camp/initiate-booking/', views.initiate_booking, name='camp_initiate_booking'),
    path('booking-data/details/<str:token>/', views.booking_details, name='booking_details'),

    # Checkout
    path('payments/create-payment-intent/', views.create_payment_intent, name='create_payment_intent'),
    path('payments/cancel-payment-intent/', views.cancel_payment_intent, name='cancel_payment_intent'),
    path('payments/confirm/', views.confirm_payment, name='confirm_payment'),
    path('payments/webhook/', views.stripe_webhook, name='stripe_webhook'),
]
