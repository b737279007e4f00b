"""
Manager App URLs
"""

from django.urls import path
from . import views, catalog_views

app_name = 'manager'

urlpatterns = [
    # API - Dashboard
    path('metrics/', views.api_metrics, name='api_metrics'),
    path('analytics/', views.api_analytics, name='api_analytics'),

    # API - Bookings
    path('bookings/', views.api_bookings_list, name='api_bookings_list'),
    path('bookings/export/', views.api_bookings_export, name='api_bookings_export'),
    path('bookings/<int:booking_id>/', views.api_booking_detail, name='api_booking_detail'),
    path('bookings/<int:booking_id>/update/', views.api_booking_update, name='api_booking_update'),
    path('bookings/<int:booking_id>/cancel/', views.api_booking_cancel, name='api_booking_cancel'),
    path('bookings/<int:booking_id>/refund/', views.api_booking_refund, name='api_booking_refund'),

    # API - Coupons
    path('coupons/', views.api_coupons_list, name='api_coupons_list'),
    path('coupons/create/', views.api_coupon_create, name='api_coupon_create'),
    path('coupons/generate-code/', views.api_coupon_generate_code, name='api_coupon_generate_code'),
    path('coupons/report/', views.api_coupon_report, name='api_coupon_report'),
    path('coupons/<int:coupon_id>/', views.api_coupon_detail, name='api_coupon_detail'),
    path('coupons/<int:coupon_id>/update/', views.api_coupon_update, name='api_coupon_update'),
    path('coupons/<int:coupon_id>/delete/', views.api_coupon_delete, name='api_coupon_delete'),

    # API - Sports
    path('sports/', catalog_views.api_sports_list, name='api_sports_list'),
    path('sports/create/', catalog_views.api_sport_create, name='api_sport_create'),
    path('sports/<int:sport_id>/', catalog_views.api_sport_detail, name='api_sport_detail'),
    path('sports/<int:sport_id>/update/', catalog_views.api_sport_update, name='api_sport_update'),
    path('sports/<int:sport_id>/delete/', catalog_views.api_sport_delete, name='api_sport_delete'),

    # API - Courses
    path('courses/', catalog_views.api_courses_list, name='api_courses_list'),
    path('courses/create/', catalog_views.api_course_create, name='api_course_create'),
    path('courses/<int:course_id>/', catalog_views.api_course_detail, name='api_course_detail'),
    path('courses/<int:course_id>/update/', catalog_views.api_course_update, name='api_course_update'),
    path('courses/<int:course_id>/delete/', catalog_views.api_course_delete, name='api_course_delete'),
    path('courses/<int:course_id>/schedules/', catalog_views.api_schedules_list, name='api_course_schedules'),

    # API - Schedules, rules and daily availability
    path('schedules/', catalog_views.api_schedules_list, name='api_schedules_list'),
    path('schedules/create/', catalog_views.api_schedule_create, name='api_schedule_create'),
    path('schedules/<int:schedule_id>/', catalog_views.api_schedule_detail, name='api_schedule_detail'),
    path('schedules/<int:schedule_id>/update/', catalog_views.api_schedule_update, name='api_schedule_update'),
    path('schedules/<int:schedule_id>/delete/', catalog_views.api_schedule_delete, name='api_schedule_delete'),
    path('schedules/<int:schedule_id>/rules/', catalog_views.api_rules_list, name='api_rules_list'),
    path('schedules/<int:schedule_id>/availability/', catalog_views.api_availability_list,
         name='api_availability_list'),
    path('schedules/<int:schedule_id>/calendar/', catalog_views.api_availability_calendar,
         name='api_availability_calendar'),

    path('rules/create/', catalog_views.api_rule_create, name='api_rule_create'),
    path('rules/<int:rule_id>/', catalog_views.api_rule_detail, name='api_rule_detail'),
    path('rules/<int:rule_id>/update/', catalog_views.api_rule_update, name='api_rule_update'),
    path('rules/<int:rule_id>/delete/', catalog_views.api_rule_delete, name='api_rule_delete'),

    path('availability/save/', catalog_views.api_availability_save, name='api_availability_save'),
    path('availability/<int:availability_id>/delete/', catalog_views.api_availability_delete,
         name='api_availability_delete'),

    # API - Camps
    path('camps/', catalog_views.api_camps_list, name='api_camps_list'),
    path('camps/create/', catalog_views.api_camp_create, name='api_camp_create'),
    path('camps/<int:camp_id>/', catalog_views.api_camp_detail, name='api_camp_detail'),
    path('camps/<int:camp_id>/update/', catalog_views.api_camp_update, name='api_camp_update'),
    path('camps/<int:camp_id>/delete/', catalog_views.api_camp_delete, name='api_camp_delete'),
    path('camps/<int:camp_id>/sessions/', catalog_views.api_camp_sessions, name='api_camp_sessions'),
    path('sessions/<int:session_id>/delete/', catalog_views.api_session_delete, name='api_session_delete'),

    # API - Tournaments
    path('tournaments/', catalog_views.api_tournaments_list, name='api_tournaments_list'),
    path('tournaments/create/', catalog_views.api_tournament_create, name='api_tournament_create'),
    path('tournaments/<int:tournament_id>/', catalog_views.api_tournament_detail, name='api_tournament_detail'),
    path('tournaments/<int:tournament_id>/update/', catalog_views.api_tournament_update,
         name='api_tournament_update'),
    path('tournaments/<int:tournament_id>/toggle/', catalog_views.api_tournament_toggle,
         name='api_tournament_toggle'),
    path('tournaments/<int:tournament_id>/delete/', catalog_views.api_tournament_delete,
         name='api_tournament_delete'),

    # API - Gallery
    path('gallery/', catalog_views.api_gallery_list, name='api_gallery_list'),
    path('gallery/create/', catalog_views.api_gallery_create, name='api_gallery_create'),
    path('gallery/<int:item_id>/', catalog_views.api_gallery_detail, name='api_gallery_detail'),
    path('gallery/<int:item_id>/update/', catalog_views.api_gallery_update, name='api_gallery_update'),
    path('gallery/<int:item_id>/delete/', catalog_views.api_gallery_delete, name='api_gallery_delete'),
    path('gallery/categories/', catalog_views.api_gallery_categories, name='api_gallery_categories'),
    path('gallery/categories/create/', catalog_views.api_gallery_category_save,
         name='api_gallery_category_create'),
    path('gallery/categories/<int:category_id>/update/', catalog_views.api_gallery_category_save,
         name='api_gallery_category_update'),
    path('gallery/categories/<int:category_id>/delete/', catalog_views.api_gallery_category_delete,
         name='api_gallery_category_delete'),
    path('gallery/tags/', catalog_views.api_gallery_tags, name='api_gallery_tags'),
    path('gallery/tags/create/', catalog_views.api_gallery_tag_create, name='api_gallery_tag_create'),
    path('gallery/tags/<int:tag_id>/delete/', catalog_views.api_gallery_tag_delete, name='api_gallery_tag_delete'),

    # API - Media library
    path('media/', catalog_views.api_media_list, name='api_media_list'),
    path('media/upload/', catalog_views.api_media_upload, name='api_media_upload'),
    path('media/<int:media_id>/delete/', catalog_views.api_media_delete, name='api_media_delete'),
]
