from django.urls import path
from . import views

urlpatterns = [
    path('sports/', views.sports_list, name='public_sports'),
    path('courses/', views.courses_list, name='public_courses'),
    path('camps/', views.camps_list, name='public_camps'),
    path('camps/<slug:slug>/', views.camp_detail, name='public_camp_detail'),
    path('tournaments/', views.tournaments_list, name='public_tournaments'),
    path('tournaments/<slug:slug>/', views.tournament_detail, name='public_tournament_detail'),
    path('gallery/', views.gallery_list, name='public_gallery'),
]
