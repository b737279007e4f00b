"""
Public read-only endpoints for the catalog
Only active / published content is exposed here
"""
from django.db.models import Prefetch
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET

from .models import Sport, Course, Camp, CampSession, Tournament, GalleryItem, GalleryCategory
from .serializers import (
    serialize_sport, serialize_course, serialize_camp, serialize_tournament,
    serialize_gallery_item, serialize_gallery_category,
)
from .utils import paginate

import logging
logger = logging.getLogger(__name__)


@require_GET
def sports_list(request):
    """Active sports"""
    sports = Sport.objects.filter(is_active=True).prefetch_related('courses')
    return JsonResponse({
        'success': True,
        'sports': [serialize_sport(sport) for sport in sports],
    })


@require_GET
def courses_list(request):
    """Active courses, optionally filtered by ?sport=<id>"""
    courses = Course.objects.filter(is_active=True, sport__is_active=True).select_related('sport')

    sport_id = request.GET.get('sport')
    if sport_id and sport_id.isdigit():
        courses = courses.filter(sport_id=sport_id)
    elif sport_id:
        logger.debug(f"Ignoring non-numeric sport filter: {sport_id!r}")

    return JsonResponse({
        'success': True,
        'courses': [serialize_course(course) for course in courses],
    })


@require_GET
def camps_list(request):
    """Published camps"""
    camps = Camp.objects.filter(is_active=True, status='PUBLISHED').select_related('featured_image')

    category = request.GET.get('category')
    if category:
        camps = camps.filter(category__iexact=category)

    return JsonResponse({
        'success': True,
        'camps': [serialize_camp(camp) for camp in camps],
    })


@require_GET
def camp_detail(request, slug):
    """
    Published camp with its open sessions and add-on groups,
    everything the booking page needs to render and price the form
    """
    camp = get_object_or_404(
        Camp.objects.select_related('featured_image').prefetch_related(
            Prefetch('sessions', queryset=CampSession.objects.exclude(status='CLOSED')),
            'media_gallery',
        ),
        slug=slug, is_active=True, status='PUBLISHED',
    )
    return JsonResponse({
        'success': True,
        'camp': serialize_camp(camp, detail=True),
    })


@require_GET
def tournaments_list(request):
    """Active tournaments, paginated with ?page=<0-based>&size=<n>"""
    tournaments = Tournament.objects.filter(is_active=True).select_related('featured_image')
    page, pagination = paginate(tournaments, request.GET.get('page'), request.GET.get('size'))

    return JsonResponse({
        'success': True,
        'tournaments': [serialize_tournament(t) for t in page.object_list],
        'pagination': pagination,
    })


@require_GET
def tournament_detail(request, slug):
    tournament = get_object_or_404(Tournament.objects.select_related('featured_image'), slug=slug, is_active=True)
    return JsonResponse({
        'success': True,
        'tournament': serialize_tournament(tournament, detail=True),
    })


@require_GET
def gallery_list(request):
    """Active gallery items, filterable by ?category=<slug>&media_type=IMAGE|VIDEO&featured=true"""
    items = GalleryItem.objects.filter(is_active=True).select_related('category').prefetch_related('tags')

    category = request.GET.get('category')
    if category:
        items = items.filter(category__slug=category)

    media_type = request.GET.get('media_type')
    if media_type:
        items = items.filter(media_type=media_type.upper())

    if request.GET.get('featured') == 'true':
        items = items.filter(is_featured=True)

    return JsonResponse({
        'success': True,
        'items': [serialize_gallery_item(item) for item in items],
        'categories': [serialize_gallery_category(c) for c in GalleryCategory.objects.all()],
    })
