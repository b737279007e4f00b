"""
Manager API for catalog content
Sports, courses, schedules, booking rules, daily availability, camps,
tournaments, gallery and the media library
"""
from django.contrib.admin.views.decorators import staff_member_required
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import ProtectedError, Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from booking.constants import ACTIVE_BOOKING_STATUSES
from booking.decorators import json_server_errors
from booking.utils import json_body, form_errors, validation_message
from catalog.forms import (
    SportForm, CourseForm, CourseScheduleForm, BookingRuleForm, RuleRangeForm, DailyAvailabilityForm,
    CampForm, CampSessionForm, CampAddonGroupForm, CampAddonOptionForm, TournamentForm,
    GalleryCategoryForm, GalleryTagForm, GalleryItemForm, MediaUploadForm,
)
from catalog.models import (
    Sport, Course, CourseSchedule, BookingRule, DailyAvailability, MediaItem,
    Camp, CampSession, Tournament, GalleryCategory, GalleryTag, GalleryItem,
)
from catalog.serializers import (
    serialize_sport, serialize_course, serialize_schedule, serialize_rule, serialize_availability,
    serialize_media, serialize_camp, serialize_session, serialize_tournament,
    serialize_gallery_category, serialize_gallery_tag, serialize_gallery_item,
)
from catalog.utils import availability_calendar, parse_year_month, paginate, save_media_upload, delete_media_files
from .utils import error_response, bind_form, save_form

import logging
logger = logging.getLogger(__name__)


def _bad_request(message):
    return JsonResponse({'success': False, 'message': message}, status=400)


# =============================================================================
# SPORTS
# =============================================================================

@staff_member_required
@json_server_errors
@require_GET
def api_sports_list(request):
    sports = Sport.objects.prefetch_related('courses')
    return JsonResponse({'success': True, 'sports': [serialize_sport(s) for s in sports]})


@staff_member_required
@json_server_errors
@require_GET
def api_sport_detail(request, sport_id):
    sport = get_object_or_404(Sport, id=sport_id)
    return JsonResponse({'success': True, 'sport': serialize_sport(sport)})


@staff_member_required
@json_server_errors
@require_POST
def api_sport_create(request):
    try:
        sport, errors = save_form(SportForm, json_body(request))
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    logger.info(f"Sport created: {sport.name} by {request.user.username}")
    return JsonResponse({'success': True, 'message': 'Sport created', 'sport': serialize_sport(sport)}, status=201)


@staff_member_required
@json_server_errors
@require_POST
def api_sport_update(request, sport_id):
    sport = get_object_or_404(Sport, id=sport_id)
    try:
        sport, errors = save_form(SportForm, json_body(request), instance=sport)
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    return JsonResponse({'success': True, 'message': 'Sport updated', 'sport': serialize_sport(sport)})


@staff_member_required
@json_server_errors
@require_POST
def api_sport_delete(request, sport_id):
    sport = get_object_or_404(Sport, id=sport_id)

    course_count = sport.courses.count()
    if course_count:
        return _bad_request(f'Cannot delete "{sport.name}": it has {course_count} course(s)')

    name = sport.name
    sport.delete()
    logger.info(f"Sport deleted: {name} by {request.user.username}")
    return JsonResponse({'success': True, 'message': f'Sport "{name}" deleted'})


# =============================================================================
# COURSES
# =============================================================================

@staff_member_required
@json_server_errors
@require_GET
def api_courses_list(request):
    """Courses, optionally filtered by ?sport=<id> and ?search="""
    courses = Course.objects.select_related('sport')

    sport_id = request.GET.get('sport')
    if sport_id and sport_id.isdigit():
        courses = courses.filter(sport_id=sport_id)

    search = request.GET.get('search', '').strip()
    if search:
        courses = courses.filter(Q(name__icontains=search) | Q(short_description__icontains=search))

    return JsonResponse({'success': True, 'courses': [serialize_course(c) for c in courses]})


@staff_member_required
@json_server_errors
@require_GET
def api_course_detail(request, course_id):
    course = get_object_or_404(Course.objects.select_related('sport'), id=course_id)
    data = serialize_course(course)
    data['schedules'] = [serialize_schedule(s) for s in course.schedules.select_related('course')]
    return JsonResponse({'success': True, 'course': data})


@staff_member_required
@json_server_errors
@require_POST
def api_course_create(request):
    try:
        course, errors = save_form(CourseForm, json_body(request))
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    return JsonResponse({'success': True, 'message': 'Course created', 'course': serialize_course(course)}, status=201)


@staff_member_required
@json_server_errors
@require_POST
def api_course_update(request, course_id):
    course = get_object_or_404(Course, id=course_id)
    try:
        course, errors = save_form(CourseForm, json_body(request), instance=course)
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    return JsonResponse({'success': True, 'message': 'Course updated', 'course': serialize_course(course)})


@staff_member_required
@json_server_errors
@require_POST
def api_course_delete(request, course_id):
    course = get_object_or_404(Course, id=course_id)
    name = course.name
    course.delete()
    logger.info(f"Course deleted: {name} by {request.user.username}")
    return JsonResponse({'success': True, 'message': f'Course "{name}" deleted'})


# =============================================================================
# COURSE SCHEDULES
# =============================================================================

@staff_member_required
@json_server_errors
@require_GET
def api_schedules_list(request, course_id=None):
    """All schedules, or those of one course"""
    schedules = CourseSchedule.objects.select_related('course')

    course_id = course_id or request.GET.get('course')
    if course_id and str(course_id).isdigit():
        schedules = schedules.filter(course_id=course_id)

    if request.GET.get('active') == 'true':
        schedules = schedules.filter(is_active=True)

    return JsonResponse({'success': True, 'schedules': [serialize_schedule(s) for s in schedules]})


@staff_member_required
@json_server_errors
@require_GET
def api_schedule_detail(request, schedule_id):
    schedule = get_object_or_404(CourseSchedule.objects.select_related('course'), id=schedule_id)
    data = serialize_schedule(schedule)
    data['rules'] = [serialize_rule(r) for r in schedule.rules.prefetch_related('ranges')]
    return JsonResponse({'success': True, 'schedule': data})


@staff_member_required
@json_server_errors
@require_POST
def api_schedule_create(request):
    try:
        schedule, errors = save_form(CourseScheduleForm, json_body(request))
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    return JsonResponse({
        'success': True,
        'message': 'Schedule created',
        'schedule': serialize_schedule(schedule),
    }, status=201)


@staff_member_required
@json_server_errors
@require_POST
def api_schedule_update(request, schedule_id):
    schedule = get_object_or_404(CourseSchedule, id=schedule_id)
    try:
        schedule, errors = save_form(CourseScheduleForm, json_body(request), instance=schedule)
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    return JsonResponse({'success': True, 'message': 'Schedule updated', 'schedule': serialize_schedule(schedule)})


@staff_member_required
@json_server_errors
@require_POST
def api_schedule_delete(request, schedule_id):
    schedule = get_object_or_404(CourseSchedule, id=schedule_id)

    history = schedule.daily_availability.count()
    if history:
        return _bad_request(
            f'Cannot delete "{schedule.schedule_name}": it has {history} day(s) of availability history'
        )

    name = schedule.schedule_name
    schedule.delete()
    return JsonResponse({'success': True, 'message': f'Schedule "{name}" deleted'})


# =============================================================================
# BOOKING RULES
# =============================================================================

def _validate_ranges(raw_ranges):
    """Range forms for the `ranges` list of a rule payload"""
    if raw_ranges is None:
        return None, None
    if not isinstance(raw_ranges, list):
        return None, {'ranges': ['Ranges must be a list']}

    forms, errors = [], []
    for index, raw in enumerate(raw_ranges):
        form = RuleRangeForm(raw if isinstance(raw, dict) else {})
        if not form.is_valid():
            errors.append({'index': index, **form_errors(form)})
        forms.append(form)

    if errors:
        return None, {'ranges': errors}
    return forms, None


def _save_rule(request, rule=None):
    data = json_body(request)
    if rule is not None:
        data.setdefault('schedule', rule.schedule_id)

    form = bind_form(BookingRuleForm, data, instance=rule)
    range_forms, range_errors = _validate_ranges(data.get('ranges'))

    errors = {} if form.is_valid() else form_errors(form)
    if range_errors:
        errors.update(range_errors)
    if errors:
        return error_response(errors)

    with transaction.atomic():
        rule = form.save()
        if range_forms is not None:
            rule.ranges.all().delete()
            for range_form in range_forms:
                rule_range = range_form.save(commit=False)
                rule_range.rule = rule
                rule_range.save()

    return rule


@staff_member_required
@json_server_errors
@require_GET
def api_rules_list(request, schedule_id):
    schedule = get_object_or_404(CourseSchedule, id=schedule_id)
    rules = schedule.rules.prefetch_related('ranges')
    return JsonResponse({'success': True, 'rules': [serialize_rule(r) for r in rules]})


@staff_member_required
@json_server_errors
@require_GET
def api_rule_detail(request, rule_id):
    rule = get_object_or_404(BookingRule, id=rule_id)
    return JsonResponse({'success': True, 'rule': serialize_rule(rule)})


@staff_member_required
@json_server_errors
@require_POST
def api_rule_create(request):
    """Body: rule fields plus optional `ranges` list"""
    try:
        result = _save_rule(request)
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if isinstance(result, JsonResponse):
        return result

    return JsonResponse({'success': True, 'message': 'Rule created', 'rule': serialize_rule(result)}, status=201)


@staff_member_required
@json_server_errors
@require_POST
def api_rule_update(request, rule_id):
    """A `ranges` list in the body replaces the existing ranges"""
    rule = get_object_or_404(BookingRule, id=rule_id)
    try:
        result = _save_rule(request, rule)
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if isinstance(result, JsonResponse):
        return result

    return JsonResponse({'success': True, 'message': 'Rule updated', 'rule': serialize_rule(result)})


@staff_member_required
@json_server_errors
@require_POST
def api_rule_delete(request, rule_id):
    rule = get_object_or_404(BookingRule, id=rule_id)
    rule.delete()
    return JsonResponse({'success': True, 'message': 'Rule deleted'})


# =============================================================================
# DAILY AVAILABILITY
# =============================================================================

@staff_member_required
@json_server_errors
@require_GET
def api_availability_list(request, schedule_id):
    """Overrides of one month, ?year=&month= default to the current month"""
    schedule = get_object_or_404(CourseSchedule, id=schedule_id)
    try:
        year, month = parse_year_month(request.GET.get('year'), request.GET.get('month'), timezone.localdate())
    except ValidationError as e:
        return _bad_request(validation_message(e))

    items = schedule.daily_availability.filter(available_date__year=year, available_date__month=month)
    return JsonResponse({
        'success': True,
        'year': year,
        'month': month,
        'items': [serialize_availability(item) for item in items],
    })


@staff_member_required
@json_server_errors
@require_GET
def api_availability_calendar(request, schedule_id):
    """Sunday-first month grid with the override status of every day"""
    schedule = get_object_or_404(CourseSchedule.objects.select_related('course'), id=schedule_id)
    try:
        year, month = parse_year_month(request.GET.get('year'), request.GET.get('month'), timezone.localdate())
    except ValidationError as e:
        return _bad_request(validation_message(e))

    return JsonResponse({
        'success': True,
        'schedule': serialize_schedule(schedule),
        'year': year,
        'month': month,
        'days': availability_calendar(schedule, year, month),
    })


@staff_member_required
@json_server_errors
@require_POST
def api_availability_save(request):
    """
    Create or update the override for (schedule, available_date)
    """
    try:
        data = json_body(request)
    except ValidationError as e:
        return _bad_request(validation_message(e))

    existing = None
    if data.get('schedule') and data.get('available_date'):
        try:
            existing = DailyAvailability.objects.filter(
                schedule_id=data['schedule'], available_date=data['available_date']
            ).first()
        except (ValidationError, ValueError):
            existing = None

    item, errors = save_form(DailyAvailabilityForm, data, instance=existing)
    if errors:
        return error_response(errors)

    return JsonResponse({
        'success': True,
        'message': 'Availability updated' if existing else 'Availability created',
        'item': serialize_availability(item),
    }, status=200 if existing else 201)


@staff_member_required
@json_server_errors
@require_POST
def api_availability_delete(request, availability_id):
    item = get_object_or_404(DailyAvailability, id=availability_id)
    if item.booked_slots:
        return _bad_request(f'Cannot delete: {item.booked_slots} slot(s) already booked on this day')

    item.delete()
    return JsonResponse({'success': True, 'message': 'Availability removed'})


# =============================================================================
# CAMPS
# =============================================================================

def _active_bookings(queryset):
    return queryset.filter(status__in=ACTIVE_BOOKING_STATUSES).count()


def _validate_sessions(camp, raw_sessions):
    """
    Session forms matched to existing sessions by `id`

    Returns:
        (forms, sessions_to_delete, errors)
    """
    if not isinstance(raw_sessions, list):
        return None, None, {'sessions': ['Sessions must be a list']}

    existing = {s.id: s for s in camp.sessions.all()} if camp.pk else {}
    forms, errors, kept_ids = [], [], set()

    for index, raw in enumerate(raw_sessions):
        raw = raw if isinstance(raw, dict) else {}
        try:
            instance = existing.get(int(raw['id'])) if raw.get('id') else None
        except (TypeError, ValueError):
            instance = None
        if instance is not None:
            kept_ids.add(instance.id)

        form = bind_form(CampSessionForm, raw, instance=instance)
        if not form.is_valid():
            errors.append({'index': index, **form_errors(form)})
        forms.append(form)

    removed = [s for session_id, s in existing.items() if session_id not in kept_ids]
    for session in removed:
        if session.bookings.exists():
            errors.append({'id': session.id, 'sessions': [
                f'Session "{session.session_name}" has bookings and cannot be removed'
            ]})

    if errors:
        return None, None, {'sessions': errors}
    return forms, removed, None


def _validate_addon_groups(raw_groups):
    """
    Group forms each with their option forms

    Returns:
        ([(group_form, [option_form, ...]), ...], errors)
    """
    if not isinstance(raw_groups, list):
        return None, {'addon_groups': ['Add-on groups must be a list']}

    groups, errors = [], []
    for index, raw in enumerate(raw_groups):
        raw = raw if isinstance(raw, dict) else {}
        group_form = bind_form(CampAddonGroupForm, raw)
        group_errors = {} if group_form.is_valid() else form_errors(group_form)

        raw_options = raw.get('options') or []
        option_forms = []
        option_errors = []
        for option_index, raw_option in enumerate(raw_options if isinstance(raw_options, list) else []):
            option_form = bind_form(CampAddonOptionForm, raw_option if isinstance(raw_option, dict) else {})
            if not option_form.is_valid():
                option_errors.append({'index': option_index, **form_errors(option_form)})
            option_forms.append(option_form)

        if not option_forms:
            group_errors['options'] = ['Each add-on group needs at least one option']
        elif option_errors:
            group_errors['options'] = option_errors

        if group_errors:
            errors.append({'index': index, **group_errors})
        groups.append((group_form, option_forms))

    if errors:
        return None, {'addon_groups': errors}
    return groups, None


def _save_camp(request, camp=None):
    """
    Validate the camp with its nested `sessions` and `addon_groups` and save everything together.
    Nested lists that are present replace the previous set.
    """
    data = json_body(request)
    camp_form = bind_form(CampForm, data, instance=camp)
    errors = {} if camp_form.is_valid() else form_errors(camp_form)

    session_forms = removed_sessions = None
    if 'sessions' in data:
        session_forms, removed_sessions, session_errors = _validate_sessions(camp_form.instance, data['sessions'])
        if session_errors:
            errors.update(session_errors)

    addon_groups = None
    if 'addon_groups' in data:
        addon_groups, addon_errors = _validate_addon_groups(data['addon_groups'])
        if addon_errors:
            errors.update(addon_errors)

    if errors:
        return error_response(errors)

    with transaction.atomic():
        camp = camp_form.save()

        if session_forms is not None:
            for session in removed_sessions:
                session.delete()
            for form in session_forms:
                session = form.save(commit=False)
                session.camp = camp
                session.save()

        if addon_groups is not None:
            camp.addon_groups.all().delete()
            for group_form, option_forms in addon_groups:
                group = group_form.save(commit=False)
                group.camp = camp
                group.save()
                for option_form in option_forms:
                    option = option_form.save(commit=False)
                    option.group = group
                    option.save()

    return camp


@staff_member_required
@json_server_errors
@require_GET
def api_camps_list(request):
    """All camps including drafts, ?status= and ?search= filters"""
    camps = Camp.objects.select_related('featured_image')

    status = request.GET.get('status')
    if status:
        camps = camps.filter(status=status.upper())

    search = request.GET.get('search', '').strip()
    if search:
        camps = camps.filter(Q(title__icontains=search) | Q(location__icontains=search))

    camps_data = []
    for camp in camps:
        data = serialize_camp(camp)
        data['session_count'] = camp.sessions.count()
        camps_data.append(data)

    return JsonResponse({'success': True, 'camps': camps_data})


@staff_member_required
@json_server_errors
@require_GET
def api_camp_detail(request, camp_id):
    camp = get_object_or_404(Camp.objects.select_related('featured_image'), id=camp_id)
    return JsonResponse({'success': True, 'camp': serialize_camp(camp, detail=True)})


@staff_member_required
@json_server_errors
@require_POST
def api_camp_create(request):
    try:
        result = _save_camp(request)
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if isinstance(result, JsonResponse):
        return result

    logger.info(f"Camp created: {result.title} by {request.user.username}")
    return JsonResponse({
        'success': True,
        'message': 'Camp created',
        'camp': serialize_camp(result, detail=True),
    }, status=201)


@staff_member_required
@json_server_errors
@require_POST
def api_camp_update(request, camp_id):
    camp = get_object_or_404(Camp, id=camp_id)
    try:
        result = _save_camp(request, camp)
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if isinstance(result, JsonResponse):
        return result

    return JsonResponse({'success': True, 'message': 'Camp updated', 'camp': serialize_camp(result, detail=True)})


@staff_member_required
@json_server_errors
@require_POST
def api_camp_delete(request, camp_id):
    camp = get_object_or_404(Camp, id=camp_id)

    active = _active_bookings(camp.bookings)
    if active:
        return _bad_request(f'Cannot delete "{camp.title}": it has {active} active booking(s)')

    title = camp.title
    try:
        camp.delete()
    except ProtectedError:
        return _bad_request(f'Cannot delete "{title}": it has booking history. Archive it instead')

    logger.info(f"Camp deleted: {title} by {request.user.username}")
    return JsonResponse({'success': True, 'message': f'Camp "{title}" deleted'})


@staff_member_required
@json_server_errors
@require_POST
def api_session_delete(request, session_id):
    session = get_object_or_404(CampSession, id=session_id)

    active = _active_bookings(session.bookings)
    if active:
        return _bad_request(f'Cannot delete "{session.session_name}": it has {active} active booking(s)')

    name = session.session_name
    try:
        session.delete()
    except ProtectedError:
        return _bad_request(f'Cannot delete "{name}": it has booking history. Close it instead')

    return JsonResponse({'success': True, 'message': f'Session "{name}" deleted'})


@staff_member_required
@json_server_errors
@require_GET
def api_camp_sessions(request, camp_id):
    camp = get_object_or_404(Camp, id=camp_id)
    return JsonResponse({'success': True, 'sessions': [serialize_session(s) for s in camp.sessions.all()]})


# =============================================================================
# TOURNAMENTS
# =============================================================================

@staff_member_required
@json_server_errors
@require_GET
def api_tournaments_list(request):
    """Paginated with 0-based ?page= and ?size=, filter by ?search= and ?active=true|false"""
    tournaments = Tournament.objects.select_related('featured_image')

    search = request.GET.get('search', '').strip()
    if search:
        tournaments = tournaments.filter(Q(title__icontains=search) | Q(location_name__icontains=search))

    active = request.GET.get('active')
    if active in ('true', 'false'):
        tournaments = tournaments.filter(is_active=active == 'true')

    page, pagination = paginate(tournaments, request.GET.get('page'), request.GET.get('size'))
    return JsonResponse({
        'success': True,
        'tournaments': [serialize_tournament(t) for t in page.object_list],
        'pagination': pagination,
    })


@staff_member_required
@json_server_errors
@require_GET
def api_tournament_detail(request, tournament_id):
    tournament = get_object_or_404(Tournament.objects.select_related('featured_image'), id=tournament_id)
    return JsonResponse({'success': True, 'tournament': serialize_tournament(tournament, detail=True)})


@staff_member_required
@json_server_errors
@require_POST
def api_tournament_create(request):
    try:
        tournament, errors = save_form(TournamentForm, json_body(request))
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    return JsonResponse({
        'success': True,
        'message': 'Tournament created',
        'tournament': serialize_tournament(tournament, detail=True),
    }, status=201)


@staff_member_required
@json_server_errors
@require_POST
def api_tournament_update(request, tournament_id):
    tournament = get_object_or_404(Tournament, id=tournament_id)
    try:
        tournament, errors = save_form(TournamentForm, json_body(request), instance=tournament)
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    return JsonResponse({
        'success': True,
        'message': 'Tournament updated',
        'tournament': serialize_tournament(tournament, detail=True),
    })


@staff_member_required
@json_server_errors
@require_POST
def api_tournament_toggle(request, tournament_id):
    tournament = get_object_or_404(Tournament, id=tournament_id)
    tournament.is_active = not tournament.is_active
    tournament.save(update_fields=['is_active'])

    return JsonResponse({
        'success': True,
        'message': 'Tournament activated' if tournament.is_active else 'Tournament deactivated',
        'is_active': tournament.is_active,
    })


@staff_member_required
@json_server_errors
@require_POST
def api_tournament_delete(request, tournament_id):
    tournament = get_object_or_404(Tournament, id=tournament_id)
    title = tournament.title
    tournament.delete()
    return JsonResponse({'success': True, 'message': f'Tournament "{title}" deleted'})


# =============================================================================
# GALLERY
# =============================================================================

@staff_member_required
@json_server_errors
@require_GET
def api_gallery_list(request):
    """
    Filters: ?category=<id>, ?media_type=IMAGE|VIDEO, ?status=active|inactive, ?featured=true
    """
    items = GalleryItem.objects.select_related('category').prefetch_related('tags')

    category = request.GET.get('category')
    if category and category.isdigit():
        items = items.filter(category_id=category)

    media_type = request.GET.get('media_type')
    if media_type:
        items = items.filter(media_type=media_type.upper())

    status = request.GET.get('status')
    if status == 'active':
        items = items.filter(is_active=True)
    elif status == 'inactive':
        items = items.filter(is_active=False)

    if request.GET.get('featured') == 'true':
        items = items.filter(is_featured=True)

    return JsonResponse({
        'success': True,
        'items': [serialize_gallery_item(item) for item in items],
        'stats': {
            'total': GalleryItem.objects.count(),
            'active': GalleryItem.objects.filter(is_active=True).count(),
            'featured': GalleryItem.objects.filter(is_featured=True).count(),
        },
    })


@staff_member_required
@json_server_errors
@require_GET
def api_gallery_detail(request, item_id):
    item = get_object_or_404(GalleryItem.objects.select_related('category'), id=item_id)
    return JsonResponse({'success': True, 'item': serialize_gallery_item(item)})


@staff_member_required
@json_server_errors
@require_POST
def api_gallery_create(request):
    try:
        item, errors = save_form(GalleryItemForm, json_body(request))
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    return JsonResponse({'success': True, 'message': 'Gallery item created', 'item': serialize_gallery_item(item)},
                        status=201)


@staff_member_required
@json_server_errors
@require_POST
def api_gallery_update(request, item_id):
    item = get_object_or_404(GalleryItem, id=item_id)
    try:
        item, errors = save_form(GalleryItemForm, json_body(request), instance=item)
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    return JsonResponse({'success': True, 'message': 'Gallery item updated', 'item': serialize_gallery_item(item)})


@staff_member_required
@json_server_errors
@require_POST
def api_gallery_delete(request, item_id):
    item = get_object_or_404(GalleryItem, id=item_id)
    item.delete()
    return JsonResponse({'success': True, 'message': 'Gallery item deleted'})


@staff_member_required
@json_server_errors
@require_GET
def api_gallery_categories(request):
    categories = GalleryCategory.objects.all()
    return JsonResponse({'success': True, 'categories': [serialize_gallery_category(c) for c in categories]})


@staff_member_required
@json_server_errors
@require_POST
def api_gallery_category_save(request, category_id=None):
    """Create, or update when `category_id` is given"""
    category = get_object_or_404(GalleryCategory, id=category_id) if category_id else None
    try:
        category, errors = save_form(GalleryCategoryForm, json_body(request), instance=category)
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    return JsonResponse({
        'success': True,
        'category': serialize_gallery_category(category),
    }, status=200 if category_id else 201)


@staff_member_required
@json_server_errors
@require_POST
def api_gallery_category_delete(request, category_id):
    """Items of the category stay, uncategorized"""
    category = get_object_or_404(GalleryCategory, id=category_id)
    category.delete()
    return JsonResponse({'success': True, 'message': 'Category deleted'})


@staff_member_required
@json_server_errors
@require_GET
def api_gallery_tags(request):
    return JsonResponse({'success': True, 'tags': [serialize_gallery_tag(t) for t in GalleryTag.objects.all()]})


@staff_member_required
@json_server_errors
@require_POST
def api_gallery_tag_create(request):
    try:
        tag, errors = save_form(GalleryTagForm, json_body(request))
    except ValidationError as e:
        return _bad_request(validation_message(e))
    if errors:
        return error_response(errors)

    return JsonResponse({'success': True, 'tag': serialize_gallery_tag(tag)}, status=201)


@staff_member_required
@json_server_errors
@require_POST
def api_gallery_tag_delete(request, tag_id):
    tag = get_object_or_404(GalleryTag, id=tag_id)
    tag.delete()
    return JsonResponse({'success': True, 'message': 'Tag deleted'})


# =============================================================================
# MEDIA LIBRARY
# =============================================================================

@staff_member_required
@json_server_errors
@require_GET
def api_media_list(request):
    items = MediaItem.objects.all()

    media_type = request.GET.get('media_type')
    if media_type:
        items = items.filter(media_type=media_type.upper())

    page, pagination = paginate(items, request.GET.get('page'), request.GET.get('size'))
    return JsonResponse({
        'success': True,
        'items': [serialize_media(item) for item in page.object_list],
        'pagination': pagination,
    })


@staff_member_required
@json_server_errors
@require_POST
def api_media_upload(request):
    """Multipart upload: `file` and optional `alt_text`"""
    form = MediaUploadForm(request.POST, request.FILES)
    if not form.is_valid():
        return error_response(form_errors(form))

    try:
        item = save_media_upload(form.cleaned_data['file'], alt_text=form.cleaned_data.get('alt_text', ''))
    except ValidationError as e:
        return _bad_request(validation_message(e))

    return JsonResponse({'success': True, 'message': 'File uploaded', 'item': serialize_media(item)}, status=201)


@staff_member_required
@json_server_errors
@require_POST
def api_media_delete(request, media_id):
    item = get_object_or_404(MediaItem, id=media_id)
    delete_media_files(item)
    item.delete()
    return JsonResponse({'success': True, 'message': 'File deleted'})
