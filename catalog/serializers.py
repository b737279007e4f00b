"""
Plain dict serialization of catalog models for JSON responses
"""


def _date(value):
    return value.isoformat() if value else None


def _time(value):
    return value.strftime('%H:%M') if value else None


def _money(value):
    return float(value) if value is not None else None


def serialize_sport(sport):
    return {
        'id': sport.id,
        'name': sport.name,
        'slug': sport.slug,
        'description': sport.description,
        'is_active': sport.is_active,
        'course_count': sport.course_count,
    }


def serialize_course(course):
    return {
        'id': course.id,
        'sport_id': course.sport_id,
        'sport_name': course.sport.name,
        'name': course.name,
        'slug': course.slug,
        'short_description': course.short_description,
        'description': course.description,
        'duration': course.duration,
        'base_price_info': course.base_price_info,
        'is_active': course.is_active,
        'image_paths': course.image_paths,
    }


def serialize_schedule(schedule):
    return {
        'id': schedule.id,
        'course_id': schedule.course_id,
        'course_name': schedule.course.name,
        'schedule_name': schedule.schedule_name,
        'start_date': _date(schedule.start_date),
        'end_date': _date(schedule.end_date),
        'instructor_name': schedule.instructor_name,
        'location': schedule.location,
        'description_override': schedule.description_override,
        'is_active': schedule.is_active,
        'booking_cutoff_hours': schedule.booking_cutoff_hours,
        'max_bookings_per_day': schedule.max_bookings_per_day,
        'max_total_bookings': schedule.max_total_bookings,
        'created_at': schedule.created_at.isoformat() if schedule.created_at else None,
        'updated_at': schedule.updated_at.isoformat() if schedule.updated_at else None,
    }


def serialize_rule(rule):
    return {
        'id': rule.id,
        'schedule_id': rule.schedule_id,
        'rule_type': rule.rule_type,
        'recurring': rule.recurring,
        'priority': rule.priority,
        'is_active': rule.is_active,
        'description': rule.description,
        'days_of_week': rule.days_of_week,
        'ranges': [
            {
                'id': r.id,
                'start_date': _date(r.start_date),
                'end_date': _date(r.end_date),
                'start_time': _time(r.start_time),
                'end_time': _time(r.end_time),
            }
            for r in rule.ranges.all()
        ],
    }


def serialize_availability(item):
    return {
        'id': item.id,
        'schedule_id': item.schedule_id,
        'available_date': _date(item.available_date),
        'max_slots': item.max_slots,
        'booked_slots': item.booked_slots,
        'price_per_slot': _money(item.price_per_slot),
        'is_booking_open': item.is_booking_open,
        'notes_admin': item.notes_admin,
        'status': item.status,
    }


def serialize_media(item):
    if item is None:
        return None
    return {
        'id': item.id,
        'url': item.get_url(),
        'thumbnail_url': item.get_thumbnail_url(),
        'file_name': item.file_name,
        'alt_text': item.alt_text,
        'media_type': item.media_type,
        'uploaded_at': item.uploaded_at.isoformat() if item.uploaded_at else None,
    }


def serialize_seo(obj):
    return {
        'meta_title': obj.meta_title,
        'meta_description': obj.meta_description,
        'meta_keywords': obj.meta_keywords,
        'canonical_url': obj.canonical_url,
        'og_title': obj.og_title,
        'og_description': obj.og_description,
        'og_image_url': obj.og_image_url,
        'twitter_card': obj.twitter_card,
        'twitter_title': obj.twitter_title,
        'twitter_description': obj.twitter_description,
        'twitter_image_url': obj.twitter_image_url,
    }


def serialize_session(session):
    return {
        'id': session.id,
        'camp_id': session.camp_id,
        'session_name': session.session_name,
        'start_date': _date(session.start_date),
        'end_date': _date(session.end_date),
        'base_price': _money(session.base_price),
        'discount_price': _money(session.discount_price),
        'effective_price': _money(session.effective_price),
        'max_capacity': session.max_capacity,
        'booked_slots': session.booked_slots,
        'available_spots': session.available_spots,
        'status': session.status,
    }


def serialize_addon_group(group):
    return {
        'id': group.id,
        'group_name': group.group_name,
        'selection_type': group.selection_type,
        'display_order': group.display_order,
        'options': [
            {
                'id': option.id,
                'option_name': option.option_name,
                'price_adjustment': _money(option.price_adjustment),
                'display_order': option.display_order,
            }
            for option in group.options.all()
        ],
    }


def serialize_camp(camp, detail=False):
    data = {
        'id': camp.id,
        'title': camp.title,
        'slug': camp.slug,
        'location': camp.location,
        'category': camp.category,
        'status': camp.status,
        'is_active': camp.is_active,
        'price_per_slot': _money(camp.price_per_slot),
        'featured_image': serialize_media(camp.featured_image),
    }
    if detail:
        data.update({
            'description': camp.description,
            'media_gallery': [serialize_media(m) for m in camp.media_gallery.all()],
            'sessions': [serialize_session(s) for s in camp.sessions.all()],
            'addon_groups': [serialize_addon_group(g) for g in camp.addon_groups.prefetch_related('options')],
            'seo': serialize_seo(camp),
        })
    return data


def serialize_tournament(tournament, detail=False):
    data = {
        'id': tournament.id,
        'title': tournament.title,
        'slug': tournament.slug,
        'location_name': tournament.location_name,
        'start_date': _date(tournament.start_date),
        'end_date': _date(tournament.end_date),
        'is_active': tournament.is_active,
        'featured_image': serialize_media(tournament.featured_image),
    }
    if detail:
        data.update({
            'description': tournament.description,
            'location_address': tournament.location_address,
            'divisions': tournament.divisions,
            'booking_link': tournament.booking_link,
            'organizer_name': tournament.organizer_name,
            'organizer_contact': tournament.organizer_contact,
            'seo': serialize_seo(tournament),
        })
    return data


def serialize_gallery_category(category):
    return {
        'id': category.id,
        'name': category.name,
        'slug': category.slug,
        'description': category.description,
    }


def serialize_gallery_tag(tag):
    return {'id': tag.id, 'name': tag.name, 'slug': tag.slug}


def serialize_gallery_item(item):
    return {
        'id': item.id,
        'title': item.title,
        'description': item.description,
        'media_type': item.media_type,
        'media_url': item.media_url,
        'thumbnail_url': item.thumbnail_url or item.media_url,
        'alt_text': item.alt_text,
        'is_active': item.is_active,
        'is_featured': item.is_featured,
        'display_order': item.display_order,
        'category': {'id': item.category.id, 'name': item.category.name} if item.category else None,
        'tags': [{'id': tag.id, 'name': tag.name} for tag in item.tags.all()],
    }
