"""
Utilities for the catalog app
"""
import calendar
import io
import logging
import os
import uuid
from datetime import date

from django.core.exceptions import ValidationError
from django.core.files.base import ContentFile
from django.core.paginator import Paginator, EmptyPage
from django.utils.text import slugify
from PIL import Image

from .constants import (
    IMAGE_EXTENSIONS, VIDEO_EXTENSIONS, MAX_IMAGE_SIZE, MAX_VIDEO_SIZE, THUMBNAIL_SIZE,
    AVAILABILITY_NONE, AVAILABILITY_CLOSED, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE,
)

logger = logging.getLogger(__name__)


def unique_slug(model, value, instance=None, slug_field='slug'):
    """
    Build a URL slug from `value` that is unique for `model`

    Args:
        model: Model class that owns the slug field
        value: Source text (title or name)
        instance: Instance being saved, excluded from the uniqueness check
        slug_field: Name of the slug field

    Returns:
        Slug string, suffixed with -2, -3, ... on collisions
    """
    base = slugify(value or '') or 'item'
    max_length = model._meta.get_field(slug_field).max_length
    base = base[:max_length - 6]

    candidate = base
    counter = 2
    qs = model.objects.all()
    if instance is not None and instance.pk:
        qs = qs.exclude(pk=instance.pk)

    while qs.filter(**{slug_field: candidate}).exists():
        candidate = f"{base}-{counter}"
        counter += 1

    return candidate


def month_grid(year, month):
    """
    Days of a month laid out for a Sunday-first calendar

    Args:
        year: Year
        month: Month 1-12

    Returns:
        List of `date` objects preceded by `None` for every empty cell before day 1
    """
    first_day = date(year, month, 1)
    # weekday(): Monday=0, the grid starts on Sunday
    leading = (first_day.weekday() + 1) % 7
    days_in_month = calendar.monthrange(year, month)[1]

    grid = [None] * leading
    grid.extend(date(year, month, day) for day in range(1, days_in_month + 1))
    return grid


def availability_calendar(schedule, year, month):
    """
    Calendar cells for the daily-availability admin view

    Each day cell carries the override for that date (if any) and a status:
    `closed` when booking is closed, `full` when every slot is taken,
    `open` otherwise, and `none` when no override exists.
    """
    overrides = {
        item.available_date: item
        for item in schedule.daily_availability.filter(
            available_date__year=year, available_date__month=month
        )
    }

    cells = []
    for day in month_grid(year, month):
        if day is None:
            cells.append(None)
            continue

        override = overrides.get(day)
        if override is None:
            cells.append({
                'date': day.isoformat(),
                'day': day.day,
                'status': AVAILABILITY_NONE,
                'availability_id': None,
                'booked_slots': None,
                'max_slots': None,
                'remarks': '',
            })
            continue

        remarks = ''
        if override.status == AVAILABILITY_CLOSED:
            remarks = override.notes_admin or 'Closed'

        cells.append({
            'date': day.isoformat(),
            'day': day.day,
            'status': override.status,
            'availability_id': override.id,
            'booked_slots': override.booked_slots,
            'max_slots': override.max_slots,
            'price_per_slot': str(override.price_per_slot),
            'remarks': remarks,
        })

    return cells


def parse_year_month(year_str, month_str, today):
    """Year and month from query params, defaulting to the current month"""
    try:
        year = int(year_str) if year_str else today.year
        month = int(month_str) if month_str else today.month
    except (TypeError, ValueError):
        raise ValidationError('Year and month must be integers')

    if not 1 <= month <= 12:
        raise ValidationError('Month must be between 1 and 12')

    return year, month


def paginate(queryset, page_str, size_str):
    """
    Paginate with a 0-based page number

    Returns:
        (page_object, pagination_dict)
    """
    try:
        page_number = max(int(page_str or 0), 0)
    except ValueError:
        page_number = 0

    try:
        size = int(size_str or DEFAULT_PAGE_SIZE)
    except ValueError:
        size = DEFAULT_PAGE_SIZE
    size = min(max(size, 1), MAX_PAGE_SIZE)

    paginator = Paginator(queryset, size)
    try:
        page = paginator.page(page_number + 1)
    except EmptyPage:
        page = paginator.page(paginator.num_pages)

    return page, {
        'current_page': page.number - 1,
        'total_pages': paginator.num_pages,
        'total_items': paginator.count,
        'page_size': size,
        'has_next': page.has_next(),
        'has_previous': page.has_previous(),
    }


def detect_media_type(filename):
    """IMAGE or VIDEO from the file extension, None for anything else"""
    ext = os.path.splitext(filename.lower())[1]
    if ext in IMAGE_EXTENSIONS:
        return 'IMAGE'
    if ext in VIDEO_EXTENSIONS:
        return 'VIDEO'
    return None


def save_media_upload(uploaded_file, alt_text=''):
    """
    Store an uploaded file in the media library

    Images are checked against the size limit and get a JPEG thumbnail;
    videos are stored as-is.

    Returns:
        The created MediaItem

    Raises:
        ValidationError: unsupported format, oversized file or unreadable image
    """
    from .models import MediaItem

    filename = uploaded_file.name
    media_type = detect_media_type(filename)
    if media_type is None:
        allowed = ', '.join(ext.lstrip('.').upper() for ext in IMAGE_EXTENSIONS + VIDEO_EXTENSIONS)
        raise ValidationError(f'Unsupported file format. Allowed: {allowed}')

    max_size = MAX_IMAGE_SIZE if media_type == 'IMAGE' else MAX_VIDEO_SIZE
    if uploaded_file.size > max_size:
        raise ValidationError(f'File is too large. Maximum size: {max_size // 1024 // 1024}MB')

    ext = os.path.splitext(filename.lower())[1]
    stored_name = f'{uuid.uuid4().hex[:12]}{ext}'

    item = MediaItem(file_name=filename, alt_text=alt_text, media_type=media_type)

    if media_type == 'IMAGE':
        try:
            img = Image.open(uploaded_file)
            img.load()
        except (OSError, SyntaxError) as e:
            raise ValidationError(f'Could not read image: {e}')

        thumb = img.convert('RGB') if img.mode != 'RGB' else img.copy()
        thumb.thumbnail(THUMBNAIL_SIZE, Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        thumb.save(buffer, format='JPEG', quality=85)
        buffer.seek(0)
        item.thumbnail.save(f'thumb_{stored_name.rsplit(".", 1)[0]}.jpg', ContentFile(buffer.read()), save=False)

        uploaded_file.seek(0)

    item.file.save(stored_name, uploaded_file, save=False)
    item.save()

    logger.info(f"Media uploaded: {filename} ({media_type}, {uploaded_file.size} bytes)")
    return item


def delete_media_files(item):
    """Remove the stored file and thumbnail of a MediaItem from storage"""
    for field in (item.file, item.thumbnail):
        if field:
            field.delete(save=False)
