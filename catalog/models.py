from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from .constants import (
    CAMP_STATUS_CHOICES, SESSION_STATUS_CHOICES, SELECTION_TYPE_CHOICES, SELECTION_SINGLE,
    RULE_TYPE_CHOICES, MEDIA_TYPE_CHOICES, DEFAULT_MAX_SLOTS,
    AVAILABILITY_OPEN, AVAILABILITY_FULL, AVAILABILITY_CLOSED,
)
from .utils import unique_slug


class Sport(models.Model):
    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=120, unique=True, blank=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Sport, self.name, instance=self)
        super().save(*args, **kwargs)

    @property
    def course_count(self):
        return self.courses.count()


class Course(models.Model):
    sport = models.ForeignKey(Sport, on_delete=models.PROTECT, related_name='courses')
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True, blank=True)
    short_description = models.CharField(max_length=300, blank=True)
    description = models.TextField(blank=True)
    duration = models.CharField(max_length=100, blank=True)
    base_price_info = models.CharField(max_length=200, blank=True)
    is_active = models.BooleanField(default=True)
    image_paths = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['sport__name', 'name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Course, self.name, instance=self)
        super().save(*args, **kwargs)


class CourseSchedule(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='schedules')
    schedule_name = models.CharField(max_length=200)
    start_date = models.DateField()
    end_date = models.DateField()
    instructor_name = models.CharField(max_length=200, blank=True)
    location = models.CharField(max_length=200, blank=True)
    description_override = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    booking_cutoff_hours = models.PositiveIntegerField(null=True, blank=True)
    max_bookings_per_day = models.PositiveIntegerField(null=True, blank=True)
    max_total_bookings = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['start_date', 'schedule_name']

    def __str__(self):
        return f"{self.course.name} - {self.schedule_name}"

    def clean(self):
        super().clean()
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': 'End date cannot be before start date'})


class BookingRule(models.Model):
    """
    Open/close rule attached to a course schedule.

    Rules are managed here and consumed by whoever evaluates booking windows;
    `priority` decides which rule wins when several match the same day.
    """
    schedule = models.ForeignKey(CourseSchedule, on_delete=models.CASCADE, related_name='rules')
    rule_type = models.CharField(max_length=10, choices=RULE_TYPE_CHOICES, default='OPEN')
    recurring = models.BooleanField(default=False)
    priority = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    description = models.CharField(max_length=255, blank=True)
    days_of_week = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ['-priority', 'id']

    def __str__(self):
        return f"{self.get_rule_type_display()} rule #{self.pk} ({self.schedule.schedule_name})"


class RuleRange(models.Model):
    rule = models.ForeignKey(BookingRule, on_delete=models.CASCADE, related_name='ranges')
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)

    def clean(self):
        super().clean()
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': 'End date cannot be before start date'})
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError({'end_time': 'End time must be after start time'})


class DailyAvailability(models.Model):
    """Per-day override of capacity and price for one schedule"""
    schedule = models.ForeignKey(CourseSchedule, on_delete=models.CASCADE, related_name='daily_availability')
    available_date = models.DateField()
    max_slots = models.PositiveIntegerField(default=DEFAULT_MAX_SLOTS)
    booked_slots = models.PositiveIntegerField(default=0)
    price_per_slot = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    is_booking_open = models.BooleanField(default=True)
    notes_admin = models.TextField(blank=True)

    class Meta:
        ordering = ['available_date']
        constraints = [
            models.UniqueConstraint(fields=['schedule', 'available_date'], name='unique_schedule_day'),
        ]

    def __str__(self):
        return f"{self.schedule} @ {self.available_date}"

    @property
    def is_full(self):
        return self.booked_slots >= self.max_slots

    @property
    def status(self):
        if not self.is_booking_open:
            return AVAILABILITY_CLOSED
        if self.is_full:
            return AVAILABILITY_FULL
        return AVAILABILITY_OPEN


class MediaItem(models.Model):
    file = models.FileField(upload_to='library/', null=True, blank=True)
    thumbnail = models.ImageField(upload_to='library/thumbs/', null=True, blank=True)
    url = models.URLField(max_length=500, blank=True)
    file_name = models.CharField(max_length=255, blank=True)
    alt_text = models.CharField(max_length=255, blank=True)
    media_type = models.CharField(max_length=10, choices=MEDIA_TYPE_CHOICES, default='IMAGE')
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-uploaded_at']

    def __str__(self):
        return self.file_name or self.url

    def get_url(self):
        if self.file:
            return self.file.url
        return self.url

    def get_thumbnail_url(self):
        if self.thumbnail:
            return self.thumbnail.url
        return self.get_url()


class SeoFields(models.Model):
    meta_title = models.CharField(max_length=200, blank=True)
    meta_description = models.CharField(max_length=500, blank=True)
    meta_keywords = models.CharField(max_length=300, blank=True)
    canonical_url = models.URLField(max_length=500, blank=True)
    og_title = models.CharField(max_length=200, blank=True)
    og_description = models.CharField(max_length=500, blank=True)
    og_image_url = models.URLField(max_length=500, blank=True)
    twitter_card = models.CharField(max_length=50, blank=True, default='summary_large_image')
    twitter_title = models.CharField(max_length=200, blank=True)
    twitter_description = models.CharField(max_length=500, blank=True)
    twitter_image_url = models.URLField(max_length=500, blank=True)

    class Meta:
        abstract = True


class Camp(SeoFields):
    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True, blank=True)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=200, blank=True)
    category = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=CAMP_STATUS_CHOICES, default='DRAFT')
    is_active = models.BooleanField(default=True)
    price_per_slot = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    featured_image = models.ForeignKey(
        MediaItem, on_delete=models.SET_NULL, null=True, blank=True, related_name='featured_in_camps'
    )
    media_gallery = models.ManyToManyField(MediaItem, blank=True, related_name='camps')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['title']

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Camp, self.title, instance=self)
        super().save(*args, **kwargs)

    @property
    def is_public(self):
        return self.is_active and self.status == 'PUBLISHED'


class CampSession(models.Model):
    camp = models.ForeignKey(Camp, on_delete=models.CASCADE, related_name='sessions')
    session_name = models.CharField(max_length=200)
    start_date = models.DateField()
    end_date = models.DateField()
    base_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    discount_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    max_capacity = models.PositiveIntegerField(default=20)
    booked_slots = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=10, choices=SESSION_STATUS_CHOICES, default='OPEN')

    class Meta:
        ordering = ['start_date', 'id']

    def __str__(self):
        return f"{self.camp.title} - {self.session_name}"

    def clean(self):
        super().clean()
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': 'End date cannot be before start date'})

    @property
    def available_spots(self):
        return max(0, self.max_capacity - self.booked_slots)

    def sync_capacity_status(self):
        """Toggle between OPEN and FULL from booked slots; CLOSED is left alone"""
        if self.status == 'OPEN' and self.booked_slots >= self.max_capacity:
            self.status = 'FULL'
        elif self.status == 'FULL' and self.booked_slots < self.max_capacity:
            self.status = 'OPEN'

    @property
    def effective_price(self):
        """Discounted price when set, otherwise the base price, otherwise the camp price"""
        for price in (self.discount_price, self.base_price, self.camp.price_per_slot):
            if price:
                return price
        return Decimal('0.00')


class CampAddonGroup(models.Model):
    camp = models.ForeignKey(Camp, on_delete=models.CASCADE, related_name='addon_groups')
    group_name = models.CharField(max_length=200)
    selection_type = models.CharField(max_length=10, choices=SELECTION_TYPE_CHOICES, default=SELECTION_SINGLE)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['display_order', 'id']

    def __str__(self):
        return f"{self.camp.title} - {self.group_name}"


class CampAddonOption(models.Model):
    group = models.ForeignKey(CampAddonGroup, on_delete=models.CASCADE, related_name='options')
    option_name = models.CharField(max_length=200)
    price_adjustment = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['display_order', 'id']

    def __str__(self):
        return self.option_name


class Tournament(SeoFields):
    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True, blank=True)
    description = models.TextField(blank=True)
    location_name = models.CharField(max_length=200)
    location_address = models.CharField(max_length=300, blank=True)
    start_date = models.DateField()
    end_date = models.DateField()
    divisions = models.TextField(blank=True)
    booking_link = models.URLField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    organizer_name = models.CharField(max_length=200, blank=True)
    organizer_contact = models.CharField(max_length=200, blank=True)
    featured_image = models.ForeignKey(
        MediaItem, on_delete=models.SET_NULL, null=True, blank=True, related_name='featured_in_tournaments'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-start_date', 'title']

    def __str__(self):
        return self.title

    def clean(self):
        super().clean()
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': 'End date cannot be before start date'})

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Tournament, self.title, instance=self)
        super().save(*args, **kwargs)


class GalleryCategory(models.Model):
    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=120, unique=True, blank=True)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'Gallery categories'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(GalleryCategory, self.name, instance=self)
        super().save(*args, **kwargs)


class GalleryTag(models.Model):
    name = models.CharField(max_length=50, unique=True)
    slug = models.SlugField(max_length=60, unique=True, blank=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(GalleryTag, self.name, instance=self)
        super().save(*args, **kwargs)


class GalleryItem(models.Model):
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    media_type = models.CharField(max_length=10, choices=MEDIA_TYPE_CHOICES, default='IMAGE')
    media_url = models.CharField(max_length=500)
    thumbnail_url = models.CharField(max_length=500, blank=True)
    alt_text = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)
    display_order = models.PositiveIntegerField(default=0)
    category = models.ForeignKey(
        GalleryCategory, on_delete=models.SET_NULL, null=True, blank=True, related_name='items'
    )
    tags = models.ManyToManyField(GalleryTag, blank=True, related_name='items')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['display_order', '-created_at']

    def __str__(self):
        return self.title
