import os

from django import forms

from .constants import DAYS_OF_WEEK, IMAGE_EXTENSIONS, VIDEO_EXTENSIONS, MAX_VIDEO_SIZE
from .models import (
    Sport, Course, CourseSchedule, BookingRule, RuleRange, DailyAvailability,
    Camp, CampSession, CampAddonGroup, CampAddonOption, Tournament,
    GalleryCategory, GalleryTag, GalleryItem,
)


class SportForm(forms.ModelForm):
    class Meta:
        model = Sport
        fields = ['name', 'description', 'is_active']

    def clean_name(self):
        return self.cleaned_data['name'].strip()


class CourseForm(forms.ModelForm):
    class Meta:
        model = Course
        fields = [
            'sport', 'name', 'short_description', 'description', 'duration',
            'base_price_info', 'is_active', 'image_paths',
        ]

    def clean_image_paths(self):
        paths = self.cleaned_data.get('image_paths') or []
        if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
            raise forms.ValidationError('Image paths must be a list of URLs')
        return paths


class CourseScheduleForm(forms.ModelForm):
    class Meta:
        model = CourseSchedule
        fields = [
            'course', 'schedule_name', 'start_date', 'end_date', 'instructor_name', 'location',
            'description_override', 'is_active', 'booking_cutoff_hours',
            'max_bookings_per_day', 'max_total_bookings',
        ]


class BookingRuleForm(forms.ModelForm):
    class Meta:
        model = BookingRule
        fields = ['schedule', 'rule_type', 'recurring', 'priority', 'is_active', 'description', 'days_of_week']

    def clean_days_of_week(self):
        days = self.cleaned_data.get('days_of_week') or []
        if not isinstance(days, list):
            raise forms.ValidationError('Days of week must be a list')

        normalized = [str(day).upper() for day in days]
        unknown = [day for day in normalized if day not in DAYS_OF_WEEK]
        if unknown:
            raise forms.ValidationError(f'Unknown day(s): {", ".join(unknown)}')

        # keep calendar order, drop duplicates
        return [day for day in DAYS_OF_WEEK if day in normalized]

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('recurring') and not cleaned_data.get('days_of_week'):
            self.add_error('days_of_week', 'A recurring rule needs at least one day of week')
        return cleaned_data


class RuleRangeForm(forms.ModelForm):
    class Meta:
        model = RuleRange
        fields = ['start_date', 'end_date', 'start_time', 'end_time']


class DailyAvailabilityForm(forms.ModelForm):
    class Meta:
        model = DailyAvailability
        fields = ['schedule', 'available_date', 'max_slots', 'price_per_slot', 'is_booking_open', 'notes_admin']

    def clean_price_per_slot(self):
        price = self.cleaned_data.get('price_per_slot')
        if price is not None and price < 0:
            raise forms.ValidationError('Price cannot be negative')
        return price

    def clean(self):
        cleaned_data = super().clean()
        max_slots = cleaned_data.get('max_slots')
        if self.instance.pk and max_slots is not None and max_slots < self.instance.booked_slots:
            self.add_error('max_slots', f'Already {self.instance.booked_slots} slots booked on this day')
        return cleaned_data


class CampForm(forms.ModelForm):
    class Meta:
        model = Camp
        fields = [
            'title', 'slug', 'description', 'location', 'category', 'status', 'is_active',
            'price_per_slot', 'featured_image', 'media_gallery',
            'meta_title', 'meta_description', 'meta_keywords', 'canonical_url',
            'og_title', 'og_description', 'og_image_url',
            'twitter_card', 'twitter_title', 'twitter_description', 'twitter_image_url',
        ]

    def clean_slug(self):
        slug = self.cleaned_data.get('slug')
        if slug and Camp.objects.filter(slug=slug).exclude(pk=self.instance.pk).exists():
            raise forms.ValidationError('A camp with this slug already exists')
        return slug


class CampSessionForm(forms.ModelForm):
    class Meta:
        model = CampSession
        fields = [
            'session_name', 'start_date', 'end_date', 'base_price', 'discount_price',
            'max_capacity', 'status',
        ]

    def clean(self):
        cleaned_data = super().clean()
        base_price = cleaned_data.get('base_price')
        discount_price = cleaned_data.get('discount_price')

        if base_price is not None and base_price < 0:
            self.add_error('base_price', 'Price cannot be negative')
        if discount_price is not None and base_price is not None and discount_price > base_price:
            self.add_error('discount_price', 'Discount price cannot exceed the base price')

        max_capacity = cleaned_data.get('max_capacity')
        if self.instance.pk and max_capacity is not None and max_capacity < self.instance.booked_slots:
            self.add_error('max_capacity', f'Already {self.instance.booked_slots} places booked in this session')

        return cleaned_data


class CampAddonGroupForm(forms.ModelForm):
    class Meta:
        model = CampAddonGroup
        fields = ['group_name', 'selection_type', 'display_order']


class CampAddonOptionForm(forms.ModelForm):
    class Meta:
        model = CampAddonOption
        fields = ['option_name', 'price_adjustment', 'display_order']


class TournamentForm(forms.ModelForm):
    class Meta:
        model = Tournament
        fields = [
            'title', 'slug', 'description', 'location_name', 'location_address', 'start_date', 'end_date',
            'divisions', 'booking_link', 'is_active', 'organizer_name', 'organizer_contact',
            'featured_image', 'meta_title', 'meta_description', 'canonical_url',
            'og_image_url', 'twitter_card',
        ]

    def clean_slug(self):
        slug = self.cleaned_data.get('slug')
        if slug and Tournament.objects.filter(slug=slug).exclude(pk=self.instance.pk).exists():
            raise forms.ValidationError('A tournament with this slug already exists')
        return slug


class GalleryCategoryForm(forms.ModelForm):
    class Meta:
        model = GalleryCategory
        fields = ['name', 'description']


class GalleryTagForm(forms.ModelForm):
    class Meta:
        model = GalleryTag
        fields = ['name']


class GalleryItemForm(forms.ModelForm):
    class Meta:
        model = GalleryItem
        fields = [
            'title', 'description', 'media_type', 'media_url', 'thumbnail_url', 'alt_text',
            'is_active', 'is_featured', 'display_order', 'category', 'tags',
        ]


class MediaUploadForm(forms.Form):
    """Upload to the media library"""
    file = forms.FileField(required=True)
    alt_text = forms.CharField(max_length=255, required=False)

    def clean_file(self):
        uploaded = self.cleaned_data.get('file')

        if not uploaded:
            raise forms.ValidationError('Choose a file to upload')

        ext = os.path.splitext(uploaded.name)[1].lower()
        if ext not in IMAGE_EXTENSIONS + VIDEO_EXTENSIONS:
            raise forms.ValidationError('Unsupported format. Allowed: JPG, PNG, GIF, WebP, MP4, WebM, MOV')

        if uploaded.size > MAX_VIDEO_SIZE:
            raise forms.ValidationError(f'File must not exceed {MAX_VIDEO_SIZE // 1024 // 1024}MB')

        return uploaded
