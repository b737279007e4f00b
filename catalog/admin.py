from django.contrib import admin
from .models import (
    Sport, Course, CourseSchedule, BookingRule, RuleRange, DailyAvailability, MediaItem,
    Camp, CampSession, CampAddonGroup, CampAddonOption, Tournament,
    GalleryCategory, GalleryTag, GalleryItem,
)


@admin.register(Sport)
class SportAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name']


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['name', 'sport', 'is_active']
    list_filter = ['sport', 'is_active']
    search_fields = ['name']


class RuleRangeInline(admin.TabularInline):
    model = RuleRange
    extra = 0


@admin.register(BookingRule)
class BookingRuleAdmin(admin.ModelAdmin):
    list_display = ['schedule', 'rule_type', 'priority', 'is_active']
    list_filter = ['rule_type', 'is_active']
    inlines = [RuleRangeInline]


@admin.register(CourseSchedule)
class CourseScheduleAdmin(admin.ModelAdmin):
    list_display = ['schedule_name', 'course', 'start_date', 'end_date', 'is_active']
    list_filter = ['is_active']


@admin.register(DailyAvailability)
class DailyAvailabilityAdmin(admin.ModelAdmin):
    list_display = ['schedule', 'available_date', 'booked_slots', 'max_slots', 'is_booking_open']
    list_filter = ['is_booking_open', 'available_date']


@admin.register(MediaItem)
class MediaItemAdmin(admin.ModelAdmin):
    list_display = ['file_name', 'media_type', 'uploaded_at']
    list_filter = ['media_type']


class CampSessionInline(admin.TabularInline):
    model = CampSession
    extra = 0


@admin.register(Camp)
class CampAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'status', 'is_active']
    list_filter = ['status', 'is_active']
    search_fields = ['title']
    inlines = [CampSessionInline]


class CampAddonOptionInline(admin.TabularInline):
    model = CampAddonOption
    extra = 0


@admin.register(CampAddonGroup)
class CampAddonGroupAdmin(admin.ModelAdmin):
    list_display = ['group_name', 'camp', 'selection_type']
    inlines = [CampAddonOptionInline]


@admin.register(Tournament)
class TournamentAdmin(admin.ModelAdmin):
    list_display = ['title', 'location_name', 'start_date', 'is_active']
    list_filter = ['is_active']
    search_fields = ['title']


@admin.register(GalleryItem)
class GalleryItemAdmin(admin.ModelAdmin):
    list_display = ['title', 'media_type', 'category', 'is_active', 'is_featured']
    list_filter = ['media_type', 'is_active', 'is_featured']


admin.site.register(GalleryCategory)
admin.site.register(GalleryTag)
