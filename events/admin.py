from django.contrib import admin
from .models import Event, EventRegistration, VolunteerRatingLog

@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ('title', 'status', 'organizer', 'date', 'approved', 'attendance_locked', 'is_deleted')
    list_filter = ('status', 'approved', 'attendance_locked', 'is_deleted', 'date')
    search_fields = ('title', 'description', 'location', 'organizer__username')
    date_hierarchy = 'date'
    # Counters are maintained by the service layer
    readonly_fields = ('total_volunteer_hours', 'total_registrations', 'attendance_locked')

@admin.register(EventRegistration)
class EventRegistrationAdmin(admin.ModelAdmin):
    list_display = ('name', 'volunteer', 'event', 'status', 'present', 'credited_hours', 'certificate_generated')
    list_filter = ('status', 'present', 'certificate_generated')
    search_fields = ('name', 'volunteer__username', 'event__title')
    readonly_fields = ('hours_credited_at', 'credited_hours', 'certificate_generated', 'counted_in_total')

@admin.register(VolunteerRatingLog)
class VolunteerRatingLogAdmin(admin.ModelAdmin):
    list_display = ('registration', 'rated_by', 'previous_rating', 'rating', 'created_at')
    list_filter = ('rating', 'created_at')
    search_fields = ('registration__name', 'registration__event__title')
