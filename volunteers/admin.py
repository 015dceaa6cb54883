from django.contrib import admin
from .models import Certificate, VolunteerStats

@admin.register(VolunteerStats)
class VolunteerStatsAdmin(admin.ModelAdmin):
    list_display = ('volunteer', 'total_volunteer_hours', 'impact_score', 'completed_events_count')
    search_fields = ('volunteer__username', 'volunteer__email')
    ordering = ('-impact_score',)

@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ('credential_id', 'volunteer', 'event_title', 'hours_text', 'rating', 'issued_at')
    search_fields = ('volunteer__username', 'event_title', 'credential_id')
    list_filter = ('issued_at',)
