from rest_framework import serializers

from .models import Certificate, VolunteerStats


class VolunteerStatsSerializer(serializers.ModelSerializer):
    class Meta:
        model = VolunteerStats
        fields = [
            "total_volunteer_hours",
            "impact_score",
            "completed_events_count",
            "updated_at",
        ]
        read_only_fields = fields


class CertificateSerializer(serializers.ModelSerializer):
    event_id = serializers.IntegerField(source="event.id", read_only=True)
    pdf_url = serializers.SerializerMethodField()

    class Meta:
        model = Certificate
        fields = [
            "id",
            "event_id",
            "event_title",
            "hours",
            "hours_text",
            "rating",
            "issued_at",
            "credential_id",
            "document_url",
            "pdf_url",
        ]
        read_only_fields = fields

    def get_pdf_url(self, obj):
        request = self.context.get("request")
        url = obj.document_url
        if url and request is not None and url.startswith("/"):
            return request.build_absolute_uri(url)
        return url
