from rest_framework import serializers

from .models import Event, EventRegistration, VolunteerRatingLog


# -----------------------------------------
# EVENT SERIALIZERS
# -----------------------------------------
class EventCreateSerializer(serializers.Serializer):
    """
    Parses and type-checks the create payload. Business rules
    (future date, deadline ordering, capacity bounds) live in the
    registry service so they apply outside HTTP too.
    """
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    location = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")
    date = serializers.DateTimeField()
    start_time = serializers.DateTimeField(required=False, allow_null=True, default=None)
    end_time = serializers.DateTimeField(required=False, allow_null=True, default=None)
    registration_deadline = serializers.DateTimeField(required=False, allow_null=True, default=None)
    max_volunteers = serializers.IntegerField()


class EventUpdateSerializer(serializers.Serializer):
    """
    Partial edit payload. Absent keys stay absent from validated_data so
    the registry only touches what the caller sent.
    """
    title = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(required=False, allow_blank=True, max_length=255)
    date = serializers.DateTimeField(required=False)
    start_time = serializers.DateTimeField(required=False, allow_null=True)
    end_time = serializers.DateTimeField(required=False, allow_null=True)
    registration_deadline = serializers.DateTimeField(required=False, allow_null=True)
    max_volunteers = serializers.IntegerField(required=False)
    status = serializers.ChoiceField(choices=Event.STATUS_CHOICES, required=False)


class EventSerializer(serializers.ModelSerializer):
    organizer_name = serializers.SerializerMethodField()
    available_spots = serializers.SerializerMethodField()
    is_full = serializers.SerializerMethodField()
    approved_volunteers_count = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "description",
            "location",
            "date",
            "start_time",
            "end_time",
            "registration_deadline",
            "max_volunteers",
            "status",
            "approved",
            "attendance_locked",
            "total_volunteer_hours",
            "total_registrations",
            "organizer",
            "organizer_name",
            "available_spots",
            "is_full",
            "approved_volunteers_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_organizer_name(self, obj):
        return obj.organizer.display_name if obj.organizer_id else None

    def _approved(self, obj):
        # listings annotate approved_total; single objects fall back to one COUNT
        if getattr(obj, "approved_total", None) is None:
            obj.approved_total = obj.approved_count()
        return obj.approved_total

    def get_approved_volunteers_count(self, obj):
        return self._approved(obj)

    def get_available_spots(self, obj):
        return max(0, obj.max_volunteers - self._approved(obj))

    def get_is_full(self, obj):
        return self._approved(obj) >= obj.max_volunteers


# -----------------------------------------
# REGISTRATION SERIALIZERS
# -----------------------------------------
class ApplicantSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    age = serializers.IntegerField(min_value=1, max_value=120)
    gender = serializers.ChoiceField(choices=EventRegistration.GENDER_CHOICES)
    phone = serializers.CharField(max_length=20)


class EventRegistrationSerializer(serializers.ModelSerializer):
    """Organizer-facing view of a registration."""
    volunteer_email = serializers.EmailField(source="volunteer.email", read_only=True)
    hours_credited = serializers.BooleanField(read_only=True)

    class Meta:
        model = EventRegistration
        fields = [
            "id",
            "event",
            "volunteer",
            "volunteer_email",
            "status",
            "name",
            "age",
            "gender",
            "phone",
            "created_at",
            "reviewed_at",
            "rejection_reason",
            "cancellation_reason",
            "reapply_count",
            "present",
            "attendance_marked_at",
            "work_duration",
            "hours_credited",
            "credited_hours",
            "certificate_generated",
            "organizer_rating",
            "volunteer_rating_for_event",
            "volunteer_feedback",
            "feedback_submitted_at",
        ]
        read_only_fields = fields


class MyRegistrationSerializer(serializers.ModelSerializer):
    """What a volunteer sees about their own registration."""

    class Meta:
        model = EventRegistration
        fields = [
            "id",
            "status",
            "created_at",
            "reviewed_at",
            "rejection_reason",
            "cancellation_reason",
            "present",
            "work_duration",
            "credited_hours",
            "certificate_generated",
            "organizer_rating",
            "volunteer_rating_for_event",
            "feedback_submitted_at",
        ]
        read_only_fields = fields


class VolunteerEventSerializer(EventSerializer):
    """Event plus the caller's own registration and certificate link."""
    my_registration = serializers.SerializerMethodField()
    certificate_url = serializers.SerializerMethodField()

    class Meta(EventSerializer.Meta):
        fields = EventSerializer.Meta.fields + ["my_registration", "certificate_url"]
        read_only_fields = fields

    def get_my_registration(self, obj):
        registrations = getattr(obj, "my_registrations", None) or []
        if not registrations:
            return None
        return MyRegistrationSerializer(registrations[0]).data

    def get_certificate_url(self, obj):
        certificates = getattr(obj, "my_certificates", None) or []
        return certificates[0].document_url if certificates else None


# -----------------------------------------
# ACTION PAYLOADS
# -----------------------------------------
class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class AttendanceSerializer(serializers.Serializer):
    volunteer_id = serializers.IntegerField()
    present = serializers.BooleanField()
    work_duration = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class RateVolunteerSerializer(serializers.Serializer):
    volunteer_id = serializers.IntegerField()
    rating = serializers.IntegerField(min_value=1, max_value=5)


class VolunteerFeedbackSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    feedback = serializers.CharField(required=False, allow_blank=True, max_length=1000, default="")


class VolunteerRatingLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = VolunteerRatingLog
        fields = ["id", "rated_by", "previous_rating", "rating", "created_at"]
