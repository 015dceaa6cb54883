from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from events import services
from events.serializers import (
    EventRegistrationSerializer,
    RateVolunteerSerializer,
    VolunteerFeedbackSerializer,
    VolunteerRatingLogSerializer,
)
from .generics import ok


class RateVolunteerView(APIView):
    """
    POST /api/events/<event_id>/rate-volunteer/
    Body: {"volunteer_id": 7, "rating": 4}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, event_id):
        serializer = RateVolunteerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        registration = services.rate_volunteer(
            request.user,
            event_id,
            serializer.validated_data["volunteer_id"],
            serializer.validated_data["rating"],
        )
        data = EventRegistrationSerializer(registration).data
        data["rating_history"] = VolunteerRatingLogSerializer(
            registration.rating_logs.all(), many=True
        ).data
        return ok(data)


class SubmitVolunteerFeedbackView(APIView):
    """
    POST /api/events/<event_id>/volunteer-feedback/
    Body: {"rating": 5, "feedback": "..."}   once per volunteer
    """
    permission_classes = [IsAuthenticated]
    throttle_scope = "event-feedback"

    def post(self, request, event_id):
        serializer = VolunteerFeedbackSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        registration = services.submit_feedback(
            request.user,
            event_id,
            serializer.validated_data["rating"],
            serializer.validated_data.get("feedback"),
        )
        return ok({
            "event_id": registration.event_id,
            "rating": registration.volunteer_rating_for_event,
            "feedback": registration.volunteer_feedback,
            "submitted_at": registration.feedback_submitted_at,
        }, status.HTTP_201_CREATED)


class EventFeedbackStatsView(APIView):
    """
    GET /api/events/<event_id>/feedback/stats/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, event_id):
        return ok(services.feedback_summary(request.user, event_id))
