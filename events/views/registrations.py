from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from events import services
from events.serializers import (
    ApplicantSerializer,
    EventRegistrationSerializer,
    MyRegistrationSerializer,
    ReasonSerializer,
)
from .generics import ok, paginated_response


class ApplyEventView(APIView):
    """
    POST /api/events/<event_id>/apply/
    Body: {"name", "age", "gender", "phone"}
    """
    permission_classes = [IsAuthenticated]
    throttle_scope = "event-apply"

    def post(self, request, event_id):
        serializer = ApplicantSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        registration = services.apply(request.user, event_id, dict(serializer.validated_data))
        return ok(MyRegistrationSerializer(registration).data, status.HTTP_201_CREATED)


class CancelRegistrationView(APIView):
    """
    POST /api/events/<event_id>/cancel/
    Body: {"reason": "..."}   at least 10 characters
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, event_id):
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        registration = services.cancel(request.user, event_id, serializer.validated_data["reason"])
        return ok(MyRegistrationSerializer(registration).data)


class EventRegistrationsView(APIView):
    """
    GET /api/events/<event_id>/volunteers/
    GET /api/events/<event_id>/volunteers/?status=pending
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, event_id):
        event, qs = services.registrations_for_event(request.user, event_id)
        status_param = request.query_params.get("status")
        if status_param:
            qs = qs.filter(status=status_param)
        return paginated_response(request, qs, EventRegistrationSerializer)


class ApproveRegistrationView(APIView):
    """
    PATCH /api/events/<event_id>/registrations/<volunteer_id>/approve/
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request, event_id, volunteer_id):
        registration = services.approve(request.user, event_id, volunteer_id)
        return ok(EventRegistrationSerializer(registration).data)


class RejectRegistrationView(APIView):
    """
    PATCH /api/events/<event_id>/registrations/<volunteer_id>/reject/
    Body: {"reason": "..."}   optional, max 300 characters
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request, event_id, volunteer_id):
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        registration = services.reject(
            request.user, event_id, volunteer_id, serializer.validated_data["reason"]
        )
        return ok(EventRegistrationSerializer(registration).data)


class RemoveRegistrationView(APIView):
    """
    DELETE /api/events/<event_id>/registrations/<volunteer_id>/
    """
    permission_classes = [IsAuthenticated]

    def delete(self, request, event_id, volunteer_id):
        result_status = services.remove(request.user, event_id, volunteer_id)
        return ok({"event_id": event_id, "volunteer_id": volunteer_id, "status": result_status})
