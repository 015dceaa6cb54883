import logging

from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated

from events import services
from events.serializers import AttendanceSerializer, EventRegistrationSerializer
from .generics import ok

logger = logging.getLogger("volunlink.events")


class MarkAttendanceView(APIView):
    """
    PUT /api/events/<event_id>/attendance/
    Body: {"volunteer_id": 7, "present": true, "work_duration": "3 hours"}
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, event_id):
        serializer = AttendanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        registration = services.mark_attendance(
            request.user,
            event_id,
            data["volunteer_id"],
            data["present"],
            data.get("work_duration"),
        )
        return ok(EventRegistrationSerializer(registration).data)


class FinalizeAttendanceView(APIView):
    """
    POST /api/events/<event_id>/attendance/finalize/

    Always 200 once hours were credited; "partial": true with the failed
    volunteers listed when some certificates could not be rendered.
    Calling again retries only what is missing.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, event_id):
        result = services.finalize(request.user, event_id)
        if result.partial:
            logger.warning(f"Partial finalization for event {event_id}: {result.failures}")
        return ok(result.as_dict())
