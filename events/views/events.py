from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework import status

from events import services
from events.locks import get_active_event
from events.permissions import IsVolunteer
from events.serializers import (
    EventCreateSerializer,
    EventSerializer,
    EventUpdateSerializer,
    ReasonSerializer,
    VolunteerEventSerializer,
)
from events.throttles import WriteScopedRateThrottle
from .generics import ok, paginated_response


class EventListCreateView(APIView):
    """
    GET  /api/events/   events visible to the caller
         ?location=&date=YYYY-MM-DD&status=&organizer=&search=&approved=
    POST /api/events/   organizers create an event
    """
    throttle_classes = [WriteScopedRateThrottle]
    throttle_scope = "event-create"

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request):
        qs = services.visible_events(request.user, request.query_params)
        return paginated_response(request, qs, EventSerializer)

    def post(self, request):
        serializer = EventCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = services.create_event(request.user, serializer.validated_data)
        return ok(EventSerializer(event).data, status.HTTP_201_CREATED)


class EventDetailView(APIView):
    """
    GET    /api/events/<event_id>/
    PATCH  /api/events/<event_id>/   partial edit (organizer/admin)
    PUT    /api/events/<event_id>/   same as PATCH
    DELETE /api/events/<event_id>/   soft delete (organizer/admin)
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request, event_id):
        event = get_active_event(event_id)
        return ok(EventSerializer(event).data)

    def patch(self, request, event_id):
        serializer = EventUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = services.update_event(request.user, event_id, serializer.validated_data)
        return ok(EventSerializer(event).data)

    def put(self, request, event_id):
        return self.patch(request, event_id)

    def delete(self, request, event_id):
        services.delete_event(request.user, event_id)
        return ok({"deleted": True, "event_id": event_id})


class EventApprovalView(APIView):
    """
    PATCH /api/events/<event_id>/approve/   admin only
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request, event_id):
        event = services.approve_event(request.user, event_id)
        return ok(EventSerializer(event).data)


class EventRejectView(APIView):
    """
    PATCH /api/events/<event_id>/reject/   admin only
    Body: {"reason": "..."}   optional, max 300 characters
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request, event_id):
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.reject_event(request.user, event_id, serializer.validated_data["reason"])
        return ok({"rejected": True, "event_id": event_id})


class EventCompleteView(APIView):
    """
    POST /api/events/<event_id>/complete/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, event_id):
        event = services.complete_event(request.user, event_id)
        return ok(EventSerializer(event).data)


class MyAppliedEventsView(APIView):
    """
    GET /api/events/applied/   every event the volunteer applied to
    """
    permission_classes = [IsAuthenticated, IsVolunteer]

    def get(self, request):
        qs = services.events_for_volunteer(request.user)
        return paginated_response(request, qs, VolunteerEventSerializer)


class MyCompletedEventsView(APIView):
    """
    GET /api/events/completed/   completed events the volunteer attended
    """
    permission_classes = [IsAuthenticated, IsVolunteer]

    def get(self, request):
        qs = services.completed_events_for_volunteer(request.user)
        return paginated_response(request, qs, VolunteerEventSerializer)


class MyOrganizedEventsView(APIView):
    """
    GET /api/events/mine/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = services.events_for_organizer(request.user)
        return paginated_response(request, qs, EventSerializer)
