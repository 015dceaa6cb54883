from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from .models import Notification
from .serializers import MarkReadSerializer, NotificationSerializer

TRUTHY = ("1", "true", "yes")


class MyNotificationsView(APIView):
    """
    The caller's inbox, newest first.

    GET  /api/notifications/me/?unread=true&topic=certificateReady
    POST /api/notifications/me/   {"ids": [1, 2]}, or no ids for everything
    """
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Notification.objects.filter(user=self.request.user)

    def get(self, request):
        qs = self.get_queryset()

        if request.query_params.get("unread", "").lower() in TRUTHY:
            qs = qs.filter(is_read=False)

        topic = request.query_params.get("topic")
        if topic:
            qs = qs.filter(topic=topic)

        return Response(NotificationSerializer(qs, many=True).data)

    def post(self, request):
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        qs = self.get_queryset().filter(is_read=False)
        ids = serializer.validated_data["ids"]
        if ids:
            qs = qs.filter(id__in=ids)

        return Response({"marked_read": qs.update(is_read=True)}, status=status.HTTP_200_OK)
