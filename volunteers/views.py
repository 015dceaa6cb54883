from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from events.permissions import IsVolunteer

from .models import Certificate
from .serializers import CertificateSerializer, VolunteerStatsSerializer
from .store import VolunteerAggregateStore


class MyStatsView(APIView):
    """
    GET /api/volunteers/me/stats/
    """
    permission_classes = [IsAuthenticated, IsVolunteer]

    def get(self, request):
        stats = VolunteerAggregateStore.stats_for(request.user.id)
        return Response({"success": True, "data": VolunteerStatsSerializer(stats).data})


class MyCertificatesView(APIView):
    """
    GET /api/volunteers/me/certificates/
    """
    permission_classes = [IsAuthenticated, IsVolunteer]

    def get(self, request):
        qs = Certificate.objects.filter(volunteer=request.user).select_related("event")
        serializer = CertificateSerializer(qs, many=True, context={"request": request})
        return Response({"success": True, "data": serializer.data})
