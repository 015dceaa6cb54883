import logging
import time

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import connections
from django.db.utils import OperationalError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework import status

logger = logging.getLogger("volunlink.core")


class HealthCheckView(APIView):
    """
    Lightweight health endpoint for uptime checks.
    - Checks DB connectivity
    - Checks that certificate storage is reachable
    - Returns env and simple latency
    """
    permission_classes = [AllowAny]
    authentication_classes = []  # public endpoint

    def get(self, request, *args, **kwargs):
        start = time.time()

        db_ok = True
        try:
            connections["default"].cursor()
        except OperationalError as e:
            logger.warning(f"Health check: database unreachable: {e}")
            db_ok = False

        storage_ok = True
        try:
            default_storage.exists("certificates")
        except Exception as e:
            logger.warning(f"Health check: storage unreachable: {e}")
            storage_ok = False

        duration_ms = int((time.time() - start) * 1000)
        healthy = db_ok and storage_ok

        return Response(
            {
                "status": "ok" if healthy else "degraded",
                "db": db_ok,
                "storage": storage_ok,
                "env": getattr(settings, "ENV", "unknown"),
                "latency_ms": duration_ms,
            },
            status=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        )
